"""
Imaging component.

Upload screening and bounded-width JPEG normalization for event banners
and testimonial avatars.
"""

from src.components.imaging.component import (
    ImageKind,
    compute_target_size,
    generate_storage_key,
    normalize_image,
    policy_from_rules,
    store_image,
    validate_upload,
)
from src.components.imaging.models import (
    AVATAR_MAX_WIDTH,
    BANNER_MAX_WIDTH,
    DEFAULT_ALLOWED_MIME_TYPES,
    DEFAULT_JPEG_QUALITY,
    DEFAULT_MAX_UPLOAD_BYTES,
    JPEG_CONTENT_TYPE,
    ImageDecodeError,
    ImageEncodeError,
    ImageNormalizationError,
    ImagePolicy,
    ImageUpload,
    ImageValidationError,
    NormalizedImage,
    StoredImage,
)

__all__ = [
    # Component
    "ImageKind",
    "compute_target_size",
    "generate_storage_key",
    "normalize_image",
    "policy_from_rules",
    "store_image",
    "validate_upload",
    # Models
    "AVATAR_MAX_WIDTH",
    "BANNER_MAX_WIDTH",
    "DEFAULT_ALLOWED_MIME_TYPES",
    "DEFAULT_JPEG_QUALITY",
    "DEFAULT_MAX_UPLOAD_BYTES",
    "JPEG_CONTENT_TYPE",
    "ImageDecodeError",
    "ImageEncodeError",
    "ImageNormalizationError",
    "ImagePolicy",
    "ImageUpload",
    "ImageValidationError",
    "NormalizedImage",
    "StoredImage",
]
