"""
Imaging component - upload screening, normalization and storage.

Functional core for shrinking user-supplied images before they reach
object storage. Normalization is a pure bytes -> bytes transform (Pillow);
only store_image touches storage.

Key behaviors:
- Width is bounded by the policy's max_width; height scales proportionally
- Images already within bounds keep their dimensions (never upscaled)
- Output is always JPEG at the policy's quality
- Storage keys carry a millisecond timestamp plus a random suffix
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime
from io import BytesIO
from typing import Literal

from PIL import Image, UnidentifiedImageError

from src.components.imaging.models import (
    AVATAR_MAX_WIDTH,
    BANNER_MAX_WIDTH,
    DEFAULT_JPEG_QUALITY,
    ImageDecodeError,
    ImageEncodeError,
    ImagePolicy,
    ImageUpload,
    ImageValidationError,
    NormalizedImage,
    StoredImage,
)
from src.core.ports.clock import ClockPort
from src.core.ports.storage import ObjectStorePort
from src.rules.models import Rules

logger = logging.getLogger(__name__)

ImageKind = Literal["banner", "avatar"]


# --- Pure Functions (Functional Core) ---


def validate_upload(upload: ImageUpload, policy: ImagePolicy) -> list[ImageValidationError]:
    """
    Screen an upload against the policy before decoding it.

    Returns list of errors (empty if valid).
    """
    errors: list[ImageValidationError] = []

    if not upload.data:
        errors.append(ImageValidationError("empty_file", "Uploaded file is empty"))
        return errors

    if upload.content_type not in policy.allowed_mime_types:
        errors.append(
            ImageValidationError(
                "invalid_mime_type",
                f"MIME type '{upload.content_type}' is not allowed. "
                f"Allowed types: {', '.join(sorted(policy.allowed_mime_types))}",
            )
        )

    if len(upload.data) > policy.max_upload_bytes:
        errors.append(
            ImageValidationError(
                "file_too_large",
                f"File size {len(upload.data)} bytes exceeds maximum of "
                f"{policy.max_upload_bytes} bytes",
            )
        )

    return errors


def compute_target_size(width: int, height: int, max_width: int) -> tuple[int, int]:
    """Dimensions after bounding width to max_width (no upscaling)."""
    if max_width <= 0:
        raise ValueError("max_width must be positive")
    if width <= max_width:
        return width, height
    scaled_height = max(1, round(height * max_width / width))
    return max_width, scaled_height


def normalize_image(
    data: bytes,
    max_width: int,
    *,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> NormalizedImage:
    """
    Downsize an image to at most max_width pixels wide and re-encode as JPEG.

    Raises:
        ImageDecodeError: If the bytes are not a decodable image
        ImageEncodeError: If the JPEG encoder produces no output
    """
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            width, height = compute_target_size(img.width, img.height, max_width)

            frame = img if img.mode == "RGB" else img.convert("RGB")
            if (width, height) != (img.width, img.height):
                frame = frame.resize((width, height), Image.Resampling.LANCZOS)

            buf = BytesIO()
            try:
                frame.save(buf, format="JPEG", quality=quality)
            except (OSError, ValueError) as e:
                raise ImageEncodeError(f"Failed to encode image: {e}") from e
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Cannot decode image: {e}") from e
    except OSError as e:
        raise ImageDecodeError(f"Cannot decode image: {e}") from e

    output = buf.getvalue()
    if not output:
        raise ImageEncodeError("Encoder produced no output")

    return NormalizedImage(data=output, width=width, height=height)


def generate_storage_key(
    prefix: str,
    stem: str,
    when: datetime,
    *,
    token: str | None = None,
) -> str:
    """
    Collision-resistant storage key.

    Format: {prefix}/{stem}_{epoch_millis}_{token}.jpg
    """
    millis = int(when.timestamp() * 1000)
    suffix = token or secrets.token_hex(4)
    return f"{prefix}/{stem}_{millis}_{suffix}.jpg"


def policy_from_rules(rules: Rules | None, kind: ImageKind) -> ImagePolicy:
    """Build the image policy for a kind of image from rules (or defaults)."""
    if rules is None:
        return ImagePolicy(max_width=BANNER_MAX_WIDTH if kind == "banner" else AVATAR_MAX_WIDTH)

    max_width = (
        rules.images.banner_max_width if kind == "banner" else rules.images.avatar_max_width
    )
    return ImagePolicy(
        max_width=max_width,
        jpeg_quality=rules.images.jpeg_quality,
        max_upload_bytes=rules.uploads.max_upload_bytes,
        allowed_mime_types=tuple(rules.uploads.allowlist_mime_types),
    )


# --- Shell ---


def store_image(
    image: NormalizedImage,
    *,
    storage: ObjectStorePort,
    clock: ClockPort,
    prefix: str,
    stem: str,
) -> StoredImage:
    """
    Upload a normalized image and resolve its public URL.

    Raises whatever the storage port raises (StorageError family).
    """
    key = generate_storage_key(prefix, stem, clock.now_utc())
    stored = storage.put_object(key, image.data, image.content_type)
    url = storage.get_public_url(stored)
    logger.info("Stored image %s (%dx%d, %d bytes)", key, image.width, image.height, stored.size_bytes)
    return StoredImage(
        key=stored.key,
        url=url,
        width=image.width,
        height=image.height,
        size_bytes=stored.size_bytes,
    )
