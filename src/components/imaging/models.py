"""
Imaging component models.

Inputs, outputs and errors for upload screening and image normalization.
"""

from __future__ import annotations

from dataclasses import dataclass, field

JPEG_CONTENT_TYPE = "image/jpeg"

# Default widths: avatars are small and cropped, banners are hero-sized
AVATAR_MAX_WIDTH = 400
BANNER_MAX_WIDTH = 1200
DEFAULT_JPEG_QUALITY = 80

DEFAULT_ALLOWED_MIME_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
)
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


# --- Errors ---


class ImageNormalizationError(Exception):
    """Base class for normalization failures."""


class ImageDecodeError(ImageNormalizationError):
    """Input bytes could not be decoded as an image."""


class ImageEncodeError(ImageNormalizationError):
    """Re-encoding produced no output."""


@dataclass(frozen=True)
class ImageValidationError:
    """Upload screening error with actionable message."""

    code: str
    message: str
    field: str = "image"


# --- Input Models ---


@dataclass(frozen=True)
class ImageUpload:
    """A raw user-supplied image file."""

    data: bytes
    filename: str = "upload"
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class ImagePolicy:
    """Size bound and encoding policy for one kind of image."""

    max_width: int
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_mime_types: tuple[str, ...] = field(default=DEFAULT_ALLOWED_MIME_TYPES)


# --- Output Models ---


@dataclass(frozen=True)
class NormalizedImage:
    """JPEG bytes plus the dimensions they encode."""

    data: bytes
    width: int
    height: int
    content_type: str = JPEG_CONTENT_TYPE


@dataclass(frozen=True)
class StoredImage:
    """Result of storing a normalized image."""

    key: str
    url: str
    width: int
    height: int
    size_bytes: int
