"""
Testimonial curation models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.components.imaging.models import ImageUpload
from src.core.entities import Testimonial

MAX_TEXT_LENGTH = 280
DEFAULT_LINK_HOSTS: tuple[str, ...] = ("twitter.com", "x.com")

# Storage layout for uploaded avatars: testimonials/image_<ms>_<token>.jpg
IMAGE_KEY_PREFIX = "testimonials"
IMAGE_KEY_STEM = "image"


# --- Errors ---


class TestimonialError(Exception):
    """Base class for testimonial errors."""


class TestimonialNotFoundError(TestimonialError):
    def __init__(self, testimonial_id: str) -> None:
        self.testimonial_id = testimonial_id
        super().__init__(f"Testimonial {testimonial_id} is no longer available")


class TestimonialStoreError(TestimonialError):
    """A store or storage write failed; the primary action did not happen."""


@dataclass(frozen=True)
class ValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


# --- Config ---


@dataclass(frozen=True)
class TestimonialConfig:
    max_text_length: int = MAX_TEXT_LENGTH
    allowed_link_hosts: tuple[str, ...] = DEFAULT_LINK_HOSTS


# --- Input Models ---


@dataclass(frozen=True)
class TestimonialInput:
    """
    Full testimonial content (create, or replace on edit).

    An uploaded image wins over image_url; both empty clears the image.
    """

    name: str
    role: str
    text: str
    image_url: str = ""
    image_upload: ImageUpload | None = None
    twitter_link: str = ""


# --- Output Models ---


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of a best-effort image deletion. Advisory only."""

    url: str
    attempted: bool
    deleted: bool = False
    reason: str | None = None


@dataclass(frozen=True)
class TestimonialOutput:
    success: bool
    testimonial: Testimonial | None = None
    errors: list[ValidationError] = field(default_factory=list)
    cleanup: CleanupResult | None = None
