"""
Testimonials component.

Admin CRUD over testimonials with best-effort cleanup of replaced images.
"""

from src.components.testimonials.component import (
    TestimonialCuration,
    build_testimonial_fields,
    cleanup_image,
    list_testimonials,
    should_cleanup,
    validate_testimonial,
    validate_twitter_link,
)
from src.components.testimonials.models import (
    DEFAULT_LINK_HOSTS,
    IMAGE_KEY_PREFIX,
    IMAGE_KEY_STEM,
    MAX_TEXT_LENGTH,
    CleanupResult,
    TestimonialConfig,
    TestimonialError,
    TestimonialInput,
    TestimonialNotFoundError,
    TestimonialOutput,
    TestimonialStoreError,
    ValidationError,
)

__all__ = [
    # Component
    "TestimonialCuration",
    "build_testimonial_fields",
    "cleanup_image",
    "list_testimonials",
    "should_cleanup",
    "validate_testimonial",
    "validate_twitter_link",
    # Models
    "DEFAULT_LINK_HOSTS",
    "IMAGE_KEY_PREFIX",
    "IMAGE_KEY_STEM",
    "MAX_TEXT_LENGTH",
    "CleanupResult",
    "TestimonialConfig",
    "TestimonialInput",
    "TestimonialOutput",
    "ValidationError",
    # Errors
    "TestimonialError",
    "TestimonialNotFoundError",
    "TestimonialStoreError",
]
