"""
Submission intake component.

Public event submissions written as pending records for moderation.
"""

from src.components.submissions.component import (
    REQUIRED_FIELDS,
    build_submission_fields,
    run_submit,
    validate_submission,
)
from src.components.submissions.models import (
    BANNER_KEY_PREFIX,
    BANNER_KEY_STEM,
    SubmitEventInput,
    SubmitEventOutput,
    ValidationError,
)

__all__ = [
    # Component
    "REQUIRED_FIELDS",
    "build_submission_fields",
    "run_submit",
    "validate_submission",
    # Models
    "BANNER_KEY_PREFIX",
    "BANNER_KEY_STEM",
    "SubmitEventInput",
    "SubmitEventOutput",
    "ValidationError",
]
