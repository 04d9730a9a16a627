"""
Submission intake models.

A community member proposes an event; it lands in submittedEvents as a
pending record and waits for a moderator.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.components.imaging.models import ImageUpload

# Storage layout for uploaded banners: submittedEvents/banner_<ms>_<token>.jpg
BANNER_KEY_PREFIX = "submittedEvents"
BANNER_KEY_STEM = "banner"


@dataclass(frozen=True)
class ValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class SubmitEventInput:
    """
    Public event submission.

    Exactly one of banner_url / banner_upload is expected; an upload wins
    when both are present.
    """

    event_name: str
    venue: str
    address: str
    date: str
    time: str
    description: str
    banner_url: str = ""
    banner_upload: ImageUpload | None = None
    registration_url: str = ""


# --- Output Models ---


@dataclass(frozen=True)
class SubmitEventOutput:
    """
    Result of a submission attempt.

    On failure the original input is echoed back so the caller can keep the
    form populated; ``retryable`` separates transient I/O failures from
    validation problems.
    """

    success: bool
    submission_id: str | None = None
    banner_url: str | None = None
    errors: list[ValidationError] = field(default_factory=list)
    retryable: bool = False
    submitted: SubmitEventInput | None = None
