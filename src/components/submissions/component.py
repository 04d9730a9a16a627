"""
Submission intake component.

Validates a public event submission, normalizes and uploads a banner file
when one is supplied, then writes a single pending document to
submittedEvents. Nothing is written to events here; publishing is a
moderation decision.

Failure semantics:
- Validation problems are reported before any storage or store call
- A failed document create leaves no document behind; a banner already
  uploaded for it is left in storage and logged as orphaned
- Store/storage failures are reported as retryable
"""

from __future__ import annotations

import logging
from typing import Any

from src.components.imaging import (
    ImageNormalizationError,
    ImagePolicy,
    normalize_image,
    store_image,
    validate_upload,
)
from src.components.submissions.models import (
    BANNER_KEY_PREFIX,
    BANNER_KEY_STEM,
    SubmitEventInput,
    SubmitEventOutput,
    ValidationError,
)
from src.core.entities import PENDING_STATUS, SUBMITTED_EVENTS
from src.core.ports.clock import ClockPort
from src.core.ports.documents import SERVER_TIMESTAMP, DocumentStoreError, DocumentStorePort
from src.core.ports.storage import ObjectStorePort, StorageError

logger = logging.getLogger(__name__)

# Input attribute -> document field, for the required free-text fields
REQUIRED_FIELDS: dict[str, str] = {
    "event_name": "eventName",
    "venue": "venue",
    "address": "address",
    "date": "date",
    "time": "time",
    "description": "description",
}


# --- Validation ---


def validate_submission(inp: SubmitEventInput, policy: ImagePolicy) -> list[ValidationError]:
    """
    Check required fields and the banner.

    Returns list of errors (empty if valid).
    """
    errors: list[ValidationError] = []

    for attr, doc_field in REQUIRED_FIELDS.items():
        if not getattr(inp, attr).strip():
            errors.append(ValidationError("required", f"{doc_field} is required", doc_field))

    if inp.banner_upload is not None:
        for err in validate_upload(inp.banner_upload, policy):
            errors.append(ValidationError(err.code, err.message, "banner"))
    elif not inp.banner_url.strip():
        errors.append(ValidationError("required", "banner is required", "banner"))
    elif not inp.banner_url.strip().startswith(("http://", "https://")):
        errors.append(
            ValidationError("invalid_url", "banner must be an http(s) URL", "banner")
        )

    return errors


def build_submission_fields(inp: SubmitEventInput, banner_url: str) -> dict[str, Any]:
    """Document fields for a new pending submission."""
    fields: dict[str, Any] = {
        doc_field: getattr(inp, attr).strip() for attr, doc_field in REQUIRED_FIELDS.items()
    }
    fields["banner"] = banner_url
    fields["registrationUrl"] = inp.registration_url or ""
    fields["submittedAt"] = SERVER_TIMESTAMP
    fields["status"] = PENDING_STATUS
    return fields


# --- Run Handler ---


def _failure(
    inp: SubmitEventInput, code: str, message: str, field: str | None, *, retryable: bool
) -> SubmitEventOutput:
    return SubmitEventOutput(
        success=False,
        errors=[ValidationError(code, message, field)],
        retryable=retryable,
        submitted=inp,
    )


def run_submit(
    inp: SubmitEventInput,
    *,
    store: DocumentStorePort,
    storage: ObjectStorePort,
    clock: ClockPort,
    policy: ImagePolicy,
) -> SubmitEventOutput:
    """
    Handle a public event submission (Atomic Handler).

    Args:
        inp: Submitted form fields plus banner URL or file
        store: Document store
        storage: Object store for uploaded banners
        clock: Time source for storage keys
        policy: Banner image policy

    Returns:
        SubmitEventOutput; ``submitted`` echoes the input on failure
    """
    errors = validate_submission(inp, policy)
    if errors:
        return SubmitEventOutput(success=False, errors=errors, submitted=inp)

    uploaded_key: str | None = None
    banner_url = inp.banner_url.strip()

    if inp.banner_upload is not None:
        try:
            normalized = normalize_image(
                inp.banner_upload.data, policy.max_width, quality=policy.jpeg_quality
            )
        except ImageNormalizationError as e:
            return _failure(inp, "invalid_image", str(e), "banner", retryable=False)

        try:
            stored = store_image(
                normalized,
                storage=storage,
                clock=clock,
                prefix=BANNER_KEY_PREFIX,
                stem=BANNER_KEY_STEM,
            )
        except StorageError as e:
            logger.error("Banner upload failed: %s", e)
            return _failure(
                inp,
                "storage_unavailable",
                "Failed to upload banner. Please try again.",
                "banner",
                retryable=True,
            )
        uploaded_key = stored.key
        banner_url = stored.url

    try:
        submission_id = store.create_document(
            SUBMITTED_EVENTS, build_submission_fields(inp, banner_url)
        )
    except DocumentStoreError as e:
        if uploaded_key is not None:
            logger.warning("Orphaned banner %s left in storage after failed submit", uploaded_key)
        logger.error("Event submission failed: %s", e)
        return _failure(
            inp,
            "store_unavailable",
            "Failed to submit event. Please try again.",
            None,
            retryable=True,
        )

    logger.info("Event submission %s received (%s)", submission_id, inp.event_name.strip())
    return SubmitEventOutput(success=True, submission_id=submission_id, banner_url=banner_url)
