"""
Moderation component.

Review of pending event submissions: preview, accept (publish) and reject,
each destructive action gated behind an explicit confirmation.
"""

from src.components.moderation.component import (
    ModerationQueue,
    build_published_fields,
    publish_submission,
)
from src.components.moderation.models import (
    CONFIRMATION_COPY,
    VALID_TRANSITIONS,
    ConfirmationError,
    ConfirmationExpiredError,
    ConfirmationNotFoundError,
    ConfirmationRequest,
    InvalidTransitionError,
    ModerationAction,
    ModerationConfig,
    ModerationError,
    ModerationOutcome,
    ModerationState,
    PublishError,
    PublishPhase,
    RejectError,
    SubmissionNotFoundError,
    can_transition,
)

__all__ = [
    # Component
    "ModerationQueue",
    "build_published_fields",
    "publish_submission",
    # Models
    "CONFIRMATION_COPY",
    "VALID_TRANSITIONS",
    "ConfirmationRequest",
    "ModerationAction",
    "ModerationConfig",
    "ModerationOutcome",
    "ModerationState",
    "PublishPhase",
    "can_transition",
    # Errors
    "ConfirmationError",
    "ConfirmationExpiredError",
    "ConfirmationNotFoundError",
    "InvalidTransitionError",
    "ModerationError",
    "PublishError",
    "RejectError",
    "SubmissionNotFoundError",
]
