"""
Moderation component models.

State machine (per submission):
- pending -> preview_open (inspect, read-only)
- preview_open -> pending (close preview)
- pending -> accepted (published to events, removed from submittedEvents)
- pending -> rejected (removed from submittedEvents)

accepted and rejected are terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

# --- State Machine ---


class ModerationState(Enum):
    PENDING = "pending"
    PREVIEW_OPEN = "preview_open"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


VALID_TRANSITIONS: dict[ModerationState, set[ModerationState]] = {
    ModerationState.PENDING: {
        ModerationState.PREVIEW_OPEN,
        ModerationState.ACCEPTED,
        ModerationState.REJECTED,
    },
    ModerationState.PREVIEW_OPEN: {ModerationState.PENDING},
    ModerationState.ACCEPTED: set(),  # Terminal state
    ModerationState.REJECTED: set(),  # Terminal state
}


def can_transition(from_state: ModerationState, to_state: ModerationState) -> bool:
    """Check if a moderation state transition is valid."""
    return to_state in VALID_TRANSITIONS.get(from_state, set())


class PublishPhase(Enum):
    """
    Progress of the submittedEvents -> events move.

    PUBLISHED_NOT_DELETED is the tolerated intermediate state: the event is
    live but the pending document could not be removed, so it will show up
    again on the next refresh.
    """

    NOT_STARTED = "not_started"
    PUBLISHED_NOT_DELETED = "published_not_deleted"
    COMPLETED = "completed"


class ModerationAction(Enum):
    ACCEPT = "accept"
    REJECT = "reject"


# Confirmation dialog copy per action: (title, message)
CONFIRMATION_COPY: dict[ModerationAction, tuple[str, str]] = {
    ModerationAction.ACCEPT: (
        "Accept Event",
        "Are you sure you want to publish this event?",
    ),
    ModerationAction.REJECT: (
        "Delete Submission",
        "Are you sure you want to delete this submission?",
    ),
}

ACTION_TARGETS: dict[ModerationAction, ModerationState] = {
    ModerationAction.ACCEPT: ModerationState.ACCEPTED,
    ModerationAction.REJECT: ModerationState.REJECTED,
}


# --- Errors ---


class ModerationError(Exception):
    """Base class for moderation errors."""


class SubmissionNotFoundError(ModerationError):
    """The submission vanished from the store (deleted elsewhere)."""

    def __init__(self, submission_id: str) -> None:
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} is no longer available")


class InvalidTransitionError(ModerationError):
    def __init__(self, submission_id: str, from_state: ModerationState, to_state: ModerationState):
        self.submission_id = submission_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Cannot move submission {submission_id} from {from_state.value} to {to_state.value}"
        )


class PublishError(ModerationError):
    """Creating the published event failed; nothing was moved."""


class RejectError(ModerationError):
    """Deleting the submission failed; it is still pending."""


class ConfirmationError(ModerationError):
    """Base class for confirmation token problems."""


class ConfirmationNotFoundError(ConfirmationError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__("Confirmation not found or already used")


class ConfirmationExpiredError(ConfirmationError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__("Confirmation has expired")


# --- Config ---


@dataclass(frozen=True)
class ModerationConfig:
    confirmation_ttl_seconds: int = 300
    use_transactions: bool = True  # Only honoured by transactional stores


# --- Output Models ---


@dataclass(frozen=True)
class ConfirmationRequest:
    """A pending destructive action awaiting explicit confirmation."""

    token: str
    action: ModerationAction
    submission_id: str
    title: str
    message: str
    expires_at: datetime


@dataclass(frozen=True)
class ModerationOutcome:
    """Result of an executed accept/reject."""

    action: ModerationAction
    submission_id: str
    state: ModerationState
    phase: PublishPhase | None = None  # accept only
    event_id: str | None = None  # accept only
    warnings: list[str] = field(default_factory=list)
