"""
Moderation component - pending submission review.

A moderator works through submittedEvents: preview (read-only), accept
(publish to events) or reject (delete). Accept and reject are two-step:
request a confirmation, then confirm it by token.

Accept is a cross-collection move:
1. read the submission
2. create the published event with a fresh createdAt
3. delete the submission

On a transactional store steps 2-3 commit together. On a plain document
store they are independent writes: if 2 fails nothing happens, if 3 fails
the event stays published and the pending document lingers
(PUBLISHED_NOT_DELETED). Duplication is tolerated, loss is not, and the
delete is not retried.

The queue keeps an in-memory list loaded from the store. Mutations after a
successful write update the list; refresh() reconciles with the store.
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from threading import RLock
from typing import Any

from src.adapters.clock import SystemClock
from src.components.moderation.models import (
    ACTION_TARGETS,
    CONFIRMATION_COPY,
    ConfirmationExpiredError,
    ConfirmationNotFoundError,
    ConfirmationRequest,
    InvalidTransitionError,
    ModerationAction,
    ModerationConfig,
    ModerationOutcome,
    ModerationState,
    PublishError,
    PublishPhase,
    RejectError,
    SubmissionNotFoundError,
    can_transition,
)
from src.core.entities import EVENTS, SUBMITTED_EVENTS, SubmittedEvent
from src.core.ports.clock import ClockPort
from src.core.ports.documents import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
    DocumentStoreError,
    DocumentStorePort,
    TransactionalDocumentStorePort,
)

logger = logging.getLogger(__name__)


# --- Pure Functions ---


def build_published_fields(submission: SubmittedEvent) -> dict[str, Any]:
    """
    Fields for the published copy of a submission.

    Content fields are copied; createdAt is the publish time, not submittedAt.
    """
    fields: dict[str, Any] = dict(submission.content_fields())
    fields["registrationUrl"] = submission.registration_url or ""
    fields["createdAt"] = SERVER_TIMESTAMP
    return fields


def _read_submission(store: DocumentStorePort, submission_id: str) -> SubmittedEvent:
    try:
        doc = store.get_document(SUBMITTED_EVENTS, submission_id)
    except DocumentStoreError as e:
        raise PublishError(f"Failed to read submission {submission_id}: {e}") from e
    if doc is None:
        raise SubmissionNotFoundError(submission_id)
    return SubmittedEvent.from_document(doc)


def publish_submission(
    store: DocumentStorePort,
    submission_id: str,
    *,
    use_transactions: bool = True,
) -> tuple[str, PublishPhase]:
    """
    Move a submission into events.

    Returns:
        (event_id, phase) where phase is COMPLETED or PUBLISHED_NOT_DELETED

    Raises:
        SubmissionNotFoundError: The submission no longer exists
        PublishError: The event could not be created (nothing moved)
    """
    if use_transactions and isinstance(store, TransactionalDocumentStorePort):
        try:
            with store.transaction() as tx:
                submission = _read_submission(tx, submission_id)
                event_id = tx.create_document(EVENTS, build_published_fields(submission))
                tx.delete_document(SUBMITTED_EVENTS, submission_id)
        except DocumentNotFoundError as e:
            raise SubmissionNotFoundError(submission_id) from e
        except DocumentStoreError as e:
            raise PublishError(f"Failed to publish submission {submission_id}: {e}") from e
        logger.info("Published submission %s as event %s", submission_id, event_id)
        return event_id, PublishPhase.COMPLETED

    submission = _read_submission(store, submission_id)

    try:
        event_id = store.create_document(EVENTS, build_published_fields(submission))
    except DocumentStoreError as e:
        raise PublishError(f"Failed to publish submission {submission_id}: {e}") from e

    try:
        store.delete_document(SUBMITTED_EVENTS, submission_id)
    except DocumentNotFoundError:
        logger.info("Submission %s was already removed", submission_id)
    except DocumentStoreError as e:
        logger.warning(
            "Event %s published but submission %s could not be removed: %s",
            event_id,
            submission_id,
            e,
        )
        return event_id, PublishPhase.PUBLISHED_NOT_DELETED

    logger.info("Published submission %s as event %s", submission_id, event_id)
    return event_id, PublishPhase.COMPLETED


# --- Queue (stateful shell) ---


class ModerationQueue:
    """
    In-memory moderation list over submittedEvents.

    One instance is shared by the admin request threads, so every read and
    state change runs under a re-entrant lock.
    """

    def __init__(
        self,
        store: DocumentStorePort,
        clock: ClockPort | None = None,
        config: ModerationConfig | None = None,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.config = config or ModerationConfig()
        self._items: dict[str, SubmittedEvent] = {}
        self._states: dict[str, ModerationState] = {}
        self._confirmations: dict[str, ConfirmationRequest] = {}
        self._loaded = False
        self._lock = RLock()

    # --- Loading ---

    def load(self) -> list[SubmittedEvent]:
        """
        Fetch every pending submission, replacing the local list.

        Raises:
            DocumentStoreError: If the store cannot be read
        """
        with self._lock:
            docs = self.store.list_documents(SUBMITTED_EVENTS, "submittedAt")
            items = [SubmittedEvent.from_document(d) for d in docs]

            previous = self._states
            self._items = {item.id: item for item in items}
            # Only ids still in the store keep a state; a lingering pending doc
            # for an accepted item is reviewable again
            self._states = {
                item.id: (
                    ModerationState.PREVIEW_OPEN
                    if previous.get(item.id) == ModerationState.PREVIEW_OPEN
                    else ModerationState.PENDING
                )
                for item in items
            }

            self._confirmations = {
                token: req
                for token, req in self._confirmations.items()
                if req.submission_id in self._items
            }
            self._loaded = True
            logger.info("Loaded %d pending submissions", len(items))
            return list(self._items.values())

    def refresh(self) -> list[SubmittedEvent]:
        """Re-fetch from the store; the store wins over the local list."""
        return self.load()

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    @property
    def loaded(self) -> bool:
        return self._loaded

    def pending(self) -> list[SubmittedEvent]:
        with self._lock:
            self._ensure_loaded()
            return list(self._items.values())

    def state_of(self, submission_id: str) -> ModerationState | None:
        with self._lock:
            return self._states.get(submission_id)

    def _forget(self, submission_id: str) -> None:
        self._items.pop(submission_id, None)
        self._states.pop(submission_id, None)
        self._drop_confirmations(submission_id)

    def _drop_confirmations(self, submission_id: str) -> None:
        self._confirmations = {
            token: req
            for token, req in self._confirmations.items()
            if req.submission_id != submission_id
        }

    def _transition(self, submission_id: str, to_state: ModerationState) -> None:
        current = self._states.get(submission_id, ModerationState.PENDING)
        if not can_transition(current, to_state):
            raise InvalidTransitionError(submission_id, current, to_state)
        self._states[submission_id] = to_state

    def _require_pending(self, submission_id: str, target: ModerationState) -> None:
        self._ensure_loaded()
        current = self._states.get(submission_id, ModerationState.PENDING)
        if current not in (ModerationState.PENDING, ModerationState.PREVIEW_OPEN):
            raise InvalidTransitionError(submission_id, current, target)
        if submission_id not in self._items:
            raise SubmissionNotFoundError(submission_id)
        if current == ModerationState.PREVIEW_OPEN:
            self.close_preview(submission_id)

    # --- Preview ---

    def preview(self, submission_id: str) -> SubmittedEvent:
        """
        Read a submission for inspection. Never writes.

        Raises:
            InvalidTransitionError: If the submission was already accepted or rejected
            SubmissionNotFoundError: If the record vanished from the store
        """
        with self._lock:
            self._ensure_loaded()
            current = self._states.get(submission_id, ModerationState.PENDING)
            if current != ModerationState.PREVIEW_OPEN and not can_transition(
                current, ModerationState.PREVIEW_OPEN
            ):
                raise InvalidTransitionError(
                    submission_id, current, ModerationState.PREVIEW_OPEN
                )

            doc = self.store.get_document(SUBMITTED_EVENTS, submission_id)
            if doc is None:
                self._forget(submission_id)
                raise SubmissionNotFoundError(submission_id)

            submission = SubmittedEvent.from_document(doc)
            self._items[submission_id] = submission
            self._states[submission_id] = ModerationState.PREVIEW_OPEN
            return submission

    def close_preview(self, submission_id: str) -> None:
        with self._lock:
            if self._states.get(submission_id) == ModerationState.PREVIEW_OPEN:
                self._transition(submission_id, ModerationState.PENDING)

    # --- Two-step actions ---

    def _request(self, submission_id: str, action: ModerationAction) -> ConfirmationRequest:
        with self._lock:
            self._require_pending(submission_id, ACTION_TARGETS[action])
            title, message = CONFIRMATION_COPY[action]
            request = ConfirmationRequest(
                token=secrets.token_urlsafe(24),
                action=action,
                submission_id=submission_id,
                title=title,
                message=message,
                expires_at=self.clock.now_utc()
                + timedelta(seconds=self.config.confirmation_ttl_seconds),
            )
            self._confirmations[request.token] = request
            return request

    def request_accept(self, submission_id: str) -> ConfirmationRequest:
        return self._request(submission_id, ModerationAction.ACCEPT)

    def request_reject(self, submission_id: str) -> ConfirmationRequest:
        return self._request(submission_id, ModerationAction.REJECT)

    def cancel(self, token: str) -> ConfirmationRequest:
        """Discard a confirmation without acting on it."""
        with self._lock:
            request = self._confirmations.pop(token, None)
        if request is None:
            raise ConfirmationNotFoundError(token)
        return request

    def confirm(self, token: str) -> ModerationOutcome:
        """
        Execute a previously requested action.

        The token is consumed whether or not the action succeeds.

        Raises:
            ConfirmationNotFoundError: Unknown or already used token
            ConfirmationExpiredError: Token older than the configured TTL
            InvalidTransitionError: The submission was already accepted or rejected
            SubmissionNotFoundError: The submission vanished
            PublishError / RejectError: The store write failed
        """
        with self._lock:
            request = self._confirmations.pop(token, None)
            if request is None:
                raise ConfirmationNotFoundError(token)
            if self.clock.now_utc() >= request.expires_at:
                raise ConfirmationExpiredError(token)

            if request.action == ModerationAction.ACCEPT:
                return self._accept(request.submission_id)
            return self._reject(request.submission_id)

    # --- Execution ---

    def _accept(self, submission_id: str) -> ModerationOutcome:
        self._require_pending(submission_id, ModerationState.ACCEPTED)

        try:
            event_id, phase = publish_submission(
                self.store,
                submission_id,
                use_transactions=self.config.use_transactions,
            )
        except SubmissionNotFoundError:
            self._forget(submission_id)
            raise
        except PublishError:
            logger.exception("Error accepting submission %s", submission_id)
            raise

        self._items.pop(submission_id, None)
        self._drop_confirmations(submission_id)
        self._transition(submission_id, ModerationState.ACCEPTED)

        warnings: list[str] = []
        if phase == PublishPhase.PUBLISHED_NOT_DELETED:
            warnings.append(
                "Event published, but the submission could not be removed "
                "and may reappear after refresh"
            )
        return ModerationOutcome(
            action=ModerationAction.ACCEPT,
            submission_id=submission_id,
            state=ModerationState.ACCEPTED,
            phase=phase,
            event_id=event_id,
            warnings=warnings,
        )

    def _reject(self, submission_id: str) -> ModerationOutcome:
        self._require_pending(submission_id, ModerationState.REJECTED)

        try:
            self.store.delete_document(SUBMITTED_EVENTS, submission_id)
        except DocumentNotFoundError as e:
            self._forget(submission_id)
            raise SubmissionNotFoundError(submission_id) from e
        except DocumentStoreError as e:
            logger.exception("Error deleting submission %s", submission_id)
            raise RejectError(f"Failed to delete submission {submission_id}: {e}") from e

        self._items.pop(submission_id, None)
        self._drop_confirmations(submission_id)
        self._transition(submission_id, ModerationState.REJECTED)
        logger.info("Rejected submission %s", submission_id)

        return ModerationOutcome(
            action=ModerationAction.REJECT,
            submission_id=submission_id,
            state=ModerationState.REJECTED,
        )
