"""
Admin event-submission moderation endpoints.

Accept and reject are two-step: the request returns a confirmation
token carrying the dialog copy, and nothing is written until that token
is confirmed.

Endpoints:
- GET /api/admin/submissions - Pending submissions, oldest first
- GET /api/admin/submissions/{id} - Preview a submission
- POST /api/admin/submissions/{id}/preview/close - Close the preview
- POST /api/admin/submissions/{id}/accept - Request publish confirmation
- POST /api/admin/submissions/{id}/reject - Request delete confirmation
- POST /api/admin/submissions/confirmations/{token} - Execute the action
- DELETE /api/admin/submissions/confirmations/{token} - Cancel the action
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.deps import get_moderation_queue
from src.api.schemas import (
    ConfirmationResponse,
    ErrorResponse,
    ModerationOutcomeResponse,
    SubmissionListResponse,
    SubmissionResponse,
)
from src.api.uploads import unavailable
from src.components.moderation import (
    ConfirmationError,
    InvalidTransitionError,
    ModerationQueue,
    PublishError,
    RejectError,
    SubmissionNotFoundError,
)
from src.core.ports.documents import DocumentStoreError

router = APIRouter()

_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _gone(e: SubmissionNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "",
    response_model=SubmissionListResponse,
    responses={503: {"model": ErrorResponse}},
    summary="List pending submissions",
)
def list_submissions(
    refresh: bool = Query(False, description="Re-fetch from the store first"),
    queue: ModerationQueue = Depends(get_moderation_queue),
) -> SubmissionListResponse:
    try:
        if refresh:
            queue.refresh()
        pending = queue.pending()
    except DocumentStoreError as e:
        raise unavailable(f"Could not load submissions: {e}") from e

    return SubmissionListResponse(
        submissions=[SubmissionResponse.from_entity(s, queue.state_of(s.id)) for s in pending],
        total=len(pending),
    )


@router.get(
    "/{submission_id}",
    response_model=SubmissionResponse,
    responses=_ERRORS,
    summary="Preview a submission",
)
def preview_submission(
    submission_id: str,
    queue: ModerationQueue = Depends(get_moderation_queue),
) -> SubmissionResponse:
    try:
        submission = queue.preview(submission_id)
    except SubmissionNotFoundError as e:
        raise _gone(e) from e
    except InvalidTransitionError as e:
        raise _conflict(e) from e
    except DocumentStoreError as e:
        raise unavailable(f"Could not load submission: {e}") from e
    return SubmissionResponse.from_entity(submission, queue.state_of(submission_id))


@router.post(
    "/{submission_id}/preview/close",
    responses=_ERRORS,
    summary="Close a submission preview",
)
def close_preview(
    submission_id: str,
    queue: ModerationQueue = Depends(get_moderation_queue),
) -> dict[str, str | None]:
    queue.close_preview(submission_id)
    state = queue.state_of(submission_id)
    return {"submission_id": submission_id, "state": state.value if state else None}


def _request(queue: ModerationQueue, submission_id: str, accept: bool) -> ConfirmationResponse:
    try:
        if accept:
            req = queue.request_accept(submission_id)
        else:
            req = queue.request_reject(submission_id)
    except SubmissionNotFoundError as e:
        raise _gone(e) from e
    except InvalidTransitionError as e:
        raise _conflict(e) from e
    except DocumentStoreError as e:
        raise unavailable(f"Could not load submissions: {e}") from e
    return ConfirmationResponse.from_request(req)


@router.post(
    "/{submission_id}/accept",
    response_model=ConfirmationResponse,
    responses=_ERRORS,
    summary="Request accept confirmation",
)
def request_accept(
    submission_id: str,
    queue: ModerationQueue = Depends(get_moderation_queue),
) -> ConfirmationResponse:
    return _request(queue, submission_id, accept=True)


@router.post(
    "/{submission_id}/reject",
    response_model=ConfirmationResponse,
    responses=_ERRORS,
    summary="Request reject confirmation",
)
def request_reject(
    submission_id: str,
    queue: ModerationQueue = Depends(get_moderation_queue),
) -> ConfirmationResponse:
    return _request(queue, submission_id, accept=False)


@router.post(
    "/confirmations/{token}",
    response_model=ModerationOutcomeResponse,
    responses=_ERRORS,
    summary="Confirm a moderation action",
    description=(
        "Executes the pending accept or reject. Accept publishes the event and "
        "removes the submission; reject deletes the submission. Tokens are single-use."
    ),
)
def confirm_action(
    token: str,
    queue: ModerationQueue = Depends(get_moderation_queue),
) -> ModerationOutcomeResponse:
    try:
        outcome = queue.confirm(token)
    except SubmissionNotFoundError as e:
        raise _gone(e) from e
    except (ConfirmationError, InvalidTransitionError) as e:
        raise _conflict(e) from e
    except (PublishError, RejectError, DocumentStoreError) as e:
        raise unavailable(str(e)) from e
    return ModerationOutcomeResponse.from_outcome(outcome)


@router.delete(
    "/confirmations/{token}",
    response_model=ConfirmationResponse,
    responses={409: {"model": ErrorResponse}},
    summary="Cancel a moderation action",
)
def cancel_action(
    token: str,
    queue: ModerationQueue = Depends(get_moderation_queue),
) -> ConfirmationResponse:
    try:
        req = queue.cancel(token)
    except ConfirmationError as e:
        raise _conflict(e) from e
    return ConfirmationResponse.from_request(req)
