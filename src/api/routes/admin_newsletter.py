"""
Admin newsletter subscribers API endpoints.

The search term (`q`) and the selected emails (`selected`, repeatable)
are passed on every call; compose and export act on the same set the
admin sees.

Endpoints:
- GET /api/admin/newsletter/subscribers - List subscribers
- DELETE /api/admin/newsletter/subscribers/{id} - Delete subscriber
- GET /api/admin/newsletter/subscribers/compose - Mail compose link (BCC)
- GET /api/admin/newsletter/subscribers/export/csv - Export CSV
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from src.api.deps import get_clock, get_subscriber_directory
from src.api.schemas import (
    ComposeResponse,
    DeleteResponse,
    ErrorResponse,
    SubscriberListResponse,
    SubscriberResponse,
)
from src.api.uploads import unavailable
from src.components.subscribers import (
    NoRecipientsError,
    SubscriberDirectory,
    SubscriberNotFoundError,
    compose_recipients,
)
from src.core.ports.clock import ClockPort
from src.core.ports.documents import DocumentStoreError

router = APIRouter()


def _load(
    directory: SubscriberDirectory, q: str, selected: list[str]
) -> SubscriberDirectory:
    try:
        directory.load()
    except DocumentStoreError as e:
        raise unavailable(f"Error fetching subscribers: {e}") from e
    directory.search_term = q
    directory.selected = list(selected)
    return directory


@router.get(
    "/subscribers",
    response_model=SubscriberListResponse,
    responses={503: {"model": ErrorResponse}},
    summary="List newsletter subscribers",
    description=(
        "Subscribers, most recent signup first, filtered by an email substring, "
        "with the count of signups in the last 7 days."
    ),
)
def list_subscribers(
    q: str = Query("", description="Case-insensitive email search"),
    directory: SubscriberDirectory = Depends(get_subscriber_directory),
    clock: ClockPort = Depends(get_clock),
) -> SubscriberListResponse:
    _load(directory, q, [])
    filtered = directory.filtered
    return SubscriberListResponse(
        subscribers=[SubscriberResponse.from_entity(s) for s in filtered],
        total=len(directory.subscribers),
        filtered=len(filtered),
        this_week=directory.recent_count(clock.now_utc()),
    )


@router.get(
    "/subscribers/compose",
    response_model=ComposeResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Compose link",
    description="Mail compose URL with the selected (else every filtered) subscriber in BCC.",
)
def compose_link(
    q: str = Query("", description="Case-insensitive email search"),
    selected: list[str] = Query([], description="Selected emails"),
    directory: SubscriberDirectory = Depends(get_subscriber_directory),
) -> ComposeResponse:
    _load(directory, q, selected)
    try:
        url = directory.compose_url()
    except NoRecipientsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return ComposeResponse(
        url=url,
        recipients=len(compose_recipients(directory.filtered, directory.selected)),
    )


@router.delete(
    "/subscribers/{subscriber_id}",
    response_model=DeleteResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Delete subscriber",
    description="Permanently delete a subscriber.",
)
def delete_subscriber(
    subscriber_id: str,
    directory: SubscriberDirectory = Depends(get_subscriber_directory),
) -> DeleteResponse:
    _load(directory, "", [])
    try:
        removed = directory.delete(subscriber_id)
    except SubscriberNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DocumentStoreError as e:
        raise unavailable(f"Error deleting subscriber: {e}") from e

    who = removed.email if removed else subscriber_id
    return DeleteResponse(success=True, message=f"Removed {who} from subscribers")


@router.get(
    "/subscribers/export/csv",
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Export subscribers to CSV",
    description="Export the filtered subscribers (narrowed to the selection, if any) as CSV.",
)
def export_subscribers_csv(
    q: str = Query("", description="Case-insensitive email search"),
    selected: list[str] = Query([], description="Selected emails"),
    directory: SubscriberDirectory = Depends(get_subscriber_directory),
    clock: ClockPort = Depends(get_clock),
) -> StreamingResponse:
    _load(directory, q, selected)
    try:
        export = directory.export(clock.now_utc().date())
    except NoRecipientsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return StreamingResponse(
        iter([export.content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={export.filename}"},
    )
