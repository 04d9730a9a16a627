"""
Public events API endpoints.

Endpoints:
- GET /api/events - Published events, newest first, optional search
- GET /api/events/{id} - Single published event
- POST /api/events/submissions - Submit an event for moderation (multipart)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from src.api.deps import (
    get_banner_policy,
    get_clock,
    get_document_store,
    get_object_store,
)
from src.api.schemas import (
    ErrorResponse,
    EventListResponse,
    EventResponse,
    SubmitEventResponse,
)
from src.api.uploads import bad_request, field_errors, read_image_upload, unavailable
from src.components.events_feed import (
    EventNotFoundError,
    event_link,
    get_event,
    list_published_events,
    search_events,
)
from src.components.imaging import ImagePolicy
from src.components.submissions import SubmitEventInput, run_submit
from src.core.ports.clock import ClockPort
from src.core.ports.documents import DocumentStoreError, DocumentStorePort
from src.core.ports.storage import ObjectStorePort

router = APIRouter()


@router.get(
    "",
    response_model=EventListResponse,
    responses={503: {"model": ErrorResponse}},
    summary="List published events",
    description="Published events, most recent first. `q` matches name, venue, city and tags.",
)
def list_events(
    q: str = Query("", description="Case-insensitive search term"),
    store: DocumentStorePort = Depends(get_document_store),
) -> EventListResponse:
    try:
        events = list_published_events(store)
    except DocumentStoreError as e:
        raise unavailable(f"Could not load events: {e}") from e

    matches = search_events(events, q)
    return EventListResponse(
        events=[EventResponse.from_entity(e, event_link(e)) for e in matches],
        total=len(matches),
    )


@router.get(
    "/{event_id}",
    response_model=EventResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Get a published event",
)
def read_event(
    event_id: str,
    store: DocumentStorePort = Depends(get_document_store),
) -> EventResponse:
    try:
        event = get_event(store, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DocumentStoreError as e:
        raise unavailable(f"Could not load event: {e}") from e
    return EventResponse.from_entity(event, event_link(event))


@router.post(
    "/submissions",
    status_code=status.HTTP_201_CREATED,
    response_model=SubmitEventResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Submit an event",
    description=(
        "Submit an event for review. Supply either `banner_url` or a `banner` image; "
        "uploads are resized to the banner width and stored as JPEG."
    ),
)
def submit_event(
    event_name: str = Form(""),
    venue: str = Form(""),
    address: str = Form(""),
    date: str = Form(""),
    time: str = Form(""),
    description: str = Form(""),
    banner_url: str = Form(""),
    registration_url: str = Form(""),
    banner: UploadFile | None = File(None),
    store: DocumentStorePort = Depends(get_document_store),
    storage: ObjectStorePort = Depends(get_object_store),
    clock: ClockPort = Depends(get_clock),
    policy: ImagePolicy = Depends(get_banner_policy),
) -> SubmitEventResponse:
    inp = SubmitEventInput(
        event_name=event_name,
        venue=venue,
        address=address,
        date=date,
        time=time,
        description=description,
        banner_url=banner_url,
        banner_upload=read_image_upload(banner),
        registration_url=registration_url,
    )

    result = run_submit(inp, store=store, storage=storage, clock=clock, policy=policy)

    if not result.success:
        if result.retryable:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=field_errors(result.errors),
            )
        raise bad_request(result.errors)

    return SubmitEventResponse(
        success=True,
        submission_id=result.submission_id or "",
        banner_url=result.banner_url or "",
    )
