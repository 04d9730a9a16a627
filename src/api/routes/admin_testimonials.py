"""
Admin testimonial curation endpoints.

Endpoints:
- GET /api/admin/testimonials - List testimonials, newest first
- POST /api/admin/testimonials - Create (multipart, optional image)
- PUT /api/admin/testimonials/{id} - Replace content (multipart, optional image)
- DELETE /api/admin/testimonials/{id} - Delete and clean up a hosted image
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from src.api.deps import get_testimonial_curation
from src.api.schemas import (
    CleanupResponse,
    ErrorResponse,
    TestimonialDeleteResponse,
    TestimonialListResponse,
    TestimonialMutationResponse,
    TestimonialResponse,
)
from src.api.uploads import bad_request, read_image_upload, unavailable
from src.components.testimonials import (
    TestimonialCuration,
    TestimonialInput,
    TestimonialNotFoundError,
    TestimonialOutput,
    TestimonialStoreError,
)
from src.core.ports.documents import DocumentStoreError

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _to_response(result: TestimonialOutput) -> TestimonialMutationResponse:
    if not result.success or result.testimonial is None:
        raise bad_request(result.errors)
    return TestimonialMutationResponse(
        testimonial=TestimonialResponse.from_entity(result.testimonial),
        image_cleanup=CleanupResponse.from_result(result.cleanup),
    )


@router.get(
    "",
    response_model=TestimonialListResponse,
    responses={503: {"model": ErrorResponse}},
    summary="List testimonials",
)
def list_testimonials(
    curation: TestimonialCuration = Depends(get_testimonial_curation),
) -> TestimonialListResponse:
    try:
        items = curation.load()
    except DocumentStoreError as e:
        raise unavailable(f"Error fetching testimonials: {e}") from e
    return TestimonialListResponse(
        testimonials=[TestimonialResponse.from_entity(t) for t in items],
        total=len(items),
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=TestimonialMutationResponse,
    responses=_ERRORS,
    summary="Create a testimonial",
)
def create_testimonial(
    name: str = Form(""),
    role: str = Form(""),
    text: str = Form(""),
    image_url: str = Form(""),
    twitter_link: str = Form(""),
    image: UploadFile | None = File(None),
    curation: TestimonialCuration = Depends(get_testimonial_curation),
) -> TestimonialMutationResponse:
    inp = TestimonialInput(
        name=name,
        role=role,
        text=text,
        image_url=image_url,
        image_upload=read_image_upload(image),
        twitter_link=twitter_link,
    )
    try:
        result = curation.create(inp)
    except TestimonialStoreError as e:
        raise unavailable(str(e)) from e
    return _to_response(result)


@router.put(
    "/{testimonial_id}",
    response_model=TestimonialMutationResponse,
    responses=_ERRORS,
    summary="Update a testimonial",
    description=(
        "Replaces every field. A replaced image hosted by this site is deleted "
        "after the update lands; the outcome is reported in `image_cleanup`."
    ),
)
def update_testimonial(
    testimonial_id: str,
    name: str = Form(""),
    role: str = Form(""),
    text: str = Form(""),
    image_url: str = Form(""),
    twitter_link: str = Form(""),
    image: UploadFile | None = File(None),
    curation: TestimonialCuration = Depends(get_testimonial_curation),
) -> TestimonialMutationResponse:
    inp = TestimonialInput(
        name=name,
        role=role,
        text=text,
        image_url=image_url,
        image_upload=read_image_upload(image),
        twitter_link=twitter_link,
    )
    try:
        result = curation.update(testimonial_id, inp)
    except TestimonialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except TestimonialStoreError as e:
        raise unavailable(str(e)) from e
    return _to_response(result)


@router.delete(
    "/{testimonial_id}",
    response_model=TestimonialDeleteResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Delete a testimonial",
)
def delete_testimonial(
    testimonial_id: str,
    curation: TestimonialCuration = Depends(get_testimonial_curation),
) -> TestimonialDeleteResponse:
    try:
        cleanup = curation.delete(testimonial_id)
    except TestimonialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except TestimonialStoreError as e:
        raise unavailable(str(e)) from e
    return TestimonialDeleteResponse(
        success=True,
        message="Testimonial deleted successfully!",
        image_cleanup=CleanupResponse.from_result(cleanup),
    )
