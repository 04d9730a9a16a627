"""
Public testimonials and news endpoints.

News is served from the started cache; testimonials are read through.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.deps import get_document_store, get_news_cache
from src.api.schemas import (
    ErrorResponse,
    NewsListResponse,
    NewsPostResponse,
    TestimonialListResponse,
    TestimonialResponse,
)
from src.api.uploads import unavailable
from src.components.news import NewsCache
from src.components.testimonials import list_testimonials
from src.core.ports.documents import DocumentStoreError, DocumentStorePort

router = APIRouter()


@router.get(
    "/testimonials",
    response_model=TestimonialListResponse,
    responses={503: {"model": ErrorResponse}},
    summary="List testimonials",
)
def public_testimonials(
    store: DocumentStorePort = Depends(get_document_store),
) -> TestimonialListResponse:
    try:
        items = list_testimonials(store)
    except DocumentStoreError as e:
        raise unavailable(f"Could not load testimonials: {e}") from e
    return TestimonialListResponse(
        testimonials=[TestimonialResponse.from_entity(t) for t in items],
        total=len(items),
    )


@router.get(
    "/news",
    response_model=NewsListResponse,
    summary="List news posts",
    description=(
        "Cached news posts, newest first. `loading` is true until the first "
        "fetch lands; `refresh` re-reads the store."
    ),
)
def public_news(
    refresh: bool = Query(False, description="Re-read the store before answering"),
    cache: NewsCache = Depends(get_news_cache),
) -> NewsListResponse:
    if refresh and cache.started:
        cache.refresh()
    return NewsListResponse(
        posts=[NewsPostResponse.from_entity(p) for p in cache.posts],
        loading=cache.loading,
        error=cache.error,
    )


@router.get(
    "/news/{slug}",
    response_model=NewsPostResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a news post by slug",
)
def public_news_post(slug: str, cache: NewsCache = Depends(get_news_cache)) -> NewsPostResponse:
    post = cache.get_post_by_slug(slug)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return NewsPostResponse.from_entity(post)
