from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from src.components.moderation import ConfirmationRequest, ModerationOutcome, ModerationState
from src.components.testimonials import CleanupResult
from src.core.entities import (
    NewsletterSubscriber,
    NewsPost,
    PublishedEvent,
    SubmittedEvent,
    Testimonial,
)

# --- Shared ---
ModerationActionName = Literal["accept", "reject"]


class ErrorResponse(BaseModel):
    detail: Any


class FieldError(BaseModel):
    code: str
    message: str
    field: str | None = None


class DeleteResponse(BaseModel):
    success: bool
    message: str


# --- Events ---
class EventResponse(BaseModel):
    id: str
    event_name: str
    venue: str
    address: str
    date: str
    time: str
    description: str
    banner: str
    registration_url: str = ""
    created_at: datetime | None = None
    link: str = Field(..., description="Registration URL, else the event's detail page")
    extra: dict[str, Any] = {}

    @classmethod
    def from_entity(cls, event: PublishedEvent, link: str) -> "EventResponse":
        return cls(
            id=event.id,
            event_name=event.event_name,
            venue=event.venue,
            address=event.address,
            date=event.date,
            time=event.time,
            description=event.description,
            banner=event.banner,
            registration_url=event.registration_url,
            created_at=event.created_at,
            link=link,
            extra=event.extra,
        )


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int


class SubmitEventResponse(BaseModel):
    success: bool
    submission_id: str
    banner_url: str
    message: str = "Event submitted successfully! Our team will review it shortly."


# --- Moderation ---
class SubmissionResponse(BaseModel):
    id: str
    event_name: str
    venue: str
    address: str
    date: str
    time: str
    description: str
    banner: str
    registration_url: str = ""
    submitted_at: datetime | None = None
    status: str
    state: str | None = None

    @classmethod
    def from_entity(
        cls, submission: SubmittedEvent, state: ModerationState | None = None
    ) -> "SubmissionResponse":
        return cls(
            id=submission.id,
            event_name=submission.event_name,
            venue=submission.venue,
            address=submission.address,
            date=submission.date,
            time=submission.time,
            description=submission.description,
            banner=submission.banner,
            registration_url=submission.registration_url,
            submitted_at=submission.submitted_at,
            status=submission.status,
            state=state.value if state else None,
        )


class SubmissionListResponse(BaseModel):
    submissions: list[SubmissionResponse]
    total: int


class ConfirmationResponse(BaseModel):
    token: str
    action: ModerationActionName
    submission_id: str
    title: str
    message: str
    expires_at: datetime

    @classmethod
    def from_request(cls, req: ConfirmationRequest) -> "ConfirmationResponse":
        return cls(
            token=req.token,
            action=req.action.value,
            submission_id=req.submission_id,
            title=req.title,
            message=req.message,
            expires_at=req.expires_at,
        )


class ModerationOutcomeResponse(BaseModel):
    action: ModerationActionName
    submission_id: str
    state: str
    phase: str | None = None
    event_id: str | None = None
    warnings: list[str] = []

    @classmethod
    def from_outcome(cls, outcome: ModerationOutcome) -> "ModerationOutcomeResponse":
        return cls(
            action=outcome.action.value,
            submission_id=outcome.submission_id,
            state=outcome.state.value,
            phase=outcome.phase.value if outcome.phase else None,
            event_id=outcome.event_id,
            warnings=list(outcome.warnings),
        )


# --- Testimonials ---
class TestimonialResponse(BaseModel):
    id: str
    name: str
    role: str
    text: str
    image: str = ""
    twitter_link: str = ""
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, t: Testimonial) -> "TestimonialResponse":
        return cls(
            id=t.id,
            name=t.name,
            role=t.role,
            text=t.text,
            image=t.image,
            twitter_link=t.twitter_link,
            created_at=t.created_at,
        )


class TestimonialListResponse(BaseModel):
    testimonials: list[TestimonialResponse]
    total: int


class CleanupResponse(BaseModel):
    url: str
    attempted: bool
    deleted: bool
    reason: str | None = None

    @classmethod
    def from_result(cls, result: CleanupResult | None) -> "CleanupResponse | None":
        if result is None:
            return None
        return cls(
            url=result.url,
            attempted=result.attempted,
            deleted=result.deleted,
            reason=result.reason,
        )


class TestimonialMutationResponse(BaseModel):
    testimonial: TestimonialResponse
    image_cleanup: CleanupResponse | None = None


class TestimonialDeleteResponse(DeleteResponse):
    image_cleanup: CleanupResponse | None = None


# --- Subscribers ---
class SubscriberResponse(BaseModel):
    id: str
    email: str
    subscribed_at: datetime | None = None

    @classmethod
    def from_entity(cls, s: NewsletterSubscriber) -> "SubscriberResponse":
        return cls(id=s.id, email=s.email, subscribed_at=s.subscribed_at)


class SubscriberListResponse(BaseModel):
    subscribers: list[SubscriberResponse]
    total: int = Field(..., description="All subscribers")
    filtered: int = Field(..., description="Subscribers matching the search term")
    this_week: int = Field(..., description="Signups in the last 7 days")


class ComposeResponse(BaseModel):
    url: str
    recipients: int


# --- News ---
class NewsPostResponse(BaseModel):
    id: str
    title: str
    slug: str
    author: str = ""
    image: str = ""
    category: str = ""
    excerpt: str = ""
    is_popular: bool = False
    is_top_story: bool = False
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, p: NewsPost) -> "NewsPostResponse":
        return cls(
            id=p.id,
            title=p.title,
            slug=p.slug,
            author=p.author,
            image=p.image,
            category=p.category,
            excerpt=p.excerpt,
            is_popular=p.is_popular,
            is_top_story=p.is_top_story,
            created_at=p.created_at,
        )


class NewsListResponse(BaseModel):
    posts: list[NewsPostResponse]
    loading: bool
    error: str | None = None
