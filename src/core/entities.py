"""
Domain entities for the community site.

Documents live in camelCase collections; entities expose snake_case
attributes and convert at the boundary (``from_document`` / ``*_fields``).

Collections:
- submittedEvents: pending community submissions (status is always "pending")
- events: published events (created only by moderation)
- testimonials: curated testimonials
- newsletterSubscribers: signups (read/delete only here)
- news: news posts (read only here)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from src.core.ports.documents import Document

logger = logging.getLogger(__name__)

__all__ = [
    "SUBMITTED_EVENTS",
    "EVENTS",
    "TESTIMONIALS",
    "NEWSLETTER_SUBSCRIBERS",
    "NEWS",
    "PENDING_STATUS",
    "EVENT_CONTENT_FIELDS",
    "parse_dt",
    "SubmittedEvent",
    "PublishedEvent",
    "Testimonial",
    "NewsletterSubscriber",
    "NewsPost",
]

# --- Collections ---

SUBMITTED_EVENTS = "submittedEvents"
EVENTS = "events"
TESTIMONIALS = "testimonials"
NEWSLETTER_SUBSCRIBERS = "newsletterSubscribers"
NEWS = "news"

PENDING_STATUS = "pending"

# Fields copied verbatim from a submission into a published event
EVENT_CONTENT_FIELDS: tuple[str, ...] = (
    "eventName",
    "venue",
    "address",
    "date",
    "time",
    "description",
    "banner",
    "registrationUrl",
)


def parse_dt(value: Any) -> datetime | None:
    """
    Parse a stored timestamp (ISO string or datetime); naive values are UTC.

    Unparseable values read as missing so one bad document never breaks a listing.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value))
        except ValueError:
            logger.warning("Ignoring malformed timestamp %r", value)
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def _str(doc: Document, key: str) -> str:
    value = doc.get(key)
    return "" if value is None else str(value)


# --- Events ---


@dataclass(frozen=True)
class SubmittedEvent:
    """A community submission awaiting a moderator decision."""

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
    status: str = PENDING_STATUS

    @classmethod
    def from_document(cls, doc: Document) -> SubmittedEvent:
        return cls(
            id=str(doc["id"]),
            event_name=_str(doc, "eventName"),
            venue=_str(doc, "venue"),
            address=_str(doc, "address"),
            date=_str(doc, "date"),
            time=_str(doc, "time"),
            description=_str(doc, "description"),
            banner=_str(doc, "banner"),
            registration_url=_str(doc, "registrationUrl"),
            submitted_at=parse_dt(doc.get("submittedAt")),
            status=_str(doc, "status") or PENDING_STATUS,
        )

    def content_fields(self) -> dict[str, str]:
        """The event content as stored document fields."""
        return {
            "eventName": self.event_name,
            "venue": self.venue,
            "address": self.address,
            "date": self.date,
            "time": self.time,
            "description": self.description,
            "banner": self.banner,
            "registrationUrl": self.registration_url,
        }


@dataclass(frozen=True)
class PublishedEvent:
    """An event visible on the public feed."""

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
    # Optional listing metadata (organiser, city, tags, format)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Document) -> PublishedEvent:
        known = set(EVENT_CONTENT_FIELDS) | {"id", "createdAt"}
        return cls(
            id=str(doc["id"]),
            event_name=_str(doc, "eventName"),
            venue=_str(doc, "venue"),
            address=_str(doc, "address"),
            date=_str(doc, "date"),
            time=_str(doc, "time"),
            description=_str(doc, "description"),
            banner=_str(doc, "banner"),
            registration_url=_str(doc, "registrationUrl"),
            created_at=parse_dt(doc.get("createdAt")),
            extra={k: v for k, v in doc.items() if k not in known},
        )


# --- Testimonials ---


@dataclass(frozen=True)
class Testimonial:
    id: str
    name: str
    role: str
    text: str
    image: str = ""
    twitter_link: str = ""
    created_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: Document) -> Testimonial:
        return cls(
            id=str(doc["id"]),
            name=_str(doc, "name"),
            role=_str(doc, "role"),
            text=_str(doc, "text"),
            image=_str(doc, "image"),
            twitter_link=_str(doc, "twitterLink"),
            created_at=parse_dt(doc.get("createdAt")),
        )


# --- Newsletter ---


@dataclass(frozen=True)
class NewsletterSubscriber:
    id: str
    email: str
    subscribed_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: Document) -> NewsletterSubscriber:
        return cls(
            id=str(doc["id"]),
            email=_str(doc, "email"),
            subscribed_at=parse_dt(doc.get("subscribedAt")),
        )


# --- News ---


@dataclass(frozen=True)
class NewsPost:
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
    def from_document(cls, doc: Document) -> NewsPost:
        return cls(
            id=str(doc["id"]),
            title=_str(doc, "title"),
            slug=_str(doc, "slug"),
            author=_str(doc, "author"),
            image=_str(doc, "image"),
            category=_str(doc, "category"),
            excerpt=_str(doc, "excerpt"),
            is_popular=bool(doc.get("isPopular", False)),
            is_top_story=bool(doc.get("isTopStory", False)),
            created_at=parse_dt(doc.get("createdAt")),
        )
