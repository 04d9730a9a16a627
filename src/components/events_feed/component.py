"""
Public events feed.

Reads only the events collection; pending submissions never appear here.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from src.core.entities import EVENTS, PublishedEvent
from src.core.ports.documents import DocumentStorePort


class EventNotFoundError(Exception):
    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"Event {event_id} is no longer available")


def list_published_events(store: DocumentStorePort) -> list[PublishedEvent]:
    """Published events, most recently published first."""
    docs = store.list_documents(EVENTS, "createdAt", descending=True)
    return [PublishedEvent.from_document(d) for d in docs]


def get_event(store: DocumentStorePort, event_id: str) -> PublishedEvent:
    doc = store.get_document(EVENTS, event_id)
    if doc is None:
        raise EventNotFoundError(event_id)
    return PublishedEvent.from_document(doc)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


def _haystack(event: PublishedEvent) -> list[str]:
    return [
        event.event_name,
        _text(event.extra.get("organiser")),
        _text(event.extra.get("tags")),
        _text(event.extra.get("city")),
        event.venue,
        event.address,
    ]


def search_events(events: Sequence[PublishedEvent], term: str) -> list[PublishedEvent]:
    """Case-insensitive match on name, organiser, tags, city, venue or address."""
    needle = term.strip().lower()
    if not needle:
        return list(events)
    return [e for e in events if any(needle in h.lower() for h in _haystack(e))]


def event_link(event: PublishedEvent) -> str:
    """Where a click on the event goes: registration page, else its detail page."""
    if event.registration_url:
        return event.registration_url
    return f"/events/{event.id}"
