"""
Events feed component.

Public listing and search over published events.
"""

from src.components.events_feed.component import (
    EventNotFoundError,
    event_link,
    get_event,
    list_published_events,
    search_events,
)

__all__ = [
    "EventNotFoundError",
    "event_link",
    "get_event",
    "list_published_events",
    "search_events",
]
