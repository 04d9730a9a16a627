"""Events feed unit tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from src.adapters.clock import FixedClock
from src.adapters.memory import InMemoryDocumentStore
from src.components.events_feed import (
    EventNotFoundError,
    event_link,
    get_event,
    list_published_events,
    search_events,
)
from src.core.entities import EVENTS, SUBMITTED_EVENTS
from src.core.ports.documents import SERVER_TIMESTAMP


def event_fields(name: str, **extra: object) -> dict[str, object]:
    fields: dict[str, object] = {
        "eventName": name,
        "venue": "Hub",
        "address": "1 Marina",
        "date": "2026-03-14",
        "time": "18:00",
        "description": "",
        "banner": "",
        "registrationUrl": "",
        "createdAt": SERVER_TIMESTAMP,
    }
    fields.update(extra)
    return fields


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 3, 1, tzinfo=UTC))


@pytest.fixture
def store(clock: FixedClock) -> InMemoryDocumentStore:
    store = InMemoryDocumentStore(clock)
    store.create_document(EVENTS, event_fields("Lagos Meetup", city="Lagos", tags=["meetup"]))
    clock.advance(timedelta(days=1))
    store.create_document(
        EVENTS,
        event_fields("Nairobi Builders", organiser="Bitcoin Kenya", city="Nairobi"),
    )
    clock.advance(timedelta(days=1))
    store.create_document(
        SUBMITTED_EVENTS, {"eventName": "Pending Thing", "status": "pending"}
    )
    return store


class TestListing:
    def test_newest_first_and_only_published(self, store: InMemoryDocumentStore) -> None:
        names = [e.event_name for e in list_published_events(store)]

        assert names == ["Nairobi Builders", "Lagos Meetup"]

    def test_get_event(self, store: InMemoryDocumentStore) -> None:
        first = list_published_events(store)[0]

        assert get_event(store, first.id) == first

    def test_get_missing_event(self, store: InMemoryDocumentStore) -> None:
        with pytest.raises(EventNotFoundError):
            get_event(store, "missing")


class TestSearch:
    @pytest.mark.parametrize(
        ("term", "expected"),
        [
            ("lagos", ["Lagos Meetup"]),
            ("KENYA", ["Nairobi Builders"]),
            ("meetup", ["Lagos Meetup"]),
            ("nairobi", ["Nairobi Builders"]),
            ("marina", ["Nairobi Builders", "Lagos Meetup"]),
            ("   ", ["Nairobi Builders", "Lagos Meetup"]),
            ("accra", []),
        ],
    )
    def test_search(self, store: InMemoryDocumentStore, term: str, expected: list[str]) -> None:
        events = list_published_events(store)

        assert [e.event_name for e in search_events(events, term)] == expected


class TestEventLink:
    def test_registration_url_wins(self, store: InMemoryDocumentStore) -> None:
        event_id = store.create_document(
            EVENTS, event_fields("Ticketed", registrationUrl="https://lu.ma/x")
        )

        assert event_link(get_event(store, event_id)) == "https://lu.ma/x"

    def test_falls_back_to_detail_page(self, store: InMemoryDocumentStore) -> None:
        event = list_published_events(store)[0]

        assert event_link(event) == f"/events/{event.id}"
