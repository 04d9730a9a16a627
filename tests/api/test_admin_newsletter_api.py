"""Admin newsletter subscribers API tests."""

from __future__ import annotations

from datetime import UTC, datetime
from urllib.parse import unquote

import pytest
from fastapi.testclient import TestClient

from src.adapters.memory import InMemoryDocumentStore
from src.core.entities import NEWSLETTER_SUBSCRIBERS


@pytest.fixture
def subscribers(store: InMemoryDocumentStore) -> dict[str, str]:
    """Three subscribers; returns email -> id."""
    rows = [
        ("alice@example.com", datetime(2026, 1, 5, 9, 30, tzinfo=UTC)),
        ("bob@example.org", datetime(2026, 2, 1, 18, 0, tzinfo=UTC)),
        ("carol@example.com", None),
    ]
    return {
        email: store.create_document(
            NEWSLETTER_SUBSCRIBERS,
            {"email": email, "subscribedAt": when.isoformat() if when else None},
        )
        for email, when in rows
    }


class TestList:
    def test_newest_first_then_undated(
        self, client: TestClient, subscribers: dict[str, str]
    ) -> None:
        data = client.get("/api/admin/newsletter/subscribers").json()

        assert [s["email"] for s in data["subscribers"]] == [
            "bob@example.org",
            "alice@example.com",
            "carol@example.com",
        ]
        assert data["total"] == data["filtered"] == 3

    def test_search_is_case_insensitive(
        self, client: TestClient, subscribers: dict[str, str]
    ) -> None:
        data = client.get("/api/admin/newsletter/subscribers", params={"q": "EXAMPLE.COM"}).json()

        assert data["total"] == 3
        assert data["filtered"] == 2


    def test_this_week_counts_recent_signups_only(
        self,
        client: TestClient,
        store: InMemoryDocumentStore,
        subscribers: dict[str, str],
    ) -> None:
        # The test clock reads 2026-03-01 12:00 UTC
        store.create_document(
            NEWSLETTER_SUBSCRIBERS,
            {"email": "dave@example.com", "subscribedAt": "2026-02-27T08:00:00+00:00"},
        )
        store.create_document(
            NEWSLETTER_SUBSCRIBERS, {"email": "erin@example.com", "subscribedAt": "yesterday"}
        )

        response = client.get("/api/admin/newsletter/subscribers")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 5
        assert data["this_week"] == 1
        erin = next(s for s in data["subscribers"] if s["email"] == "erin@example.com")
        assert erin["subscribed_at"] is None


class TestDelete:
    def test_delete(
        self,
        client: TestClient,
        store: InMemoryDocumentStore,
        subscribers: dict[str, str],
    ) -> None:
        response = client.delete(
            f"/api/admin/newsletter/subscribers/{subscribers['bob@example.org']}"
        )

        assert response.status_code == 200
        assert "bob@example.org" in response.json()["message"]
        assert store.count(NEWSLETTER_SUBSCRIBERS) == 2

    def test_delete_missing_is_404(self, client: TestClient) -> None:
        response = client.delete("/api/admin/newsletter/subscribers/nope")

        assert response.status_code == 404


class TestCompose:
    def test_selection_goes_to_bcc(
        self, client: TestClient, subscribers: dict[str, str]
    ) -> None:
        response = client.get(
            "/api/admin/newsletter/subscribers/compose",
            params={"selected": ["alice@example.com", "carol@example.com"]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["recipients"] == 2
        assert body["url"].startswith("https://mail.google.com/mail/?view=cm&fs=1&bcc=")
        assert unquote(body["url"]).endswith("bcc=alice@example.com,carol@example.com")

    def test_no_selection_uses_filtered_view(
        self, client: TestClient, subscribers: dict[str, str]
    ) -> None:
        body = client.get(
            "/api/admin/newsletter/subscribers/compose", params={"q": "bob"}
        ).json()

        assert body["recipients"] == 1
        assert body["url"].endswith("bcc=bob@example.org")

    def test_nobody_to_email(self, client: TestClient) -> None:
        response = client.get("/api/admin/newsletter/subscribers/compose")

        assert response.status_code == 400
        assert response.json()["detail"] == "No subscribers to email"


class TestExport:
    def test_csv_of_filtered_subscribers(
        self, client: TestClient, subscribers: dict[str, str]
    ) -> None:
        response = client.get(
            "/api/admin/newsletter/subscribers/export/csv", params={"q": "example.com"}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == (
            "attachment; filename=newsletter_subscribers_2026-03-01.csv"
        )
        assert response.text.splitlines() == [
            "Email,Subscribed Date",
            'alice@example.com,"Jan 5, 2026, 09:30 AM"',
            "carol@example.com,N/A",
        ]

    def test_selection_narrows_export(
        self, client: TestClient, subscribers: dict[str, str]
    ) -> None:
        response = client.get(
            "/api/admin/newsletter/subscribers/export/csv",
            params={"selected": ["bob@example.org"]},
        )

        assert response.text.splitlines()[1:] == ['bob@example.org,"Feb 1, 2026, 06:00 PM"']

    def test_nothing_to_export(self, client: TestClient) -> None:
        response = client.get("/api/admin/newsletter/subscribers/export/csv")

        assert response.status_code == 400
        assert response.json()["detail"] == "No subscribers to export"
