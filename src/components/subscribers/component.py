"""
Subscriber export/contact component.

Everything works on an in-memory list loaded from newsletterSubscribers:

- Filter: case-insensitive substring match on email
- Selection: explicit emails picked by the admin
- Compose and export act on the selection when there is one, otherwise on
  the whole filtered view

Compose produces a mail-client deep link with recipients in BCC; nothing is
sent from the server.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from urllib.parse import quote

from src.components.subscribers.models import (
    CSV_HEADER,
    DEFAULT_COMPOSE_BASE_URL,
    DEFAULT_EXPORT_PREFIX,
    MISSING_DATE,
    RECENT_DAYS,
    CsvExport,
    NoRecipientsError,
    SubscriberConfig,
    SubscriberNotFoundError,
)
from src.core.entities import NEWSLETTER_SUBSCRIBERS, NewsletterSubscriber
from src.core.ports.documents import DocumentNotFoundError, DocumentStorePort

logger = logging.getLogger(__name__)


# --- Pure Functions (Functional Core) ---


def filter_subscribers(
    subscribers: Sequence[NewsletterSubscriber], term: str
) -> list[NewsletterSubscriber]:
    """Case-insensitive substring filter on email. Blank term keeps everything."""
    needle = term.lower()
    if not needle:
        return list(subscribers)
    return [s for s in subscribers if needle in s.email.lower()]


def toggle_selection(selected: Sequence[str], email: str) -> list[str]:
    if email in selected:
        return [e for e in selected if e != email]
    return [*selected, email]


def toggle_select_all(
    selected: Sequence[str], filtered: Sequence[NewsletterSubscriber]
) -> list[str]:
    """Select the whole filtered view, or clear if it is already fully selected."""
    if len(selected) == len(filtered):
        return []
    return [s.email for s in filtered]


def compose_recipients(
    filtered: Sequence[NewsletterSubscriber], selected: Sequence[str]
) -> list[str]:
    """The selection as given, or every filtered email when nothing is selected."""
    if selected:
        return list(selected)
    return [s.email for s in filtered]


def export_targets(
    filtered: Sequence[NewsletterSubscriber], selected: Sequence[str]
) -> list[NewsletterSubscriber]:
    """Filtered subscribers restricted to the selection (if any)."""
    if selected:
        chosen = set(selected)
        return [s for s in filtered if s.email in chosen]
    return list(filtered)


def build_compose_url(emails: Sequence[str], base_url: str = DEFAULT_COMPOSE_BASE_URL) -> str:
    """
    Mail-client compose link with every recipient in BCC.

    Raises:
        NoRecipientsError: If there is nobody to email
    """
    if not emails:
        raise NoRecipientsError("No subscribers to email")
    bcc = quote(",".join(emails), safe="@,")
    return f"{base_url}&bcc={bcc}"


def count_recent(
    subscribers: Iterable[NewsletterSubscriber], now: datetime, days: int = RECENT_DAYS
) -> int:
    """Signups strictly newer than `days` before `now`. Missing dates never count."""
    cutoff = now - timedelta(days=days)
    return sum(
        1 for s in subscribers if s.subscribed_at is not None and s.subscribed_at > cutoff
    )


def format_subscribed_date(value: datetime | None) -> str:
    """E.g. 'Mar 1, 2026, 06:00 PM'."""
    if value is None:
        return MISSING_DATE
    return f"{value:%b} {value.day}, {value.year}, {value:%I:%M %p}"


def export_filename(today: date, prefix: str = DEFAULT_EXPORT_PREFIX) -> str:
    return f"{prefix}_{today.isoformat()}.csv"


def export_csv(subscribers: Iterable[NewsletterSubscriber]) -> str:
    """
    Render subscribers as CSV with an 'Email,Subscribed Date' header.

    Raises:
        NoRecipientsError: If there is nobody to export
    """
    rows = [[s.email, format_subscribed_date(s.subscribed_at)] for s in subscribers]
    if not rows:
        raise NoRecipientsError("No subscribers to export")

    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(rows)
    return output.getvalue()


def list_subscribers(store: DocumentStorePort) -> list[NewsletterSubscriber]:
    """Every subscriber, most recent signup first."""
    docs = store.list_documents(NEWSLETTER_SUBSCRIBERS, "subscribedAt", descending=True)
    return [NewsletterSubscriber.from_document(d) for d in docs]


def delete_subscriber(store: DocumentStorePort, subscriber_id: str) -> None:
    """
    Raises:
        SubscriberNotFoundError: If the subscriber is already gone
        DocumentStoreError: On store failure
    """
    try:
        store.delete_document(NEWSLETTER_SUBSCRIBERS, subscriber_id)
    except DocumentNotFoundError as e:
        raise SubscriberNotFoundError(subscriber_id) from e


# --- Directory (stateful shell) ---


class SubscriberDirectory:
    """Loaded subscriber list plus the admin's current filter and selection."""

    def __init__(self, store: DocumentStorePort, config: SubscriberConfig | None = None) -> None:
        self.store = store
        self.config = config or SubscriberConfig()
        self._subscribers: list[NewsletterSubscriber] = []
        self.search_term = ""
        self.selected: list[str] = []

    def load(self) -> list[NewsletterSubscriber]:
        self._subscribers = list_subscribers(self.store)
        return list(self._subscribers)

    @property
    def subscribers(self) -> list[NewsletterSubscriber]:
        return list(self._subscribers)

    @property
    def filtered(self) -> list[NewsletterSubscriber]:
        return filter_subscribers(self._subscribers, self.search_term)

    def toggle(self, email: str) -> None:
        self.selected = toggle_selection(self.selected, email)

    def toggle_all(self) -> None:
        self.selected = toggle_select_all(self.selected, self.filtered)

    def delete(self, subscriber_id: str) -> NewsletterSubscriber | None:
        """
        Delete a subscriber and drop it from the local list.

        Returns the removed subscriber if it was in the local list.
        """
        removed = next((s for s in self._subscribers if s.id == subscriber_id), None)
        try:
            delete_subscriber(self.store, subscriber_id)
        except SubscriberNotFoundError:
            self._forget(subscriber_id)
            raise

        self._forget(subscriber_id)
        if removed is not None:
            self.selected = [e for e in self.selected if e != removed.email]
            logger.info("Removed %s from subscribers", removed.email)
        return removed

    def _forget(self, subscriber_id: str) -> None:
        self._subscribers = [s for s in self._subscribers if s.id != subscriber_id]

    def recent_count(self, now: datetime, days: int = RECENT_DAYS) -> int:
        """Signups in the last `days` across the whole list (the "This Week" figure)."""
        return count_recent(self._subscribers, now, days)

    def compose_url(self) -> str:
        emails = compose_recipients(self.filtered, self.selected)
        return build_compose_url(emails, self.config.compose_base_url)

    def export(self, today: date) -> CsvExport:
        targets = export_targets(self.filtered, self.selected)
        content = export_csv(targets)
        logger.info("Exported %d subscribers to CSV", len(targets))
        return CsvExport(
            filename=export_filename(today, self.config.export_filename_prefix),
            content=content,
            row_count=len(targets),
        )
