"""
Subscriber export/contact models.

Newsletter subscribers are read and deleted here, never created or edited.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_COMPOSE_BASE_URL = "https://mail.google.com/mail/?view=cm&fs=1"
DEFAULT_EXPORT_PREFIX = "newsletter_subscribers"
CSV_HEADER: tuple[str, str] = ("Email", "Subscribed Date")
MISSING_DATE = "N/A"
RECENT_DAYS = 7


# --- Errors ---


class SubscriberError(Exception):
    """Base class for subscriber directory errors."""


class SubscriberNotFoundError(SubscriberError):
    def __init__(self, subscriber_id: str) -> None:
        self.subscriber_id = subscriber_id
        super().__init__(f"Subscriber {subscriber_id} is no longer available")


class NoRecipientsError(SubscriberError):
    """Compose/export was asked to act on an empty set."""


# --- Config ---


@dataclass(frozen=True)
class SubscriberConfig:
    compose_base_url: str = DEFAULT_COMPOSE_BASE_URL
    export_filename_prefix: str = DEFAULT_EXPORT_PREFIX


# --- Output Models ---


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str
    row_count: int
