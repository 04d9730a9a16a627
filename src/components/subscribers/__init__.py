"""
Subscribers component.

List, filter, delete, compose-to and export newsletter subscribers.
"""

from src.components.subscribers.component import (
    SubscriberDirectory,
    build_compose_url,
    compose_recipients,
    count_recent,
    delete_subscriber,
    export_csv,
    export_filename,
    export_targets,
    filter_subscribers,
    format_subscribed_date,
    list_subscribers,
    toggle_select_all,
    toggle_selection,
)
from src.components.subscribers.models import (
    CSV_HEADER,
    DEFAULT_COMPOSE_BASE_URL,
    DEFAULT_EXPORT_PREFIX,
    MISSING_DATE,
    RECENT_DAYS,
    CsvExport,
    NoRecipientsError,
    SubscriberConfig,
    SubscriberError,
    SubscriberNotFoundError,
)

__all__ = [
    # Component
    "SubscriberDirectory",
    "build_compose_url",
    "compose_recipients",
    "count_recent",
    "delete_subscriber",
    "export_csv",
    "export_filename",
    "export_targets",
    "filter_subscribers",
    "format_subscribed_date",
    "list_subscribers",
    "toggle_select_all",
    "toggle_selection",
    # Models
    "CSV_HEADER",
    "DEFAULT_COMPOSE_BASE_URL",
    "DEFAULT_EXPORT_PREFIX",
    "MISSING_DATE",
    "RECENT_DAYS",
    "CsvExport",
    "SubscriberConfig",
    # Errors
    "NoRecipientsError",
    "SubscriberError",
    "SubscriberNotFoundError",
]
