"""
News cache.

A process-wide snapshot of the news collection with an explicit lifecycle:
start() loads it, refresh() re-reads it and notifies subscribers, stop()
drops subscribers and data. A failed load records the error instead of
raising; readers see an empty list plus ``error``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from src.core.entities import NEWS, NewsPost
from src.core.ports.documents import DocumentStoreError, DocumentStorePort

logger = logging.getLogger(__name__)

NewsListener = Callable[[list[NewsPost]], None]


class NewsCache:
    def __init__(self, store: DocumentStorePort) -> None:
        self.store = store
        self._posts: list[NewsPost] = []
        self._listeners: list[NewsListener] = []
        self._loading = True
        self._error: str | None = None
        self._started = False

    # --- Lifecycle ---

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        logger.info("Starting news cache")
        self.refresh()

    def stop(self) -> None:
        self._listeners.clear()
        self._posts = []
        self._loading = True
        self._error = None
        self._started = False
        logger.info("Stopped news cache")

    @property
    def started(self) -> bool:
        return self._started

    # --- Data ---

    def refresh(self) -> list[NewsPost]:
        """Re-read the collection and notify subscribers. Never raises on store errors."""
        try:
            docs = self.store.list_documents(NEWS, "createdAt", descending=True)
        except DocumentStoreError as e:
            logger.exception("Error loading news")
            self._error = str(e)
            self._loading = False
            return list(self._posts)

        self._posts = [NewsPost.from_document(d) for d in docs]
        self._error = None
        self._loading = False
        self._notify()
        return list(self._posts)

    @property
    def posts(self) -> list[NewsPost]:
        return list(self._posts)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    def get_post_by_slug(self, slug: str) -> NewsPost | None:
        return next((p for p in self._posts if p.slug == slug), None)

    # --- Subscriptions ---

    def subscribe(self, listener: NewsListener) -> Callable[[], None]:
        """
        Register a listener for snapshot updates.

        The listener receives the current snapshot immediately if one is
        loaded. Returns a callable that unsubscribes it.
        """
        self._listeners.append(listener)
        if self._started and not self._loading:
            self._deliver(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            self._deliver(listener)

    def _deliver(self, listener: NewsListener) -> None:
        try:
            listener(list(self._posts))
        except Exception:
            logger.exception("News listener failed")
