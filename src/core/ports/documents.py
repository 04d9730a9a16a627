"""
Document Store Port.

Protocol-based interface for a collection-scoped document database.
Implementations: SQLite (persistent), in-memory (dev/tests).

Documents are plain mappings. The store assigns ids and resolves
SERVER_TIMESTAMP sentinels to the write time (ISO-8601 UTC strings).
Reads return ``{"id": ..., **fields}``.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable


class ServerTimestamp:
    """Sentinel resolved by the store to its own clock at write time."""

    _instance: ServerTimestamp | None = None

    def __new__(cls) -> ServerTimestamp:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = ServerTimestamp()

Document = dict[str, Any]


@runtime_checkable
class DocumentStorePort(Protocol):
    """Collection-scoped CRUD interface."""

    def create_document(self, collection: str, fields: Mapping[str, Any]) -> str:
        """
        Create a document and return its store-assigned id.

        Any field whose value is SERVER_TIMESTAMP is replaced by the
        store's write time.
        """
        ...

    def get_document(self, collection: str, doc_id: str) -> Document | None:
        """Get a document by id, or None if absent."""
        ...

    def list_documents(
        self,
        collection: str,
        order_by: str | None = None,
        *,
        descending: bool = False,
    ) -> list[Document]:
        """List every document in a collection, optionally ordered by a field."""
        ...

    def update_document(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        """
        Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If the id is absent
        """
        ...

    def delete_document(self, collection: str, doc_id: str) -> None:
        """
        Delete a document.

        Raises:
            DocumentNotFoundError: If the id is absent
        """
        ...


@runtime_checkable
class TransactionalDocumentStorePort(DocumentStorePort, Protocol):
    """A document store that can group several writes atomically."""

    def transaction(self) -> AbstractContextManager[DocumentStorePort]:
        """
        Open a transaction.

        Writes made through the yielded store are committed together when
        the block exits cleanly and rolled back if it raises.
        """
        ...


class DocumentStoreError(Exception):
    """Base class for document store failures (I/O, permissions, corruption)."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when an update/delete targets a missing document."""

    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document not found: {collection}/{doc_id}")
