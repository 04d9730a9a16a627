"""
In-memory adapters for development and tests.

InMemoryDocumentStore deliberately offers no transaction support, so it
behaves like a plain managed document database: multi-document writes are
independent calls.
"""

from __future__ import annotations

import copy
import hashlib
from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from src.adapters.clock import SystemClock
from src.core.ports.clock import ClockPort
from src.core.ports.documents import SERVER_TIMESTAMP, Document, DocumentNotFoundError
from src.core.ports.storage import KeyExistsError, KeyNotFoundError, StoredObject


class InMemoryDocumentStore:
    """Dict-backed DocumentStorePort."""

    def __init__(self, clock: ClockPort | None = None) -> None:
        self.clock = clock or SystemClock()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _resolve(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        now = self.clock.now_utc().isoformat()
        resolved = {k: (now if v is SERVER_TIMESTAMP else v) for k, v in fields.items()}
        resolved.pop("id", None)
        return copy.deepcopy(resolved)

    def create_document(self, collection: str, fields: Mapping[str, Any]) -> str:
        doc_id = uuid4().hex
        self._collections.setdefault(collection, {})[doc_id] = self._resolve(fields)
        return doc_id

    def get_document(self, collection: str, doc_id: str) -> Document | None:
        data = self._collections.get(collection, {}).get(doc_id)
        if data is None:
            return None
        return {"id": doc_id, **copy.deepcopy(data)}

    def list_documents(
        self,
        collection: str,
        order_by: str | None = None,
        *,
        descending: bool = False,
    ) -> list[Document]:
        docs = [
            {"id": doc_id, **copy.deepcopy(data)}
            for doc_id, data in self._collections.get(collection, {}).items()
        ]
        if order_by is not None:
            # Missing values sort first ascending, matching SQLite NULL ordering
            docs.sort(
                key=lambda d: (d.get(order_by) is not None, str(d.get(order_by) or "")),
                reverse=descending,
            )
        return docs

    def update_document(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise DocumentNotFoundError(collection, doc_id)
        docs[doc_id].update(self._resolve(fields))

    def delete_document(self, collection: str, doc_id: str) -> None:
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise DocumentNotFoundError(collection, doc_id)
        del docs[doc_id]

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))


class InMemoryObjectStore:
    """Dict-backed ObjectStorePort serving URLs under a fixed prefix."""

    def __init__(self, public_base_url: str = "http://localhost:8000/media") -> None:
        self.public_base_url = public_base_url.rstrip("/")
        self._objects: dict[str, tuple[bytes, StoredObject]] = {}

    def put_object(self, key: str, data: bytes, content_type: str) -> StoredObject:
        if key in self._objects:
            raise KeyExistsError(key)
        sha256_hex = hashlib.sha256(data).hexdigest()
        stored = StoredObject(
            key=key,
            size_bytes=len(data),
            content_type=content_type,
            sha256=sha256_hex,
            etag=f'"{sha256_hex[:32]}"',
        )
        self._objects[key] = (data, stored)
        return stored

    def get_object(self, key: str) -> tuple[bytes, StoredObject]:
        if key not in self._objects:
            raise KeyNotFoundError(key)
        return self._objects[key]

    def get_public_url(self, ref: StoredObject | str) -> str:
        key = ref.key if isinstance(ref, StoredObject) else ref
        return f"{self.public_base_url}/{key}"

    def key_from_url(self, url: str) -> str | None:
        prefix = self.public_base_url + "/"
        if url and url.startswith(prefix):
            return url[len(prefix):] or None
        return None

    def is_hosted(self, url: str) -> bool:
        return self.key_from_url(url) is not None

    def delete_object(self, ref_or_url: StoredObject | str) -> None:
        if isinstance(ref_or_url, StoredObject):
            key = ref_or_url.key
        else:
            key = self.key_from_url(ref_or_url) or ref_or_url
        if key not in self._objects:
            raise KeyNotFoundError(key)
        del self._objects[key]

    def keys(self) -> list[str]:
        return list(self._objects)
