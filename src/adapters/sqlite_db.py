"""
SQLite Document Store Adapter.

Implements DocumentStorePort (and TransactionalDocumentStorePort) on a
single SQLite table keyed by (collection, id), with each document stored
as a JSON object.

Server timestamps are resolved from the injected clock at write time and
stored as ISO-8601 UTC strings, so ordering by a timestamp field is a
plain text ordering.
"""

from __future__ import annotations

import json
import re
import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import uuid4

from src.adapters.clock import SystemClock
from src.core.ports.clock import ClockPort
from src.core.ports.documents import (
    SERVER_TIMESTAMP,
    Document,
    DocumentNotFoundError,
    DocumentStoreError,
)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    id TEXT NOT NULL,
    data TEXT NOT NULL,
    PRIMARY KEY (collection, id)
);
CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection);
"""

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Connection scope that commits owned connections and maps sqlite errors."""
        conn = self._get_conn()
        try:
            yield conn
            if self._should_close():
                conn.commit()
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Document Store
# -----------------------------------------------------------------------------


class SQLiteDocumentStore(SQLiteRepoBase):
    """SQLite implementation of TransactionalDocumentStorePort."""

    def __init__(
        self,
        db_path: str,
        clock: ClockPort | None = None,
        connection: sqlite3.Connection | None = None,
        *,
        ensure_schema: bool = True,
    ) -> None:
        super().__init__(db_path, connection)
        self.clock = clock or SystemClock()
        if ensure_schema:
            self.ensure_schema()

    def ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.executescript(SCHEMA_SQL)

    def _resolve(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        now = self.clock.now_utc().isoformat()
        return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in fields.items()}

    def _load(self, row: dict[str, Any]) -> Document:
        data: dict[str, Any] = json.loads(row["data"])
        data.pop("id", None)
        return {"id": row["id"], **data}

    def create_document(self, collection: str, fields: Mapping[str, Any]) -> str:
        doc_id = uuid4().hex
        payload = self._resolve(fields)
        payload.pop("id", None)
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO documents (collection, id, data) VALUES (?, ?, ?)",
                (collection, doc_id, json.dumps(payload, default=_json_default)),
            )
        return doc_id

    def get_document(self, collection: str, doc_id: str) -> Document | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
        return self._load(row) if row else None

    def list_documents(
        self,
        collection: str,
        order_by: str | None = None,
        *,
        descending: bool = False,
    ) -> list[Document]:
        if order_by is None:
            sql = "SELECT id, data FROM documents WHERE collection = ? ORDER BY rowid ASC"
            params: tuple[Any, ...] = (collection,)
        else:
            if not _FIELD_NAME.match(order_by):
                raise ValueError(f"Invalid order_by field: {order_by!r}")
            direction = "DESC" if descending else "ASC"
            sql = (
                "SELECT id, data FROM documents WHERE collection = ? "
                f"ORDER BY json_extract(data, ?) {direction}, rowid ASC"
            )
            params = (collection, f"$.{order_by}")

        with self._connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._load(r) for r in rows]

    def update_document(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
            if row is None:
                raise DocumentNotFoundError(collection, doc_id)

            merged = self._load(row)
            merged.update(self._resolve(fields))
            merged.pop("id", None)
            conn.execute(
                "UPDATE documents SET data = ? WHERE collection = ? AND id = ?",
                (json.dumps(merged, default=_json_default), collection, doc_id),
            )

    def delete_document(self, collection: str, doc_id: str) -> None:
        with self._connection() as conn:
            cur = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )
            if cur.rowcount == 0:
                raise DocumentNotFoundError(collection, doc_id)

    @contextmanager
    def transaction(self) -> Iterator[SQLiteDocumentStore]:
        """
        Unit of work over a shared connection.

        Commits when the block exits cleanly; rolls back on any exception.
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e
        conn.row_factory = dict_factory
        try:
            yield SQLiteDocumentStore(
                self.db_path, self.clock, connection=conn, ensure_schema=False
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DocumentStoreError(str(e)) from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()
