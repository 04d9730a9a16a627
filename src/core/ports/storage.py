"""
Object Storage Port.

Protocol-based interface for blob storage of event banners and
testimonial images.
Implementations: Local filesystem (now), S3-compatible (future).

Keys are written once; callers generate collision-resistant keys.
Public URLs are derived from keys, and an URL can be mapped back to its
key when (and only when) it is hosted by this storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredObject:
    """Reference to a stored object."""

    key: str
    size_bytes: int
    content_type: str
    sha256: str
    etag: str


class ObjectStorePort(Protocol):
    """Object storage port interface."""

    def put_object(self, key: str, data: bytes, content_type: str) -> StoredObject:
        """
        Store object bytes under the given key.

        Raises:
            KeyExistsError: If key already exists
            StorageError: On I/O failure
        """
        ...

    def get_object(self, key: str) -> tuple[bytes, StoredObject]:
        """
        Retrieve object bytes by key.

        Raises:
            KeyNotFoundError: If key doesn't exist
        """
        ...

    def get_public_url(self, ref: StoredObject | str) -> str:
        """Public URL for a stored object or key."""
        ...

    def key_from_url(self, url: str) -> str | None:
        """Storage key for an URL hosted by this store, else None."""
        ...

    def is_hosted(self, url: str) -> bool:
        """True when the URL points into this store."""
        ...

    def delete_object(self, ref_or_url: StoredObject | str) -> None:
        """
        Delete an object by reference, key or hosted URL.

        Raises:
            KeyNotFoundError: If the reference does not resolve to an object
            StorageError: On I/O failure
        """
        ...


class StorageError(Exception):
    """Base class for storage errors."""


class KeyExistsError(StorageError):
    """Raised when attempting to write to an existing key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Key already exists: {key}")


class KeyNotFoundError(StorageError):
    """Raised when key doesn't exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Key not found: {key}")


class IntegrityError(StorageError):
    """Raised when data integrity check fails."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Integrity check failed: expected {expected}, got {actual}")
