# Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.clock import ClockPort
from src.core.ports.documents import (
    SERVER_TIMESTAMP,
    Document,
    DocumentNotFoundError,
    DocumentStoreError,
    DocumentStorePort,
    ServerTimestamp,
    TransactionalDocumentStorePort,
)
from src.core.ports.storage import (
    IntegrityError,
    KeyExistsError,
    KeyNotFoundError,
    ObjectStorePort,
    StorageError,
    StoredObject,
)

__all__ = [
    # Clock
    "ClockPort",
    # Documents
    "SERVER_TIMESTAMP",
    "Document",
    "DocumentNotFoundError",
    "DocumentStoreError",
    "DocumentStorePort",
    "ServerTimestamp",
    "TransactionalDocumentStorePort",
    # Storage
    "IntegrityError",
    "KeyExistsError",
    "KeyNotFoundError",
    "ObjectStorePort",
    "StorageError",
    "StoredObject",
]
