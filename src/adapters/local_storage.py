"""
Local Filesystem Storage Adapter.

Implements ObjectStorePort using the local filesystem, for development and
single-server deployments. Objects are served back by the app under a
public URL prefix (``{public_base_url}/{key}``).

Invariants:
- Keys once written cannot be overwritten
- sha256 stored equals sha256 served
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from urllib.parse import quote, unquote, urlsplit

from src.core.ports.storage import (
    IntegrityError,
    KeyExistsError,
    KeyNotFoundError,
    StorageError,
    StoredObject,
)


class LocalObjectStorage:
    """
    Local filesystem implementation of ObjectStorePort.

    Stores objects as files with accompanying metadata JSON.
    Example key: "testimonials/image_1700000000000_ab12.jpg"
    -> {base_path}/testimonials/image_1700000000000_ab12.jpg.bin + .meta.json
    """

    def __init__(
        self,
        base_path: str | Path,
        public_base_url: str,
        *,
        create_dirs: bool = True,
    ) -> None:
        """
        Initialize local object storage.

        Args:
            base_path: Root directory for storage
            public_base_url: URL prefix objects are served under (e.g. http://host/media)
            create_dirs: Whether to create directories if they don't exist
        """
        self.base_path = Path(base_path)
        self.public_base_url = public_base_url.rstrip("/")

        if create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    def _key_to_paths(self, key: str) -> tuple[Path, Path]:
        """Convert storage key to file paths (data and metadata)."""
        # Sanitize key to prevent directory traversal
        safe_key = key.replace("..", "").lstrip("/")
        if not safe_key:
            raise KeyNotFoundError(key)
        data_path = self.base_path / f"{safe_key}.bin"
        meta_path = self.base_path / f"{safe_key}.meta.json"
        return data_path, meta_path

    def _compute_etag(self, sha256_hex: str) -> str:
        return f'"{sha256_hex[:32]}"'

    def put_object(self, key: str, data: bytes, content_type: str) -> StoredObject:
        """Store object bytes; raises KeyExistsError if the key is taken."""
        data_path, meta_path = self._key_to_paths(key)

        if data_path.exists():
            raise KeyExistsError(key)

        sha256_hex = hashlib.sha256(data).hexdigest()
        stored = StoredObject(
            key=key,
            size_bytes=len(data),
            content_type=content_type,
            sha256=sha256_hex,
            etag=self._compute_etag(sha256_hex),
        )

        try:
            data_path.parent.mkdir(parents=True, exist_ok=True)
            with open(data_path, "wb") as f:
                f.write(data)
            with open(meta_path, "w") as f:
                json.dump(
                    {
                        "key": stored.key,
                        "size_bytes": stored.size_bytes,
                        "content_type": stored.content_type,
                        "sha256": stored.sha256,
                        "etag": stored.etag,
                    },
                    f,
                )
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

        return stored

    def get_object(self, key: str) -> tuple[bytes, StoredObject]:
        """Retrieve object bytes by key, verifying integrity."""
        data_path, meta_path = self._key_to_paths(key)

        if not data_path.exists():
            raise KeyNotFoundError(key)

        with open(data_path, "rb") as f:
            data = f.read()

        metadata = self._load_metadata(meta_path, key, data)

        actual_sha256 = hashlib.sha256(data).hexdigest()
        if actual_sha256 != metadata.sha256:
            raise IntegrityError(metadata.sha256, actual_sha256)

        return data, metadata

    def exists(self, key: str) -> bool:
        data_path, _ = self._key_to_paths(key)
        return data_path.exists()

    def get_public_url(self, ref: StoredObject | str) -> str:
        key = ref.key if isinstance(ref, StoredObject) else ref
        return f"{self.public_base_url}/{quote(key)}"

    def key_from_url(self, url: str) -> str | None:
        """Map a hosted URL back to its key; None for foreign URLs."""
        if not url:
            return None
        prefix = self.public_base_url + "/"
        if url.startswith(prefix):
            key = unquote(urlsplit(url[len(prefix):]).path)
            return key or None
        return None

    def is_hosted(self, url: str) -> bool:
        return self.key_from_url(url) is not None

    def delete_object(self, ref_or_url: StoredObject | str) -> None:
        """Delete by reference, key or hosted URL."""
        if isinstance(ref_or_url, StoredObject):
            key = ref_or_url.key
        else:
            key = self.key_from_url(ref_or_url) or ref_or_url
            if "://" in key:
                raise KeyNotFoundError(key)

        data_path, meta_path = self._key_to_paths(key)
        if not data_path.exists():
            raise KeyNotFoundError(key)

        try:
            data_path.unlink()
            if meta_path.exists():
                meta_path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

    def _load_metadata(self, meta_path: Path, key: str, data: bytes) -> StoredObject:
        """Load metadata from JSON file, rebuilding it if missing."""
        if not meta_path.exists():
            sha256_hex = hashlib.sha256(data).hexdigest()
            return StoredObject(
                key=key,
                size_bytes=len(data),
                content_type="application/octet-stream",
                sha256=sha256_hex,
                etag=self._compute_etag(sha256_hex),
            )

        with open(meta_path) as f:
            meta = json.load(f)

        return StoredObject(
            key=meta["key"],
            size_bytes=meta["size_bytes"],
            content_type=meta["content_type"],
            sha256=meta["sha256"],
            etag=meta["etag"],
        )


def create_local_storage(
    public_base_url: str,
    base_path: str | Path | None = None,
    *,
    env_var: str = "STORAGE_PATH",
    default_path: str = "./data/media",
) -> LocalObjectStorage:
    """
    Factory function to create LocalObjectStorage from config.

    Args:
        public_base_url: URL prefix objects are served under
        base_path: Explicit base path (overrides env var)
        env_var: Environment variable name for storage path
        default_path: Default path if not configured
    """
    if base_path is None:
        base_path = os.environ.get(env_var, default_path)

    return LocalObjectStorage(base_path, public_base_url)
