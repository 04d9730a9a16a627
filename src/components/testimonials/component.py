"""
Testimonial curation component.

CRUD over the testimonials collection with stale-image cleanup.

Key behaviors:
- Validation (required fields, text ceiling, Twitter/X link, upload
  screening) runs before any store or storage call
- Edit is a full replace; createdAt is refreshed on every save
- On replace, the previous image is deleted only when this system's storage
  hosts it and the new image differs
- Delete removes the image before the document
- Image cleanup is advisory: failures are logged, never raised, and never
  undo the primary write
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any

from src.adapters.clock import SystemClock
from src.components.imaging import (
    ImageNormalizationError,
    ImagePolicy,
    normalize_image,
    store_image,
    validate_upload,
)
from src.components.testimonials.models import (
    DEFAULT_LINK_HOSTS,
    IMAGE_KEY_PREFIX,
    IMAGE_KEY_STEM,
    CleanupResult,
    TestimonialConfig,
    TestimonialInput,
    TestimonialNotFoundError,
    TestimonialOutput,
    TestimonialStoreError,
    ValidationError,
)
from src.core.entities import TESTIMONIALS, Testimonial
from src.core.ports.clock import ClockPort
from src.core.ports.documents import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
    DocumentStoreError,
    DocumentStorePort,
)
from src.core.ports.storage import ObjectStorePort, StorageError

logger = logging.getLogger(__name__)


# --- Pure Functions (Functional Core) ---


def validate_twitter_link(link: str, allowed_hosts: tuple[str, ...] = DEFAULT_LINK_HOSTS) -> bool:
    """An empty link is fine; otherwise it must mention an allowed host."""
    if not link.strip():
        return True
    return any(host in link for host in allowed_hosts)


def validate_testimonial(
    inp: TestimonialInput,
    config: TestimonialConfig | None = None,
    policy: ImagePolicy | None = None,
) -> list[ValidationError]:
    """
    Validate testimonial content.

    Returns list of errors (empty if valid).
    """
    cfg = config or TestimonialConfig()
    errors: list[ValidationError] = []

    for field_name in ("name", "role", "text"):
        if not getattr(inp, field_name).strip():
            errors.append(ValidationError("required", f"{field_name} is required", field_name))

    if len(inp.text) > cfg.max_text_length:
        errors.append(
            ValidationError(
                "text_too_long",
                f"Testimonial text is too long. Maximum {cfg.max_text_length} characters allowed.",
                "text",
            )
        )

    if not validate_twitter_link(inp.twitter_link, cfg.allowed_link_hosts):
        errors.append(
            ValidationError(
                "invalid_twitter_link",
                "Please enter a valid Twitter/X post link "
                f"({' or '.join(cfg.allowed_link_hosts)})",
                "twitterLink",
            )
        )

    if inp.image_upload is not None and policy is not None:
        for err in validate_upload(inp.image_upload, policy):
            errors.append(ValidationError(err.code, err.message, "image"))

    return errors


def build_testimonial_fields(inp: TestimonialInput, image_url: str) -> dict[str, Any]:
    return {
        "name": inp.name,
        "role": inp.role,
        "text": inp.text,
        "image": image_url or "",
        "twitterLink": inp.twitter_link or "",
        "createdAt": SERVER_TIMESTAMP,
    }


def should_cleanup(old_url: str, new_url: str, storage: ObjectStorePort) -> bool:
    """True when the old image is ours and is being replaced."""
    return bool(old_url) and old_url != new_url and storage.is_hosted(old_url)


def cleanup_image(storage: ObjectStorePort, url: str) -> CleanupResult:
    """
    Best-effort deletion of a hosted image.

    Never raises; the result is advisory.
    """
    if not url or not storage.is_hosted(url):
        return CleanupResult(url=url, attempted=False, reason="not hosted")
    try:
        storage.delete_object(url)
    except StorageError as e:
        logger.warning("Could not delete image %s: %s", url, e)
        return CleanupResult(url=url, attempted=True, deleted=False, reason=str(e))
    logger.info("Deleted image %s", url)
    return CleanupResult(url=url, attempted=True, deleted=True)


def list_testimonials(store: DocumentStorePort) -> list[Testimonial]:
    """Every testimonial, newest first."""
    docs = store.list_documents(TESTIMONIALS, "createdAt", descending=True)
    return [Testimonial.from_document(d) for d in docs]


# --- Curation (stateful shell) ---


class TestimonialCuration:
    """
    Admin-side testimonial management over a local list.

    The list is shared by the admin request threads; changes to it are made
    under a lock.
    """

    def __init__(
        self,
        store: DocumentStorePort,
        storage: ObjectStorePort,
        *,
        clock: ClockPort | None = None,
        config: TestimonialConfig | None = None,
        policy: ImagePolicy | None = None,
    ) -> None:
        self.store = store
        self.storage = storage
        self.clock = clock or SystemClock()
        self.config = config or TestimonialConfig()
        self.policy = policy or ImagePolicy(max_width=400)
        self._items: list[Testimonial] = []
        self._lock = Lock()

    def load(self) -> list[Testimonial]:
        items = list_testimonials(self.store)
        with self._lock:
            self._items = items
            return list(items)

    @property
    def items(self) -> list[Testimonial]:
        with self._lock:
            return list(self._items)

    def get(self, testimonial_id: str) -> Testimonial:
        doc = self.store.get_document(TESTIMONIALS, testimonial_id)
        if doc is None:
            self._drop(testimonial_id)
            raise TestimonialNotFoundError(testimonial_id)
        return Testimonial.from_document(doc)

    def _drop(self, testimonial_id: str) -> None:
        with self._lock:
            self._items = [t for t in self._items if t.id != testimonial_id]

    def _resolve_image(self, inp: TestimonialInput) -> tuple[str, str | None]:
        """Upload a new image if one was supplied. Returns (url, uploaded_key)."""
        if inp.image_upload is None:
            return inp.image_url.strip(), None

        normalized = normalize_image(
            inp.image_upload.data, self.policy.max_width, quality=self.policy.jpeg_quality
        )
        try:
            stored = store_image(
                normalized,
                storage=self.storage,
                clock=self.clock,
                prefix=IMAGE_KEY_PREFIX,
                stem=IMAGE_KEY_STEM,
            )
        except StorageError as e:
            raise TestimonialStoreError(f"Failed to upload image: {e}") from e
        return stored.url, stored.key

    def _invalid(self, errors: list[ValidationError]) -> TestimonialOutput:
        return TestimonialOutput(success=False, errors=errors)

    def create(self, inp: TestimonialInput) -> TestimonialOutput:
        """
        Create a testimonial.

        Raises:
            TestimonialStoreError: If the upload or the document write fails
        """
        errors = validate_testimonial(inp, self.config, self.policy)
        if errors:
            return self._invalid(errors)

        try:
            image_url, uploaded_key = self._resolve_image(inp)
        except ImageNormalizationError as e:
            return self._invalid([ValidationError("invalid_image", str(e), "image")])

        try:
            testimonial_id = self.store.create_document(
                TESTIMONIALS, build_testimonial_fields(inp, image_url)
            )
            testimonial = self.get(testimonial_id)
        except DocumentStoreError as e:
            if uploaded_key:
                logger.warning("Orphaned image %s left in storage after failed save", uploaded_key)
            raise TestimonialStoreError(f"Error saving testimonial: {e}") from e

        with self._lock:
            self._items.insert(0, testimonial)
        logger.info("Created testimonial %s", testimonial_id)
        return TestimonialOutput(success=True, testimonial=testimonial)

    def update(self, testimonial_id: str, inp: TestimonialInput) -> TestimonialOutput:
        """
        Replace a testimonial's content.

        The new image is stored and the document updated before the old
        image is cleaned up, so a cleanup failure never loses content.

        Raises:
            TestimonialNotFoundError: If the testimonial vanished
            TestimonialStoreError: If the upload or the document write fails
        """
        errors = validate_testimonial(inp, self.config, self.policy)
        if errors:
            return self._invalid(errors)

        try:
            existing = self.get(testimonial_id)
        except DocumentStoreError as e:
            raise TestimonialStoreError(f"Error loading testimonial: {e}") from e

        try:
            image_url, uploaded_key = self._resolve_image(inp)
        except ImageNormalizationError as e:
            return self._invalid([ValidationError("invalid_image", str(e), "image")])

        try:
            self.store.update_document(
                TESTIMONIALS, testimonial_id, build_testimonial_fields(inp, image_url)
            )
            updated = self.get(testimonial_id)
        except DocumentNotFoundError as e:
            self._drop(testimonial_id)
            raise TestimonialNotFoundError(testimonial_id) from e
        except DocumentStoreError as e:
            if uploaded_key:
                logger.warning("Orphaned image %s left in storage after failed save", uploaded_key)
            raise TestimonialStoreError(f"Error saving testimonial: {e}") from e

        cleanup = None
        if should_cleanup(existing.image, image_url, self.storage):
            cleanup = cleanup_image(self.storage, existing.image)

        with self._lock:
            self._items = [updated if t.id == testimonial_id else t for t in self._items]
        logger.info("Updated testimonial %s", testimonial_id)
        return TestimonialOutput(success=True, testimonial=updated, cleanup=cleanup)

    def delete(self, testimonial_id: str) -> CleanupResult:
        """
        Delete a testimonial, cleaning up its hosted image first.

        Raises:
            TestimonialNotFoundError: If the testimonial vanished
            TestimonialStoreError: If the document delete fails
        """
        try:
            existing = self.get(testimonial_id)
        except DocumentStoreError as e:
            raise TestimonialStoreError(f"Error loading testimonial: {e}") from e

        cleanup = cleanup_image(self.storage, existing.image)

        try:
            self.store.delete_document(TESTIMONIALS, testimonial_id)
        except DocumentNotFoundError as e:
            self._drop(testimonial_id)
            raise TestimonialNotFoundError(testimonial_id) from e
        except DocumentStoreError as e:
            raise TestimonialStoreError(f"Error deleting testimonial: {e}") from e

        self._drop(testimonial_id)
        logger.info("Deleted testimonial %s", testimonial_id)
        return cleanup
