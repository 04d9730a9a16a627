"""
Submission intake unit tests.

- A valid submission creates exactly one pending document and no events
- Required fields and banner are validated before any I/O
- File banners are normalized and uploaded under a time-based key
- Store failures leave no document and report a retryable error
"""

from __future__ import annotations

from collections.abc import Mapping
from io import BytesIO
from typing import Any

import pytest
from PIL import Image

from src.adapters.clock import FixedClock
from src.adapters.memory import InMemoryDocumentStore, InMemoryObjectStore
from src.components.imaging import ImagePolicy, ImageUpload
from src.components.submissions import SubmitEventInput, run_submit, validate_submission
from src.core.entities import EVENTS, SUBMITTED_EVENTS
from src.core.ports.documents import DocumentStoreError
from src.core.ports.storage import StorageError, StoredObject

# --- Mock Ports ---


class FailingCreateStore(InMemoryDocumentStore):
    """Document store whose creates always fail."""

    def __init__(self) -> None:
        super().__init__()
        self.create_calls = 0

    def create_document(self, collection: str, fields: Mapping[str, Any]) -> str:
        self.create_calls += 1
        raise DocumentStoreError("store unavailable")


class FailingPutStorage(InMemoryObjectStore):
    def put_object(self, key: str, data: bytes, content_type: str) -> StoredObject:
        raise StorageError("bucket unavailable")


class CountingStore(InMemoryDocumentStore):
    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    def create_document(self, collection: str, fields: Mapping[str, Any]) -> str:
        self.calls += 1
        return super().create_document(collection, fields)


# --- Helpers ---


def png_bytes(width: int = 2400, height: int = 1200) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), (10, 20, 30)).save(buf, format="PNG")
    return buf.getvalue()


def make_input(**overrides: Any) -> SubmitEventInput:
    values: dict[str, Any] = {
        "event_name": "Lagos Meetup",
        "venue": "Hub",
        "address": "1 Marina, Lagos",
        "date": "2026-03-14",
        "time": "18:00",
        "description": "Monthly bitcoin meetup",
        "banner_url": "https://cdn.example.com/banner.jpg",
    }
    values.update(overrides)
    return SubmitEventInput(**values)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(FixedClock())


@pytest.fixture
def storage() -> InMemoryObjectStore:
    return InMemoryObjectStore("http://testserver/media")


@pytest.fixture
def policy() -> ImagePolicy:
    return ImagePolicy(max_width=1200)


# --- Tests ---


class TestValidateSubmission:
    def test_valid_input(self, policy: ImagePolicy) -> None:
        assert validate_submission(make_input(), policy) == []

    @pytest.mark.parametrize(
        ("attr", "field"),
        [
            ("event_name", "eventName"),
            ("venue", "venue"),
            ("address", "address"),
            ("date", "date"),
            ("time", "time"),
            ("description", "description"),
        ],
    )
    def test_required_fields(self, policy: ImagePolicy, attr: str, field: str) -> None:
        errors = validate_submission(make_input(**{attr: "   "}), policy)

        assert [(e.code, e.field) for e in errors] == [("required", field)]

    def test_banner_required(self, policy: ImagePolicy) -> None:
        errors = validate_submission(make_input(banner_url=""), policy)

        assert errors[0].field == "banner"
        assert errors[0].code == "required"

    def test_banner_url_must_be_http(self, policy: ImagePolicy) -> None:
        errors = validate_submission(make_input(banner_url="javascript:alert(1)"), policy)

        assert errors[0].code == "invalid_url"

    def test_banner_upload_mime_type_screened(self, policy: ImagePolicy) -> None:
        upload = ImageUpload(data=b"%PDF", filename="x.pdf", content_type="application/pdf")

        errors = validate_submission(make_input(banner_url="", banner_upload=upload), policy)

        assert errors[0].code == "invalid_mime_type"
        assert errors[0].field == "banner"


class TestRunSubmit:
    def test_valid_submission_creates_one_pending_doc(
        self,
        store: InMemoryDocumentStore,
        storage: InMemoryObjectStore,
        policy: ImagePolicy,
    ) -> None:
        result = run_submit(
            make_input(registration_url="https://lu.ma/lagos"),
            store=store,
            storage=storage,
            clock=FixedClock(),
            policy=policy,
        )

        assert result.success
        assert store.count(SUBMITTED_EVENTS) == 1
        assert store.count(EVENTS) == 0

        doc = store.list_documents(SUBMITTED_EVENTS)[0]
        assert doc["id"] == result.submission_id
        assert doc["status"] == "pending"
        assert doc["eventName"] == "Lagos Meetup"
        assert doc["banner"] == "https://cdn.example.com/banner.jpg"
        assert doc["registrationUrl"] == "https://lu.ma/lagos"
        assert doc["submittedAt"] == FixedClock().now_utc().isoformat()

    def test_missing_registration_url_stored_empty(
        self,
        store: InMemoryDocumentStore,
        storage: InMemoryObjectStore,
        policy: ImagePolicy,
    ) -> None:
        run_submit(make_input(), store=store, storage=storage, clock=FixedClock(), policy=policy)

        assert store.list_documents(SUBMITTED_EVENTS)[0]["registrationUrl"] == ""

    def test_file_banner_is_normalized_and_uploaded(
        self,
        store: InMemoryDocumentStore,
        storage: InMemoryObjectStore,
        policy: ImagePolicy,
    ) -> None:
        upload = ImageUpload(data=png_bytes(), filename="b.png", content_type="image/png")

        result = run_submit(
            make_input(banner_url="", banner_upload=upload),
            store=store,
            storage=storage,
            clock=FixedClock(),
            policy=policy,
        )

        assert result.success
        keys = storage.keys()
        assert len(keys) == 1
        assert keys[0].startswith("submittedEvents/banner_")
        assert result.banner_url == f"http://testserver/media/{keys[0]}"

        data, meta = storage.get_object(keys[0])
        assert meta.content_type == "image/jpeg"
        assert Image.open(BytesIO(data)).size == (1200, 600)

        doc = store.list_documents(SUBMITTED_EVENTS)[0]
        assert doc["banner"] == result.banner_url

    def test_validation_failure_makes_no_calls(
        self, storage: InMemoryObjectStore, policy: ImagePolicy
    ) -> None:
        store = CountingStore()

        result = run_submit(
            make_input(event_name=""),
            store=store,
            storage=storage,
            clock=FixedClock(),
            policy=policy,
        )

        assert not result.success
        assert not result.retryable
        assert store.calls == 0
        assert storage.keys() == []

    def test_undecodable_upload_is_not_retryable(
        self,
        store: InMemoryDocumentStore,
        storage: InMemoryObjectStore,
        policy: ImagePolicy,
    ) -> None:
        upload = ImageUpload(data=b"garbage", filename="b.png", content_type="image/png")

        result = run_submit(
            make_input(banner_url="", banner_upload=upload),
            store=store,
            storage=storage,
            clock=FixedClock(),
            policy=policy,
        )

        assert not result.success
        assert result.errors[0].code == "invalid_image"
        assert not result.retryable
        assert store.count(SUBMITTED_EVENTS) == 0

    def test_store_failure_leaves_no_document(
        self, storage: InMemoryObjectStore, policy: ImagePolicy
    ) -> None:
        store = FailingCreateStore()
        inp = make_input()

        result = run_submit(inp, store=store, storage=storage, clock=FixedClock(), policy=policy)

        assert not result.success
        assert result.retryable
        assert result.submitted == inp
        assert store.count(SUBMITTED_EVENTS) == 0

    def test_store_failure_after_upload_leaks_blob(
        self, storage: InMemoryObjectStore, policy: ImagePolicy, caplog: pytest.LogCaptureFixture
    ) -> None:
        store = FailingCreateStore()
        upload = ImageUpload(data=png_bytes(100, 50), filename="b.png", content_type="image/png")

        result = run_submit(
            make_input(banner_url="", banner_upload=upload),
            store=store,
            storage=storage,
            clock=FixedClock(),
            policy=policy,
        )

        assert not result.success
        assert result.retryable
        assert len(storage.keys()) == 1
        assert "Orphaned banner" in caplog.text

    def test_storage_failure_is_retryable(
        self, store: InMemoryDocumentStore, policy: ImagePolicy
    ) -> None:
        upload = ImageUpload(data=png_bytes(100, 50), filename="b.png", content_type="image/png")

        result = run_submit(
            make_input(banner_url="", banner_upload=upload),
            store=store,
            storage=FailingPutStorage(),
            clock=FixedClock(),
            policy=policy,
        )

        assert not result.success
        assert result.retryable
        assert result.errors[0].code == "storage_unavailable"
        assert store.count(SUBMITTED_EVENTS) == 0
