from collections.abc import Callable, Generator
from io import BytesIO
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from src.adapters.clock import FixedClock
from src.adapters.memory import InMemoryDocumentStore, InMemoryObjectStore
from src.api.deps import (
    get_clock,
    get_document_store,
    get_news_cache,
    get_object_store,
    get_rules,
    reset_singletons,
)
from src.api.main import app
from src.components.news import NewsCache
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent
MEDIA_URL = "http://testserver/media"


@pytest.fixture
def rules() -> Rules:
    """The real rules.yaml from the project root."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store(clock: FixedClock) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(clock)


@pytest.fixture
def storage() -> InMemoryObjectStore:
    return InMemoryObjectStore(MEDIA_URL)


@pytest.fixture
def news_cache(store: InMemoryDocumentStore) -> NewsCache:
    return NewsCache(store)


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Encode a solid-colour test image."""

    def _make(width: int = 800, height: int = 400, fmt: str = "PNG") -> bytes:
        buf = BytesIO()
        Image.new("RGB", (width, height), (247, 147, 26)).save(buf, format=fmt)
        return buf.getvalue()

    return _make


@pytest.fixture
def client(
    rules: Rules,
    clock: FixedClock,
    store: InMemoryDocumentStore,
    storage: InMemoryObjectStore,
    news_cache: NewsCache,
) -> Generator[TestClient, None, None]:
    """Test client over in-memory adapters. The lifespan is not run."""
    reset_singletons()
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_object_store] = lambda: storage
    app.dependency_overrides[get_news_cache] = lambda: news_cache

    yield TestClient(app)

    app.dependency_overrides.clear()
    reset_singletons()
