"""App startup and shutdown with the memory backend."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.api import deps
from src.api.main import app

PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def memory_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    monkeypatch.setenv("SITE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SITE_STORE_BACKEND", "memory")
    monkeypatch.setenv("SITE_RULES_PATH", str(PROJECT_ROOT / "rules.yaml"))
    app.dependency_overrides.clear()
    deps.reset_singletons()
    yield
    deps.reset_singletons()


def test_lifespan_starts_and_stops_news_cache(memory_env: None, tmp_path: Path) -> None:
    with TestClient(app) as client:
        cache = deps._news_cache_instance
        assert cache is not None and cache.started
        assert client.get("/api/news").json()["loading"] is False
        assert (tmp_path / "data").is_dir()

    assert not cache.started
