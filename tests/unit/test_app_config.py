"""Startup configuration and settings tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from src.api.deps import Settings, get_settings, reset_singletons
from src.app_shell.config import ConfigError, configure_logging, validate_ops_rules
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def rules() -> Rules:
    return load_rules(PROJECT_ROOT / "rules.yaml")


class TestValidateOpsRules:
    def test_creates_data_dir(self, rules: Rules, tmp_path: Path) -> None:
        data_dir = tmp_path / "data"

        validate_ops_rules(rules, data_dir)

        assert data_dir.is_dir()

    def test_missing_required_env(
        self, rules: Rules, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("SITE_ADMIN_TOKEN", raising=False)
        rules = rules.model_copy(
            update={"ops": rules.ops.model_copy(update={"required_env": ["SITE_ADMIN_TOKEN"]})}
        )

        with pytest.raises(ConfigError, match="SITE_ADMIN_TOKEN"):
            validate_ops_rules(rules, tmp_path)

    def test_unusable_data_dir(self, rules: Rules, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(ConfigError):
            validate_ops_rules(rules, blocker / "data")


def test_configure_logging_sets_root_level(rules: Rules) -> None:
    root = logging.getLogger()
    previous = root.level
    rules = rules.model_copy(
        update={"ops": rules.ops.model_copy(update={"log_level": "WARNING"})}
    )
    try:
        configure_logging(rules)
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)


class TestSettings:
    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("SITE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("SITE_PUBLIC_BASE_URL", "https://community.example.com/")
        monkeypatch.setenv("SITE_STORE_BACKEND", "memory")

        settings = Settings()

        assert settings.db_path == str(tmp_path / "site.db")
        assert settings.media_dir == tmp_path / "media"
        assert settings.public_base_url == "https://community.example.com"
        assert settings.store_backend == "memory"

    def test_settings_are_cached_until_reset(self) -> None:
        reset_singletons()
        first = get_settings()

        assert get_settings() is first
        reset_singletons()
        assert get_settings() is not first
