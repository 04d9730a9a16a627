"""
Rules loader tests.

rules.yaml is validated with pydantic at load time; anything malformed
surfaces as ValueError so startup can fail fast.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from src.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def raw_rules() -> dict[str, Any]:
    with open(PROJECT_ROOT / "rules.yaml") as f:
        data: dict[str, Any] = yaml.safe_load(f)
    return data


def write(tmp_path: Path, data: dict[str, Any]) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestProjectRules:
    def test_project_rules_load(self) -> None:
        rules = load_rules(PROJECT_ROOT / "rules.yaml")

        assert rules.site.media_path == "/media"
        assert rules.images.banner_max_width == 1200
        assert rules.images.avatar_max_width == 400
        assert rules.testimonials.max_text_length == 280
        assert rules.testimonials.allowed_link_hosts == ["twitter.com", "x.com"]
        assert rules.moderation.confirmation_ttl_seconds == 300
        assert "image/jpeg" in rules.uploads.allowlist_mime_types


class TestValidation:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("project: [unclosed")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_missing_section(self, tmp_path: Path, raw_rules: dict[str, Any]) -> None:
        del raw_rules["newsletter"]

        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(write(tmp_path, raw_rules))

    def test_quality_out_of_range(self, tmp_path: Path, raw_rules: dict[str, Any]) -> None:
        raw_rules["images"]["jpeg_quality"] = 120

        with pytest.raises(ValueError):
            load_rules(write(tmp_path, raw_rules))

    def test_log_level_normalised(self, tmp_path: Path, raw_rules: dict[str, Any]) -> None:
        raw_rules["ops"]["log_level"] = "debug"

        assert load_rules(write(tmp_path, raw_rules)).ops.log_level == "DEBUG"

    def test_unknown_log_level(self, tmp_path: Path, raw_rules: dict[str, Any]) -> None:
        raw_rules["ops"]["log_level"] = "LOUD"

        with pytest.raises(ValueError):
            load_rules(write(tmp_path, raw_rules))


def test_fenced_yaml_block(tmp_path: Path, raw_rules: dict[str, Any]) -> None:
    path = tmp_path / "rules.md"
    path.write_text(
        "# Site rules\n\n```yaml\n" + yaml.safe_dump(raw_rules) + "```\n\nTrailing notes.\n"
    )

    assert load_rules(path).project.slug == "bitcoin-community-site"
