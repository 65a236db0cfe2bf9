"""
Tests for rules loading and validation.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from src.rules.loader import load_rules, parse_rules

MINIMAL = """
project: {slug: test, rules_version: "1"}
rooms:
  name: {pattern: "^[a-z]+$", min: 3, max: 10}
  generator: {adjectives: [red], nouns: [fox]}
realtime:
  transient_update_types: [cursor]
presence:
  palette: ["#000000"]
uploads:
  max_upload_bytes: 100
  allowlist_mime_types: [image/png]
ops:
  data_dir_required: false
"""


def test_project_rules_load(rules) -> None:
    assert rules.project.slug == "infinite-canvas"
    assert rules.rooms.name.min == 3
    assert rules.rooms.name.max == 50
    assert len(rules.presence.palette) == 10
    assert "cursor" in rules.realtime.transient_update_types
    assert rules.cleanup.max_age_days == 30


def test_defaults_fill_optional_sections() -> None:
    rules = parse_rules(MINIMAL)

    assert rules.password_hashing.algorithm == "argon2"
    assert rules.permissions.readonly_allowed_updates == ["cursor", "userInfo"]
    assert rules.cleanup.enabled
    assert rules.rooms.generator.max_number == 999
    assert rules.ops.cors_origins == ["*"]


def test_fenced_yaml_block() -> None:
    text = "# Canvas rules\n\nSome prose.\n\n```yaml\n" + MINIMAL + "```\n\nMore prose.\n"
    assert parse_rules(text).project.slug == "test"


def test_invalid_yaml() -> None:
    with pytest.raises(ValueError, match="Invalid YAML"):
        parse_rules("rooms: [unclosed")


def test_schema_mismatch() -> None:
    with pytest.raises(ValueError, match="validation failed"):
        parse_rules("project: {slug: test}")


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_load_from_file(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(MINIMAL)
    assert load_rules(path).uploads.max_upload_bytes == 100
