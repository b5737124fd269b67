"""Tests for the settings persistence layer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from metaforge.services.settings import Settings, SettingsStore


def test_load_returns_defaults_when_file_missing(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")

    assert store.load() == Settings()


def test_defaults() -> None:
    settings = Settings()

    assert settings.screenshot_timeout == 8.0
    assert settings.screenshot_settle_delay == 0.5
    assert settings.trim_text is True
    assert settings.excluded_tags == ["create_file", "edit_file"]
    assert settings.interrupt_precedence == "last"


def test_save_and_load_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    original = Settings(
        screenshot_timeout=3.5,
        screenshot_settle_delay=0.0,
        trim_text=False,
        excluded_tags=["create_file"],
        interrupt_precedence="first",
        debug_logging=True,
        log_dir=str(tmp_path / "logs"),
    )

    SettingsStore(path).save(original)
    reloaded = SettingsStore(path).load()

    assert reloaded == original
    assert json.loads(path.read_text(encoding="utf-8"))["version"] == 1
    assert not path.with_suffix(".tmp").exists()


def test_invalid_json_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    assert SettingsStore(path).load() == Settings()


def test_unknown_fields_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"screenshot_timeout": 2.0, "theme": "dark"}), encoding="utf-8")

    settings = SettingsStore(path).load()

    assert settings.screenshot_timeout == 2.0


def test_env_overrides_take_precedence(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    SettingsStore(path).save(Settings(screenshot_timeout=3.0))
    monkeypatch.setenv("METAFORGE_SCREENSHOT_TIMEOUT", "12.5")
    monkeypatch.setenv("METAFORGE_SCREENSHOT_SETTLE_DELAY", "0.25")
    monkeypatch.setenv("METAFORGE_INTERRUPT_PRECEDENCE", "FIRST")

    settings = SettingsStore(path).load()

    assert settings.screenshot_timeout == 12.5
    assert settings.screenshot_settle_delay == 0.25
    assert settings.interrupt_precedence == "first"


def test_bool_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("METAFORGE_DEBUG_LOGGING", "yes")
    monkeypatch.setenv("METAFORGE_TRIM_TEXT", "0")

    settings = SettingsStore(tmp_path / "settings.json").load()

    assert settings.debug_logging is True
    assert settings.trim_text is False


def test_invalid_float_env_override_is_ignored(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("METAFORGE_SCREENSHOT_TIMEOUT", "soon")

    settings = SettingsStore(tmp_path / "settings.json").load()

    assert settings.screenshot_timeout == 8.0


def test_load_applies_cli_overrides(tmp_path: Path) -> None:
    settings = SettingsStore(tmp_path / "settings.json").load(
        overrides={"screenshot_timeout": 1.0, "unknown": "x", "log_dir": None}
    )

    assert settings.screenshot_timeout == 1.0
    assert settings.log_dir is None


def test_env_overrides_take_priority_over_cli(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("METAFORGE_SCREENSHOT_TIMEOUT", "4")

    settings = SettingsStore(tmp_path / "settings.json").load(overrides={"screenshot_timeout": 1.0})

    assert settings.screenshot_timeout == 4.0


def test_invalid_values_are_normalized(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "interrupt_precedence": "middle",
                "screenshot_settle_delay": -1,
                "screenshot_timeout": "fast",
                "excluded_tags": "create_file, edit_file",
            }
        ),
        encoding="utf-8",
    )

    settings = SettingsStore(path).load()

    assert settings.interrupt_precedence == "last"
    assert settings.screenshot_settle_delay == 0.0
    assert settings.screenshot_timeout == 8.0
    assert settings.excluded_tags == ["create_file", "edit_file"]
