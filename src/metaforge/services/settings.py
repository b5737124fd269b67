"""Settings dataclasses and persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

from ..orchestration.planner import INTERRUPT_PRECEDENCE, PRECEDENCE_FIRST, PRECEDENCE_LAST

__all__ = ["Settings", "SettingsStore", "default_settings_path"]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".metaforge"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_ENV_OVERRIDES: Mapping[str, str] = {
    "METAFORGE_INTERRUPT_PRECEDENCE": "interrupt_precedence",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "METAFORGE_DEBUG_LOGGING": "debug_logging",
    "METAFORGE_TRIM_TEXT": "trim_text",
}
_FLOAT_ENV_OVERRIDES: Mapping[str, str] = {
    "METAFORGE_SCREENSHOT_TIMEOUT": "screenshot_timeout",
    "METAFORGE_SCREENSHOT_SETTLE_DELAY": "screenshot_settle_delay",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_PRECEDENCE_CHOICES: tuple[str, ...] = (PRECEDENCE_LAST, PRECEDENCE_FIRST)


@dataclass(slots=True)
class Settings:
    """User-configurable settings persisted between sessions."""

    screenshot_timeout: float = 8.0
    screenshot_settle_delay: float = 0.5
    trim_text: bool = True
    excluded_tags: list[str] = field(default_factory=lambda: ["create_file", "edit_file"])
    interrupt_precedence: str = INTERRUPT_PRECEDENCE
    debug_logging: bool = False
    log_dir: str | None = None


def default_settings_path() -> Path:
    return _DEFAULT_SETTINGS_PATH


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings from disk, applying CLI/environment overrides when present."""

        payload = self._read_payload()
        settings = Settings()
        if payload:
            data = _filter_fields(payload)
            try:
                settings = Settings(**data)
            except TypeError as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = Settings()
        LOGGER.debug("Settings loaded from %s (version=%s)", self._path, payload.get("version") if payload else None)

        if overrides:
            settings = self._apply_overrides(settings, overrides, source="CLI")

        settings = self._apply_env_overrides(settings)
        return _normalize(settings)

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with atomic file writes."""

        payload = asdict(settings)
        payload["version"] = _SETTINGS_VERSION
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            payload = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Settings file %s does not contain a JSON object", self._path)
            return {}
        return payload

    def _apply_overrides(
        self,
        settings: Settings,
        overrides: Mapping[str, Any],
        *,
        source: str = "runtime",
    ) -> Settings:
        allowed = {field.name for field in fields(Settings)}
        filtered: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in allowed or value is None:
                continue
            filtered[key] = value
        if filtered:
            LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
            settings = replace(settings, **filtered)
        return settings

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower()
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        for env_name, field_name in _FLOAT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = float(value)
            except ValueError:
                LOGGER.warning("Environment override %s=%s is not a valid float", env_name, value)
        if overrides:
            settings = self._apply_overrides(settings, overrides, source="environment")
        return settings


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {field.name for field in fields(Settings)}
    return {key: value for key, value in payload.items() if key in allowed}


def _normalize(settings: Settings) -> Settings:
    updates: Dict[str, Any] = {}
    if settings.interrupt_precedence not in _PRECEDENCE_CHOICES:
        LOGGER.warning(
            "Unknown interrupt_precedence '%s'; defaulting to %s.",
            settings.interrupt_precedence,
            INTERRUPT_PRECEDENCE,
        )
        updates["interrupt_precedence"] = INTERRUPT_PRECEDENCE
    if isinstance(settings.excluded_tags, str):
        updates["excluded_tags"] = [tag.strip() for tag in settings.excluded_tags.split(",") if tag.strip()]
    for name in ("screenshot_timeout", "screenshot_settle_delay"):
        value = getattr(settings, name)
        try:
            number = float(value)
        except (TypeError, ValueError):
            LOGGER.warning("Setting %s=%r is not a number; using the default.", name, value)
            number = getattr(Settings(), name)
        if number < 0:
            LOGGER.warning("Setting %s=%s is negative; using 0.", name, number)
            number = 0.0
        if number != value:
            updates[name] = number
    if updates:
        settings = replace(settings, **updates)
    return settings
