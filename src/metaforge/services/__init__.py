"""Service layer helpers (settings persistence)."""

from .settings import Settings, SettingsStore, default_settings_path

__all__ = ["Settings", "SettingsStore", "default_settings_path"]
