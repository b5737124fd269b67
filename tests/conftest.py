"""Shared pytest fixtures."""

from __future__ import annotations

import logging

import pytest

from metaforge.project import VirtualFileStore
from metaforge.tools import ToolRegistry, build_default_registry


@pytest.fixture
def ten_line_file() -> str:
    return "\n".join(f"line {number}" for number in range(1, 11))


@pytest.fixture
def store(ten_line_file: str) -> VirtualFileStore:
    return VirtualFileStore({"index.html": ten_line_file, "style.css": "body {}\n"})


@pytest.fixture
def registry() -> ToolRegistry:
    return build_default_registry()


@pytest.fixture(autouse=True)
def _isolated_home(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> None:
    """Keep settings and log files out of the real home directory."""

    monkeypatch.setenv("METAFORGE_LOG_DIR", str(tmp_path_factory.mktemp("logs")))
    for name in (
        "METAFORGE_SCREENSHOT_TIMEOUT",
        "METAFORGE_SCREENSHOT_SETTLE_DELAY",
        "METAFORGE_INTERRUPT_PRECEDENCE",
        "METAFORGE_DEBUG_LOGGING",
        "METAFORGE_TRIM_TEXT",
        "METAFORGE_DEBUG",
        "METAFORGE_SETTINGS_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def restore_logging(monkeypatch: pytest.MonkeyPatch):
    """Undo root logger changes made by ``setup_logging``."""

    from metaforge.utils import logging as logging_utils

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    monkeypatch.setattr(logging_utils, "_LOG_PATH", None)
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.captureWarnings(False)
