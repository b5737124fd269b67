"""Command line entry point for running agent responses against a project snapshot."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO

from .agent.turn import TurnOutcome, TurnProcessor
from .project.file_store import VirtualFileStore
from .services.settings import Settings, SettingsStore
from .utils import logging as logging_utils

__all__ = ["main", "configure_logging", "load_settings", "load_snapshot", "save_snapshot"]

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}
_LOGGER = logging.getLogger(__name__)
_STDIN_MARKER = "-"


class SnapshotError(ValueError):
    """Raised when a project snapshot file cannot be used."""


def configure_logging(debug: bool = False, *, log_dir: str | Path | None = None, force: bool = False) -> None:
    """Configure logging for the command line tool."""

    level = logging.DEBUG if debug else logging.INFO
    logging_utils.setup_logging(level, log_dir=log_dir, force=force)
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(level))


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        settings = active_store.load(overrides=overrides)
    except Exception as exc:  # pragma: no cover
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        settings = Settings()
    return settings


def load_snapshot(path: Path | None) -> VirtualFileStore:
    """Build a store from a JSON object mapping paths to file contents."""

    if path is None or not path.exists():
        if path is not None:
            _LOGGER.info("Snapshot %s does not exist; starting with an empty project.", path)
        return VirtualFileStore()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in payload.items()
    ):
        raise SnapshotError(f"Snapshot {path} must be a JSON object mapping paths to text.")
    return VirtualFileStore(payload)


def save_snapshot(store: VirtualFileStore, path: Path) -> Path:
    """Write the store's files to ``path`` atomically."""

    body = json.dumps(store.snapshot(), indent=2, sort_keys=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    tmp_path.write_text(body, encoding="utf-8")
    tmp_path.replace(path)
    _LOGGER.debug("Snapshot saved to %s (%d files)", path, len(store))
    return path


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the `metaforge` console script."""

    args = _parse_cli_args(argv)

    debug = args.debug or _env_flag("METAFORGE_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("METAFORGE_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings_store = SettingsStore(resolved_path)
    try:
        cli_overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2

    settings = load_settings(resolved_path, store=settings_store, overrides=cli_overrides or None)

    if args.dump_settings:
        _dump_settings(settings, settings_store, cli_overrides)
        return 0

    if (settings.debug_logging and not debug) or settings.log_dir:
        debug = debug or settings.debug_logging
        configure_logging(debug, log_dir=settings.log_dir, force=True)

    if args.response is None:
        print("A RESPONSE file (or '-' for stdin) is required.", file=sys.stderr)
        return 2

    try:
        response_text = _read_response(args.response)
    except OSError as exc:
        print(f"Unable to read response: {exc}", file=sys.stderr)
        return 2

    project_path = Path(args.project).expanduser() if args.project else None
    if args.write and project_path is None:
        print("--write requires --project.", file=sys.stderr)
        return 2
    try:
        store = load_snapshot(project_path)
    except SnapshotError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    processor = TurnProcessor.from_settings(store, settings)

    if args.plan:
        plan = processor.orchestrator.plan(processor.parse(response_text))
        json.dump(plan.to_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    outcome = asyncio.run(processor.process(response_text))
    _print_outcome(outcome)

    if args.write and project_path is not None:
        save_snapshot(store, project_path)
    return 0


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _read_response(source: str) -> str:
    if source == _STDIN_MARKER:
        return sys.stdin.read()
    return Path(source).expanduser().read_text(encoding="utf-8")


def _print_outcome(outcome: TurnOutcome, stream: TextIO | None = None) -> None:
    destination = stream or sys.stdout
    for annotation in outcome.annotations:
        label = f" ({annotation.label})" if annotation.label else ""
        destination.write(f"# {annotation.kind}{label}: {annotation.text}\n")
    if outcome.tool_log:
        destination.write(outcome.tool_log + "\n")
    if outcome.interrupt is not None:
        destination.write(f"<{outcome.interrupt.kind}> {outcome.interrupt.value}\n")


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="metaforge",
        add_help=True,
        description="Run the file operations in an agent response against a project snapshot.",
    )
    parser.add_argument(
        "response",
        nargs="?",
        metavar="RESPONSE",
        help="File holding the agent response, or '-' to read stdin.",
    )
    parser.add_argument(
        "--project",
        metavar="SNAPSHOT.json",
        help="JSON object mapping project paths to file contents.",
    )
    parser.add_argument(
        "--write",
        action="store_true",
        help="Save the modified project back to the snapshot file.",
    )
    parser.add_argument(
        "--plan",
        action="store_true",
        help="Print the ordered execution plan as JSON without running it.",
    )
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.metaforge/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings for this run (repeatable).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    """Turn ``KEY=VALUE`` strings into typed :class:`Settings` overrides.

    The target type is taken from the field's default value.
    """

    defaults = asdict(Settings())
    overrides: Dict[str, Any] = {}
    for entry in items:
        key, separator, raw_value = entry.partition("=")
        key = key.strip()
        if not separator:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        if key not in defaults:
            raise ValueError(f"Unknown setting '{key}'.")
        overrides[key] = _coerce_value(key, defaults[key], raw_value.strip())
    return overrides


def _coerce_value(key: str, default: Any, raw_value: str) -> Any:
    if isinstance(default, bool):
        lowered = raw_value.lower()
        if lowered in _TRUE_VALUES or lowered in _FALSE_VALUES:
            return lowered in _TRUE_VALUES
        raise ValueError(f"'{key}' expects a boolean, got '{raw_value}'.")
    if isinstance(default, float):
        try:
            return float(raw_value)
        except ValueError:
            raise ValueError(f"'{key}' expects a number, got '{raw_value}'.") from None
    if isinstance(default, list):
        return [item.strip() for item in raw_value.split(",") if item.strip()]
    if default is None:
        return raw_value or None
    return raw_value


def _dump_settings(settings: Settings, store: SettingsStore, overrides: Mapping[str, Any]) -> None:
    payload = {
        "settings": asdict(settings),
        "meta": {"path": str(store.path), "cli_overrides": sorted(overrides)},
    }
    json.dump(payload, sys.stdout, indent=2)
    sys.stdout.write("\n")
