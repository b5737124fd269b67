"""Logging setup for the ``metaforge`` command line tool.

Records go to a rotating ``metaforge.log`` and, unless disabled, to stderr
in a shorter form. Every parser recovery is already logged at WARNING by
:mod:`metaforge.markup.parser`, so the matching ``ParseRecoveryWarning`` is
muted here; any other warning is captured into the log.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
import warnings
from pathlib import Path

from ..tools.errors import ParseRecoveryWarning

__all__ = ["LOG_FILE_NAME", "setup_logging"]

LOG_FILE_NAME = "metaforge.log"
_DEFAULT_LOG_DIR = Path.home() / ".metaforge" / "logs"
_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
_MAX_BYTES = 1_000_000
_BACKUP_COUNT = 3
# Third-party loggers never go below WARNING.
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio", "jsonschema")
_LOG_PATH: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    force: bool = False,
) -> Path:
    """Install the file and console handlers on the root logger.

    The log directory is ``log_dir``, else ``$METAFORGE_LOG_DIR``, else
    ``~/.metaforge/logs``. Later calls are no-ops unless ``force`` is set.

    Returns:
        The path of the active log file.
    """

    global _LOG_PATH
    if _LOG_PATH is not None and not force:
        return _LOG_PATH

    directory = Path(log_dir or os.environ.get("METAFORGE_LOG_DIR") or _DEFAULT_LOG_DIR).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / LOG_FILE_NAME

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handlers: list[logging.Handler] = [file_handler]
    if console:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        handlers.append(stderr_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    warnings.filterwarnings("ignore", category=ParseRecoveryWarning)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _LOG_PATH = log_path
    return log_path
