"""In-memory project filesystem with line-indexed edit operations."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Protocol

from ..tools.errors import (
    DestinationExistsError,
    PathNotFoundError,
    ToolError,
    UnknownEditModeError,
)

__all__ = [
    "EDIT_MODES",
    "FileStoreChange",
    "FileStoreListener",
    "StoreStatus",
    "VirtualFileStore",
    "split_lines",
]

LOGGER = logging.getLogger(__name__)

EDIT_MODES: tuple[str, ...] = ("replace", "insert_after", "delete")

_NEWLINE_RE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split ``text`` on universal newlines, keeping a trailing empty line."""

    return _NEWLINE_RE.split(text)


@dataclass(slots=True, frozen=True)
class FileStoreChange:
    """Describes a mutation that was just applied to the store."""

    operation: str
    paths: tuple[str, ...]


class FileStoreListener(Protocol):
    """Callback signature fired after every successful mutation."""

    def __call__(self, change: FileStoreChange) -> None:  # pragma: no cover - protocol
        ...


@dataclass(slots=True, frozen=True)
class StoreStatus:
    """Outcome of a mutation that reports failures instead of raising."""

    ok: bool
    message: str
    changed: bool = False
    error: ToolError | None = None

    def __str__(self) -> str:
        return self.message


class VirtualFileStore:
    """Mapping of project paths to their full text content.

    Paths are compared as exact, case-sensitive strings. Every successful
    mutation notifies the registered listeners synchronously; listener
    failures are logged and never reach the caller.
    """

    def __init__(self, initial_files: Mapping[str, str] | None = None) -> None:
        self._files: dict[str, str] = dict(initial_files or {})
        self._listeners: list[FileStoreListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, listener: FileStoreListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: FileStoreListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            LOGGER.debug("Listener %r was not registered", listener)

    def _notify(self, operation: str, *paths: str) -> None:
        change = FileStoreChange(operation=operation, paths=tuple(paths))
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                LOGGER.exception("File store listener %r failed for %s", listener, operation)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def exists(self, path: str) -> bool:
        return path in self._files

    def read(self, path: str) -> str:
        try:
            return self._files[path]
        except KeyError:
            raise PathNotFoundError(message=f"File not found: {path}", path=path) from None

    def read_lines(self, path: str, start: int, end: int) -> list[str]:
        """Return lines ``start``..``end`` (1-based, inclusive), clamped to the file."""

        lines = split_lines(self.read(path))
        start_index = max(0, start - 1)
        end_index = min(len(lines), end)
        if start_index >= len(lines):
            return []
        return lines[start_index:end_index]

    def list(self) -> list[str]:
        return sorted(self._files)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of every file, suitable for persistence."""

        return dict(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        return path in self._files

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def load(self, files: Mapping[str, str] | Iterable[tuple[str, str]]) -> None:
        """Replace the whole project content with ``files``."""

        self._files = dict(files)
        self._notify("load", *sorted(self._files))

    def write(self, path: str, content: str) -> str:
        self._files[path] = content
        self._notify("write", path)
        size = len(content.encode("utf-8"))
        return f"Wrote {size} bytes to {path}"

    def delete(self, path: str) -> StoreStatus:
        if path not in self._files:
            return StoreStatus(ok=True, message=f"File {path} did not exist.")
        del self._files[path]
        self._notify("delete", path)
        return StoreStatus(ok=True, message=f"Deleted {path}", changed=True)

    def move(self, path: str, new_path: str) -> StoreStatus:
        if path not in self._files:
            error: ToolError = PathNotFoundError(message=f"Source {path} not found.", path=path)
            return StoreStatus(ok=False, message=f"Error: {error.message}", error=error)
        if new_path in self._files:
            error = DestinationExistsError(
                message=f"Destination {new_path} already exists. Delete it first if you want to overwrite.",
                path=new_path,
            )
            return StoreStatus(ok=False, message=f"Error: {error.message}", error=error)
        self._files[new_path] = self._files.pop(path)
        self._notify("move", path, new_path)
        return StoreStatus(ok=True, message=f"Moved {path} to {new_path}", changed=True)

    def edit_lines(
        self,
        path: str,
        start: int,
        end: int,
        mode: str,
        new_text: str = "",
    ) -> str:
        """Apply a line-indexed edit and return a status line.

        Args:
            path: Target file.
            start: First line (1-based, inclusive). Ignored for ``insert_after``.
            end: Last line (inclusive); for ``insert_after`` the anchor line.
            mode: One of ``replace``, ``insert_after`` or ``delete``.
            new_text: Replacement or inserted text; ignored for ``delete``.

        Raises:
            PathNotFoundError: If ``path`` is not in the store.
            UnknownEditModeError: If ``mode`` is not supported.
        """

        if path not in self._files:
            raise PathNotFoundError(message=f"File not found: {path}", path=path)
        if mode not in EDIT_MODES:
            raise UnknownEditModeError(message=f"Unknown edit mode: {mode}", mode=mode)

        lines = split_lines(self._files[path])
        new_lines = split_lines(new_text) if new_text else []
        start_index = max(0, start - 1)
        delete_count = max(0, end - start + 1)

        if mode == "replace":
            _pad(lines, start_index)
            lines[start_index:start_index + delete_count] = new_lines
        elif mode == "insert_after":
            target_index = max(0, end)
            _pad(lines, target_index)
            lines[target_index:target_index] = new_lines
        elif start_index < len(lines):
            del lines[start_index:start_index + delete_count]

        self._files[path] = "\n".join(lines)
        self._notify("edit", path)
        return f"Edited {path} (Mode: {mode}, Lines: {start}-{end})"


def _pad(lines: list[str], length: int) -> None:
    while len(lines) < length:
        lines.append("")
