"""Handlers for the file tags: create, edit, delete, move, read and list."""

from __future__ import annotations

import logging
import sys

from ..markup.nodes import MarkupNode
from .errors import InvalidParameterError
from .types import ToolContext, ToolResult

__all__ = [
    "create_file",
    "edit_file",
    "delete_file",
    "move_file",
    "read_file",
    "list_files",
    "int_attribute",
    "LINE_NUMBER_SEPARATOR",
]

LOGGER = logging.getLogger(__name__)

LINE_NUMBER_SEPARATOR = " | "
_READ_TO_END = sys.maxsize


def int_attribute(node: MarkupNode, name: str, default: int | None = None) -> int:
    """Return the integer value of attribute ``name`` or ``default``.

    Raises:
        InvalidParameterError: The attribute is missing without a default or
            is not an integer.
    """

    raw = node.attributes.get(name)
    if raw is None or not raw.strip():
        if default is None:
            raise InvalidParameterError(
                message=f"<{node.tag}> requires an integer '{name}' attribute",
                parameter=name,
                expected="integer",
            )
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidParameterError(
            message=f"<{node.tag}> attribute '{name}' must be an integer, got {raw!r}",
            parameter=name,
            value=raw,
            expected="integer",
        ) from None


def create_file(node: MarkupNode, context: ToolContext) -> ToolResult:
    path = node.attributes["path"]
    status = context.store.write(path, node.text())
    return ToolResult.success(node.tag, status, summary=f"Created {path}")


def edit_file(node: MarkupNode, context: ToolContext) -> ToolResult:
    path = node.attributes["path"]
    mode = node.attributes["mode"]
    end = int_attribute(node, "end")
    # insert_after anchors on ``end`` alone
    start = int_attribute(node, "start", default=end if mode == "insert_after" else None)
    body = "" if mode == "delete" else node.text()
    status = context.store.edit_lines(path, start, end, mode, body)
    return ToolResult.success(node.tag, status)


def delete_file(node: MarkupNode, context: ToolContext) -> ToolResult:
    status = context.store.delete(node.attributes["path"])
    return ToolResult.success(node.tag, status.message)


def move_file(node: MarkupNode, context: ToolContext) -> ToolResult:
    status = context.store.move(node.attributes["path"], node.attributes["new_path"])
    if not status.ok and status.error is not None:
        LOGGER.info("move_file rejected: %s", status.message)
        return ToolResult.failure(node.tag, status.error)
    return ToolResult.success(node.tag, status.message)


def read_file(node: MarkupNode, context: ToolContext) -> ToolResult:
    path = node.attributes["path"]
    start = int_attribute(node, "start", default=1)
    end = int_attribute(node, "end", default=_READ_TO_END)
    lines = context.store.read_lines(path, start, end)

    if node.attributes.get("line_numbers") != "false":
        first = max(1, start)
        rendered = "\n".join(f"{first + offset}{LINE_NUMBER_SEPARATOR}{line}" for offset, line in enumerate(lines))
    else:
        rendered = "\n".join(lines)

    return ToolResult.success(
        node.tag,
        f"{path}:\n{rendered}",
        summary=f"Read {path} ({len(lines)} lines)",
    )


def list_files(node: MarkupNode, context: ToolContext) -> ToolResult:
    paths = context.store.list()
    return ToolResult.success(node.tag, ", ".join(paths), summary=f"Listed {len(paths)} files")
