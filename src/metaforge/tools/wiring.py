"""Wire the default tag vocabulary to its handlers."""

from __future__ import annotations

from typing import Mapping

from . import file_tools, preview_tools
from .registry import ToolRegistry
from .types import ToolHandler, ToolKind
from .vocabulary import TOOL_SPECS

__all__ = ["DEFAULT_HANDLERS", "build_default_registry"]

DEFAULT_HANDLERS: Mapping[str, ToolHandler] = {
    "create_file": file_tools.create_file,
    "edit_file": file_tools.edit_file,
    "delete_file": file_tools.delete_file,
    "move_file": file_tools.move_file,
    "read_file": file_tools.read_file,
    "list_files": file_tools.list_files,
    "preview": preview_tools.preview,
    "take_screenshot": preview_tools.take_screenshot,
}


def build_default_registry() -> ToolRegistry:
    """Return a registry holding every tag of the vocabulary."""

    registry = ToolRegistry()
    for spec in TOOL_SPECS:
        handler = DEFAULT_HANDLERS.get(spec.name) if spec.kind == ToolKind.IMMEDIATE else None
        registry.register(spec, handler)
    return registry
