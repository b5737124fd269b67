"""The tag vocabulary agents use to request project operations."""

from __future__ import annotations

from typing import Any

from .types import ToolKind, ToolSpec

__all__ = [
    "IMMEDIATE_TAGS",
    "INTERRUPT_TAGS",
    "ANNOTATION_TAGS",
    "TOOL_SPECS",
    "spec_for",
]

_LINE_NUMBER: dict[str, Any] = {"type": "string", "pattern": r"^\s*-?\d+\s*$"}
_PATH: dict[str, Any] = {"type": "string", "minLength": 1}


def _attributes(properties: dict[str, Any], required: tuple[str, ...] = (), **extra: Any) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = list(required)
    schema.update(extra)
    return schema


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="create_file",
        description="Create or overwrite a file with the tag body.",
        attributes=_attributes({"path": _PATH}, ("path",)),
        has_body=True,
        is_write=True,
    ),
    ToolSpec(
        name="edit_file",
        description="Replace, insert after or delete a 1-based inclusive line range.",
        attributes=_attributes(
            {
                "path": _PATH,
                "start": _LINE_NUMBER,
                "end": _LINE_NUMBER,
                "mode": {"type": "string"},
            },
            ("path", "end", "mode"),
            **{
                "if": {"properties": {"mode": {"const": "insert_after"}}},
                "else": {"required": ["start"]},
            },
        ),
        has_body=True,
        is_write=True,
    ),
    ToolSpec(
        name="delete_file",
        description="Delete a file; deleting a missing file is not an error.",
        attributes=_attributes({"path": _PATH}, ("path",)),
        is_write=True,
    ),
    ToolSpec(
        name="move_file",
        description="Rename a file without overwriting an existing destination.",
        attributes=_attributes({"path": _PATH, "new_path": _PATH}, ("path", "new_path")),
        is_write=True,
    ),
    ToolSpec(
        name="read_file",
        description="Read a line range, optionally prefixed with line numbers.",
        attributes=_attributes(
            {
                "path": _PATH,
                "start": _LINE_NUMBER,
                "end": _LINE_NUMBER,
                "line_numbers": {"type": "string"},
            },
            ("path",),
        ),
    ),
    ToolSpec(name="list_files", description="List every project path."),
    ToolSpec(name="preview", description="Rebuild and reload the preview surface."),
    ToolSpec(name="take_screenshot", description="Capture the preview surface as an image."),
    ToolSpec(
        name="ask",
        description="Ask the user a question and end the turn.",
        kind=ToolKind.INTERRUPT,
        has_body=True,
    ),
    ToolSpec(
        name="finish",
        description="Report completion and end the turn.",
        kind=ToolKind.INTERRUPT,
        has_body=True,
    ),
    ToolSpec(name="thinking", description="Private reasoning.", kind=ToolKind.ANNOTATION, has_body=True),
    ToolSpec(name="plan", description="Plan of upcoming steps.", kind=ToolKind.ANNOTATION, has_body=True),
    ToolSpec(name="report", description="Progress report for the user.", kind=ToolKind.ANNOTATION, has_body=True),
)

IMMEDIATE_TAGS: tuple[str, ...] = tuple(spec.name for spec in TOOL_SPECS if spec.kind == ToolKind.IMMEDIATE)
INTERRUPT_TAGS: tuple[str, ...] = tuple(spec.name for spec in TOOL_SPECS if spec.kind == ToolKind.INTERRUPT)
ANNOTATION_TAGS: tuple[str, ...] = tuple(spec.name for spec in TOOL_SPECS if spec.kind == ToolKind.ANNOTATION)

_SPECS_BY_NAME = {spec.name: spec for spec in TOOL_SPECS}


def spec_for(name: str) -> ToolSpec:
    return _SPECS_BY_NAME[name]
