"""Markup tool vocabulary, handlers and error types.

Example:
    from metaforge.tools import ToolContext, build_default_registry

    registry = build_default_registry()
    registry.kind_of("edit_file")  # -> "immediate"
"""

from .errors import (
    DestinationExistsError,
    ErrorCode,
    InvalidParameterError,
    MissingParameterError,
    OperationCancelledError,
    ParseRecoveryWarning,
    PathNotFoundError,
    ScreenshotCaptureError,
    ScreenshotTimeoutError,
    ScreenshotUnavailableError,
    SurfaceUnavailableError,
    ToolError,
    ToolExecutionError,
    UnknownEditModeError,
)
from .registry import DuplicateToolError, ToolNotFoundError, ToolRegistration, ToolRegistry
from .types import STATUS_ERROR, STATUS_SUCCESS, SimpleTool, ToolContext, ToolKind, ToolResult, ToolSpec
from .vocabulary import ANNOTATION_TAGS, IMMEDIATE_TAGS, INTERRUPT_TAGS, TOOL_SPECS, spec_for
from .wiring import DEFAULT_HANDLERS, build_default_registry

__all__ = [
    # errors.py
    "DestinationExistsError",
    "ErrorCode",
    "InvalidParameterError",
    "MissingParameterError",
    "OperationCancelledError",
    "ParseRecoveryWarning",
    "PathNotFoundError",
    "ScreenshotCaptureError",
    "ScreenshotTimeoutError",
    "ScreenshotUnavailableError",
    "SurfaceUnavailableError",
    "ToolError",
    "ToolExecutionError",
    "UnknownEditModeError",
    # registry.py
    "DuplicateToolError",
    "ToolNotFoundError",
    "ToolRegistration",
    "ToolRegistry",
    # types.py
    "STATUS_ERROR",
    "STATUS_SUCCESS",
    "SimpleTool",
    "ToolContext",
    "ToolKind",
    "ToolResult",
    "ToolSpec",
    # vocabulary.py
    "ANNOTATION_TAGS",
    "IMMEDIATE_TAGS",
    "INTERRUPT_TAGS",
    "TOOL_SPECS",
    "spec_for",
    # wiring.py
    "DEFAULT_HANDLERS",
    "build_default_registry",
]
