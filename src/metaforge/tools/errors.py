"""Standardized error types for markup tools.

This module provides a hierarchy of error classes with consistent
dictionary serialization for tool results fed back to the agent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# -----------------------------------------------------------------------------
# Error Code Constants
# -----------------------------------------------------------------------------

class ErrorCode:
    """Constants for error codes used in tool results."""

    # File store errors
    PATH_NOT_FOUND = "path_not_found"
    DESTINATION_EXISTS = "destination_exists"
    UNKNOWN_EDIT_MODE = "unknown_edit_mode"

    # Render surface errors
    SURFACE_UNAVAILABLE = "surface_unavailable"
    SCREENSHOT_UNAVAILABLE = "screenshot_unavailable"
    SCREENSHOT_TIMEOUT = "screenshot_timeout"
    SCREENSHOT_FAILED = "screenshot_failed"
    OPERATION_CANCELLED = "operation_cancelled"

    # General errors
    TOOL_EXECUTION = "tool_execution"
    INVALID_PARAMETER = "invalid_parameter"
    MISSING_PARAMETER = "missing_parameter"


# -----------------------------------------------------------------------------
# Base Error Class
# -----------------------------------------------------------------------------

@dataclass
class ToolError(Exception):
    """Base exception class for all tool errors.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
        suggestion: Actionable guidance for recovery.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result

    def __str__(self) -> str:
        return self.message


# -----------------------------------------------------------------------------
# File Store Errors
# -----------------------------------------------------------------------------

@dataclass
class PathNotFoundError(ToolError):
    """Error raised when a path is not present in the file store."""

    error_code: str = field(default=ErrorCode.PATH_NOT_FOUND)
    message: str = field(default="File not found")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Use list_files to see the available paths")

    path: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.path is not None:
            result["path"] = self.path
        return result


@dataclass
class DestinationExistsError(ToolError):
    """Error raised when a move would overwrite an existing file."""

    error_code: str = field(default=ErrorCode.DESTINATION_EXISTS)
    message: str = field(default="Destination already exists")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Delete it first if you want to overwrite")

    path: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.path is not None:
            result["path"] = self.path
        return result


@dataclass
class UnknownEditModeError(ToolError):
    """Error raised when an edit mode is not one of the supported modes."""

    error_code: str = field(default=ErrorCode.UNKNOWN_EDIT_MODE)
    message: str = field(default="Unknown edit mode")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Use one of: replace, insert_after, delete")

    mode: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.mode is not None:
            result["mode"] = self.mode
        return result


# -----------------------------------------------------------------------------
# Render Surface Errors
# -----------------------------------------------------------------------------

@dataclass
class SurfaceUnavailableError(ToolError):
    """Error raised when no render surface is attached."""

    error_code: str = field(default=ErrorCode.SURFACE_UNAVAILABLE)
    message: str = field(default="No preview surface is attached")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="")


@dataclass
class ScreenshotUnavailableError(SurfaceUnavailableError):
    """Error raised when a screenshot is requested without a render surface."""

    error_code: str = field(default=ErrorCode.SCREENSHOT_UNAVAILABLE)
    message: str = field(default="No preview window")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="")


@dataclass
class ScreenshotTimeoutError(ToolError):
    """Error raised when the render surface does not answer a capture request."""

    error_code: str = field(default=ErrorCode.SCREENSHOT_TIMEOUT)
    message: str = field(default="Screenshot timeout")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Call preview and retry once the page has loaded")

    timeout_seconds: float | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.timeout_seconds is not None:
            result["timeout_seconds"] = self.timeout_seconds
        return result


@dataclass
class ScreenshotCaptureError(ToolError):
    """Error raised when the render surface reports a capture failure."""

    error_code: str = field(default=ErrorCode.SCREENSHOT_FAILED)
    message: str = field(default="Screenshot capture failed")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="")


@dataclass
class OperationCancelledError(ToolError):
    """Error raised when an operation was cancelled by the caller."""

    error_code: str = field(default=ErrorCode.OPERATION_CANCELLED)
    message: str = field(default="Operation was cancelled")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="")

    reason: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.reason is not None:
            result["reason"] = self.reason
        return result


# -----------------------------------------------------------------------------
# General Errors
# -----------------------------------------------------------------------------

@dataclass
class InvalidParameterError(ToolError):
    """Error raised when a tag attribute value is invalid."""

    error_code: str = field(default=ErrorCode.INVALID_PARAMETER)
    message: str = field(default="Invalid parameter value")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Check the attribute requirements")

    parameter: str | None = field(default=None)
    value: Any = field(default=None)
    expected: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.parameter is not None:
            result["parameter"] = self.parameter
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.expected is not None:
            result["expected"] = self.expected
        return result


@dataclass
class MissingParameterError(ToolError):
    """Error raised when a required tag attribute is missing."""

    error_code: str = field(default=ErrorCode.MISSING_PARAMETER)
    message: str = field(default="Required parameter is missing")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Provide the required attribute")

    parameter: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.parameter is not None:
            result["parameter"] = self.parameter
        return result


@dataclass
class ToolExecutionError(ToolError):
    """Catch-all wrapper for unexpected failures inside a single tool."""

    error_code: str = field(default=ErrorCode.TOOL_EXECUTION)
    message: str = field(default="Tool execution failed")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="")

    tool_name: str = field(default="")
    cause: BaseException | None = field(default=None, repr=False)

    @classmethod
    def wrap(cls, tool_name: str, exc: BaseException) -> "ToolExecutionError":
        """Wrap an arbitrary exception raised by ``tool_name``."""
        return cls(message=str(exc) or type(exc).__name__, tool_name=tool_name, cause=exc)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.tool_name:
            result["tool"] = self.tool_name
        return result


# -----------------------------------------------------------------------------
# Parser Diagnostics
# -----------------------------------------------------------------------------

class ParseRecoveryWarning(UserWarning):
    """Non-fatal diagnostic emitted when the parser recovers from bad markup."""


__all__ = [
    "ErrorCode",
    "ToolError",
    "PathNotFoundError",
    "DestinationExistsError",
    "UnknownEditModeError",
    "SurfaceUnavailableError",
    "ScreenshotUnavailableError",
    "ScreenshotTimeoutError",
    "ScreenshotCaptureError",
    "OperationCancelledError",
    "InvalidParameterError",
    "MissingParameterError",
    "ToolExecutionError",
    "ParseRecoveryWarning",
]
