"""Tests for the tool error hierarchy."""

from __future__ import annotations

from metaforge.tools.errors import (
    DestinationExistsError,
    ErrorCode,
    InvalidParameterError,
    MissingParameterError,
    OperationCancelledError,
    PathNotFoundError,
    ScreenshotTimeoutError,
    ScreenshotUnavailableError,
    SurfaceUnavailableError,
    ToolError,
    ToolExecutionError,
)


def test_errors_are_exceptions_with_message_as_str() -> None:
    error = PathNotFoundError(message="File not found: a.txt", path="a.txt")

    assert isinstance(error, Exception)
    assert str(error) == "File not found: a.txt"
    assert error.args == ("File not found: a.txt",)


def test_path_not_found_to_dict() -> None:
    error = PathNotFoundError(message="File not found: a.txt", path="a.txt")

    assert error.to_dict() == {
        "error": ErrorCode.PATH_NOT_FOUND,
        "message": "File not found: a.txt",
        "suggestion": "Use list_files to see the available paths",
        "path": "a.txt",
    }


def test_destination_exists_carries_path() -> None:
    error = DestinationExistsError(path="b.txt")

    assert error.error_code == ErrorCode.DESTINATION_EXISTS
    assert error.to_dict()["path"] == "b.txt"


def test_screenshot_errors_use_short_messages() -> None:
    assert str(ScreenshotUnavailableError()) == "No preview window"
    assert str(ScreenshotTimeoutError(timeout_seconds=8.0)) == "Screenshot timeout"
    assert ScreenshotTimeoutError(timeout_seconds=8.0).to_dict()["timeout_seconds"] == 8.0


def test_screenshot_unavailable_is_a_surface_error() -> None:
    assert isinstance(ScreenshotUnavailableError(), SurfaceUnavailableError)


def test_parameter_errors_to_dict() -> None:
    missing = MissingParameterError(message="<move_file> requires the 'new_path' attribute", parameter="new_path")
    invalid = InvalidParameterError(parameter="start", value="abc", expected="integer")

    assert missing.to_dict()["parameter"] == "new_path"
    assert invalid.to_dict()["value"] == "'abc'"
    assert invalid.to_dict()["expected"] == "integer"


def test_cancelled_error_reason() -> None:
    error = OperationCancelledError(reason="user stopped the turn")

    assert error.to_dict()["reason"] == "user stopped the turn"


def test_execution_error_wraps_arbitrary_exceptions() -> None:
    cause = KeyError("path")
    error = ToolExecutionError.wrap("create_file", cause)

    assert error.cause is cause
    assert error.tool_name == "create_file"
    assert error.to_dict()["tool"] == "create_file"


def test_execution_error_uses_type_name_for_empty_message() -> None:
    error = ToolExecutionError.wrap("preview", RuntimeError())

    assert error.message == "RuntimeError"


def test_base_error_to_dict_omits_empty_fields() -> None:
    bare = ToolError(error_code="custom", message="boom")
    full = ToolError(error_code="custom", message="boom", details={"k": 1}, suggestion="retry")

    assert bare.to_dict() == {"error": "custom", "message": "boom"}
    assert full.to_dict() == {"error": "custom", "message": "boom", "details": {"k": 1}, "suggestion": "retry"}
