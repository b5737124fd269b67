"""Render surface protocol and the screenshot round trip."""

from .screenshot import (
    DEFAULT_CAPTURE_TIMEOUT,
    CaptureError,
    CaptureMessage,
    CaptureResult,
    CaptureState,
    RenderSurface,
    ScreenshotRequest,
    capture_screenshot,
    decode_image_data,
)

__all__ = [
    "DEFAULT_CAPTURE_TIMEOUT",
    "CaptureError",
    "CaptureMessage",
    "CaptureResult",
    "CaptureState",
    "RenderSurface",
    "ScreenshotRequest",
    "capture_screenshot",
    "decode_image_data",
]
