"""Tests for the screenshot round trip state machine."""

from __future__ import annotations

import asyncio

import pytest

from metaforge.preview import (
    CaptureError,
    CaptureResult,
    CaptureState,
    RenderSurface,
    ScreenshotRequest,
    capture_screenshot,
    decode_image_data,
)
from metaforge.tools.errors import (
    OperationCancelledError,
    ScreenshotCaptureError,
    ScreenshotTimeoutError,
    ScreenshotUnavailableError,
)
from tests.helpers import PNG_BYTES, PNG_DATA_URL, FakeRenderSurface, failing_surface, silent_surface, success_surface


class TestDecodeImageData:
    def test_data_url(self) -> None:
        assert decode_image_data(PNG_DATA_URL) == PNG_BYTES

    def test_bare_base64(self) -> None:
        assert decode_image_data(PNG_DATA_URL.split(",", 1)[1]) == PNG_BYTES

    def test_invalid_payload(self) -> None:
        with pytest.raises(ScreenshotCaptureError):
            decode_image_data("data:image/png;base64,***not base64***")


class TestScreenshotRequest:
    @pytest.mark.asyncio
    async def test_result_delivered_before_wait(self) -> None:
        request = ScreenshotRequest(timeout=1.0)

        assert request.deliver(CaptureResult(PNG_DATA_URL))
        image = await request.wait()

        assert image == PNG_BYTES
        assert request.state is CaptureState.SUCCEEDED

    @pytest.mark.asyncio
    async def test_error_message_is_reported(self) -> None:
        request = ScreenshotRequest(timeout=1.0)
        request.deliver(CaptureError("canvas is tainted"))

        with pytest.raises(ScreenshotCaptureError, match="canvas is tainted"):
            await request.wait()

        assert request.state is CaptureState.FAILED

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        request = ScreenshotRequest(timeout=0.01)

        with pytest.raises(ScreenshotTimeoutError) as excinfo:
            await request.wait()

        assert str(excinfo.value) == "Screenshot timeout"
        assert request.state is CaptureState.TIMED_OUT

    @pytest.mark.asyncio
    async def test_late_delivery_after_timeout_is_ignored(self) -> None:
        request = ScreenshotRequest(timeout=0.01)
        with pytest.raises(ScreenshotTimeoutError):
            await request.wait()

        assert request.deliver(CaptureResult(PNG_DATA_URL)) is False
        assert request.state is CaptureState.TIMED_OUT

    @pytest.mark.asyncio
    async def test_second_delivery_is_ignored(self) -> None:
        request = ScreenshotRequest(timeout=1.0)

        assert request.deliver(CaptureResult(PNG_DATA_URL))
        assert not request.deliver(CaptureError("late"))
        assert await request.wait() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_cancel_event_aborts_wait(self) -> None:
        request = ScreenshotRequest(timeout=5.0)
        cancel_event = asyncio.Event()
        asyncio.get_running_loop().call_soon(cancel_event.set)

        with pytest.raises(OperationCancelledError):
            await request.wait(cancel_event)

        assert request.state is CaptureState.CANCELLED

    @pytest.mark.asyncio
    async def test_unrelated_message_is_not_consumed(self) -> None:
        request = ScreenshotRequest(timeout=1.0)

        assert request.deliver("ping") is False  # type: ignore[arg-type]
        assert request.state is CaptureState.PENDING
        request.cancel("test over")
        with pytest.raises(OperationCancelledError):
            await request.wait()


class TestCaptureScreenshot:
    def test_fake_surface_satisfies_protocol(self) -> None:
        assert isinstance(FakeRenderSurface(), RenderSurface)

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        surface = success_surface()

        image = await capture_screenshot(surface, timeout=1.0)

        assert image == PNG_BYTES
        assert surface.capture_requests == 1

    @pytest.mark.asyncio
    async def test_synchronous_reply(self) -> None:
        surface = FakeRenderSurface(CaptureResult(PNG_DATA_URL), deferred=False)

        assert await capture_screenshot(surface, timeout=1.0) == PNG_BYTES

    @pytest.mark.asyncio
    async def test_surface_error(self) -> None:
        with pytest.raises(ScreenshotCaptureError, match="canvas is tainted"):
            await capture_screenshot(failing_surface(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_silent_surface_times_out_and_late_answer_is_dropped(self) -> None:
        surface = silent_surface()

        with pytest.raises(ScreenshotTimeoutError):
            await capture_screenshot(surface, timeout=0.01)

        assert surface.answer(CaptureResult(PNG_DATA_URL)) == [False]

    @pytest.mark.asyncio
    async def test_no_surface(self) -> None:
        with pytest.raises(ScreenshotUnavailableError, match="No preview window"):
            await capture_screenshot(None)
