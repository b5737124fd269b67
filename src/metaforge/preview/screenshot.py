"""Screenshot round trip with an externally owned render surface.

A capture is modelled as a small state machine::

    PENDING -> SUCCEEDED | FAILED | TIMED_OUT | CANCELLED

The orchestrator asks the surface to capture itself and hands it a reply
callback. The surface answers with :class:`CaptureResult` or
:class:`CaptureError`; anything arriving after a terminal state is ignored.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, Union, runtime_checkable

from ..tools.errors import (
    OperationCancelledError,
    ScreenshotCaptureError,
    ScreenshotTimeoutError,
    ScreenshotUnavailableError,
    ToolError,
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

LOGGER = logging.getLogger(__name__)

DEFAULT_CAPTURE_TIMEOUT = 8.0


@dataclass(slots=True, frozen=True)
class CaptureResult:
    """Successful capture; ``data`` is a data URL or bare base64 text."""

    data: str


@dataclass(slots=True, frozen=True)
class CaptureError:
    """Capture failure reported by the render surface."""

    message: str


CaptureMessage = Union[CaptureResult, CaptureError]


@runtime_checkable
class RenderSurface(Protocol):
    """Preview surface owned outside the core (an iframe, a headless browser...)."""

    async def reload(self) -> None:
        """Rebuild and reload the preview, returning once it has settled."""
        ...

    def request_capture(self, reply: Callable[[CaptureMessage], None]) -> None:
        """Ask the surface to capture itself and answer through ``reply``."""
        ...


class CaptureState(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self is not CaptureState.PENDING


class ScreenshotRequest:
    """One outstanding capture request.

    Must be created while an event loop is running. ``deliver`` may be called
    before ``wait`` starts; the first terminal message wins.
    """

    def __init__(self, timeout: float = DEFAULT_CAPTURE_TIMEOUT) -> None:
        self.timeout = timeout
        self._state = CaptureState.PENDING
        self._future: asyncio.Future[bytes] = asyncio.get_running_loop().create_future()

    @property
    def state(self) -> CaptureState:
        return self._state

    def deliver(self, message: CaptureMessage) -> bool:
        """Feed a message from the surface; returns ``True`` if it was consumed."""

        if self._state.terminal:
            LOGGER.debug("Ignoring %s after capture reached %s", type(message).__name__, self._state.value)
            return False
        if isinstance(message, CaptureResult):
            try:
                image = decode_image_data(message.data)
            except ScreenshotCaptureError as exc:
                self._fail(CaptureState.FAILED, exc)
                return True
            self._state = CaptureState.SUCCEEDED
            self._future.set_result(image)
            return True
        if isinstance(message, CaptureError):
            self._fail(CaptureState.FAILED, ScreenshotCaptureError(message=message.message or "Screenshot failed"))
            return True
        LOGGER.debug("Ignoring unrelated surface message %r", message)
        return False

    def cancel(self, reason: str | None = None) -> None:
        if not self._state.terminal:
            self._fail(CaptureState.CANCELLED, OperationCancelledError(message="Screenshot cancelled", reason=reason))

    async def wait(self, cancel_event: asyncio.Event | None = None) -> bytes:
        """Wait for the surface's answer, the timeout or ``cancel_event``.

        Raises:
            ScreenshotCaptureError: The surface reported an error.
            ScreenshotTimeoutError: No answer within ``timeout`` seconds.
            OperationCancelledError: ``cancel_event`` was set first.
        """

        waiters: set[asyncio.Future] = {self._future}
        cancel_task: asyncio.Task | None = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)
        try:
            done, _ = await asyncio.wait(waiters, timeout=self.timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if cancel_task is not None and not cancel_task.done():
                cancel_task.cancel()

        if self._future.done():
            return self._future.result()
        if cancel_task is not None and cancel_task in done:
            self.cancel("cancel signal set")
        else:
            self._fail(
                CaptureState.TIMED_OUT,
                ScreenshotTimeoutError(timeout_seconds=self.timeout),
            )
        return self._future.result()

    def _fail(self, state: CaptureState, error: ToolError) -> None:
        self._state = state
        self._future.set_exception(error)


def decode_image_data(data: str) -> bytes:
    """Decode a ``data:`` URL or bare base64 payload into image bytes."""

    payload = data.split(",", 1)[1] if data.startswith("data:") and "," in data else data
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ScreenshotCaptureError(message=f"Invalid image data: {exc}") from exc


async def capture_screenshot(
    surface: RenderSurface | None,
    *,
    timeout: float = DEFAULT_CAPTURE_TIMEOUT,
    cancel_event: asyncio.Event | None = None,
) -> bytes:
    """Run one capture round trip against ``surface`` and return the image."""

    if surface is None:
        raise ScreenshotUnavailableError()
    request = ScreenshotRequest(timeout=timeout)
    LOGGER.debug("Requesting screenshot (timeout=%.1fs)", timeout)
    surface.request_capture(request.deliver)
    image = await request.wait(cancel_event)
    LOGGER.debug("Screenshot captured (%d bytes)", len(image))
    return image
