"""Shared test helpers and stub classes.

This module contains reusable test stubs that are used across multiple test files.
Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

import asyncio
import base64
from typing import Callable

from metaforge.preview.screenshot import CaptureError, CaptureMessage, CaptureResult

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


class FakeRenderSurface:
    """Render surface stub that answers capture requests from a script.

    ``reply`` is sent back for every capture request. With ``reply=None`` the
    surface stays silent until :meth:`answer` is called, which lets tests
    exercise timeouts and late deliveries.

    Example:
        from tests.helpers import FakeRenderSurface, PNG_DATA_URL

        surface = FakeRenderSurface(CaptureResult(PNG_DATA_URL))
    """

    def __init__(self, reply: CaptureMessage | None = None, *, deferred: bool = True) -> None:
        self.reply = reply
        self.deferred = deferred
        self.reload_count = 0
        self.capture_requests = 0
        self.pending: list[Callable[[CaptureMessage], bool]] = []
        self.events: list[str] = []

    async def reload(self) -> None:
        self.reload_count += 1
        self.events.append("reload")

    def request_capture(self, reply: Callable[[CaptureMessage], bool]) -> None:
        self.capture_requests += 1
        self.events.append("capture")
        if self.reply is None:
            self.pending.append(reply)
            return
        if self.deferred:
            asyncio.get_running_loop().call_soon(reply, self.reply)
        else:
            reply(self.reply)

    def answer(self, message: CaptureMessage) -> list[bool]:
        """Deliver ``message`` to every capture request still waiting."""

        return [reply(message) for reply in self.pending]


def success_surface() -> FakeRenderSurface:
    return FakeRenderSurface(CaptureResult(PNG_DATA_URL))


def failing_surface(message: str = "canvas is tainted") -> FakeRenderSurface:
    return FakeRenderSurface(CaptureError(message))


def silent_surface() -> FakeRenderSurface:
    return FakeRenderSurface(None)
