"""Handlers for the tags that drive the external render surface."""

from __future__ import annotations

import asyncio
import logging

from ..markup.nodes import MarkupNode
from ..preview import screenshot
from .errors import ScreenshotUnavailableError, SurfaceUnavailableError
from .types import ToolContext, ToolResult

__all__ = ["preview", "take_screenshot"]

LOGGER = logging.getLogger(__name__)


async def preview(node: MarkupNode, context: ToolContext) -> ToolResult:
    if context.surface is None:
        raise SurfaceUnavailableError()
    await context.surface.reload()
    return ToolResult.success(node.tag, "Refreshed.", summary="Preview refreshed")


async def take_screenshot(node: MarkupNode, context: ToolContext) -> ToolResult:
    surface = context.surface
    if surface is None:
        raise ScreenshotUnavailableError()
    await surface.reload()
    if context.settle_delay > 0:
        await asyncio.sleep(context.settle_delay)
    image = await screenshot.capture_screenshot(
        surface,
        timeout=context.screenshot_timeout,
        cancel_event=context.cancel_event,
    )
    return ToolResult.success(node.tag, "Captured.", summary="Screenshot captured", payload=image)
