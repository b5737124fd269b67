"""Core types shared by the markup tools and the orchestrator."""

from __future__ import annotations

import asyncio
import base64
import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Union

from .errors import ToolError

if TYPE_CHECKING:  # pragma: no cover
    from ..markup.nodes import MarkupNode
    from ..preview.screenshot import RenderSurface
    from ..project.file_store import VirtualFileStore

__all__ = [
    "ToolKind",
    "ToolSpec",
    "ToolResult",
    "ToolContext",
    "ToolHandler",
    "SimpleTool",
    "STATUS_SUCCESS",
    "STATUS_ERROR",
]

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


# -----------------------------------------------------------------------------
# Tool Kinds
# -----------------------------------------------------------------------------


class ToolKind:
    """How the orchestrator treats a recognized tag."""

    IMMEDIATE = "immediate"
    INTERRUPT = "interrupt"
    ANNOTATION = "annotation"


# -----------------------------------------------------------------------------
# Tool Specification
# -----------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ToolSpec:
    """Specification for one tag of the markup vocabulary.

    Attributes:
        name: Tag name as written by the agent.
        description: Human-readable description of what the tag does.
        kind: One of the :class:`ToolKind` values.
        attributes: JSON Schema for the tag's attribute mapping.
        has_body: Whether the tag's content carries meaningful text.
        is_write: Whether the tag mutates the file store.
    """

    name: str
    description: str
    kind: str = ToolKind.IMMEDIATE
    attributes: Mapping[str, Any] = field(default_factory=dict)
    has_body: bool = False
    is_write: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "kind": self.kind,
            "attributes": dict(self.attributes) if self.attributes else {},
            "has_body": self.has_body,
            "is_write": self.is_write,
        }


# -----------------------------------------------------------------------------
# Tool Result
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class ToolResult:
    """Outcome of one executed immediate tag.

    Attributes:
        status: ``"success"`` or ``"error"``.
        tag: The tag that produced the result.
        message: Full text fed back to the agent.
        summary: Short human-facing line.
        payload: Image bytes for screenshots.
        error: The error behind an error result.
    """

    status: str
    tag: str
    message: str
    summary: str = ""
    payload: bytes | None = None
    error: ToolError | None = field(default=None, repr=False)

    @classmethod
    def success(
        cls,
        tag: str,
        message: str,
        *,
        summary: str = "",
        payload: bytes | None = None,
    ) -> "ToolResult":
        return cls(STATUS_SUCCESS, tag, message, summary or message, payload)

    @classmethod
    def failure(cls, tag: str, error: ToolError) -> "ToolResult":
        return cls(STATUS_ERROR, tag, error.message, f"Error <{tag}>: {error.message}", None, error)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS

    def log_line(self) -> str:
        """Render the line injected into the agent's next prompt."""

        if self.ok:
            return f"[{self.tag}] {self.message}"
        return f"[System Error] <{self.tag}>: {self.message}"

    def payload_base64(self) -> str | None:
        if self.payload is None:
            return None
        return base64.b64encode(self.payload).decode("ascii")

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": self.status,
            "tag": self.tag,
            "message": self.message,
            "summary": self.summary,
        }
        if self.payload is not None:
            result["payload_bytes"] = len(self.payload)
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result


# -----------------------------------------------------------------------------
# Tool Context
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class ToolContext:
    """Runtime collaborators handed to every tool handler.

    Attributes:
        store: The project's virtual file store.
        surface: Optional render surface for preview and screenshots.
        screenshot_timeout: Seconds to wait for a capture answer.
        settle_delay: Seconds to wait after the preview settles before capturing.
        cancel_event: Optional caller signal that aborts a pending capture.
    """

    store: "VirtualFileStore"
    surface: "RenderSurface | None" = None
    screenshot_timeout: float = 8.0
    settle_delay: float = 0.5
    cancel_event: asyncio.Event | None = None


# -----------------------------------------------------------------------------
# Tool Handlers
# -----------------------------------------------------------------------------

ToolHandler = Callable[["MarkupNode", ToolContext], Union[ToolResult, Awaitable[ToolResult]]]


@dataclass
class SimpleTool:
    """Tool implementation wrapping a sync or async handler."""

    spec: ToolSpec
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.spec.name

    async def execute(self, node: "MarkupNode", context: ToolContext) -> ToolResult:
        result = self.handler(node, context)
        if inspect.isawaitable(result):
            result = await result
        return result
