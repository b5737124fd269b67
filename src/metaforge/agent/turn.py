"""Processing of one complete agent response into tool results."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Sequence

from ..markup.nodes import MarkupItem, MarkupNode
from ..markup.parser import parse
from ..orchestration.orchestrator import OrchestratorConfig, ToolOrchestrator
from ..orchestration.types import InterruptDescriptor
from ..preview.screenshot import RenderSurface
from ..project.file_store import VirtualFileStore
from ..tools.registry import ToolRegistry
from ..tools.types import ToolKind, ToolResult
from ..tools.vocabulary import ANNOTATION_TAGS

if TYPE_CHECKING:  # pragma: no cover
    from ..services.settings import Settings

__all__ = [
    "EXCLUDED_TAGS",
    "Annotation",
    "TurnOutcome",
    "TurnProcessor",
    "collect_annotations",
    "format_tool_outputs",
]

LOGGER = logging.getLogger(__name__)

# Bodies of these tags are file content and are never parsed as markup.
EXCLUDED_TAGS: tuple[str, ...] = ("create_file", "edit_file")


def format_tool_outputs(results: Sequence[ToolResult]) -> str:
    """Render results as the ``<tool_outputs>`` block fed into the next prompt."""

    if not results:
        return ""
    body = "\n".join(result.log_line() for result in results)
    return f"<tool_outputs>\n{body}\n</tool_outputs>"


@dataclass(slots=True, frozen=True)
class Annotation:
    """A ``thinking``/``plan``/``report`` block surfaced for display only."""

    kind: str
    label: str | None
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "label": self.label, "text": self.text}


def collect_annotations(tree: Iterable[MarkupItem], registry: ToolRegistry | None = None) -> list[Annotation]:
    annotations: list[Annotation] = []
    for item in tree:
        if not isinstance(item, MarkupNode):
            continue
        if registry is not None:
            is_annotation = registry.kind_of(item.tag) == ToolKind.ANNOTATION
        else:
            is_annotation = item.tag in ANNOTATION_TAGS
        if is_annotation:
            annotations.append(Annotation(item.tag, item.attributes.get("label"), item.text().strip()))
    return annotations


@dataclass(slots=True)
class TurnOutcome:
    """Everything the agent loop needs after one response was processed.

    Attributes:
        results: Tool results in execution order.
        interrupt: The honored ``ask``/``finish`` request, if any.
        tool_log: The ``<tool_outputs>`` block for the next prompt.
        summaries: Short human-facing lines, one per result.
        attachments: Screenshot images to attach to the next prompt.
        annotations: Display-only annotation blocks in document order.
    """

    results: list[ToolResult] = field(default_factory=list)
    interrupt: InterruptDescriptor | None = None
    tool_log: str = ""
    summaries: list[str] = field(default_factory=list)
    attachments: list[bytes] = field(default_factory=list)
    annotations: list[Annotation] = field(default_factory=list)

    @property
    def should_continue(self) -> bool:
        """True when the loop should send the tool log back to the agent."""
        return self.interrupt is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "interrupt": self.interrupt.to_dict() if self.interrupt is not None else None,
            "tool_log": self.tool_log,
            "summaries": list(self.summaries),
            "attachments": len(self.attachments),
            "annotations": [annotation.to_dict() for annotation in self.annotations],
            "should_continue": self.should_continue,
        }


class TurnProcessor:
    """Parses an agent response and runs its tool invocations."""

    def __init__(
        self,
        store: VirtualFileStore,
        *,
        surface: RenderSurface | None = None,
        registry: ToolRegistry | None = None,
        config: OrchestratorConfig | None = None,
        trim_text: bool = True,
        excluded_tags: Sequence[str] = EXCLUDED_TAGS,
    ) -> None:
        self._orchestrator = ToolOrchestrator(store, surface=surface, registry=registry, config=config)
        self._trim_text = trim_text
        self._excluded_tags = tuple(excluded_tags)

    @classmethod
    def from_settings(
        cls, store: VirtualFileStore, settings: "Settings", *, surface: RenderSurface | None = None
    ) -> "TurnProcessor":
        return cls(
            store,
            surface=surface,
            config=OrchestratorConfig.from_settings(settings),
            trim_text=settings.trim_text,
            excluded_tags=settings.excluded_tags,
        )

    @property
    def orchestrator(self) -> ToolOrchestrator:
        return self._orchestrator

    def parse(self, response_text: str) -> list[MarkupItem]:
        return parse(response_text, self._trim_text, self._excluded_tags)

    async def process(self, response_text: str, *, cancel_event: asyncio.Event | None = None) -> TurnOutcome:
        tree = self.parse(response_text)
        outcome = await self._orchestrator.execute(tree, cancel_event=cancel_event)
        turn = TurnOutcome(
            results=outcome.results,
            interrupt=outcome.interrupt,
            tool_log=format_tool_outputs(outcome.results),
            summaries=[result.summary for result in outcome.results],
            attachments=[result.payload for result in outcome.results if result.payload is not None],
            annotations=collect_annotations(tree, self._orchestrator.registry),
        )
        LOGGER.debug(
            "Turn processed: %d result(s), %d annotation(s), continue=%s",
            len(turn.results),
            len(turn.annotations),
            turn.should_continue,
        )
        return turn
