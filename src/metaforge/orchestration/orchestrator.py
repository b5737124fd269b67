"""Tool orchestrator for parsed agent responses.

This module provides the ToolOrchestrator class that classifies the nodes
of a parsed response, orders them safely, runs them one at a time against
the project's file store and collects one result per operation.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from ..markup.nodes import MarkupItem, MarkupNode
from ..preview.screenshot import DEFAULT_CAPTURE_TIMEOUT, RenderSurface
from ..project.file_store import VirtualFileStore
from ..tools.errors import ToolError, ToolExecutionError
from ..tools.registry import ToolRegistry
from ..tools.types import ToolContext, ToolResult
from ..tools.wiring import build_default_registry
from .planner import INTERRUPT_PRECEDENCE, PRECEDENCE_FIRST, PRECEDENCE_LAST, build_plan
from .types import ExecutionOutcome, ExecutionPlan, InterruptDescriptor

if TYPE_CHECKING:  # pragma: no cover
    from ..services.settings import Settings

__all__ = ["OrchestratorConfig", "ToolOrchestrator"]

LOGGER = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Orchestrator Configuration
# -----------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class OrchestratorConfig:
    """Configuration for the tool orchestrator.

    Attributes:
        screenshot_timeout: Seconds to wait for the render surface's capture answer.
        settle_delay: Seconds to wait after the preview settles before capturing.
        interrupt_precedence: ``"last"`` or ``"first"`` interrupt wins.
        log_results: Whether to log full result messages (may be large).
    """

    screenshot_timeout: float = DEFAULT_CAPTURE_TIMEOUT
    settle_delay: float = 0.5
    interrupt_precedence: str = INTERRUPT_PRECEDENCE
    log_results: bool = False

    def __post_init__(self) -> None:
        if self.interrupt_precedence not in (PRECEDENCE_FIRST, PRECEDENCE_LAST):
            raise ValueError(
                f"interrupt_precedence must be {PRECEDENCE_LAST!r} or {PRECEDENCE_FIRST!r}, "
                f"got {self.interrupt_precedence!r}"
            )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "OrchestratorConfig":
        return cls(
            screenshot_timeout=settings.screenshot_timeout,
            settle_delay=settings.screenshot_settle_delay,
            interrupt_precedence=settings.interrupt_precedence,
            log_results=settings.debug_logging,
        )


# -----------------------------------------------------------------------------
# Tool Orchestrator
# -----------------------------------------------------------------------------


class ToolOrchestrator:
    """Runs the tool invocations of one parsed agent response.

    The orchestrator owns the store for the duration of :meth:`execute`;
    callers must not run two ``execute`` calls for the same project at once.

    Example:
        store = VirtualFileStore({"index.html": "<h1>Hi</h1>"})
        orchestrator = ToolOrchestrator(store)
        outcome = await orchestrator.execute(parse(response, True, EXCLUDED_TAGS))
    """

    def __init__(
        self,
        store: VirtualFileStore,
        *,
        surface: RenderSurface | None = None,
        registry: ToolRegistry | None = None,
        config: OrchestratorConfig | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: The project's file store.
            surface: Optional render surface for ``preview``/``take_screenshot``.
            registry: Tag registry; defaults to the full vocabulary.
            config: Optional orchestrator configuration.
        """
        self._store = store
        self._surface = surface
        self._registry = registry or build_default_registry()
        self._config = config or OrchestratorConfig()

    @property
    def store(self) -> VirtualFileStore:
        return self._store

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    def attach_surface(self, surface: RenderSurface | None) -> None:
        self._surface = surface

    def plan(self, tree: Iterable[MarkupItem]) -> ExecutionPlan:
        """Classify and order the top-level nodes of ``tree`` without running them."""
        return build_plan(tree, self._registry, interrupt_precedence=self._config.interrupt_precedence)

    async def execute(
        self,
        tree: Iterable[MarkupItem],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ExecutionOutcome:
        """Execute every immediate invocation in ``tree``.

        Operations run strictly one after another. A failing operation
        becomes an error result and the rest of the batch still runs.

        Args:
            tree: Output of :func:`metaforge.markup.parse`.
            cancel_event: Optional signal that aborts a pending screenshot.

        Returns:
            Results in execution order and the honored interrupt, if any.
        """
        plan = self.plan(tree)
        context = ToolContext(
            store=self._store,
            surface=self._surface,
            screenshot_timeout=self._config.screenshot_timeout,
            settle_delay=self._config.settle_delay,
            cancel_event=cancel_event,
        )

        results: list[ToolResult] = []
        for node in plan.operations:
            results.append(await self.run(node, context))

        interrupt = None
        if plan.interrupt is not None:
            interrupt = InterruptDescriptor(kind=plan.interrupt.tag, value=plan.interrupt.text().strip())

        LOGGER.debug(
            "Executed %d operation(s), %d failed, interrupt=%s",
            len(results),
            sum(1 for result in results if not result.ok),
            interrupt.kind if interrupt else None,
        )
        return ExecutionOutcome(results=results, interrupt=interrupt)

    async def run(self, node: MarkupNode, context: ToolContext) -> ToolResult:
        """Run a single invocation, converting any failure into an error result."""
        start_time = time.perf_counter()
        try:
            registration = self._registry.require(node.tag)
            if registration.tool is None:
                raise ValueError(f"<{node.tag}> is not an executable tool")
            self._registry.validate(node.tag, node.attributes)
            result = await registration.tool.execute(node, context)
        except ToolError as exc:
            LOGGER.warning("Tool <%s> failed: %s", node.tag, exc)
            result = ToolResult.failure(node.tag, exc)
        except Exception as exc:
            LOGGER.exception("Exec Error <%s>", node.tag)
            result = ToolResult.failure(node.tag, ToolExecutionError.wrap(node.tag, exc))

        duration_ms = (time.perf_counter() - start_time) * 1000
        if self._config.log_results:
            LOGGER.debug("Tool <%s> %s in %.1fms: %s", node.tag, result.status, duration_ms, result.message)
        else:
            LOGGER.debug("Tool <%s> %s in %.1fms", node.tag, result.status, duration_ms)
        return result
