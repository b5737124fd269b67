"""Value types produced by the tool orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..markup.nodes import MarkupNode
from ..tools.types import ToolResult

__all__ = ["InterruptDescriptor", "ExecutionPlan", "ExecutionOutcome"]


@dataclass(slots=True, frozen=True)
class InterruptDescriptor:
    """An ``ask`` or ``finish`` request that ends the turn's tool phase."""

    kind: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "value": self.value}


@dataclass(slots=True)
class ExecutionPlan:
    """Immediate operations in execution order plus the honored interrupt."""

    operations: list[MarkupNode] = field(default_factory=list)
    interrupt: MarkupNode | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "operations": [node.to_dict() for node in self.operations],
            "interrupt": self.interrupt.to_dict() if self.interrupt is not None else None,
        }


@dataclass(slots=True)
class ExecutionOutcome:
    """Results of one ``execute`` call, in execution order."""

    results: list[ToolResult] = field(default_factory=list)
    interrupt: InterruptDescriptor | None = None

    @property
    def failed(self) -> list[ToolResult]:
        return [result for result in self.results if not result.ok]

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "interrupt": self.interrupt.to_dict() if self.interrupt is not None else None,
        }
