"""Classification, ordering and execution of parsed tool invocations.

Example:
    from metaforge.markup import parse
    from metaforge.orchestration import ToolOrchestrator
    from metaforge.project import VirtualFileStore

    orchestrator = ToolOrchestrator(VirtualFileStore())
    outcome = await orchestrator.execute(parse(response, True, ["create_file", "edit_file"]))
"""

from .orchestrator import OrchestratorConfig, ToolOrchestrator
from .planner import (
    EDIT_TAG,
    INTERRUPT_PRECEDENCE,
    PRECEDENCE_FIRST,
    PRECEDENCE_LAST,
    build_plan,
    edit_sort_key,
    reorder_edits,
)
from .types import ExecutionOutcome, ExecutionPlan, InterruptDescriptor

__all__ = [
    # orchestrator.py
    "OrchestratorConfig",
    "ToolOrchestrator",
    # planner.py
    "EDIT_TAG",
    "INTERRUPT_PRECEDENCE",
    "PRECEDENCE_FIRST",
    "PRECEDENCE_LAST",
    "build_plan",
    "edit_sort_key",
    "reorder_edits",
    # types.py
    "ExecutionOutcome",
    "ExecutionPlan",
    "InterruptDescriptor",
]
