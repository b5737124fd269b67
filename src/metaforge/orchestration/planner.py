"""Classification and safe ordering of parsed tool invocations.

Edits addressed by line number are applied bottom-up within each file so
that an applied edit never shifts the lines a later edit refers to.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..markup.nodes import MarkupItem, MarkupNode
from ..tools.registry import ToolRegistry
from ..tools.types import ToolKind
from .types import ExecutionPlan

__all__ = [
    "EDIT_TAG",
    "INTERRUPT_PRECEDENCE",
    "PRECEDENCE_FIRST",
    "PRECEDENCE_LAST",
    "build_plan",
    "edit_sort_key",
    "reorder_edits",
]

LOGGER = logging.getLogger(__name__)

EDIT_TAG = "edit_file"

PRECEDENCE_FIRST = "first"
PRECEDENCE_LAST = "last"

# The last interrupt in document order wins.
INTERRUPT_PRECEDENCE = PRECEDENCE_LAST


def build_plan(
    tree: Iterable[MarkupItem],
    registry: ToolRegistry,
    *,
    interrupt_precedence: str = INTERRUPT_PRECEDENCE,
) -> ExecutionPlan:
    """Split the top level of ``tree`` into immediate operations and one interrupt.

    Strings, annotation tags and unknown tags are dropped.
    """

    if interrupt_precedence not in (PRECEDENCE_FIRST, PRECEDENCE_LAST):
        raise ValueError(f"Unknown interrupt precedence: {interrupt_precedence!r}")

    operations: list[MarkupNode] = []
    interrupts: list[MarkupNode] = []
    for item in tree:
        if not isinstance(item, MarkupNode):
            continue
        kind = registry.kind_of(item.tag)
        if kind == ToolKind.INTERRUPT:
            interrupts.append(item)
        elif kind == ToolKind.IMMEDIATE:
            operations.append(item)
        elif kind is None:
            LOGGER.debug("Ignoring unrecognized tag <%s>", item.tag)

    interrupt: MarkupNode | None = None
    if interrupts:
        interrupt = interrupts[0] if interrupt_precedence == PRECEDENCE_FIRST else interrupts[-1]
        if len(interrupts) > 1:
            LOGGER.info(
                "%d interrupts in one response; honoring <%s> (%s wins)",
                len(interrupts),
                interrupt.tag,
                interrupt_precedence,
            )

    return ExecutionPlan(operations=reorder_edits(operations), interrupt=interrupt)


def edit_sort_key(node: MarkupNode) -> tuple[str, int]:
    """Key ordering edits by path ascending, then anchor line descending.

    The anchor is ``start``; an ``insert_after`` edit without ``start``
    anchors on ``end``, the same line its handler inserts after.
    """

    path = node.attributes.get("path") or ""
    raw = node.attributes.get("start")
    if raw is None and node.attributes.get("mode") == "insert_after":
        raw = node.attributes.get("end")
    try:
        anchor = int((raw or "0").strip())
    except ValueError:
        anchor = 0
    return (path, -anchor)


def reorder_edits(operations: Sequence[MarkupNode]) -> list[MarkupNode]:
    """Sort the ``edit_file`` nodes and splice them in at the first edit's slot.

    Every other node keeps its relative position.
    """

    edits = [node for node in operations if node.tag == EDIT_TAG]
    if not edits:
        return list(operations)

    first_edit = next(index for index, node in enumerate(operations) if node.tag == EDIT_TAG)
    others = [node for node in operations if node.tag != EDIT_TAG]
    edits.sort(key=edit_sort_key)
    return [*others[:first_edit], *edits, *others[first_edit:]]
