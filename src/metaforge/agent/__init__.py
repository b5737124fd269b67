"""Turn processing for the agent loop."""

from .turn import (
    EXCLUDED_TAGS,
    Annotation,
    TurnOutcome,
    TurnProcessor,
    collect_annotations,
    format_tool_outputs,
)

__all__ = [
    "EXCLUDED_TAGS",
    "Annotation",
    "TurnOutcome",
    "TurnProcessor",
    "collect_annotations",
    "format_tool_outputs",
]
