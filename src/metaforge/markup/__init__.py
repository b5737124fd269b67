"""LPML-style markup parsing for agent responses."""

from .nodes import MarkupItem, MarkupNode, ParseContext
from .parser import parse, parse_attributes

__all__ = [
    "MarkupItem",
    "MarkupNode",
    "ParseContext",
    "parse",
    "parse_attributes",
]
