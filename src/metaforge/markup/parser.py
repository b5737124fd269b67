"""Permissive parser for the LPML-style tags agents emit in their replies.

The parser is a stack machine over regex-located tokens. It never raises:
malformed markup degrades to literal text. Each unmatched closing tag is
logged at WARNING and issued as a
:class:`~metaforge.tools.errors.ParseRecoveryWarning`.
"""

from __future__ import annotations

import logging
import re
import uuid
import warnings
from typing import Collection

from ..tools.errors import ParseRecoveryWarning
from .nodes import MarkupItem, MarkupNode, ParseContext

__all__ = [
    "parse",
    "protect",
    "restore",
    "parse_attributes",
    "ATTRIBUTE_RE",
    "TAG_RE",
    "PROTECT_RE",
]

LOGGER = logging.getLogger(__name__)

_ATTRIBUTE = r""" [^"'/<> -]+=(?:"[^"]*"|'[^']*')"""
_NAME = r"[^/>\s]+"

ATTRIBUTE_RE = re.compile(r""" ([^"'/<> -]+)=(?:"([^"]*)"|'([^']*)')""")

TAG_RE = re.compile(
    rf"(?P<start><(?P<start_name>{_NAME})(?P<start_attrs>(?:{_ATTRIBUTE})*)\s*>)"
    rf"|(?P<end></(?P<end_name>{_NAME})\s*>)"
    rf"|(?P<empty><(?P<empty_name>{_NAME})(?P<empty_attrs>(?:{_ATTRIBUTE})*)\s*/>)"
)

# Code spans, HTML comments and declarations are shielded from tag scanning.
PROTECT_RE = re.compile(r"`.*?`|<!--.*?-->|<!.*?>", re.DOTALL)

_PLACEHOLDER_PREFIX = "__PROTECTED_"
_PLACEHOLDER_RE = re.compile(r"__PROTECTED_[0-9a-f]{32}__")


def parse(
    text: str,
    trim_text: bool = False,
    excluded_tags: Collection[str] = (),
) -> list[MarkupItem]:
    """Parse ``text`` into an ordered tree of markup nodes and strings.

    Args:
        text: Raw agent output.
        trim_text: Strip whitespace around text spans and drop spans that
            become empty.
        excluded_tags: Tags whose bodies are captured as raw text up to the
            first end tag of the same name.

    Returns:
        The content of the virtual root element.
    """

    context = ParseContext()
    protected_text = protect(text, context.protected)
    excluded = frozenset(excluded_tags)

    cursor = 0
    active_exclusion: str | None = None

    for match in TAG_RE.finditer(protected_text):
        if active_exclusion is not None:
            if match.group("end") is not None and match.group("end_name") == active_exclusion:
                active_exclusion = None
            else:
                continue

        _append_text(context, protected_text[cursor:match.start()], trim_text)
        cursor = match.end()

        if match.group("start") is not None:
            name = match.group("start_name")
            if name in excluded:
                active_exclusion = name
            context.open(MarkupNode(name, parse_attributes(match.group("start_attrs")), []))
        elif match.group("empty") is not None:
            name = match.group("empty_name")
            context.append(MarkupNode(name, parse_attributes(match.group("empty_attrs")), None))
        else:
            name = match.group("end_name")
            index = context.find_open(name)
            if index == -1:
                _warn_unmatched(name)
                context.append(match.group(0))
            else:
                context.close_to(index)

    _append_text(context, protected_text[cursor:], trim_text)

    tree = context.root.content or []
    return restore(tree, context.protected)


def parse_attributes(text: str | None) -> dict[str, str]:
    """Extract ``name="value"`` pairs from the attribute part of a tag."""

    attributes: dict[str, str] = {}
    if not text:
        return attributes
    for match in ATTRIBUTE_RE.finditer(text):
        name, double_quoted, single_quoted = match.groups()
        attributes[name] = double_quoted if double_quoted is not None else single_quoted
    return attributes


def protect(text: str, mapping: dict[str, str]) -> str:
    """Replace protected regions with opaque placeholders recorded in ``mapping``."""

    def _substitute(match: re.Match[str]) -> str:
        placeholder = f"{_PLACEHOLDER_PREFIX}{uuid.uuid4().hex}__"
        mapping[placeholder] = match.group(0)
        return placeholder

    return PROTECT_RE.sub(_substitute, text)


def restore(tree: list[MarkupItem], mapping: dict[str, str]) -> list[MarkupItem]:
    """Put protected regions back into text nodes and attribute values."""

    if not mapping:
        return tree
    restored: list[MarkupItem] = []
    for item in tree:
        if isinstance(item, str):
            restored.append(_restore_string(item, mapping))
            continue
        item.attributes = {key: _restore_string(value, mapping) for key, value in item.attributes.items()}
        if item.content is not None:
            item.content = restore(item.content, mapping)
        restored.append(item)
    return restored


def _restore_string(text: str, mapping: dict[str, str]) -> str:
    if _PLACEHOLDER_PREFIX not in text:
        return text
    return _PLACEHOLDER_RE.sub(lambda match: mapping.get(match.group(0), match.group(0)), text)


def _append_text(context: ParseContext, text: str, trim_text: bool) -> None:
    if trim_text:
        text = text.strip()
    if text:
        context.append(text)


def _warn_unmatched(name: str) -> None:
    message = f"Unmatched closing tag </{name}> found."
    LOGGER.warning(message)
    warnings.warn(message, ParseRecoveryWarning, stacklevel=3)
