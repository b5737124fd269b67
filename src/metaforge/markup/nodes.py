"""Dataclasses describing parsed markup trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

__all__ = ["MarkupNode", "MarkupItem", "ParseContext", "ROOT_TAG"]

ROOT_TAG = "root"


@dataclass(slots=True)
class MarkupNode:
    """A single element in a parsed markup tree.

    ``content`` is ``None`` for self-closing elements and a (possibly empty)
    list of text and child elements otherwise.
    """

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    content: list[MarkupItem] | None = field(default_factory=list)

    @property
    def is_self_closing(self) -> bool:
        return self.content is None

    def children(self) -> Iterator[MarkupNode]:
        """Yield the direct child elements, skipping text."""

        for item in self.content or ():
            if isinstance(item, MarkupNode):
                yield item

    def text(self) -> str:
        """Return all descendant text concatenated in document order."""

        parts: list[str] = []
        for item in self.content or ():
            if isinstance(item, str):
                parts.append(item)
            else:
                parts.append(item.text())
        return "".join(parts)

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready representation of the node and its subtree."""

        content: list[Any] | None
        if self.content is None:
            content = None
        else:
            content = [item if isinstance(item, str) else item.to_dict() for item in self.content]
        return {"tag": self.tag, "attributes": dict(self.attributes), "content": content}


MarkupItem = Union[MarkupNode, str]


@dataclass(slots=True)
class ParseContext:
    """Transient state used while a single document is parsed.

    The stack always holds the root sentinel at the bottom; its content is the
    resulting tree.
    """

    root: MarkupNode = field(default_factory=lambda: MarkupNode(ROOT_TAG))
    stack: list[MarkupNode] = field(default_factory=list)
    protected: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.stack:
            self.stack.append(self.root)

    @property
    def top(self) -> MarkupNode:
        return self.stack[-1]

    def append(self, item: MarkupItem) -> None:
        content = self.top.content
        assert content is not None  # only open elements are pushed
        content.append(item)

    def open(self, node: MarkupNode) -> None:
        self.append(node)
        self.stack.append(node)

    def find_open(self, tag: str) -> int:
        """Return the stack index of the innermost open ``tag`` or -1.

        The root sentinel is never a candidate.
        """

        for index in range(len(self.stack) - 1, 0, -1):
            if self.stack[index].tag == tag:
                return index
        return -1

    def close_to(self, index: int) -> None:
        """Pop the frame at ``index`` and everything opened after it."""

        del self.stack[max(1, index):]
