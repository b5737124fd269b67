"""Registry of the tags the orchestrator understands.

Every tag of the vocabulary has a :class:`ToolSpec`; immediate tags also
carry a handler. Attribute mappings are validated against the tag's JSON
Schema before a handler runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from .errors import InvalidParameterError, MissingParameterError, ToolError
from .types import SimpleTool, ToolHandler, ToolKind, ToolSpec

__all__ = [
    "ToolRegistry",
    "ToolRegistration",
    "DuplicateToolError",
    "ToolNotFoundError",
]

LOGGER = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------


class DuplicateToolError(Exception):
    """Raised when attempting to register a tag that already exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' is already registered")


class ToolNotFoundError(Exception):
    """Raised when a requested tag is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' not found")


# -----------------------------------------------------------------------------
# Tool Registration
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class ToolRegistration:
    """Record of a registered tag.

    Attributes:
        spec: Tag specification.
        tool: Handler wrapper; ``None`` for interrupt and annotation tags.
        enabled: Whether the tag is currently honored.
        validator: Compiled attribute schema validator.
    """

    spec: ToolSpec
    tool: SimpleTool | None = None
    enabled: bool = True
    validator: Draft202012Validator | None = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.spec.name


# -----------------------------------------------------------------------------
# Tool Registry
# -----------------------------------------------------------------------------


class ToolRegistry:
    """Registry for managing the tag vocabulary.

    Example:
        registry = ToolRegistry()
        registry.register(
            ToolSpec(name="list_files", description="List project files"),
            handler=lambda node, context: ToolResult.success("list_files", "..."),
        )
        registry.kind_of("list_files")  # -> "immediate"
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolRegistration] = {}

    def register(
        self,
        spec: ToolSpec,
        handler: ToolHandler | None = None,
        *,
        enabled: bool = True,
        allow_override: bool = False,
    ) -> ToolRegistration:
        """Register a tag spec and, for immediate tags, its handler.

        Raises:
            DuplicateToolError: If the tag exists and ``allow_override`` is False.
            ValueError: If an immediate tag has no handler.
        """
        if spec.name in self._tools and not allow_override:
            raise DuplicateToolError(spec.name)
        if spec.kind == ToolKind.IMMEDIATE and handler is None:
            raise ValueError(f"Immediate tool '{spec.name}' requires a handler")

        validator = None
        if spec.attributes:
            Draft202012Validator.check_schema(spec.attributes)
            validator = Draft202012Validator(spec.attributes)

        registration = ToolRegistration(
            spec=spec,
            tool=SimpleTool(spec=spec, handler=handler) if handler is not None else None,
            enabled=enabled,
            validator=validator,
        )
        self._tools[spec.name] = registration
        LOGGER.debug("Registered %s tag '%s'", spec.kind, spec.name)
        return registration

    def unregister(self, name: str) -> None:
        if self._tools.pop(name, None) is None:
            raise ToolNotFoundError(name)

    def get(self, name: str) -> ToolRegistration | None:
        """Return the enabled registration for ``name`` or ``None``."""
        registration = self._tools.get(name)
        if registration is None or not registration.enabled:
            return None
        return registration

    def require(self, name: str) -> ToolRegistration:
        registration = self.get(name)
        if registration is None:
            raise ToolNotFoundError(name)
        return registration

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def kind_of(self, name: str) -> str | None:
        """Return the tag's kind, or ``None`` for unknown or disabled tags."""
        registration = self.get(name)
        return registration.spec.kind if registration is not None else None

    def set_enabled(self, name: str, enabled: bool) -> None:
        self.require_any(name).enabled = enabled

    def require_any(self, name: str) -> ToolRegistration:
        registration = self._tools.get(name)
        if registration is None:
            raise ToolNotFoundError(name)
        return registration

    def list_names(self, kind: str | None = None) -> list[str]:
        """List enabled tag names, optionally restricted to one kind."""
        return sorted(
            name
            for name, registration in self._tools.items()
            if registration.enabled and (kind is None or registration.spec.kind == kind)
        )

    def validate(self, name: str, attributes: Mapping[str, Any]) -> None:
        """Check ``attributes`` against the tag's schema.

        Raises:
            MissingParameterError: A required attribute is absent.
            InvalidParameterError: An attribute has an invalid value.
        """
        registration = self.require(name)
        if registration.validator is None:
            return
        issue = best_match(registration.validator.iter_errors(dict(attributes)))
        if issue is None:
            return
        raise _error_from_issue(name, issue)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)


def _error_from_issue(tag: str, issue: Any) -> ToolError:
    if issue.validator == "required":
        instance = issue.instance if isinstance(issue.instance, Mapping) else {}
        missing = next((name for name in issue.validator_value if name not in instance), None)
        return MissingParameterError(
            message=f"<{tag}> requires the '{missing}' attribute",
            parameter=missing,
        )
    parameter = str(issue.absolute_path[0]) if issue.absolute_path else None
    label = f"'{parameter}' attribute" if parameter else "attributes"
    return InvalidParameterError(
        message=f"<{tag}> has an invalid {label}: {issue.message}",
        parameter=parameter,
        value=issue.instance,
        expected=str(issue.validator_value),
    )
