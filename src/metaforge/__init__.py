"""Markup engine that turns agent responses into ordered project file operations."""

__all__ = ["__version__"]

__version__ = "0.1.0"
