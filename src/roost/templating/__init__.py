"""Templating — kida integration and the ``Template`` return type."""

from roost.templating.returns import Template

__all__ = ["Template"]
