"""
Custom exception hierarchy for mindmap-layout.

Every error carries optional context and suggestions that are folded into
the formatted message, so callers can print ``str(err)`` directly.

Example::

    from mindmap_layout.exceptions import GraphContractError

    raise GraphContractError(
        "Edge references a node with no layout cell",
        context={"source": 3, "target": 7},
        suggestions=["Add node 7 to the graph before creating the edge"],
    )
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class MindMapLayoutError(Exception):
    """
    Base exception for all mindmap-layout errors.

    Attributes:
        context: Dictionary of contextual information (node index, sizes, etc.)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class ValidationError(MindMapLayoutError):
    """
    Input validation failed with one or more errors.

    Collects all problems instead of failing on the first one.

    Example::

        raise ValidationError(
            ["nodes[2]: missing 'index'", "edges[0]: unknown target 9"],
            context={"file": "map.json"},
        )

    Attributes:
        errors: List of individual validation error messages
    """

    def __init__(
        self,
        errors: List[str],
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.errors = errors
        message = f"Validation failed with {len(errors)} error(s):\n"
        message += "\n".join(f"  {i + 1}. {e}" for i, e in enumerate(errors))
        super().__init__(message, context, suggestions)


class GraphContractError(MindMapLayoutError):
    """
    The graph collaborator broke its contract.

    Raised when an edge references a node index that has no node (or no
    layout cell). This is a malformed graph, never a recoverable condition.
    """

    pass


class LayoutGeometryError(MindMapLayoutError):
    """
    Layout geometry cannot be derived from the inputs.

    Raised for a non-positive aspect ratio, a negative minimum edge length,
    or a zero aggregate node footprint.
    """

    pass


class OptimizerStateError(MindMapLayoutError):
    """
    Optimizer operation called out of order.

    Example::

        raise OptimizerStateError(
            "optimize() called before initialize()",
            suggestions=["Call initialize(aspect_ratio, min_edge_length) first"],
        )
    """

    pass


class ConfigurationError(MindMapLayoutError):
    """
    Configuration or settings error.

    Raised when annealing schedule values are invalid.
    """

    pass


__all__ = [
    "MindMapLayoutError",
    "ValidationError",
    "GraphContractError",
    "LayoutGeometryError",
    "OptimizerStateError",
    "ConfigurationError",
]
