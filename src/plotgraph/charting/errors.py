"""Error types raised by the charting pipeline.

Only programming errors escape the pipeline. Data problems (empty input,
missing keys, textual values on a numeric axis, degenerate domains) degrade
to an empty or zero-extent chart instead of raising.
"""

from __future__ import annotations

__all__ = ["ChartError", "MixedValueTypesError", "UnknownChartKindError"]


class ChartError(Exception):
    """Base class for charting errors."""


class MixedValueTypesError(ChartError, TypeError):
    """Raised when ordering would compare values of different kinds (number, text, other)."""

    def __init__(self, key: str, left: object, right: object) -> None:
        super().__init__(
            f"Cannot order column '{key}': mixed value types {type(left).__name__!s} "
            f"and {type(right).__name__!s} ({left!r} vs {right!r})"
        )
        self.key = key
        self.left = left
        self.right = right


class UnknownChartKindError(ChartError, KeyError):
    """Raised when no geometry builder is registered for a chart kind."""
