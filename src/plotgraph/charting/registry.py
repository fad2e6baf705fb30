"""Chart registry.

Maps each :class:`ChartKind` to the geometry builder that draws it, so the
rest of the pipeline dispatches through one ``build`` call instead of
branching per kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Callable, Dict, Optional

from .errors import UnknownChartKindError
from .types import ChartKind, ChartRequest, ChartResult

Builder = Callable[[ChartRequest], ChartResult]


@dataclass
class ChartType:
    """Metadata for a registered chart kind."""

    kind: ChartKind
    builder: Builder
    description: str


class ChartRegistry:
    def __init__(self) -> None:
        self._types: Dict[ChartKind, ChartType] = {}

    def register(self, kind: ChartKind, builder: Builder, description: str) -> None:
        if kind in self._types:
            raise ValueError(f"Chart kind already registered: {kind.value}")
        self._types[kind] = ChartType(kind, builder, description)

    def unregister(self, kind: ChartKind) -> Optional[ChartType]:
        return self._types.pop(kind, None)

    def build(self, req: ChartRequest) -> ChartResult:
        """Eagerly build the requested geometry and record build duration (ms)."""
        ct = self._types.get(req.kind)
        if ct is None:
            raise UnknownChartKindError(f"Unknown chart kind: {req.kind}")
        start = perf_counter()
        result = ct.builder(req)
        elapsed = (perf_counter() - start) * 1000.0
        # Do not override if builder already set build_ms
        result.meta.setdefault("build_ms", elapsed)
        return result

    def list_types(self) -> Dict[str, str]:
        return {k.value: v.description for k, v in self._types.items()}

    def __contains__(self, kind: object) -> bool:
        return kind in self._types


chart_registry = ChartRegistry()


def register_chart_type(kind: ChartKind, builder: Builder, description: str) -> None:
    chart_registry.register(kind, builder, description)
