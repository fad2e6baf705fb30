"""Width adaptation for chart frames.

Rules (initial simple set):
    - Each kind prefers a 700 px outer width. When the viewport is narrower
      than the kind's breakpoint (700 px cartesian, 800 px pie), the plot
      area takes the viewport width minus left and right margins instead.
    - Hide the legend if the plot width is below ``MIN_LEGEND_WIDTH``.

Heights are fixed per kind; there is no vertical breakpoint logic.
"""

from __future__ import annotations

from typing import Dict, Tuple

from plotgraph.config import settings

from .types import ChartKind, Frame, Margin

__all__ = ["compute_frame", "legend_visible"]

_MARGINS: Dict[ChartKind, Tuple[int, int, int, int]] = {
    ChartKind.SCATTER: settings.SCATTER_MARGIN,
    ChartKind.LINE: settings.LINE_MARGIN,
    ChartKind.BAR: settings.BAR_MARGIN,
    ChartKind.PIE: settings.PIE_MARGIN,
}


def compute_frame(kind: ChartKind, viewport_width: float) -> Frame:
    margin = Margin(*_MARGINS[kind])
    if kind is ChartKind.PIE:
        breakpoint_px = settings.PIE_BREAKPOINT
        outer_height = settings.PIE_OUTER_HEIGHT
    else:
        breakpoint_px = settings.CARTESIAN_BREAKPOINT
        outer_height = settings.CARTESIAN_OUTER_HEIGHT
    base = viewport_width if viewport_width < breakpoint_px else settings.PREFERRED_OUTER_WIDTH
    width = max(0.0, float(base - margin.left - margin.right))
    height = float(outer_height - margin.top - margin.bottom)
    return Frame(width=width, height=height, margin=margin)


def legend_visible(frame: Frame) -> bool:
    return frame.width >= settings.MIN_LEGEND_WIDTH
