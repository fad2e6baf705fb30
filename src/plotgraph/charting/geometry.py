"""Per-kind geometry builders.

Each builder turns a normalized dataset into declarative shape descriptors
(markers, polyline, bars, arcs, labels, legend swatches), axis descriptors and
side-table rows. Nothing here touches pixels; the drawing backend does that.

Identity keys are ``(kind, family, identity)``. Bars are identified by their
category label (plus an occurrence ordinal when a label repeats); everything
else by record index. Because the kind is part of the key, shapes of
different chart kinds never reconcile with each other.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from plotgraph.config import settings

from .normalize import format_value, numeric_value
from .palette import DEFAULT_SCHEMES, ColorAssignment, series_color
from .registry import chart_registry, register_chart_type
from .responsive import legend_visible
from .scales import TAU, BandScale, ChartScales, LinearScale, build_scales
from .types import (
    ArcSlice,
    AxisKeys,
    AxisSpec,
    BarRect,
    ChartGeometry,
    ChartKind,
    ChartRequest,
    ChartResult,
    Frame,
    LegendSwatch,
    Marker,
    Polyline,
    Record,
    Shape,
    TableRow,
    TextLabel,
    Tick,
)

__all__ = ["render", "table_rows", "percent_of"]

_logger = logging.getLogger(__name__)

# Absorbs float error so that exact fractions (e.g. 1/2) do not floor to 49%
_PERCENT_EPS = 1e-9


def render(
    kind: ChartKind,
    data: Sequence[Record],
    keys: AxisKeys,
    frame: Frame,
    options: Optional[dict] = None,
) -> ChartGeometry:
    """Single entry point: build the geometry for ``kind`` via the registry."""
    result = chart_registry.build(ChartRequest(kind=kind, data=data, keys=keys, frame=frame, options=options))
    _logger.debug(
        "Built %s geometry: %d shapes in %.2f ms", kind.value, len(result.geometry.shapes), result.meta["build_ms"]
    )
    return result.geometry


def percent_of(part: float, whole: float) -> int:
    """Whole percent, rounded down."""
    return int(math.floor(part / whole * 100 + _PERCENT_EPS))


def _colors(req: ChartRequest) -> ColorAssignment:
    scheme = (req.options or {}).get("scheme") or DEFAULT_SCHEMES[req.kind]
    return ColorAssignment(len(req.data), scheme=scheme)


def _empty(req: ChartRequest) -> ChartResult:
    return ChartResult(geometry=ChartGeometry(kind=req.kind, frame=req.frame), meta={"empty": True})


def table_rows(
    data: Sequence[Record], keys: AxisKeys, colors: ColorAssignment, *, with_percentage: bool = False
) -> Tuple[TableRow, ...]:
    total = 0.0
    weights: List[float] = []
    if with_percentage:
        for record in data:
            v = numeric_value(record[keys.y])
            weights.append(v if v is not None and v > 0 else 0.0)
        total = sum(weights)
    rows = []
    for i, record in enumerate(data):
        pct: Optional[int] = None
        if with_percentage and total > 0:
            pct = percent_of(weights[i], total)
        rows.append(TableRow(x_value=record[keys.x], y_value=record[keys.y], percentage=pct, color=colors(i)))
    return tuple(rows)


def _linear_ticks(scale: LinearScale) -> Tuple[Tick, ...]:
    return tuple(Tick(value=t, label=format_value(t), position=scale(t)) for t in scale.ticks())


def _band_ticks(scale: BandScale) -> Tuple[Tick, ...]:
    return tuple(Tick(value=label, label=label, position=scale.center(label) or 0.0) for label in scale.domain)


def _cartesian_axes(scales: ChartScales, keys: AxisKeys, frame: Frame) -> Tuple[AxisSpec, ...]:
    x_scale = scales.x
    x_ticks = _band_ticks(x_scale) if isinstance(x_scale, BandScale) else _linear_ticks(x_scale)  # type: ignore[arg-type]
    y_ticks = _linear_ticks(scales.y) if scales.y is not None else ()
    return (
        AxisSpec(orient="bottom", ticks=x_ticks, length=frame.width, title=f"x-axis: {keys.x}"),
        AxisSpec(orient="left", ticks=y_ticks, length=frame.height, title=f"y-axis: {keys.y}"),
    )


def _markers(req: ChartRequest, scales: ChartScales, colors: ColorAssignment) -> List[Shape]:
    x, y = req.keys.x, req.keys.y
    return [
        Marker(
            key=(req.kind.value, "marker", i),
            index=i,
            record=record,
            cx=scales.x(record[x]),  # type: ignore[misc]
            cy=scales.y(record[y]),  # type: ignore[misc]
            r=settings.MARKER_RADIUS,
            fill=colors(i),
        )
        for i, record in enumerate(req.data)
    ]


# ---------------- Scatter ---------------------------------------------------


def _scatter_builder(req: ChartRequest) -> ChartResult:
    if not req.data:
        return _empty(req)
    scales = build_scales(req.kind, req.data, req.keys, req.frame)
    colors = _colors(req)
    geometry = ChartGeometry(
        kind=req.kind,
        frame=req.frame,
        shapes=tuple(_markers(req, scales, colors)),
        axes=_cartesian_axes(scales, req.keys, req.frame),
        table=table_rows(req.data, req.keys, colors),
        show_table=True,
    )
    return ChartResult(geometry=geometry, meta={"points": len(req.data)})


# ---------------- Line ------------------------------------------------------


def _line_builder(req: ChartRequest) -> ChartResult:
    if not req.data:
        return _empty(req)
    scales = build_scales(req.kind, req.data, req.keys, req.frame)
    colors = _colors(req)
    markers = _markers(req, scales, colors)
    # path and markers share one coordinate list
    path = Polyline(
        key=(req.kind.value, "path", 0),
        index=0,
        record=None,
        points=tuple((m.cx, m.cy) for m in markers),  # type: ignore[union-attr]
        stroke=series_color(0),
        stroke_width=settings.LINE_STROKE_WIDTH,
    )
    geometry = ChartGeometry(
        kind=req.kind,
        frame=req.frame,
        shapes=(path, *markers),
        axes=_cartesian_axes(scales, req.keys, req.frame),
        table=table_rows(req.data, req.keys, colors),
    )
    return ChartResult(geometry=geometry, meta={"points": len(markers)})


# ---------------- Bar -------------------------------------------------------


def _bar_builder(req: ChartRequest) -> ChartResult:
    if not req.data:
        return _empty(req)
    scales = build_scales(req.kind, req.data, req.keys, req.frame)
    band: BandScale = scales.x  # type: ignore[assignment]
    y_scale = scales.y
    if y_scale is None:
        return _empty(req)
    colors = _colors(req)
    baseline = req.frame.height
    occurrences: Counter = Counter()
    bars: List[Shape] = []
    for i, record in enumerate(req.data):
        label = format_value(record[req.keys.x])
        ordinal = occurrences[label]
        occurrences[label] += 1
        top = y_scale(record[req.keys.y])
        bars.append(
            BarRect(
                key=(req.kind.value, "bar", (label, ordinal)),
                index=i,
                record=record,
                x=band(label) or 0.0,
                y=min(top, baseline),
                width=band.bandwidth,
                height=abs(baseline - top),
                fill=colors(i),
            )
        )
    geometry = ChartGeometry(
        kind=req.kind,
        frame=req.frame,
        shapes=tuple(bars),
        axes=_cartesian_axes(scales, req.keys, req.frame),
        table=table_rows(req.data, req.keys, colors),
    )
    return ChartResult(geometry=geometry, meta={"bars": len(bars), "categories": len(band.domain)})


# ---------------- Pie -------------------------------------------------------


def _pie_builder(req: ChartRequest) -> ChartResult:
    if not req.data:
        return _empty(req)
    scales = build_scales(req.kind, req.data, req.keys, req.frame)
    colors = _colors(req)
    frame = req.frame
    cx, cy = frame.width / 2, frame.height / 2
    outer = max(0.0, min(frame.width, frame.height) / 2 - settings.PIE_RADIUS_INSET)
    kind = req.kind.value

    arcs: List[Shape] = []
    labels: List[Shape] = []
    if any(end > start for start, end in scales.angles):
        for i, (record, (start, end)) in enumerate(zip(req.data, scales.angles)):
            arcs.append(
                ArcSlice(
                    key=(kind, "arc", i),
                    index=i,
                    record=record,
                    cx=cx,
                    cy=cy,
                    start_angle=start,
                    end_angle=end,
                    inner_radius=0.0,
                    outer_radius=outer,
                    fill=colors(i),
                )
            )
            mid = (start + end) / 2
            r = outer / 2
            labels.append(
                TextLabel(
                    key=(kind, "label", i),
                    index=i,
                    record=record,
                    x=cx + math.sin(mid) * r,
                    y=cy - math.cos(mid) * r,
                    text=f"{percent_of(end - start, TAU)}%",
                )
            )
    else:
        _logger.debug("Pie total for '%s' is not positive; no slices emitted", req.keys.y)

    show_legend = legend_visible(frame)
    legend: List[Shape] = []
    if show_legend:
        for i, record in enumerate(req.data):
            legend.append(
                LegendSwatch(
                    key=(kind, "legend", i),
                    index=i,
                    record=record,
                    x=frame.width - settings.LEGEND_RIGHT_INSET,
                    y=settings.LEGEND_TOP + i * settings.LEGEND_ROW_HEIGHT,
                    size=settings.LEGEND_SWATCH_SIZE,
                    fill=colors(i),
                    label=format_value(record[req.keys.x]),
                )
            )

    geometry = ChartGeometry(
        kind=req.kind,
        frame=frame,
        shapes=(*arcs, *labels, *legend),
        table=table_rows(req.data, req.keys, colors, with_percentage=True),
        show_table=True,
        legend_visible=show_legend,
    )
    return ChartResult(geometry=geometry, meta={"slices": len(arcs)})


register_chart_type(ChartKind.SCATTER, _scatter_builder, "Scatter plot, one marker per record")
register_chart_type(ChartKind.LINE, _line_builder, "Polyline through all records with point markers")
register_chart_type(ChartKind.BAR, _bar_builder, "Bar chart over category bands")
register_chart_type(ChartKind.PIE, _pie_builder, "Full pie with percentage labels and legend")
