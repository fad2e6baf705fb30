"""Core charting types: chart kinds, shape descriptors and render contracts."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple, Union

Value = Union[int, float, str]
Record = Mapping[str, Value]
Dataset = Sequence[Record]
ShapeKey = Tuple[str, str, Any]
Point = Tuple[float, float]


class ChartKind(str, Enum):
    SCATTER = "scatter"
    LINE = "line"
    BAR = "bar"
    PIE = "pie"


# Fallback order used when the active kind must be re-chosen
PRIORITY_ORDER: Tuple[ChartKind, ...] = (
    ChartKind.SCATTER,
    ChartKind.LINE,
    ChartKind.BAR,
    ChartKind.PIE,
)


@dataclass(frozen=True)
class AxisKeys:
    """The pair of column names feeding the x and y channels."""

    x: str
    y: str


@dataclass(frozen=True)
class Margin:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class Frame:
    """Drawing extent for one chart: plot area plus surrounding margins."""

    width: float
    height: float
    margin: Margin

    @property
    def outer_width(self) -> float:
        return self.width + self.margin.left + self.margin.right

    @property
    def outer_height(self) -> float:
        return self.height + self.margin.top + self.margin.bottom

    @property
    def origin(self) -> Point:
        return (self.margin.left, self.margin.top)


# ---------------------------------------------------------------------------
# Shape descriptors
#
# Every shape carries an identity key used for enter/update/exit matching, the
# index of its record within the normalized dataset and the record itself (for
# tooltip lookup). Coordinates are plot-area pixels, y growing downward.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Marker:
    key: ShapeKey
    index: int
    record: Optional[Record]
    cx: float
    cy: float
    r: float
    fill: str
    opacity: float = 1.0

    interactive = True

    def contains(self, x: float, y: float) -> bool:
        return math.hypot(x - self.cx, y - self.cy) <= self.r


@dataclass(frozen=True)
class Polyline:
    key: ShapeKey
    index: int
    record: Optional[Record]
    points: Tuple[Point, ...]
    stroke: str
    stroke_width: float = 2.0
    opacity: float = 1.0

    interactive = False


@dataclass(frozen=True)
class BarRect:
    key: ShapeKey
    index: int
    record: Optional[Record]
    x: float
    y: float
    width: float
    height: float
    fill: str
    opacity: float = 1.0

    interactive = True

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


@dataclass(frozen=True)
class ArcSlice:
    """Pie slice. Angles are radians, clockwise from twelve o'clock."""

    key: ShapeKey
    index: int
    record: Optional[Record]
    cx: float
    cy: float
    start_angle: float
    end_angle: float
    inner_radius: float
    outer_radius: float
    fill: str
    opacity: float = 1.0

    interactive = True

    @property
    def span(self) -> float:
        return self.end_angle - self.start_angle

    def contains(self, x: float, y: float) -> bool:
        dx, dy = x - self.cx, y - self.cy
        dist = math.hypot(dx, dy)
        if dist < self.inner_radius or dist > self.outer_radius:
            return False
        angle = math.atan2(dx, -dy) % (2 * math.pi)
        return self.start_angle <= angle < self.end_angle


@dataclass(frozen=True)
class TextLabel:
    key: ShapeKey
    index: int
    record: Optional[Record]
    x: float
    y: float
    text: str
    color: str = "#ffffff"
    font_size: float = 12.0
    opacity: float = 1.0

    interactive = False


@dataclass(frozen=True)
class LegendSwatch:
    key: ShapeKey
    index: int
    record: Optional[Record]
    x: float
    y: float
    size: float
    fill: str
    label: str
    font_size: float = 14.0
    opacity: float = 1.0

    interactive = False


Shape = Union[Marker, Polyline, BarRect, ArcSlice, TextLabel, LegendSwatch]


# ---------------------------------------------------------------------------
# Declarative axis / table descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tick:
    value: Value
    label: str
    position: float


@dataclass(frozen=True)
class AxisSpec:
    """An axis the backend should draw.

    ``orient`` is ``"bottom"`` (drawn along y = plot height) or ``"left"``
    (drawn along x = 0).
    """

    orient: str
    ticks: Tuple[Tick, ...]
    length: float
    title: str


@dataclass(frozen=True)
class TableRow:
    x_value: Value
    y_value: Value
    percentage: Optional[int]
    color: str


@dataclass(frozen=True)
class ChartGeometry:
    """Everything one chart kind produced for one render pass."""

    kind: Optional[ChartKind]
    frame: Frame
    shapes: Tuple[Shape, ...] = ()
    axes: Tuple[AxisSpec, ...] = ()
    table: Tuple[TableRow, ...] = ()
    show_table: bool = False
    legend_visible: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.shapes


@dataclass(frozen=True)
class ChartRequest:
    """Represents a logical chart request.

    Attributes:
        kind: Chart kind whose registered builder should run.
        data: Normalized dataset (already deduplicated and ordered).
        keys: Axis keys for the x and y channels.
        frame: Drawing extent.
        options: Optional rendering hints (e.g. ``scheme`` for colors).
    """

    kind: ChartKind
    data: Sequence[Record]
    keys: AxisKeys
    frame: Frame
    options: Optional[Dict[str, Any]] = None


@dataclass
class ChartResult:
    geometry: ChartGeometry
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TooltipState:
    visible: bool = False
    content: str = ""
    position: Point = (0.0, 0.0)


@dataclass(frozen=True)
class Scene:
    """One drawable frame handed to a :class:`RenderSurface`."""

    frame: Frame
    shapes: Tuple[Shape, ...]
    axes: Tuple[AxisSpec, ...] = ()
    legend_visible: bool = True
    hover_key: Optional[ShapeKey] = None
    tooltip: TooltipState = TooltipState()


class RenderSurface(Protocol):  # pragma: no cover - structural only
    """Protocol all drawing surfaces must implement."""

    def draw(self, scene: Scene) -> None: ...
