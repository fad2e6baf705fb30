"""Scale builders: map dataset values to plot coordinates or pie angles.

Linear scales always use the domain ``[0, max]``. The minimum is pinned to 0
even when the data holds negative values. Those values land outside the range
because the scale does not clamp. Text on a numeric channel counts as 0.

A domain whose maximum is not positive is *degenerate*: every value maps to
the start of the range, so shapes render with zero extent instead of failing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from matplotlib.ticker import MaxNLocator

from plotgraph.config import settings

from .normalize import format_value, numeric_value
from .types import AxisKeys, ChartKind, Frame, Record, Value

__all__ = [
    "LinearScale",
    "BandScale",
    "ChartScales",
    "linear_scale_for",
    "band_scale_for",
    "allocate_angles",
    "build_scales",
]

TAU = 2 * math.pi
_TICK_STEPS = [1, 2, 2.5, 5, 10]


@dataclass(frozen=True)
class LinearScale:
    domain: Tuple[float, float]
    range: Tuple[float, float]

    @property
    def degenerate(self) -> bool:
        return self.domain[1] <= self.domain[0]

    def __call__(self, value: object) -> float:
        r0, r1 = self.range
        if self.degenerate:
            return r0
        v = numeric_value(value)
        if v is None:
            v = 0.0
        d0, d1 = self.domain
        return r0 + (v - d0) / (d1 - d0) * (r1 - r0)

    def ticks(self, count: int = settings.DEFAULT_TICK_COUNT) -> Tuple[float, ...]:
        d0, d1 = self.domain
        if self.degenerate:
            return (d0,)
        locator = MaxNLocator(nbins=count, steps=_TICK_STEPS)
        eps = (d1 - d0) * 1e-9
        return tuple(float(t) for t in locator.tick_values(d0, d1) if d0 - eps <= t <= d1 + eps)


@dataclass(frozen=True)
class BandScale:
    """Evenly spaced bands over ordered category labels (d3 ``scaleBand``).

    ``padding`` is applied both between bands and at the outer edges, as a
    fraction of the step.
    """

    domain: Tuple[str, ...]
    range: Tuple[float, float]
    padding: float = settings.BAND_PADDING

    @property
    def step(self) -> float:
        start, stop = self.range
        n = len(self.domain)
        return (stop - start) / max(1.0, n - self.padding + self.padding * 2)

    @property
    def bandwidth(self) -> float:
        return self.step * (1 - self.padding)

    @property
    def _start(self) -> float:
        start, stop = self.range
        n = len(self.domain)
        return start + (stop - start - self.step * (n - self.padding)) * 0.5

    def __call__(self, label: object) -> Optional[float]:
        text = label if isinstance(label, str) else format_value(label)
        try:
            i = self.domain.index(text)
        except ValueError:
            return None
        return self._start + self.step * i

    def center(self, label: object) -> Optional[float]:
        pos = self(label)
        return None if pos is None else pos + self.bandwidth / 2


@dataclass(frozen=True)
class ChartScales:
    x: Optional[object] = None  # LinearScale | BandScale
    y: Optional[LinearScale] = None
    angles: Tuple[Tuple[float, float], ...] = ()


def linear_scale_for(values: Iterable[Value], extent: float, *, invert: bool = False) -> LinearScale:
    """Scale with domain ``[0, max(numeric values)]`` onto ``[0, extent]``.

    With ``invert`` the range is ``[extent, 0]`` (vertical axes).
    """
    numbers = [v for v in (numeric_value(x) for x in values) if v is not None]
    top = max(numbers) if numbers else 0.0
    rng = (float(extent), 0.0) if invert else (0.0, float(extent))
    return LinearScale(domain=(0.0, top), range=rng)


def band_scale_for(values: Iterable[Value], extent: float, padding: float = settings.BAND_PADDING) -> BandScale:
    labels = []
    for value in values:
        label = format_value(value)
        if label not in labels:
            labels.append(label)
    return BandScale(domain=tuple(labels), range=(0.0, float(extent)), padding=padding)


def allocate_angles(values: Sequence[Value]) -> Tuple[Tuple[float, float], ...]:
    """Proportional angular spans in input order, starting at angle 0.

    Text and negative values get a zero span and are left out of the total.
    """
    weights = []
    for value in values:
        v = numeric_value(value)
        weights.append(v if v is not None and v > 0 else 0.0)
    total = sum(weights)
    spans = []
    angle = 0.0
    for w in weights:
        span = TAU * w / total if total > 0 else 0.0
        spans.append((angle, angle + span))
        angle += span
    return tuple(spans)


def build_scales(kind: ChartKind, data: Sequence[Record], keys: AxisKeys, frame: Frame) -> ChartScales:
    xs = [r[keys.x] for r in data]
    ys = [r[keys.y] for r in data]
    if kind is ChartKind.PIE:
        return ChartScales(angles=allocate_angles(ys))
    y_scale = linear_scale_for(ys, frame.height, invert=True)
    if kind is ChartKind.BAR:
        return ChartScales(x=band_scale_for(xs, frame.width), y=y_scale)
    return ChartScales(x=linear_scale_for(xs, frame.width), y=y_scale)
