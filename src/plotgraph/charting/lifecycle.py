"""Render lifecycle: full pipeline re-run plus enter/update/exit reconciliation.

Every input change (dataset, axis keys, chart kind, viewport width) re-runs
normalize -> scales/colors -> geometry from scratch. The new shape list is then
reconciled against what is *currently displayed* by identity key:

 - key in both        -> update transition from the displayed state
 - key only displayed -> exit transition, shape removed when it completes
 - key only new       -> enter transition

Because reconciliation starts from the displayed state at the moment of the
new pass, in-flight transitions are replaced rather than queued: the last
input always wins.

The driver owns the drawing surface. It never schedules time itself; the
backend timer calls :meth:`RenderLifecycleDriver.tick` and the driver
computes the interpolated frame for that instant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from time import perf_counter
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from matplotlib.colors import to_hex, to_rgb

from plotgraph.design.motion import CubicBezier, MotionSpec, default_motion, ease

from .errors import MixedValueTypesError
from .geometry import render as render_geometry
from .normalize import normalize
from .responsive import compute_frame
from .types import (
    ArcSlice,
    AxisKeys,
    BarRect,
    ChartGeometry,
    ChartKind,
    Dataset,
    Frame,
    Marker,
    Record,
    RenderSurface,
    Scene,
    Shape,
    ShapeKey,
    TextLabel,
    TooltipState,
)

__all__ = [
    "Phase",
    "Transition",
    "RenderPass",
    "RenderLifecycleDriver",
    "interpolate_shape",
    "enter_transition",
    "update_transition",
    "exit_transition",
    "reconcile",
]

_logger = logging.getLogger(__name__)

_COLOR_FIELDS = frozenset({"fill", "stroke", "color"})
_SNAP_FIELDS = frozenset({"key", "index", "record", "text", "label"})

Overlay = Callable[[], Tuple[Optional[ShapeKey], TooltipState]]


class Phase(str, Enum):
    ENTER = "enter"
    UPDATE = "update"
    EXIT = "exit"


@dataclass(frozen=True)
class Transition:
    key: ShapeKey
    phase: Phase
    start: Shape
    end: Shape
    duration_ms: float
    delay_ms: float = 0.0
    easing: CubicBezier = (0.0, 0.0, 1.0, 1.0)

    @property
    def total_ms(self) -> float:
        return self.delay_ms + self.duration_ms

    def progress(self, elapsed_ms: float) -> float:
        if elapsed_ms < self.delay_ms:
            return 0.0
        if self.duration_ms <= 0:
            return 1.0
        return ease(self.easing, (elapsed_ms - self.delay_ms) / self.duration_ms)

    def state_at(self, elapsed_ms: float) -> Shape:
        return interpolate_shape(self.start, self.end, self.progress(elapsed_ms))

    def done(self, elapsed_ms: float) -> bool:
        return elapsed_ms >= self.total_ms


@dataclass(frozen=True)
class RenderPass:
    """Outcome of one full pipeline run."""

    seq: int
    kind: Optional[ChartKind]
    keys: Optional[AxisKeys]
    data: Tuple[Record, ...]
    geometry: ChartGeometry
    transitions: Tuple[Transition, ...]
    started_at: float
    error: Optional[str] = None

    def by_phase(self, phase: Phase) -> Tuple[Transition, ...]:
        return tuple(t for t in self.transitions if t.phase is phase)


# ---------------------------------------------------------------------------
# Interpolation
# ---------------------------------------------------------------------------


def _mix_color(a: str, b: str, t: float) -> str:
    ra, rb = np.asarray(to_rgb(a)), np.asarray(to_rgb(b))
    return to_hex(ra + (rb - ra) * t)


def _pad_points(points, size: int) -> np.ndarray:
    """Points as an array of at least ``size`` rows; extra rows repeat the last point."""
    arr = np.asarray(points, dtype=float)
    if len(arr) >= size:
        return arr
    return np.vstack([arr, np.repeat(arr[-1:], size - len(arr), axis=0)])


def interpolate_shape(a: Shape, b: Shape, t: float) -> Shape:
    """Blend two states of the same shape; ``t=0`` gives ``a``, ``t=1`` gives ``b``."""
    if t <= 0.0:
        return a
    if t >= 1.0 or type(a) is not type(b):
        return b
    changes = {}
    for f in fields(b):
        va, vb = getattr(a, f.name), getattr(b, f.name)
        if va == vb or f.name in _SNAP_FIELDS:
            continue
        if f.name in _COLOR_FIELDS:
            changes[f.name] = _mix_color(va, vb, t)
        elif f.name == "points":
            if va and vb:
                pa, pb = _pad_points(va, len(vb)), _pad_points(vb, len(va))
                changes[f.name] = tuple(map(tuple, (pa + (pb - pa) * t).tolist()))
        elif isinstance(va, (int, float)) and isinstance(vb, (int, float)):
            changes[f.name] = va + (vb - va) * t
    return replace(b, **changes)


# ---------------------------------------------------------------------------
# Transition factories
# ---------------------------------------------------------------------------


def enter_transition(shape: Shape, frame: Frame, motion: MotionSpec) -> Transition:
    """Grow or fade a new shape in."""
    easing = motion.easing("standard")
    duration = motion.duration("enter")
    delay = 0
    if isinstance(shape, Marker):
        start: Shape = replace(shape, r=0.0)
    elif isinstance(shape, BarRect):
        start = replace(shape, y=frame.height, height=0.0)
    elif isinstance(shape, ArcSlice):
        start = replace(shape, start_angle=0.0, end_angle=0.0)
        duration = motion.duration("pie_reveal")
    elif isinstance(shape, TextLabel):
        start = replace(shape, opacity=0.0)
        duration = motion.duration("label_fade")
        delay = motion.delay("label")
    else:
        start = replace(shape, opacity=0.0)
    return Transition(shape.key, Phase.ENTER, start, shape, duration, delay, easing)


def update_transition(old: Shape, new: Shape, motion: MotionSpec) -> Transition:
    return Transition(new.key, Phase.UPDATE, old, new, motion.duration("update"), 0, motion.easing("standard"))


def exit_transition(shape: Shape, frame: Frame, motion: MotionSpec) -> Transition:
    """Shrink or fade a shape out; it is dropped once the transition completes."""
    if isinstance(shape, BarRect):
        end: Shape = replace(shape, y=frame.height, height=0.0)
    elif isinstance(shape, Marker):
        end = replace(shape, r=0.0)
    else:
        end = replace(shape, opacity=0.0)
    return Transition(shape.key, Phase.EXIT, shape, end, motion.duration("exit"), 0, motion.easing("standard"))


def reconcile(
    previous: Sequence[Shape],
    new: Sequence[Shape],
    *,
    frame: Frame,
    previous_frame: Optional[Frame] = None,
    motion: MotionSpec,
) -> List[Transition]:
    """Diff ``previous`` against ``new`` by identity key.

    Exiting shapes come first so that new shapes draw on top of them.
    """
    new_keys = {s.key for s in new}
    prev_by_key: Dict[ShapeKey, Shape] = {s.key: s for s in previous}
    exit_frame = previous_frame or frame
    out = [exit_transition(s, exit_frame, motion) for s in previous if s.key not in new_keys]
    for shape in new:
        old = prev_by_key.get(shape.key)
        out.append(update_transition(old, shape, motion) if old is not None else enter_transition(shape, frame, motion))
    return out


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


class RenderLifecycleDriver:
    def __init__(
        self,
        surface: RenderSurface,
        *,
        clock: Callable[[], float] = perf_counter,
        motion: MotionSpec | None = None,
        options: dict | None = None,
    ) -> None:
        self._surface = surface
        self._clock = clock
        self._motion = motion or default_motion()
        self._options = options
        self._overlay: Optional[Overlay] = None
        self._pass: Optional[RenderPass] = None
        self._seq = 0

    # Readouts ----------------------------------------------------------
    @property
    def surface(self) -> RenderSurface:
        return self._surface

    @property
    def current_pass(self) -> Optional[RenderPass]:
        return self._pass

    def set_overlay(self, overlay: Optional[Overlay]) -> None:
        """Source of hover key + tooltip merged into each drawn scene."""
        self._overlay = overlay

    # Pipeline ----------------------------------------------------------
    def render(
        self,
        kind: Optional[ChartKind],
        dataset: Dataset,
        keys: Optional[AxisKeys],
        viewport_width: float,
    ) -> RenderPass:
        now = self._clock()
        displayed = self.displayed_shapes(now)
        previous_frame = self._pass.geometry.frame if self._pass else None
        frame = compute_frame(kind or ChartKind.SCATTER, viewport_width)

        error: Optional[str] = None
        data: Tuple[Record, ...] = ()
        if kind is None or keys is None:
            geometry = ChartGeometry(kind=kind, frame=frame)
        else:
            try:
                data = normalize(dataset, keys.x, keys.y)
            except MixedValueTypesError as exc:
                _logger.warning("Rendering empty %s chart: %s", kind.value, exc)
                error = str(exc)
            geometry = render_geometry(kind, data, keys, frame, self._options)

        transitions = reconcile(
            displayed, geometry.shapes, frame=frame, previous_frame=previous_frame, motion=self._motion
        )
        self._seq += 1
        self._pass = RenderPass(
            seq=self._seq,
            kind=kind,
            keys=keys,
            data=data,
            geometry=geometry,
            transitions=tuple(transitions),
            started_at=now,
            error=error,
        )
        _logger.debug(
            "Render pass %d (%s): %d records, %d enter / %d update / %d exit",
            self._seq,
            kind.value if kind else "none",
            len(data),
            len(self._pass.by_phase(Phase.ENTER)),
            len(self._pass.by_phase(Phase.UPDATE)),
            len(self._pass.by_phase(Phase.EXIT)),
        )
        self.tick(now)
        return self._pass

    # Frames ------------------------------------------------------------
    def _elapsed_ms(self, now: Optional[float]) -> float:
        if self._pass is None:
            return 0.0
        now = self._clock() if now is None else now
        return (now - self._pass.started_at) * 1000.0

    def displayed_shapes(self, now: Optional[float] = None) -> Tuple[Shape, ...]:
        """Shapes as they look at ``now``, exiting shapes included until done."""
        if self._pass is None:
            return ()
        elapsed = self._elapsed_ms(now)
        return tuple(
            t.state_at(elapsed)
            for t in self._pass.transitions
            if not (t.phase is Phase.EXIT and t.done(elapsed))
        )

    def live_shapes(self, now: Optional[float] = None) -> Tuple[Shape, ...]:
        """Displayed shapes that belong to the current geometry (no exiting ones)."""
        if self._pass is None:
            return ()
        elapsed = self._elapsed_ms(now)
        return tuple(t.state_at(elapsed) for t in self._pass.transitions if t.phase is not Phase.EXIT)

    def is_animating(self, now: Optional[float] = None) -> bool:
        if self._pass is None:
            return False
        elapsed = self._elapsed_ms(now)
        return any(not t.done(elapsed) for t in self._pass.transitions)

    def frame(self, now: Optional[float] = None) -> Scene:
        if self._pass is None:
            return Scene(frame=compute_frame(ChartKind.SCATTER, 0), shapes=())
        hover_key, tooltip = self._overlay() if self._overlay else (None, TooltipState())
        geometry = self._pass.geometry
        return Scene(
            frame=geometry.frame,
            shapes=self.displayed_shapes(now),
            axes=geometry.axes,
            legend_visible=geometry.legend_visible,
            hover_key=hover_key,
            tooltip=tooltip,
        )

    def tick(self, now: Optional[float] = None) -> bool:
        """Draw the frame for ``now``; returns whether more frames are needed."""
        self._surface.draw(self.frame(now))
        return self.is_animating(now)

    def settle(self) -> None:
        """Jump every transition to its end state and draw it."""
        if self._pass is None:
            return
        longest = max((t.total_ms for t in self._pass.transitions), default=0.0)
        self._pass = replace(self._pass, started_at=self._clock() - longest / 1000.0 - 1e-3)
        self.tick()
