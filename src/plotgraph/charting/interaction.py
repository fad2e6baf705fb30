"""Hover and tooltip interaction over rendered shapes.

Each shape is either ``idle`` or ``hovered``, and at most one shape is
hovered at a time. Entering a shape computes the tooltip text from the
shape's record and places the tooltip at a fixed offset from the pointer.
Moving inside the same shape only repositions the tooltip. Leaving clears it.

The controller never mutates geometry. It only reads shape identities from
``shapes_provider``. The hover emphasis (larger marker radius) is applied by
the drawing backend through :func:`apply_hover_emphasis` using
``hovered_key``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

from plotgraph.config import settings
from plotgraph.services.event_bus import ChartEvent, EventBus

from .normalize import format_value
from .types import AxisKeys, Marker, Point, Shape, ShapeKey, TooltipState

__all__ = ["HoverState", "InteractionController", "apply_hover_emphasis", "tooltip_content"]

_logger = logging.getLogger(__name__)


class HoverState(str, Enum):
    IDLE = "idle"
    HOVERED = "hovered"


def apply_hover_emphasis(shape: Shape) -> Shape:
    """Return the hovered rendition of ``shape`` (markers grow, others unchanged)."""
    if isinstance(shape, Marker):
        return replace(shape, r=shape.r + settings.HOVER_RADIUS_DELTA)
    return shape


def tooltip_content(shape: Shape, keys: AxisKeys) -> str:
    record = shape.record or {}
    return (
        f"{keys.x}: {format_value(record.get(keys.x, ''))}, "
        f"{keys.y}: {format_value(record.get(keys.y, ''))}"
    )


class InteractionController:
    def __init__(
        self,
        shapes_provider: Callable[[], Sequence[Shape]],
        keys_provider: Callable[[], Optional[AxisKeys]],
        *,
        bus: EventBus | None = None,
        offset: Tuple[float, float] = settings.TOOLTIP_OFFSET,
    ) -> None:
        self._shapes = shapes_provider
        self._keys = keys_provider
        self._bus = bus
        self._offset = offset
        self._state = HoverState.IDLE
        self._hovered_key: Optional[ShapeKey] = None
        self._tooltip = TooltipState()

    # Readouts ------------------------------------------------------------
    @property
    def state(self) -> HoverState:
        return self._state

    @property
    def hovered_key(self) -> Optional[ShapeKey]:
        return self._hovered_key

    @property
    def tooltip(self) -> TooltipState:
        return self._tooltip

    # Hit testing ---------------------------------------------------------
    def hit_test(self, x: float, y: float) -> Optional[Shape]:
        """Topmost interactive shape under the pointer (last drawn wins)."""
        for shape in reversed(tuple(self._shapes())):
            if not getattr(shape, "interactive", False):
                continue
            candidate = apply_hover_emphasis(shape) if shape.key == self._hovered_key else shape
            if candidate.contains(x, y):  # type: ignore[union-attr]
                return shape
        return None

    def pointer_moved(self, x: float, y: float) -> None:
        """Route a raw pointer position into enter / move / leave transitions."""
        target = self.hit_test(x, y)
        if target is None:
            self.pointer_leave()
            return
        if self._state is HoverState.HOVERED and target.key == self._hovered_key:
            self.pointer_move((x, y))
            return
        self.pointer_leave()
        self.pointer_enter(target, (x, y))

    # State transitions ---------------------------------------------------
    def pointer_enter(self, shape: Shape, pointer: Point) -> None:
        keys = self._keys()
        content = tooltip_content(shape, keys) if keys is not None else ""
        self._state = HoverState.HOVERED
        self._hovered_key = shape.key
        self._tooltip = TooltipState(visible=True, content=content, position=self._place(pointer))
        _logger.debug("Hover enter %s", shape.key)
        self._notify()

    def pointer_move(self, pointer: Point) -> None:
        if self._state is not HoverState.HOVERED:
            return
        self._tooltip = replace(self._tooltip, position=self._place(pointer))

    def pointer_leave(self) -> None:
        if self._state is HoverState.IDLE:
            return
        _logger.debug("Hover leave %s", self._hovered_key)
        self._state = HoverState.IDLE
        self._hovered_key = None
        self._tooltip = TooltipState()
        self._notify()

    def sync(self) -> None:
        """Drop the hover when the hovered shape disappeared in a new render pass."""
        if self._hovered_key is None:
            return
        if all(s.key != self._hovered_key for s in self._shapes()):
            self.pointer_leave()

    # Internal ------------------------------------------------------------
    def _place(self, pointer: Point) -> Point:
        return (pointer[0] + self._offset[0], pointer[1] + self._offset[1])

    def _notify(self) -> None:
        if self._bus is None:
            return
        self._bus.publish(
            ChartEvent.HOVER_CHANGED,
            {"key": self._hovered_key, "tooltip": self._tooltip},
        )
