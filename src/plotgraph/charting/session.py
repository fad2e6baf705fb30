"""Chart session: the seam between the UI chrome and the chart core.

The chrome (navigation bar, chart-kind toggles, settings dialog) owns the
inputs and hands them over wholesale:

 - ``replace_dataset``      -- a new dataset; never diffed
 - ``set_axis_keys``        -- the (x, y) column pair
 - ``set_enabled_kinds``    -- which chart kinds the user switched on
 - ``select_kind``          -- the kind to show (must be enabled)
 - ``resize``               -- viewport width for basic width adaptation

Each call re-runs the whole pipeline synchronously through the lifecycle
driver and publishes a ``ChartEvent`` describing what changed, followed by
``RENDER_COMPLETED``. The session also exposes what the chrome reads back:
the drawing surface, the hover/tooltip state and the side-table rows.
"""

from __future__ import annotations

import logging
from typing import Callable, FrozenSet, Iterable, Optional, Tuple

from plotgraph.config import settings
from plotgraph.design.motion import MotionSpec
from plotgraph.services.event_bus import ChartEvent, EventBus

from .interaction import InteractionController
from .lifecycle import RenderLifecycleDriver, RenderPass
from .normalize import default_axis_keys
from .types import PRIORITY_ORDER, AxisKeys, ChartKind, Dataset, RenderSurface, TableRow, TooltipState

__all__ = ["ChartSession", "choose_active_kind"]

_logger = logging.getLogger(__name__)


def choose_active_kind(enabled: Iterable[ChartKind], current: Optional[ChartKind]) -> Optional[ChartKind]:
    """Keep ``current`` if still enabled, else the first enabled kind by priority."""
    enabled_set = set(enabled)
    if current is not None and current in enabled_set:
        return current
    for kind in PRIORITY_ORDER:
        if kind in enabled_set:
            return kind
    return None


class ChartSession:
    def __init__(
        self,
        surface: RenderSurface,
        *,
        bus: EventBus | None = None,
        viewport_width: float = settings.DEFAULT_VIEWPORT_WIDTH,
        enabled_kinds: Iterable[ChartKind] = PRIORITY_ORDER,
        clock: Callable[[], float] | None = None,
        options: dict | None = None,
        motion: MotionSpec | None = None,
    ) -> None:
        self._bus = bus
        driver_kwargs = {"clock": clock} if clock is not None else {}
        self._driver = RenderLifecycleDriver(surface, motion=motion, options=options, **driver_kwargs)
        self._interaction = InteractionController(
            shapes_provider=self._driver.live_shapes,
            keys_provider=lambda: self._keys,
            bus=bus,
        )
        self._driver.set_overlay(lambda: (self._interaction.hovered_key, self._interaction.tooltip))
        self._dataset: Dataset = ()
        self._keys: Optional[AxisKeys] = None
        self._viewport_width = viewport_width
        self._enabled: FrozenSet[ChartKind] = frozenset(enabled_kinds)
        self._active: Optional[ChartKind] = choose_active_kind(self._enabled, None)

    # Readouts ----------------------------------------------------------
    @property
    def surface(self) -> RenderSurface:
        return self._driver.surface

    @property
    def driver(self) -> RenderLifecycleDriver:
        return self._driver

    @property
    def interaction(self) -> InteractionController:
        return self._interaction

    @property
    def tooltip(self) -> TooltipState:
        return self._interaction.tooltip

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def keys(self) -> Optional[AxisKeys]:
        return self._keys

    @property
    def active_kind(self) -> Optional[ChartKind]:
        return self._active

    @property
    def enabled_kinds(self) -> FrozenSet[ChartKind]:
        return self._enabled

    @property
    def current_pass(self) -> Optional[RenderPass]:
        return self._driver.current_pass

    @property
    def table_rows(self) -> Tuple[TableRow, ...]:
        current = self._driver.current_pass
        return current.geometry.table if current else ()

    # Inputs ------------------------------------------------------------
    def replace_dataset(self, dataset: Dataset) -> RenderPass:
        self._dataset = tuple(dataset)
        if self._keys is None:
            self._keys = default_axis_keys(self._dataset)
            if self._keys is not None:
                _logger.debug("Default axis keys: %s / %s", self._keys.x, self._keys.y)
        self._publish(ChartEvent.DATASET_REPLACED, {"records": len(self._dataset), "keys": self._keys})
        return self.render()

    def set_axis_keys(self, x: str, y: str) -> RenderPass:
        self._keys = AxisKeys(x, y)
        self._publish(ChartEvent.AXIS_KEYS_CHANGED, self._keys)
        return self.render()

    def set_enabled_kinds(self, kinds: Iterable[ChartKind]) -> RenderPass:
        self._enabled = frozenset(kinds)
        previous = self._active
        self._active = choose_active_kind(self._enabled, previous)
        self._publish(ChartEvent.ENABLED_KINDS_CHANGED, sorted(k.value for k in self._enabled))
        if self._active is not previous:
            self._publish(ChartEvent.CHART_KIND_CHANGED, self._active)
        return self.render()

    def select_kind(self, kind: ChartKind) -> RenderPass:
        if kind not in self._enabled:
            raise ValueError(f"Chart kind not enabled: {kind.value}")
        if kind is not self._active:
            self._active = kind
            self._publish(ChartEvent.CHART_KIND_CHANGED, kind)
        return self.render()

    def resize(self, viewport_width: float) -> RenderPass:
        self._viewport_width = viewport_width
        return self.render()

    def render(self) -> RenderPass:
        result = self._driver.render(self._active, self._dataset, self._keys, self._viewport_width)
        self._interaction.sync()
        self._publish(
            ChartEvent.RENDER_COMPLETED,
            {"seq": result.seq, "kind": result.kind, "shapes": len(result.geometry.shapes), "error": result.error},
        )
        return result

    def _publish(self, event: ChartEvent, payload: object) -> None:
        if self._bus is not None:
            self._bus.publish(event, payload)
