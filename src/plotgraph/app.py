"""Application bootstrap utilities for plotgraph.

Responsibilities:
 - Optional headless bootstrap (for tests / environments without a display)
 - Loading design tokens early so motion settings fail fast
 - Wiring the event bus, logging service, drawing surface and chart session
 - Providing a single returned context object with references

The bootstrap avoids importing PyQt6 at module import time to keep test
collection fast and allow running headless tools (the CLI) without a GUI.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from plotgraph.charting.backends import MatplotlibSurface
from plotgraph.charting.session import ChartSession
from plotgraph.charting.types import PRIORITY_ORDER, ChartKind
from plotgraph.config import settings
from plotgraph.design import DesignTokens, load_tokens
from plotgraph.design.motion import build_motion_spec
from plotgraph.services import EventBus, LoggingService

__all__ = ["AppContext", "create_app"]


@dataclass
class AppContext:
    """Container with references created during bootstrap.

    Attributes
    ----------
    qt_app: The QApplication instance (None if headless)
    headless: Whether headless bootstrap was used
    design_tokens: Loaded design tokens
    bus: Event bus shared by the session and the host UI
    logging_service: Ring buffer attached to the ``plotgraph`` logger
    surface: Matplotlib drawing surface owned by the session's driver
    session: The chart session facade
    duration_s: Total elapsed seconds for bootstrap
    """

    qt_app: Optional[Any]
    headless: bool
    design_tokens: DesignTokens
    bus: EventBus
    logging_service: LoggingService
    surface: MatplotlibSurface
    session: ChartSession
    duration_s: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def shutdown(self) -> None:
        self.logging_service.detach()


def _qt_application() -> Any:  # pragma: no cover - requires a display or offscreen platform
    from PyQt6.QtWidgets import QApplication

    return QApplication.instance() or QApplication(sys.argv[:1])


def create_app(
    *,
    headless: bool = True,
    viewport_width: float | None = None,
    enabled_kinds: Iterable[ChartKind] = PRIORITY_ORDER,
    options: dict | None = None,
) -> AppContext:
    """Create and wire the chart application context.

    Parameters
    ----------
    headless: Skip QApplication creation (CLI and unit tests).
    viewport_width: Initial viewport width; defaults to ``DEFAULT_VIEWPORT_WIDTH``.
    enabled_kinds: Chart kinds the chrome starts with.
    options: Rendering hints passed to the geometry builders.
    """
    started = time.perf_counter()
    qt_app = None if headless else _qt_application()

    tokens = load_tokens()
    bus = EventBus()
    logging_service = LoggingService(bus=bus)
    logging_service.attach()

    surface = MatplotlibSurface(dpi=settings.DEFAULT_DPI)
    session = ChartSession(
        surface,
        bus=bus,
        viewport_width=settings.DEFAULT_VIEWPORT_WIDTH if viewport_width is None else viewport_width,
        enabled_kinds=enabled_kinds,
        options=options,
        motion=build_motion_spec(tokens),
    )
    return AppContext(
        qt_app=qt_app,
        headless=headless,
        design_tokens=tokens,
        bus=bus,
        logging_service=logging_service,
        surface=surface,
        session=session,
        duration_s=time.perf_counter() - started,
    )
