from plotgraph.app import create_app
from plotgraph.charting.types import ChartKind
from plotgraph.services.event_bus import ChartEvent


def test_create_app_headless():
    ctx = create_app(headless=True, viewport_width=900)
    try:
        assert ctx.headless is True
        assert ctx.qt_app is None
        assert ctx.design_tokens is not None
        assert ctx.session.surface is ctx.surface
        assert ctx.duration_s >= 0
    finally:
        ctx.shutdown()


def test_logging_service_wired_to_bus():
    ctx = create_app(headless=True, enabled_kinds=[ChartKind.LINE])
    try:
        logged = []
        ctx.bus.subscribe(ChartEvent.LOG_RECORD_ADDED, lambda evt: logged.append(evt.payload["name"]))
        ctx.session.replace_dataset([{"t": 1, "v": 2}, {"t": 0, "v": 1}])
        assert ctx.session.active_kind is ChartKind.LINE
        assert any(name.startswith("plotgraph.charting") for name in logged)
        assert ctx.logging_service.query(name_contains="lifecycle")
    finally:
        ctx.shutdown()


def test_create_app_twice_gives_independent_buses():
    c1 = create_app(headless=True)
    c2 = create_app(headless=True)
    try:
        assert c1.bus is not c2.bus
        assert c1.design_tokens is c2.design_tokens  # cached token file
    finally:
        c1.shutdown()
        c2.shutdown()
