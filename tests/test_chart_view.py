"""Smoke test for the Qt chart view (skipped when PyQt6 is unavailable)."""

from __future__ import annotations

import pytest

pytest.importorskip("PyQt6.QtWidgets")

from plotgraph.charting.backends import MatplotlibSurface  # noqa: E402
from plotgraph.charting.session import ChartSession  # noqa: E402
from plotgraph.charting.types import ChartKind  # noqa: E402
from plotgraph.services.event_bus import EventBus  # noqa: E402
from plotgraph.views.chart_view import ChartView  # noqa: E402


def test_chart_view_table_follows_kind(qtbot, sales):
    bus = EventBus()
    session = ChartSession(MatplotlibSurface(), bus=bus, viewport_width=1024)
    view = ChartView(session)
    qtbot.addWidget(view)
    view.attach(bus)

    session.replace_dataset(sales)
    assert view.table.rowCount() == 2
    assert view.table.columnCount() == 3  # year, sales, color
    assert not view.table.isHidden()

    session.set_enabled_kinds([ChartKind.PIE])
    assert view.table.columnCount() == 4
    assert view.table.item(0, 2).text() == "33%"

    session.set_enabled_kinds([ChartKind.BAR])
    assert view.table.isHidden()


def test_chart_view_requires_matplotlib_surface(qtbot):
    class Dummy:
        def draw(self, scene):
            pass

    with pytest.raises(TypeError):
        ChartView(ChartSession(Dummy()))
