"""Matplotlib surface drawing and export.

Runs headless on the Agg backend; we verify artists are produced for each
chart kind and that export writes PNG / SVG files.
"""

from __future__ import annotations

import pytest
from matplotlib.patches import Circle, Rectangle, Wedge

from plotgraph.charting.backends import MatplotlibSurface
from plotgraph.charting.session import ChartSession
from plotgraph.charting.types import ChartKind, Marker


@pytest.fixture
def mpl_session(clock):
    return ChartSession(MatplotlibSurface(dpi=100), viewport_width=1024, clock=clock)


def _settled(session, kind, data):
    session.replace_dataset(data)
    session.set_enabled_kinds([kind])
    session.driver.settle()
    return session.surface


def test_scatter_draws_circles_and_sizes_figure(mpl_session, sales):
    surface = _settled(mpl_session, ChartKind.SCATTER, sales)
    ax = surface.figure.axes[0]
    assert len([p for p in ax.patches if isinstance(p, Circle)]) == 2
    width, height = surface.figure.get_size_inches() * surface.figure.dpi
    assert (round(width), round(height)) == (700, 600)
    texts = [t.get_text() for t in ax.texts]
    assert "x-axis: year" in texts and "y-axis: sales" in texts


def test_pie_draws_wedges_labels_and_legend(mpl_session, sales):
    surface = _settled(mpl_session, ChartKind.PIE, sales)
    ax = surface.figure.axes[0]
    assert len([p for p in ax.patches if isinstance(p, Wedge)]) == 2
    texts = [t.get_text() for t in ax.texts]
    assert "33%" in texts and "66%" in texts
    assert "2020" in texts and "2021" in texts


def test_bar_draws_rectangles(mpl_session, sales):
    surface = _settled(mpl_session, ChartKind.BAR, sales)
    ax = surface.figure.axes[0]
    assert len([p for p in ax.patches if isinstance(p, Rectangle)]) == 2


def test_hover_emphasis_and_tooltip_drawn(mpl_session, sales):
    surface = _settled(mpl_session, ChartKind.SCATTER, sales)
    marker = next(s for s in mpl_session.current_pass.geometry.shapes if isinstance(s, Marker))
    mpl_session.interaction.pointer_moved(marker.cx, marker.cy)
    mpl_session.driver.tick()
    ax = surface.figure.axes[0]
    radii = sorted(p.get_radius() for p in ax.patches if isinstance(p, Circle))
    assert radii == [5.0, 8.0]
    assert "year: 2020, sales: 10" in [t.get_text() for t in ax.texts]


def test_export_png_and_svg(tmp_path, mpl_session, sales):
    surface = _settled(mpl_session, ChartKind.LINE, sales)
    png = tmp_path / "chart.png"
    svg = tmp_path / "chart.svg"
    surface.export(str(png), format="png")
    surface.export(str(svg), format="svg")
    assert png.exists() and png.stat().st_size > 0
    assert svg.read_text(encoding="utf-8").lstrip().startswith("<?xml")


def test_export_rejects_unknown_format(tmp_path, mpl_session, sales):
    surface = _settled(mpl_session, ChartKind.SCATTER, sales)
    with pytest.raises(ValueError):
        surface.export(str(tmp_path / "chart.pdf"), format="pdf")


def test_draw_count_tracks_frames(mpl_session, sales):
    surface = mpl_session.surface
    assert surface.draw_count == 0
    mpl_session.replace_dataset(sales)
    assert surface.draw_count == 1
    assert surface.last_scene is not None
