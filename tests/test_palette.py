from plotgraph.charting.palette import WARM_ANCHORS, ColorAssignment, colormap_for, series_color
from plotgraph.charting.types import ChartKind
from plotgraph.charting.palette import DEFAULT_SCHEMES
import pytest


def test_color_determinism():
    a = ColorAssignment(7)
    b = ColorAssignment(7)
    assert [a(i) for i in range(7)] == [b(i) for i in range(7)]
    assert a(3) == a(3)


def test_colors_are_hex_and_distinct():
    colors = ColorAssignment(5).colors()
    assert len(colors) == 5
    assert all(c.startswith("#") and len(c) == 7 for c in colors)
    assert len(set(colors)) == 5


def test_warm_starts_at_first_anchor():
    assert ColorAssignment(4)(0) == WARM_ANCHORS[0]


def test_index_outside_count_raises():
    colors = ColorAssignment(3)
    with pytest.raises(IndexError):
        colors(3)
    with pytest.raises(IndexError):
        colors(-1)
    with pytest.raises(IndexError):
        ColorAssignment(0)(0)


def test_matplotlib_schemes():
    rainbow = ColorAssignment(4, scheme="rainbow")
    assert rainbow(0) != ColorAssignment(4)(0)
    assert DEFAULT_SCHEMES[ChartKind.BAR] == "rainbow"
    with pytest.raises(ValueError):
        colormap_for("no-such-scheme")


def test_series_color_is_tab10():
    assert series_color(0) == "#1f77b4"
    assert series_color(10) == series_color(0)
