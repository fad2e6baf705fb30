"""Render lifecycle: reconciliation, transitions and frame timing."""

from __future__ import annotations

import pytest

from plotgraph.charting.lifecycle import (
    Phase,
    RenderLifecycleDriver,
    enter_transition,
    exit_transition,
    interpolate_shape,
    reconcile,
)
from plotgraph.charting.responsive import compute_frame
from plotgraph.charting.types import (
    ArcSlice,
    AxisKeys,
    BarRect,
    ChartKind,
    Marker,
    Polyline,
    TextLabel,
)
from plotgraph.design.motion import default_motion

KEYS = AxisKeys("year", "sales")


@pytest.fixture
def driver(surface, clock):
    return RenderLifecycleDriver(surface, clock=clock)


def _bars(shapes):
    return [s for s in shapes if isinstance(s, BarRect)]


def test_first_render_enters_everything(driver, surface, sales):
    rp = driver.render(ChartKind.BAR, sales, KEYS, 1024)
    assert rp.seq == 1
    assert len(rp.data) == 2
    assert [t.phase for t in rp.transitions] == [Phase.ENTER, Phase.ENTER]
    # first frame drawn immediately; bars start flat on the baseline
    scene = surface.last
    assert all(b.height == 0 for b in _bars(scene.shapes))
    assert driver.is_animating()


def test_enter_completes_after_duration(driver, surface, clock, sales):
    rp = driver.render(ChartKind.BAR, sales, KEYS, 1024)
    clock.advance_ms(250)
    mid = _bars(driver.displayed_shapes())
    final = _bars(rp.geometry.shapes)
    assert 0 < mid[0].height < final[0].height
    clock.advance_ms(260)
    assert not driver.is_animating()
    assert driver.tick() is False
    assert _bars(surface.last.shapes) == final


def test_empty_dataset_exits_prior_shapes(driver, clock, sales):
    driver.render(ChartKind.BAR, sales, KEYS, 1024)
    clock.advance_ms(600)
    rp = driver.render(ChartKind.BAR, [], KEYS, 1024)
    assert rp.geometry.is_empty
    assert rp.data == ()
    assert [t.phase for t in rp.transitions] == [Phase.EXIT, Phase.EXIT]
    clock.advance_ms(500)
    shrinking = _bars(driver.displayed_shapes())
    assert len(shrinking) == 2
    assert driver.live_shapes() == ()
    clock.advance_ms(600)
    assert driver.displayed_shapes() == ()
    assert not driver.is_animating()


def test_switching_bar_to_pie_never_reconciles(driver, clock, sales):
    bar = driver.render(ChartKind.BAR, sales, KEYS, 1024)
    clock.advance_ms(600)
    pie = driver.render(ChartKind.PIE, sales, KEYS, 1024)
    exits = pie.by_phase(Phase.EXIT)
    enters = pie.by_phase(Phase.ENTER)
    assert {t.key for t in exits} == {s.key for s in bar.geometry.shapes}
    assert {t.key for t in enters} == {s.key for s in pie.geometry.shapes}
    assert not pie.by_phase(Phase.UPDATE)
    arcs = [t for t in enters if isinstance(t.end, ArcSlice)]
    assert len(arcs) == 2
    assert all(t.start.span == 0 for t in arcs)
    assert all(t.duration_ms == 800 for t in arcs)


def test_same_keys_update(driver, clock, sales):
    driver.render(ChartKind.BAR, sales, KEYS, 1024)
    clock.advance_ms(600)
    changed = [{"year": 2020, "sales": 30}, {"year": 2021, "sales": 20}]
    rp = driver.render(ChartKind.BAR, changed, KEYS, 1024)
    assert [t.phase for t in rp.transitions] == [Phase.UPDATE, Phase.UPDATE]
    assert all(t.duration_ms == 500 for t in rp.transitions)


def test_reentrant_render_starts_from_displayed_state(driver, clock, sales):
    first = driver.render(ChartKind.BAR, sales, KEYS, 1024)
    clock.advance_ms(200)
    displayed = _bars(driver.displayed_shapes())
    second = driver.render(ChartKind.BAR, sales, KEYS, 1024)
    assert second.seq == first.seq + 1
    updates = second.by_phase(Phase.UPDATE)
    assert [t.start for t in updates] == displayed
    assert [t.end for t in updates] == _bars(second.geometry.shapes)


def test_exiting_shapes_drawn_beneath_new(driver, clock, sales):
    driver.render(ChartKind.BAR, sales, KEYS, 1024)
    clock.advance_ms(600)
    rp = driver.render(ChartKind.SCATTER, sales, KEYS, 1024)
    phases = [t.phase for t in rp.transitions]
    assert phases == sorted(phases, key=lambda p: p is not Phase.EXIT)


def test_pie_labels_fade_in_after_delay(driver, clock, sales):
    driver.render(ChartKind.PIE, sales, KEYS, 1024)
    clock.advance_ms(300)
    labels = [s for s in driver.displayed_shapes() if isinstance(s, TextLabel)]
    assert labels and all(s.opacity == 0 for s in labels)
    clock.advance_ms(350)
    labels = [s for s in driver.displayed_shapes() if isinstance(s, TextLabel)]
    assert all(s.opacity == 1 for s in labels)
    clock.advance_ms(200)
    assert not driver.is_animating()


def test_mixed_types_render_empty_with_error(driver, caplog):
    data = [{"year": 2020, "sales": 1}, {"year": "soon", "sales": 2}]
    with caplog.at_level("WARNING", logger="plotgraph"):
        rp = driver.render(ChartKind.SCATTER, data, KEYS, 1024)
    assert rp.geometry.is_empty
    assert rp.error and "year" in rp.error
    assert any("Rendering empty" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize("odd", [None, False])
def test_non_text_label_renders_empty_with_error(driver, odd):
    data = [{"name": odd, "v": 1}, {"name": "a", "v": 2}]
    rp = driver.render(ChartKind.BAR, data, AxisKeys("name", "v"), 1024)
    assert rp.geometry.is_empty
    assert rp.error and "name" in rp.error


def test_no_kind_renders_empty(driver, sales):
    rp = driver.render(None, sales, KEYS, 1024)
    assert rp.kind is None and rp.geometry.is_empty


def test_settle_jumps_to_end(driver, surface, sales):
    rp = driver.render(ChartKind.PIE, sales, KEYS, 1024)
    driver.settle()
    assert not driver.is_animating()
    assert surface.last.shapes == rp.geometry.shapes


def test_frame_carries_axes_and_overlay(driver, sales):
    from plotgraph.charting.types import TooltipState

    tip = TooltipState(visible=True, content="hi", position=(1, 2))
    driver.set_overlay(lambda: (("bar", "bar", ("2020", 0)), tip))
    driver.render(ChartKind.BAR, sales, KEYS, 1024)
    scene = driver.frame()
    assert len(scene.axes) == 2
    assert scene.tooltip is tip
    assert scene.hover_key == ("bar", "bar", ("2020", 0))


def test_interpolate_shape_numbers_and_colors():
    a = Marker(key=("scatter", "marker", 0), index=0, record=None, cx=0, cy=0, r=0, fill="#000000")
    b = Marker(key=("scatter", "marker", 0), index=0, record=None, cx=10, cy=20, r=10, fill="#ffffff")
    mid = interpolate_shape(a, b, 0.5)
    assert (mid.cx, mid.cy, mid.r) == (5, 10, 5)
    assert mid.fill == "#808080"
    assert interpolate_shape(a, b, 0) is a
    assert interpolate_shape(a, b, 1) is b


def test_interpolate_polyline_points():
    a = Polyline(key=("line", "path", 0), index=0, record=None, points=((0, 0), (10, 10)), stroke="#000000")
    b = Polyline(key=("line", "path", 0), index=0, record=None, points=((10, 0), (20, 30)), stroke="#000000")
    assert interpolate_shape(a, b, 0.5).points == ((5.0, 0.0), (15.0, 20.0))
    longer = Polyline(key=("line", "path", 0), index=0, record=None, points=((1, 1),) * 3, stroke="#000000")
    # the shorter path repeats its last point so the shared prefix still moves
    expected = ((0.5, 0.5), (5.5, 5.5), (5.5, 5.5))
    assert interpolate_shape(a, longer, 0.5).points == expected
    assert interpolate_shape(longer, a, 0.5).points == expected
    assert interpolate_shape(longer, a, 1).points == a.points


def test_transition_factories():
    motion = default_motion()
    frame = compute_frame(ChartKind.BAR, 1024)
    bar = BarRect(key=("bar", "bar", ("a", 0)), index=0, record=None, x=10, y=100, width=20, height=50, fill="#ff0000")
    enter = enter_transition(bar, frame, motion)
    assert enter.start.y == frame.height and enter.start.height == 0
    assert enter.duration_ms == 500
    leave = exit_transition(bar, frame, motion)
    assert leave.end.height == 0 and leave.duration_ms == 1000
    assert leave.state_at(1000) == leave.end

    marker = Marker(key=("scatter", "marker", 0), index=0, record=None, cx=1, cy=1, r=5, fill="#ff0000")
    assert enter_transition(marker, frame, motion).start.r == 0
    assert exit_transition(marker, frame, motion).end.r == 0


def test_reconcile_by_key():
    motion = default_motion()
    frame = compute_frame(ChartKind.SCATTER, 1024)
    m = lambda i, cx: Marker(key=("scatter", "marker", i), index=i, record=None, cx=cx, cy=0, r=5, fill="#000000")  # noqa: E731
    out = reconcile([m(0, 0), m(1, 10)], [m(1, 20), m(2, 30)], frame=frame, motion=motion)
    assert [(t.key[2], t.phase) for t in out] == [(0, Phase.EXIT), (1, Phase.UPDATE), (2, Phase.ENTER)]
