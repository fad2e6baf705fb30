from __future__ import annotations

import math

import pytest

from plotgraph.charting.responsive import compute_frame
from plotgraph.charting.scales import (
    TAU,
    BandScale,
    LinearScale,
    allocate_angles,
    band_scale_for,
    build_scales,
    linear_scale_for,
)
from plotgraph.charting.types import AxisKeys, ChartKind


def test_linear_domain_pinned_to_zero():
    scale = linear_scale_for([5, 10, -3], 100)
    assert scale.domain == (0.0, 10.0)
    assert scale(0) == 0
    assert scale(10) == 100
    # unclamped: negatives fall outside the range
    assert scale(-3) == pytest.approx(-30)


def test_linear_scale_monotonic():
    scale = linear_scale_for([1, 7, 42], 500)
    values = [-5, 0, 1, 3.5, 7, 20, 42, 50]
    mapped = [scale(v) for v in values]
    assert mapped == sorted(mapped)
    assert len(set(mapped)) == len(values)


def test_inverted_scale_for_vertical_axis():
    scale = linear_scale_for([20], 500, invert=True)
    assert scale(0) == 500
    assert scale(20) == 0
    assert scale(10) == pytest.approx(250)


def test_text_counts_as_zero():
    scale = linear_scale_for([4, "n/a"], 100)
    assert scale.domain == (0.0, 4.0)
    assert scale("n/a") == 0


def test_degenerate_domain_maps_to_range_start():
    scale = linear_scale_for(["a", "b"], 300, invert=True)
    assert scale.degenerate
    assert scale(0) == 300
    assert scale(12) == 300
    assert scale.ticks() == (0.0,)


def test_ticks_within_domain():
    ticks = LinearScale(domain=(0.0, 20.0), range=(0.0, 100.0)).ticks()
    assert ticks[0] == 0.0
    assert ticks[-1] <= 20.0
    assert list(ticks) == sorted(ticks)
    assert 10.0 in ticks


def test_band_scale_layout():
    band = BandScale(domain=("a", "b", "c"), range=(0.0, 300.0), padding=0.1)
    # step = 300 / (3 - 0.1 + 0.2)
    assert band.step == pytest.approx(300 / 3.1)
    assert band.bandwidth == pytest.approx(band.step * 0.9)
    positions = [band(label) for label in band.domain]
    assert positions == sorted(positions)
    assert positions[0] == pytest.approx(band.step * 0.1)
    assert positions[-1] + band.bandwidth == pytest.approx(300 - band.step * 0.1)
    assert band("zzz") is None


def test_band_scale_for_formats_and_dedupes_labels():
    band = band_scale_for([2020, 2021.0, 2020], 100)
    assert band.domain == ("2020", "2021")
    assert band(2021) == band("2021")


def test_angle_conservation():
    spans = allocate_angles([10, 20, 30, 5])
    total = sum(end - start for start, end in spans)
    assert total == pytest.approx(TAU)
    assert spans[0][0] == 0
    for (_, end), (start, _) in zip(spans, spans[1:]):
        assert end == pytest.approx(start)


def test_angles_ignore_negative_and_text():
    spans = allocate_angles([10, -5, "x", 30])
    assert spans[1][1] - spans[1][0] == 0
    assert spans[2][1] - spans[2][0] == 0
    assert spans[3][1] - spans[3][0] == pytest.approx(TAU * 0.75)


def test_angles_zero_total():
    assert allocate_angles([0, -1, "a"]) == ((0.0, 0.0), (0.0, 0.0), (0.0, 0.0))


def test_build_scales_per_kind():
    data = ({"year": 2020, "sales": 10}, {"year": 2021, "sales": 20})
    keys = AxisKeys("year", "sales")
    bar = build_scales(ChartKind.BAR, data, keys, compute_frame(ChartKind.BAR, 1024))
    assert isinstance(bar.x, BandScale)
    assert bar.x.domain == ("2020", "2021")
    scatter = build_scales(ChartKind.SCATTER, data, keys, compute_frame(ChartKind.SCATTER, 1024))
    assert isinstance(scatter.x, LinearScale)
    assert scatter.x.domain == (0.0, 2021.0)
    pie = build_scales(ChartKind.PIE, data, keys, compute_frame(ChartKind.PIE, 1024))
    assert [end - start for start, end in pie.angles] == pytest.approx([TAU / 3, 2 * TAU / 3])
    assert pie.x is None and pie.y is None
    assert math.isclose(pie.angles[-1][1], TAU)
