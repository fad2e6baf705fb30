"""Deterministic chart colors.

Each record position in the normalized dataset maps to a color through a
continuous colormap sampled at ``index / count``. The same color then appears
on the chart shape, the legend swatch and the side table row, so they can be
matched by eye.

Schemes:
 - ``warm``: magenta -> orange -> yellow-green ramp (the default)
 - any registered matplotlib colormap name (``rainbow``, ``viridis``, ...)

The line stroke uses the first categorical ``tab10`` color, see
:func:`series_color`.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict

import matplotlib
from matplotlib.colors import Colormap, LinearSegmentedColormap, to_hex

from .types import ChartKind

__all__ = ["ColorAssignment", "colormap_for", "series_color", "DEFAULT_SCHEMES", "WARM_ANCHORS"]

# Evenly spaced samples of the "warm" cubehelix ramp
WARM_ANCHORS = (
    "#6e40aa",
    "#963db3",
    "#bf3caf",
    "#e4419d",
    "#fe4b83",
    "#ff5e63",
    "#ff7847",
    "#fb9633",
    "#e2b72f",
    "#c6d63c",
    "#aff05b",
)

DEFAULT_SCHEMES: Dict[ChartKind, str] = {
    ChartKind.SCATTER: "warm",
    ChartKind.LINE: "warm",
    ChartKind.BAR: "rainbow",
    ChartKind.PIE: "warm",
}


@lru_cache(maxsize=16)
def colormap_for(scheme: str) -> Colormap:
    if scheme == "warm":
        return LinearSegmentedColormap.from_list("warm", list(WARM_ANCHORS))
    try:
        return matplotlib.colormaps[scheme]
    except KeyError:
        raise ValueError(f"Unknown color scheme: {scheme}") from None


def series_color(index: int) -> str:
    """Categorical color for a whole series (``tab10`` ordinal)."""
    cmap = matplotlib.colormaps["tab10"]
    return to_hex(cmap(max(index, 0) % cmap.N))


@dataclass(frozen=True)
class ColorAssignment:
    """Maps a zero-based record index to a ``#rrggbb`` color.

    Defined for every index in ``[0, count)``; other indices raise
    ``IndexError``.
    """

    count: int
    scheme: str = "warm"

    def __call__(self, index: int) -> str:
        if not 0 <= index < self.count:
            raise IndexError(f"Color index {index} outside [0, {self.count})")
        return _sample(self.scheme, index / self.count)

    def colors(self) -> tuple[str, ...]:
        return tuple(self(i) for i in range(self.count))


@lru_cache(maxsize=1024)
def _sample(scheme: str, t: float) -> str:
    return to_hex(colormap_for(scheme)(t))
