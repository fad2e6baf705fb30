"""Global configuration and constants for chart layout and interaction."""

from __future__ import annotations

import os
from typing import Final

# Viewport the host reports when it cannot measure itself (px)
DEFAULT_VIEWPORT_WIDTH: Final = int(os.environ.get("PLOTGRAPH_VIEWPORT_WIDTH", "1024"))
DEFAULT_DPI: Final = int(os.environ.get("PLOTGRAPH_DPI", "100"))

# Cartesian charts (scatter / line / bar)
PREFERRED_OUTER_WIDTH: Final = 700
CARTESIAN_OUTER_HEIGHT: Final = 600
CARTESIAN_BREAKPOINT: Final = 700

# Pie chart uses a taller canvas and a wider breakpoint
PIE_OUTER_HEIGHT: Final = 800
PIE_BREAKPOINT: Final = 800
PIE_RADIUS_INSET: Final = 10

# Margins (top, right, bottom, left)
SCATTER_MARGIN: Final = (40, 60, 60, 60)
LINE_MARGIN: Final = (20, 30, 60, 60)
BAR_MARGIN: Final = (20, 30, 60, 60)
PIE_MARGIN: Final = (40, 60, 60, 60)

# Shapes
MARKER_RADIUS: Final = 5.0
HOVER_RADIUS_DELTA: Final = 3.0  # 5 -> 8, roughly 1.6x
LINE_STROKE_WIDTH: Final = 2.0
BAND_PADDING: Final = 0.1
DEFAULT_TICK_COUNT: Final = 10

# Legend (pie)
LEGEND_RIGHT_INSET: Final = 100
LEGEND_TOP: Final = 20
LEGEND_ROW_HEIGHT: Final = 25
LEGEND_SWATCH_SIZE: Final = 20
LEGEND_TEXT_GAP: Final = 30
MIN_LEGEND_WIDTH: Final = 450  # px; below this the legend is hidden

# Tooltip placement relative to the pointer
TOOLTIP_OFFSET: Final = (10.0, -10.0)

# Backend frame interval while transitions are running (ms)
ANIMATION_FRAME_MS: Final = 16
