"""Chart pipeline: normalize -> scales + colors -> geometry -> lifecycle.

Provides one polymorphic entry point per stage so the UI layer can request
a chart kind without branching per kind. Importing this package registers
the four built-in geometry builders (scatter, line, bar, pie).
"""

from .types import AxisKeys, ChartKind, ChartRequest, ChartResult, TooltipState, PRIORITY_ORDER  # noqa: F401
from .registry import chart_registry, register_chart_type  # noqa: F401
from .normalize import normalize, default_axis_keys  # noqa: F401
from .geometry import render  # noqa: F401  # registers the built-in chart kinds
from .lifecycle import RenderLifecycleDriver, RenderPass, Phase  # noqa: F401
from .interaction import InteractionController  # noqa: F401
from .backends import MatplotlibSurface  # noqa: F401
from .session import ChartSession  # noqa: F401
