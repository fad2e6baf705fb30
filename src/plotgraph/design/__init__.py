"""Design tokens for chart motion (durations, delays, easing curves)."""

from .loader import load_tokens, DesignTokens, TokenValidationError  # noqa: F401
from .motion import MotionSpec, build_motion_spec, get_duration_ms, get_easing_curve, parse_cubic_bezier  # noqa: F401
