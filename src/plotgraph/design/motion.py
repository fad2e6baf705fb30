"""Motion utilities: easing curve parsing, evaluation and duration lookup.

Wraps the ``motion`` group of the design tokens.
Transitions only carry *intent* (duration, delay, easing); the drawing
backend's timer decides when frames are produced and asks for progress via
:func:`ease`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Tuple

from .loader import DesignTokens, load_tokens

__all__ = [
    "CubicBezier",
    "MotionSpec",
    "build_motion_spec",
    "default_motion",
    "parse_cubic_bezier",
    "ease",
    "get_duration_ms",
    "get_easing_curve",
]

CubicBezier = Tuple[float, float, float, float]


@dataclass(frozen=True)
class MotionSpec:
    durations: Mapping[str, int]
    easings: Mapping[str, str]
    delays: Mapping[str, int]

    def duration(self, name: str) -> int:
        if name not in self.durations:
            raise KeyError(f"Unknown motion duration token: {name}")
        return self.durations[name]

    def delay(self, name: str) -> int:
        if name not in self.delays:
            raise KeyError(f"Unknown motion delay token: {name}")
        return self.delays[name]

    def easing(self, name: str) -> CubicBezier:
        raw = self.easings.get(name)
        if raw is None:
            raise KeyError(f"Unknown easing token: {name}")
        return parse_cubic_bezier(raw)


def build_motion_spec(tokens: DesignTokens) -> MotionSpec:
    motion = tokens.raw.get("motion", {})
    return MotionSpec(
        durations=motion.get("duration", {}),
        easings=motion.get("easing", {}),
        delays=motion.get("delay", {}),
    )


def default_motion() -> MotionSpec:
    return build_motion_spec(load_tokens())


_BEZIER_RE = re.compile(r"^cubic-bezier\((?P<args>[^()]*)\)$")


def parse_cubic_bezier(spec: str) -> CubicBezier:
    """``'cubic-bezier(x1, y1, x2, y2)'`` -> ``(x1, y1, x2, y2)``.

    The x control points must lie in [0, 1] so that progress stays a function
    of time; y may overshoot.
    """
    match = _BEZIER_RE.match(spec.strip().lower())
    if match is None:
        raise ValueError(f"Not a cubic-bezier() easing: {spec!r}")
    try:
        values = tuple(float(v) for v in match.group("args").split(","))
    except ValueError:
        raise ValueError(f"Non-numeric cubic-bezier argument in {spec!r}") from None
    if len(values) != 4:
        raise ValueError(f"cubic-bezier() takes 4 numbers, got {len(values)} in {spec!r}")
    x1, y1, x2, y2 = values
    if not (0.0 <= x1 <= 1.0 and 0.0 <= x2 <= 1.0):
        raise ValueError(f"cubic-bezier x control points must be within [0, 1]: {spec!r}")
    return x1, y1, x2, y2


def _bezier(p1: float, p2: float, s: float) -> float:
    inv = 1.0 - s
    return 3 * inv * inv * s * p1 + 3 * inv * s * s * p2 + s * s * s


def _bezier_slope(p1: float, p2: float, s: float) -> float:
    inv = 1.0 - s
    return 3 * inv * inv * p1 + 6 * inv * s * (p2 - p1) + 3 * s * s * (1.0 - p2)


def ease(curve: CubicBezier, t: float) -> float:
    """Eased progress for linear progress ``t`` (clamped to [0, 1])."""
    if t <= 0.0:
        return 0.0
    if t >= 1.0:
        return 1.0
    x1, y1, x2, y2 = curve
    # Solve x(s) = t: a few Newton steps, bisection if the slope flattens out
    s = t
    for _ in range(8):
        err = _bezier(x1, x2, s) - t
        if abs(err) < 1e-7:
            return _bezier(y1, y2, s)
        slope = _bezier_slope(x1, x2, s)
        if abs(slope) < 1e-6:
            break
        s -= err / slope
    lo, hi = 0.0, 1.0
    s = t
    for _ in range(50):
        x = _bezier(x1, x2, s)
        if abs(x - t) < 1e-7:
            break
        if x < t:
            lo = s
        else:
            hi = s
        s = (lo + hi) / 2
    return _bezier(y1, y2, s)


# Token shortcuts


def get_duration_ms(tokens: DesignTokens, name: str) -> int:
    return build_motion_spec(tokens).duration(name)


def get_easing_curve(tokens: DesignTokens, name: str) -> CubicBezier:
    return build_motion_spec(tokens).easing(name)
