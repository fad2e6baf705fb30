"""Design token loading.

The bundled ``tokens.json`` holds the motion group (durations, delays and
easing curves) used by chart transitions. A custom file can be passed for
experiments; it must carry the same ``motion.duration`` and ``motion.easing``
groups, e.g.::

    load_tokens("my_tokens.json").raw["motion"]["duration"]["enter"]
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping

_TOKEN_FILE = Path(__file__).parent / "tokens.json"

__all__ = ["DesignTokens", "TokenValidationError", "load_tokens"]


class TokenValidationError(RuntimeError):
    """Raised when required token fields are missing or malformed."""


@dataclass(frozen=True)
class DesignTokens:
    raw: Mapping[str, Any]


def load_tokens(path: str | Path | None = None) -> DesignTokens:
    """Load design tokens from JSON.

    Parameters
    ----------
    path: optional explicit path override. The bundled token file is read
        once and cached.
    """
    if path is None:
        return _load_default()
    return _read(Path(path))


@lru_cache(maxsize=1)
def _load_default() -> DesignTokens:
    return _read(_TOKEN_FILE)


def _read(token_path: Path) -> DesignTokens:
    if not token_path.is_file():
        raise FileNotFoundError(f"No design token file at {token_path}")
    data: Dict[str, Any] = json.loads(token_path.read_text(encoding="utf-8"))
    _validate_tokens(data)
    return DesignTokens(raw=data)


def _validate_tokens(data: Mapping[str, Any]) -> None:
    motion = data.get("motion")
    if not isinstance(motion, Mapping):
        raise TokenValidationError("Missing top-level token group: motion")
    for group in ("duration", "easing"):
        if group not in motion:
            raise TokenValidationError(f"motion.{group} group required")
    for name, value in motion["duration"].items():
        if not isinstance(value, int) or value < 0:
            raise TokenValidationError(f"motion.duration.{name} must be a non-negative int")
