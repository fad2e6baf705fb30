"""Dataset normalization: deduplicate and order records for an axis-key pair.

The normalized sequence is what every later stage (scales, colors, geometry,
tables) consumes. It is rebuilt from scratch for each (dataset, x, y) triple
and never mutated afterwards.

Rules:
 - Two records with equal values at both keys collapse to the first one seen.
 - Records are ordered ascending by the x value, then by the y value. The
   sort is stable.
 - Numbers compare numerically and text compares lexicographically. Ordering
   a number against text raises :class:`MixedValueTypesError`. Anything else
   (None, bools, NaN) is a kind of its own and raises the same error when
   ordered against a different kind or when it has no ordering at all.
 - Missing keys (absent from the first record) produce an empty result.
"""

from __future__ import annotations

import logging
import math
from functools import cmp_to_key
from typing import Iterable, List, Optional, Tuple

from .errors import MixedValueTypesError
from .types import AxisKeys, Dataset, Record, Value

__all__ = [
    "normalize",
    "infer_columns",
    "default_axis_keys",
    "numeric_value",
    "format_value",
    "is_numeric",
]

_logger = logging.getLogger(__name__)


def is_numeric(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and not math.isnan(value)


def numeric_value(value: object) -> Optional[float]:
    """Return ``value`` as float when it is a usable number, else ``None``."""
    return float(value) if is_numeric(value) else None  # type: ignore[arg-type]


def format_value(value: object) -> str:
    """Render a cell value for labels and tooltips (``2020.0`` -> ``2020``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def infer_columns(dataset: Dataset) -> Tuple[str, ...]:
    if not dataset:
        return ()
    return tuple(dataset[0].keys())


def default_axis_keys(dataset: Dataset) -> Optional[AxisKeys]:
    """First two columns of the first record; ``None`` for an empty dataset."""
    columns = infer_columns(dataset)
    if not columns:
        return None
    if len(columns) == 1:
        return AxisKeys(columns[0], columns[0])
    return AxisKeys(columns[0], columns[1])


def _kind(value: object) -> str:
    if is_numeric(value):
        return "number"
    if isinstance(value, str):
        return "text"
    # None, bools, NaN
    return type(value).__name__


def _compare(key: str, left: Value, right: Value) -> int:
    if _kind(left) != _kind(right):
        raise MixedValueTypesError(key, left, right)
    if left == right:
        return 0
    try:
        if left < right:  # type: ignore[operator]
            return -1
        if left > right:  # type: ignore[operator]
            return 1
    except TypeError as exc:
        raise MixedValueTypesError(key, left, right) from exc
    return 0


def _check_uniform(key: str, values: Iterable[Value]) -> None:
    started = False
    first: Value = ""
    for value in values:
        if not started:
            first, started = value, True
        elif _kind(first) != _kind(value):
            raise MixedValueTypesError(key, first, value)


def _dedupe(dataset: Dataset, x_key: str, y_key: str) -> List[Record]:
    seen: set = set()
    out: List[Record] = []
    skipped = 0
    for record in dataset:
        if x_key not in record or y_key not in record:
            skipped += 1
            continue
        x, y = record[x_key], record[y_key]
        # type tag keeps 1 and "1" apart while letting 1 == 1.0 collapse
        ident = (_kind(x), x, _kind(y), y)
        if ident in seen:
            continue
        seen.add(ident)
        out.append(record)
    if skipped:
        _logger.warning("Skipped %d record(s) lacking '%s' or '%s'", skipped, x_key, y_key)
    return out


def normalize(dataset: Dataset, x_key: str, y_key: str) -> Tuple[Record, ...]:
    """Deduplicate and order ``dataset`` for the given axis keys.

    Returns an empty tuple when the dataset is empty or either key is not a
    column of the first record.

    Raises:
        MixedValueTypesError: ordering would compare a number with text.
    """
    if not dataset:
        return ()
    columns = infer_columns(dataset)
    if x_key not in columns or y_key not in columns:
        _logger.debug("Axis keys (%s, %s) not in columns %s", x_key, y_key, columns)
        return ()

    unique = _dedupe(dataset, x_key, y_key)
    _check_uniform(x_key, (r[x_key] for r in unique))

    def _order(a: Record, b: Record) -> int:
        c = _compare(x_key, a[x_key], b[x_key])
        if c:
            return c
        return _compare(y_key, a[y_key], b[y_key])

    unique.sort(key=cmp_to_key(_order))
    return tuple(unique)
