"""Render a chart from a data file without a GUI.

Loads a JSON array of records or a CSV file, runs the full chart pipeline
headless, jumps every transition to its final state and exports the frame
as PNG or SVG. CSV cells that look numeric become numbers.

Emits either a human-readable summary or JSON (via ``--json``). Exit code 0
on success, 2 when the input cannot be charted (missing file, unreadable
data, unknown column, mixed value types, unsupported output format).

Example:
  plotgraph-render sales.csv --kind bar --x year --y sales -o sales.png
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import os
import sys
from typing import Any, Dict, List

from plotgraph.app import create_app
from plotgraph.charting.normalize import default_axis_keys, infer_columns
from plotgraph.charting.types import ChartKind


class InputError(ValueError):
    """Raised when the data file cannot be turned into a dataset."""


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Render a scatter, line, bar or pie chart to an image file")
    p.add_argument("data", help="JSON array of records or CSV file with a header row")
    p.add_argument("--kind", choices=[k.value for k in ChartKind], default=ChartKind.SCATTER.value)
    p.add_argument("--x", help="Column for the x channel (default: first column)")
    p.add_argument("--y", help="Column for the y channel (default: second column)")
    p.add_argument("-o", "--output", required=True, help="Output image path (.png or .svg)")
    p.add_argument("--width", type=float, default=None, help="Viewport width in px")
    p.add_argument("--scheme", default=None, help="Color scheme (warm or any matplotlib colormap)")
    p.add_argument("--dpi", type=int, default=120, help="PNG resolution")
    p.add_argument("--json", action="store_true", help="Emit JSON instead of human-readable text")
    p.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details to stderr")
    return p.parse_args(argv)


def coerce_cell(text: str) -> Any:
    """'3' -> 3, '2.5' -> 2.5, anything else stays text."""
    s = text.strip()
    try:
        return int(s)
    except ValueError:
        pass
    try:
        value = float(s)
    except ValueError:
        return text
    return text if value != value else value  # keep 'nan' as text


def load_dataset(path: str) -> List[Dict[str, Any]]:
    if not os.path.isfile(path):
        raise InputError(f"Data file not found: {path}")
    with open(path, "r", encoding="utf-8", newline="") as f:
        if path.lower().endswith(".json"):
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise InputError(f"Invalid JSON in {path}: {e}") from e
            if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
                raise InputError("JSON data must be an array of objects")
            if any(isinstance(v, (list, dict)) for r in data for v in r.values()):
                raise InputError("JSON cells must be numbers, strings, booleans or null")
            return data
        reader = csv.DictReader(f)
        return [{k: coerce_cell(v or "") for k, v in row.items() if k is not None} for row in reader]


def _table_payload(rows) -> List[Dict[str, Any]]:
    return [{"x": r.x_value, "y": r.y_value, "percentage": r.percentage, "color": r.color} for r in rows]


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        dataset = load_dataset(args.data)
    except InputError as e:
        print(str(e), file=sys.stderr)
        return 2

    columns = infer_columns(dataset)
    defaults = default_axis_keys(dataset)
    x = args.x or (defaults.x if defaults else None)
    y = args.y or (defaults.y if defaults else None)
    missing = [k for k in (x, y) if k not in columns]
    if not dataset or missing:
        print(f"Cannot chart columns {missing or [x, y]}; available: {list(columns)}", file=sys.stderr)
        return 2

    fmt = os.path.splitext(args.output)[1].lstrip(".").lower() or "png"
    kind = ChartKind(args.kind)
    ctx = create_app(
        headless=True,
        viewport_width=args.width,
        enabled_kinds=[kind],
        options={"scheme": args.scheme} if args.scheme else None,
    )
    try:
        session = ctx.session
        session.set_axis_keys(x, y)
        result = session.replace_dataset(dataset)
        session.driver.settle()
        if result.error:
            print(result.error, file=sys.stderr)
            return 2
        try:
            ctx.surface.export(args.output, format=fmt, dpi=args.dpi)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 2
    finally:
        ctx.shutdown()

    geometry = result.geometry
    if args.json:
        payload = {
            "kind": kind.value,
            "keys": {"x": x, "y": y},
            "records": len(result.data),
            "shapes": len(geometry.shapes),
            "output": args.output,
            "table": _table_payload(geometry.table),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(f"Rendered {kind.value} chart:")
        print(f"  Columns: x={x}, y={y}")
        print(f"  Records: {len(result.data)} (of {len(dataset)})")
        print(f"  Shapes: {len(geometry.shapes)}")
        print(f"  Output: {args.output}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
