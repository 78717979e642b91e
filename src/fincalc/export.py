"""CSV export of schedule rows.

Any sequence of row dataclasses can be exported: the header is the field
names (nested records are flattened as ``outer_inner``), floats are written
with two decimals, dates in ISO format and missing values as empty cells.
"""
from __future__ import annotations

import csv
import io
from dataclasses import asdict, is_dataclass
from datetime import date
from pathlib import Path
from typing import Any, Sequence


def _flatten(record: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in record.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{name}_"))
        else:
            flat[name] = value
    return flat


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        return f"{value:.2f}"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def rows_to_csv(rows: Sequence[Any]) -> str:
    """Serialize dataclass rows to CSV text; an empty sequence gives an empty string."""
    if not rows:
        return ""
    if not is_dataclass(rows[0]):
        raise TypeError(f"Expected dataclass rows, got {type(rows[0]).__name__}")

    records = [_flatten(asdict(row)) for row in rows]
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(records[0].keys())
    for record in records:
        writer.writerow(_cell(v) for v in record.values())
    return buffer.getvalue()


def write_csv(path: Path, rows: Sequence[Any]) -> None:
    path.write_text(rows_to_csv(rows), encoding="utf-8")
