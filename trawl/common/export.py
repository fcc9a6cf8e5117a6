"""Write extracted rows to delimited text or JSON lines."""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable, Mapping
from typing import Any, TextIO


def column_order(rows: Iterable[Mapping[str, str]]) -> list[str]:
    """Columns in order of first appearance across all rows."""
    columns: dict[str, None] = {}
    for row in rows:
        for name in row:
            columns.setdefault(name, None)
    return list(columns)


def write_csv(rows: Iterable[Mapping[str, str]], stream: TextIO) -> int:
    """Write rows as CSV with a header line.

    Missing values are written as empty cells.

    Returns:
        The number of data rows written.
    """
    rows = list(rows)
    writer = csv.DictWriter(
        stream, fieldnames=column_order(rows), restval="", lineterminator="\n"
    )
    writer.writeheader()
    for row in rows:
        writer.writerow(dict(row))
    return len(rows)


def write_jsonl(rows: Iterable[Mapping[str, Any]], stream: TextIO) -> int:
    """Write one JSON object per row, preserving column order."""
    count = 0
    for row in rows:
        stream.write(json.dumps(dict(row), ensure_ascii=False) + "\n")
        count += 1
    return count
