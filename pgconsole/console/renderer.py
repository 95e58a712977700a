"""Text renderings of result rows: a bordered fixed-width grid and CSV."""

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence

NULL_MARKER = "NULL"


def format_cell(value: Any) -> str:
    """Return the display text for a single cell value."""

    if value is None:
        return NULL_MARKER
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def column_names(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    if not rows:
        return []
    return list(rows[0].keys())


def column_widths(rows: Sequence[Mapping[str, Any]], headers: Sequence[str]) -> list[int]:
    widths = [len(header) for header in headers]
    for row in rows:
        for index, header in enumerate(headers):
            widths[index] = max(widths[index], len(format_cell(row.get(header))))
    return widths


def render_fixed_width(rows: Sequence[Mapping[str, Any]]) -> str:
    """Render *rows* as a ``+---+`` bordered grid; empty input renders as ``""``."""

    if not rows:
        return ""

    headers = column_names(rows)
    widths = column_widths(rows, headers)
    separator = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    def _line(cells: Sequence[str]) -> str:
        padded = (f" {cell.ljust(width)} " for cell, width in zip(cells, widths))
        return "|" + "|".join(padded) + "|"

    lines = [separator, _line(headers), separator]
    for row in rows:
        lines.append(_line([format_cell(row.get(header)) for header in headers]))
    lines.append(separator)
    return "\n".join(lines)


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    text = format_cell(value)
    # Quotes inside the value are left as-is.
    if "," in text:
        return f'"{text}"'
    return text


def render_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """Render *rows* as CSV text with the first row's keys as the header."""

    if not rows:
        return ""

    headers = column_names(rows)
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(_csv_cell(row.get(header)) for header in headers))
    return "\n".join(lines)


def describe_row_count(count: int) -> str:
    return "(1 row)" if count == 1 else f"({count} rows)"
