"""Tests for fixed-width and CSV rendering."""

from __future__ import annotations

import csv
import io

from pgconsole.console.renderer import (
    column_widths,
    describe_row_count,
    format_cell,
    render_csv,
    render_fixed_width,
)


def test_render_fixed_width_grid() -> None:
    rows = [
        {"id": 1, "name": "Alice", "meta": {"a": 1}},
        {"id": 22, "name": None},
    ]

    rendered = render_fixed_width(rows)

    assert rendered.splitlines() == [
        "+----+-------+---------+",
        "| id | name  | meta    |",
        "+----+-------+---------+",
        '| 1  | Alice | {"a":1} |',
        "| 22 | NULL  | NULL    |",
        "+----+-------+---------+",
    ]


def test_column_width_covers_header_and_every_cell() -> None:
    rows = [
        {"short": "a much longer value", "wide_header_name": 1},
        {"short": None, "wide_header_name": 123456},
    ]
    headers = list(rows[0])

    widths = column_widths(rows, headers)

    for width, header in zip(widths, headers):
        assert width >= len(header)
        assert all(width >= len(format_cell(row.get(header))) for row in rows)
    lines = render_fixed_width(rows).splitlines()
    assert len({len(line) for line in lines}) == 1


def test_render_is_deterministic() -> None:
    rows = [{"x": 1, "y": [1, 2]}, {"x": 2, "y": None}]

    assert render_fixed_width(rows) == render_fixed_width(rows)
    assert render_csv(rows) == render_csv(rows)


def test_empty_rows_render_nothing() -> None:
    assert render_fixed_width([]) == ""
    assert render_csv([]) == ""


def test_cell_formatting() -> None:
    assert format_cell(None) == "NULL"
    assert format_cell(True) == "true"
    assert format_cell([1, {"k": "v"}]) == '[1,{"k":"v"}]'
    assert format_cell(3.5) == "3.5"


def test_render_csv_quotes_values_with_commas() -> None:
    rows = [
        {"name": "Smith, John", "age": 30},
        {"name": "Doe", "age": None},
    ]

    rendered = render_csv(rows)

    assert rendered == 'name,age\n"Smith, John",30\nDoe,'
    parsed = list(csv.reader(io.StringIO(rendered)))
    assert parsed[1][0] == "Smith, John"


def test_render_csv_leaves_embedded_quotes_alone() -> None:
    rendered = render_csv([{"quote": 'say "hi"'}])

    assert rendered == 'quote\nsay "hi"'


def test_describe_row_count() -> None:
    assert describe_row_count(1) == "(1 row)"
    assert describe_row_count(0) == "(0 rows)"
    assert describe_row_count(12) == "(12 rows)"
