"""Statement splitting for submitted SQL text."""

from __future__ import annotations

STATEMENT_DELIMITER = ";"


def split_statements(raw: str) -> list[str]:
    """Split *raw* on ``;`` into trimmed, non-empty statements in source order.

    The split is purely lexical: a semicolon inside a string literal, comment or
    dollar-quoted body also ends a statement.
    """

    return [
        segment.strip()
        for segment in raw.split(STATEMENT_DELIMITER)
        if segment.strip()
    ]
