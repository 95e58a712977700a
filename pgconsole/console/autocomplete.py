"""Keyword and table-name completion for the token at the cursor."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

DEFAULT_LIMIT = 10

SQL_KEYWORDS: tuple[str, ...] = (
    "SELECT", "FROM", "WHERE", "JOIN", "INNER JOIN", "LEFT JOIN", "RIGHT JOIN", "FULL JOIN",
    "GROUP BY", "ORDER BY", "HAVING", "LIMIT", "OFFSET", "UNION", "INTERSECT", "EXCEPT",
    "INSERT", "INTO", "VALUES", "UPDATE", "SET", "DELETE", "CREATE", "DROP", "ALTER",
    "TABLE", "INDEX", "VIEW", "TRIGGER", "FUNCTION", "PROCEDURE", "DATABASE", "SCHEMA",
    "PRIMARY KEY", "FOREIGN KEY", "UNIQUE", "NOT NULL", "DEFAULT", "CHECK", "REFERENCES",
    "AND", "OR", "NOT", "IN", "EXISTS", "BETWEEN", "LIKE", "ILIKE", "IS NULL", "IS NOT NULL",
    "CASE", "WHEN", "THEN", "ELSE", "END", "AS", "DISTINCT", "ALL", "ANY", "SOME",
    "COUNT", "SUM", "AVG", "MIN", "MAX", "COALESCE", "NULLIF", "GREATEST", "LEAST",
    "CAST", "EXTRACT", "DATE_PART", "NOW", "CURRENT_DATE", "CURRENT_TIME", "CURRENT_TIMESTAMP",
)

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class Completion:
    text: str
    cursor: int


def current_token(text: str, cursor: int) -> str:
    """Return the partial word immediately before *cursor*."""

    before = text[: max(0, cursor)]
    return _WHITESPACE_RE.split(before)[-1]


def suggest(
    text: str,
    cursor: int,
    known_identifiers: Iterable[str] = (),
    *,
    limit: int = DEFAULT_LIMIT,
) -> list[str]:
    """Return up to *limit* keywords then identifiers extending the current token."""

    token = current_token(text, cursor).upper()
    if not token:
        return []

    candidates: list[str] = []
    seen: set[str] = set()
    for candidate in (*SQL_KEYWORDS, *known_identifiers):
        upper = candidate.upper()
        if upper == token or not upper.startswith(token) or candidate in seen:
            continue
        seen.add(candidate)
        candidates.append(candidate)
        if len(candidates) >= limit:
            break
    return candidates


def apply_completion(text: str, cursor: int, candidate: str) -> Completion:
    """Replace the token before *cursor* with *candidate*."""

    cursor = max(0, min(cursor, len(text)))
    token = current_token(text, cursor)
    start = cursor - len(token)
    updated = text[:start] + candidate + text[cursor:]
    return Completion(text=updated, cursor=start + len(candidate))
