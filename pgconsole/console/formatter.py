"""Whitespace-level SQL formatting for the editor's Format action."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_CLAUSE_RE = re.compile(r"\b(SELECT|FROM|WHERE|JOIN|GROUP BY|ORDER BY|HAVING|UNION)\b", re.IGNORECASE)
_QUALIFIED_JOIN_RE = re.compile(r"\b(INNER|LEFT|RIGHT|FULL)\s+(JOIN)\b", re.IGNORECASE)


def format_sql(text: str) -> str:
    """Put each major clause on its own line and break after commas.

    This is not a parser; it rewrites whitespace only and ignores string
    literals.
    """

    formatted = _WHITESPACE_RE.sub(" ", text)
    formatted = formatted.replace(",", ",\n  ")
    formatted = _CLAUSE_RE.sub(lambda match: "\n" + match.group(1), formatted)
    formatted = _QUALIFIED_JOIN_RE.sub(
        lambda match: f"\n{match.group(1)} {match.group(2)}", formatted
    )
    return formatted.strip()
