"""Tests for keyword and identifier completion."""

from __future__ import annotations

from pgconsole.console.autocomplete import SQL_KEYWORDS, apply_completion, current_token, suggest


def test_partial_keyword_suggests_matching_keywords_only() -> None:
    suggestions = suggest("SEL", 3, [])

    assert "SELECT" in suggestions
    assert all(candidate.upper().startswith("SEL") for candidate in suggestions)


def test_exact_match_is_not_suggested() -> None:
    assert "SELECT" not in suggest("SELECT", 6, [])


def test_matching_is_case_insensitive() -> None:
    assert "SELECT" in suggest("sel", 3, [])


def test_keywords_come_before_known_tables() -> None:
    text = "SELECT * FROM ord"

    suggestions = suggest(text, len(text), ["orders", "order_items", "customers"])

    assert suggestions == ["ORDER BY", "orders", "order_items"]


def test_no_suggestions_without_partial_word() -> None:
    assert suggest("SELECT ", 7, ["orders"]) == []
    assert suggest("", 0, ["orders"]) == []


def test_suggestions_are_capped() -> None:
    keyword_hits = [keyword for keyword in SQL_KEYWORDS if keyword.startswith("C")]

    suggestions = suggest("C", 1, ["customers", "carts", "coupons"])

    assert len(keyword_hits) < 10 < len(keyword_hits) + 3
    assert len(suggestions) == 10
    assert suggestions[: len(keyword_hits)] == keyword_hits


def test_token_is_taken_before_cursor() -> None:
    assert current_token("SEL FROM t", 3) == "SEL"
    assert "SELECT" in suggest("SEL FROM t", 3, [])


def test_apply_completion_replaces_token_and_moves_cursor() -> None:
    completion = apply_completion("SELECT * FR", 11, "FROM")

    assert completion.text == "SELECT * FROM"
    assert completion.cursor == 13


def test_apply_completion_in_middle_of_text() -> None:
    completion = apply_completion("sel name FROM users", 3, "SELECT")

    assert completion.text == "SELECT name FROM users"
    assert completion.cursor == 6
