"""Tests for command history recall."""

from __future__ import annotations

from pgconsole.console.history import InteractionHistory


def _history(*entries: str) -> InteractionHistory:
    history = InteractionHistory()
    for entry in entries:
        history.record(entry)
    return history


def test_recall_previous_walks_back_and_clamps_at_oldest() -> None:
    history = _history("a", "b", "c")

    entry, index = history.recall_previous(None)
    assert (entry, index) == ("c", 2)
    entry, index = history.recall_previous(index)
    assert (entry, index) == ("b", 1)
    entry, index = history.recall_previous(index)
    assert (entry, index) == ("a", 0)
    entry, index = history.recall_previous(index)
    assert (entry, index) == ("a", 0)

    entry, index = history.recall_next(index)
    assert (entry, index) == ("b", 1)


def test_recall_next_past_newest_clears_selection() -> None:
    history = _history("a", "b")

    assert history.recall_next(1) == ("", None)
    assert history.recall_next(None) == ("", None)


def test_recall_on_empty_history_returns_nothing() -> None:
    history = InteractionHistory()

    assert history.recall_previous(None) == ("", None)


def test_stateful_cursor_and_clear() -> None:
    history = _history("first", "second")

    assert history.previous() == "second"
    assert history.previous() == "first"
    assert history.cursor == 0
    assert history.next() == "second"
    assert history.next() == ""
    assert history.cursor is None

    history.previous()
    history.clear()

    assert len(history) == 0
    assert history.cursor is None
    assert history.previous() == ""


def test_record_keeps_entries_verbatim_and_resets_cursor() -> None:
    history = _history("SELECT 1")
    history.previous()

    history.record("  select 2 ")

    assert history.entries == ["SELECT 1", "  select 2 "]
    assert history.cursor is None
