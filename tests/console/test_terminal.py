"""Tests for the terminal surface."""

from __future__ import annotations

import asyncio

import pytest

from pgconsole.console.executor import QueryExecutor
from pgconsole.console.meta_commands import MetaCommandInterpreter
from pgconsole.console.results import LineKind
from pgconsole.console.schema_cache import SchemaCache
from pgconsole.console.terminal import ConsoleBusyError, TerminalSession
from pgconsole.core.config import DEFAULT_PROMPT, DEFAULT_WELCOME_MESSAGE
from pgconsole.integrations.in_memory_backend import InMemoryBackend


def _terminal(backend: InMemoryBackend | None = None) -> TerminalSession:
    backend = backend or InMemoryBackend()
    schema = SchemaCache(backend)
    executor = QueryExecutor(backend=backend, on_schema_change=schema.invalidate)
    return TerminalSession(interpreter=MetaCommandInterpreter(executor=executor, schema=schema))


def test_starts_with_welcome_line() -> None:
    terminal = _terminal()

    assert [(line.kind, line.content) for line in terminal.lines] == [
        (LineKind.OUTPUT, DEFAULT_WELCOME_MESSAGE)
    ]


def test_submit_echoes_command_then_output() -> None:
    backend = InMemoryBackend()
    backend.prime("SELECT 1 AS one", [{"one": 1}])
    terminal = _terminal(backend)

    appended = asyncio.run(terminal.submit("SELECT 1 AS one"))

    assert [line.kind for line in appended] == [LineKind.COMMAND, LineKind.TABLE]
    assert appended[0].content == f"{DEFAULT_PROMPT}SELECT 1 AS one"
    assert terminal.lines[1:] == appended
    assert not terminal.executing


def test_blank_submission_is_ignored() -> None:
    terminal = _terminal()

    assert asyncio.run(terminal.submit("   ")) == []
    assert len(terminal.lines) == 1
    assert len(terminal.history) == 0


def test_clear_resets_to_welcome_line() -> None:
    terminal = _terminal()
    asyncio.run(terminal.submit("help"))

    lines = asyncio.run(terminal.submit("clear"))

    assert [line.content for line in lines] == [DEFAULT_WELCOME_MESSAGE]
    assert [line.content for line in terminal.lines] == [DEFAULT_WELCOME_MESSAGE]
    assert terminal.history.entries == ["help", "clear"]


def test_submit_while_busy_is_rejected() -> None:
    terminal = _terminal()
    terminal.executing = True

    with pytest.raises(ConsoleBusyError):
        asyncio.run(terminal.submit("SELECT 1"))
    assert len(terminal.history) == 0


def test_command_recall_walks_history() -> None:
    terminal = _terminal()

    async def scenario() -> None:
        for command in ("SELECT 1", "\\dt", "help"):
            await terminal.submit(command)

    asyncio.run(scenario())

    assert terminal.recall_previous() == "help"
    assert terminal.recall_previous() == "\\dt"
    assert terminal.recall_previous() == "SELECT 1"
    assert terminal.recall_previous() == "SELECT 1"
    assert terminal.recall_next() == "\\dt"
    assert terminal.recall_next() == "help"
    assert terminal.recall_next() == ""


def test_custom_prompt_is_used_for_echo() -> None:
    backend = InMemoryBackend()
    schema = SchemaCache(backend)
    terminal = TerminalSession(
        interpreter=MetaCommandInterpreter(executor=QueryExecutor(backend=backend), schema=schema),
        welcome_message="hi",
        prompt="db> ",
    )

    appended = asyncio.run(terminal.submit("help"))

    assert appended[0].content == "db> help"
    assert terminal.lines[0].content == "hi"
