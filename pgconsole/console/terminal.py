"""Terminal surface: echoed commands, interpreter output and command recall."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pgconsole.console.history import InteractionHistory
from pgconsole.console.meta_commands import MetaCommandInterpreter
from pgconsole.console.results import TerminalLine
from pgconsole.core.config import DEFAULT_PROMPT, DEFAULT_WELCOME_MESSAGE

LOGGER = logging.getLogger(__name__)


class ConsoleBusyError(RuntimeError):
    """Raised when input arrives while a previous submission is still running."""


@dataclass
class TerminalSession:
    """Append-only log of terminal lines for one console session."""

    interpreter: MetaCommandInterpreter
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    prompt: str = DEFAULT_PROMPT
    history: InteractionHistory = field(default_factory=InteractionHistory)
    lines: list[TerminalLine] = field(init=False)
    executing: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.lines = [TerminalLine.output(self.welcome_message)]

    async def submit(self, command: str) -> list[TerminalLine]:
        """Run one line of input and return the lines it appended."""

        if not command.strip():
            return []
        if self.executing:
            raise ConsoleBusyError("A command is already running in this terminal")

        self.history.record(command)
        echoed = TerminalLine.command(f"{self.prompt}{command}")
        self.lines.append(echoed)

        self.executing = True
        try:
            outcome = await self.interpreter.interpret(command)
        finally:
            self.executing = False

        if outcome.clear:
            self.clear()
            return list(self.lines)

        self.lines.extend(outcome.lines)
        LOGGER.debug("Terminal command produced %s line(s)", len(outcome.lines))
        return [echoed, *outcome.lines]

    def clear(self) -> None:
        self.lines = [TerminalLine.output(self.welcome_message)]

    def recall_previous(self) -> str:
        return self.history.previous()

    def recall_next(self) -> str:
        return self.history.next()
