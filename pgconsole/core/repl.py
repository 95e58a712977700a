"""Interactive terminal for running SQL and meta-commands against the backend."""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from pgconsole.console.exports import export_result_csv
from pgconsole.console.renderer import describe_row_count, render_fixed_width
from pgconsole.console.results import ExecutionResult, LineKind, TerminalLine
from pgconsole.core.config import ConsoleSettings, load_settings
from pgconsole.core.dependencies import ConsoleDependencies, ConsoleSession, build_console, build_dependencies
from pgconsole.core.observability import ExecutionObservationSink, describe_execution_event

LOGGER = logging.getLogger(__name__)

_exit_commands = {"\\q", "exit", "quit"}


@dataclass
class ConsoleCLI:
    """Line-oriented terminal built on top of a console session."""

    dependencies: ConsoleDependencies
    console_settings: ConsoleSettings = field(default_factory=ConsoleSettings)
    input_func: Callable[[str], str] = field(default=input)
    output_func: Callable[[str], None] = field(default=print)
    verbose: bool = False
    _session: ConsoleSession | None = field(default=None, init=False)

    @property
    def session(self) -> ConsoleSession:
        if self._session is None:
            if self.verbose:
                self.dependencies.execution_logger = ConsoleExecutionLogger(
                    downstream=self.dependencies.execution_logger,
                    emit=self.output_func,
                )
            self._session = build_console(self.dependencies, self.console_settings)
        return self._session

    def start(self) -> None:
        """Launch an interactive terminal session."""

        terminal = self.session.terminal
        self._render_lines(terminal.lines)
        with asyncio.Runner() as runner:
            while True:
                try:
                    raw = self.input_func(terminal.prompt)
                except EOFError:
                    self.output_func("\nSession ended.")
                    break

                command = raw.strip()
                if not command:
                    continue
                if command.lower() in _exit_commands:
                    self.output_func("Session ended.")
                    break

                appended = runner.run(terminal.submit(command))
                # The echoed command line is what the user just typed.
                self._render_lines([line for line in appended if line.kind is not LineKind.COMMAND])
            self._close_backend(runner)

    def run_script(self, path: str | Path, *, export_dir: Path | None = None) -> int:
        """Execute every statement in *path*; return the number of failures.

        With *export_dir*, every result that returned rows is also written there
        as a CSV file.
        """

        text = Path(path).read_text(encoding="utf-8")
        workspace = self.session.workspace
        with asyncio.Runner() as runner:
            outcome = runner.run(workspace.execute(text))
            self._close_backend(runner)
        if outcome.warning is not None:
            self.output_func(f"{outcome.warning.title}: {outcome.warning.description}")
            return 0
        for result in outcome.results:
            self._render_result(result)
            if export_dir is not None and result.rows:
                target = export_result_csv(result).write_to(export_dir)
                self.output_func(f"Exported {result.row_count} row(s) to {target}")
        return sum(1 for result in outcome.results if not result.succeeded)

    def _close_backend(self, runner: asyncio.Runner) -> None:
        close = getattr(self.dependencies.backend, "aclose", None)
        if close is not None:
            runner.run(close())

    def _render_lines(self, lines: list[TerminalLine]) -> None:
        for line in lines:
            match line.kind:
                case LineKind.COMMAND | LineKind.OUTPUT | LineKind.ERROR:
                    self.output_func(line.content)
                case LineKind.TABLE:
                    self.output_func(line.content)
                    self.output_func("")

    def _render_result(self, result: ExecutionResult) -> None:
        self.output_func(f"{self.session.terminal.prompt}{result.statement_text}")
        if not result.succeeded:
            self.output_func(f"ERROR: {result.error_message}")
        elif result.rows:
            self.output_func(render_fixed_width(result.row_list))
            self.output_func(describe_row_count(result.row_count))
        else:
            self.output_func(result.message or describe_row_count(0))
        self.output_func(f"Time: {result.execution_time_ms} ms")
        self.output_func("")


@dataclass(slots=True)
class ConsoleExecutionLogger(ExecutionObservationSink):
    downstream: ExecutionObservationSink | None
    emit: Callable[[str], None]

    def log_event(self, session_id: str, event: str, payload: dict[str, Any]) -> None:  # type: ignore[override]
        if self.downstream is not None:
            self.downstream.log_event(session_id, event, payload)
        message = describe_execution_event(event, payload)
        if message:
            self.emit(f"  ↳ {message}")


def _configure_logging(debug: bool) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        if debug:
            root_logger.setLevel(logging.DEBUG)
        return
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Interactive SQL console")
    parser.add_argument("--config", default="configs/dev.yaml", help="Path to the YAML config file")
    parser.add_argument("--file", help="Run the statements in this SQL file and exit")
    parser.add_argument(
        "--export",
        action="store_true",
        help="With --file, write each row-returning result to the exports directory as CSV",
    )
    parser.add_argument("--verbose", action="store_true", help="Narrate execution events")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    _configure_logging(debug=args.debug)
    settings = load_settings(args.config)
    dependencies = build_dependencies(settings)

    cli = ConsoleCLI(
        dependencies=dependencies,
        console_settings=settings.console,
        verbose=args.verbose,
    )
    if args.file:
        export_dir = dependencies.exports_dir if args.export else None
        failures = cli.run_script(args.file, export_dir=export_dir)
        raise SystemExit(1 if failures else 0)
    cli.start()


if __name__ == "__main__":
    main()
