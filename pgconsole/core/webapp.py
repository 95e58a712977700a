"""FastAPI-powered HTTP API for the SQL console."""

from __future__ import annotations

import argparse
import logging
import threading
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator
from uuid import uuid4

from fastapi import FastAPI, HTTPException, status
from fastapi.responses import Response
from pydantic import BaseModel, Field

from pgconsole.console.exports import ExportDocument
from pgconsole.console.results import ExecutionResult, TerminalLine
from pgconsole.console.terminal import ConsoleBusyError
from pgconsole.core.config import Settings, load_settings
from pgconsole.core.dependencies import ConsoleDependencies, ConsoleSession, build_console, build_dependencies

LOGGER = logging.getLogger(__name__)


class SessionManager:
    """Thread-safe in-memory registry of console sessions."""

    def __init__(self, dependencies: ConsoleDependencies, settings: Settings) -> None:
        self._dependencies = dependencies
        self._settings = settings
        self._sessions: dict[str, ConsoleSession] = {}
        self._lock = threading.Lock()

    def create(self) -> ConsoleSession:
        session_id = uuid4().hex[:8]
        with self._lock:
            while session_id in self._sessions:
                session_id = uuid4().hex[:8]
            session = build_console(
                self._dependencies,
                self._settings.console,
                session_id=session_id,
            )
            self._sessions[session_id] = session
        return session

    def get(self, session_id: str) -> ConsoleSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        close_session = getattr(self._dependencies.execution_logger, "close_session", None)
        if removed and close_session is not None:
            close_session(session_id)
        return removed


class ExecutionResultModel(BaseModel):
    id: str
    statement_text: str
    preview: str
    rows: list[dict[str, Any]] | None
    columns: list[str]
    error_message: str | None
    message: str | None
    execution_time_ms: int
    submitted_at: datetime

    @classmethod
    def from_result(cls, result: ExecutionResult) -> "ExecutionResultModel":
        return cls(
            id=result.id,
            statement_text=result.statement_text,
            preview=result.preview(),
            rows=result.row_list if result.rows is not None else None,
            columns=result.columns,
            error_message=result.error_message,
            message=result.message,
            execution_time_ms=result.execution_time_ms,
            submitted_at=result.submitted_at,
        )


class TerminalLineModel(BaseModel):
    id: str
    kind: str
    content: str
    timestamp: datetime

    @classmethod
    def from_line(cls, line: TerminalLine) -> "TerminalLineModel":
        return cls(id=line.id, kind=line.kind.value, content=line.content, timestamp=line.timestamp)


class TableModel(BaseModel):
    schema_name: str = Field(..., description="Schema the table lives in")
    name: str
    type: str


class SessionResponse(BaseModel):
    session_id: str
    editor: str
    terminal: list[TerminalLineModel]
    tables: list[TableModel]


class ExecuteRequest(BaseModel):
    query: str | None = Field(None, description="SQL to run; defaults to the editor buffer")


class WarningModel(BaseModel):
    title: str
    description: str


class ExecuteResponse(BaseModel):
    results: list[ExecutionResultModel]
    has_errors: bool
    summary: str | None = None
    warning: WarningModel | None = None


class ResultsResponse(BaseModel):
    results: list[ExecutionResultModel]


class EditorPayload(BaseModel):
    text: str


class TerminalRequest(BaseModel):
    command: str


class TerminalResponse(BaseModel):
    appended: list[TerminalLineModel]
    lines: list[TerminalLineModel]


class SuggestRequest(BaseModel):
    text: str
    cursor: int = Field(..., ge=0)


class SuggestResponse(BaseModel):
    suggestions: list[str]


class CompleteRequest(SuggestRequest):
    candidate: str = Field(..., min_length=1)


class CompleteResponse(BaseModel):
    text: str
    cursor: int


class HistoryResponse(BaseModel):
    entry: str
    index: int | None


def create_app(
    config_path: str = "configs/dev.yaml",
    *,
    settings: Settings | None = None,
    dependencies: ConsoleDependencies | None = None,
) -> FastAPI:
    LOGGER.info("Initialising console API with config '%s'", config_path)
    settings = settings or load_settings(config_path)
    dependencies = dependencies or build_dependencies(settings)
    session_manager = SessionManager(dependencies, settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        close = getattr(dependencies.backend, "aclose", None)
        if close is not None:
            await close()

    app = FastAPI(title="SQL Console", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.dependencies = dependencies
    app.state.session_manager = session_manager

    def _require_session(session_id: str) -> ConsoleSession:
        session = session_manager.get(session_id)
        if session is None:
            LOGGER.warning("Session %s not found", session_id)
            raise HTTPException(status_code=404, detail="Session not found")
        return session

    @app.get("/api/health")
    def healthcheck() -> dict[str, str]:  # pragma: no cover - trivial
        return {"status": "ok"}

    @app.post("/api/session", response_model=SessionResponse)
    async def start_session() -> SessionResponse:
        session = session_manager.create()
        tables = await session.schema.refresh()
        LOGGER.info("Session %s created with %s table(s)", session.session_id, len(tables))
        return _session_response(session)

    @app.get("/api/session/{session_id}", response_model=SessionResponse)
    async def resume_session(session_id: str) -> SessionResponse:
        session = _require_session(session_id)
        await session.schema.settle()
        return _session_response(session)

    @app.delete("/api/session/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
    def end_session(session_id: str) -> Response:
        if not session_manager.remove(session_id):
            raise HTTPException(status_code=404, detail="Session not found")
        LOGGER.info("Session %s closed", session_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/api/session/{session_id}/tables", response_model=list[TableModel])
    async def list_tables(session_id: str) -> list[TableModel]:
        session = _require_session(session_id)
        tables = await session.schema.ensure_loaded()
        return [TableModel(schema_name=table.schema, name=table.name, type=table.type) for table in tables]

    @app.post("/api/session/{session_id}/execute", response_model=ExecuteResponse)
    async def execute(session_id: str, payload: ExecuteRequest) -> ExecuteResponse:
        session = _require_session(session_id)
        LOGGER.info(
            "Execute requested for session_id=%s query=%s",
            session_id,
            _truncate_for_log(payload.query if payload.query is not None else session.workspace.editor),
        )
        try:
            outcome = await session.workspace.execute(payload.query)
        except ConsoleBusyError as exc:
            LOGGER.warning("Execute rejected for busy session_id=%s", session_id)
            raise HTTPException(status_code=409, detail=str(exc)) from exc

        warning = None
        if outcome.warning is not None:
            warning = WarningModel(title=outcome.warning.title, description=outcome.warning.description)
        LOGGER.info(
            "Session %s executed %s statement(s) has_errors=%s",
            session_id,
            len(outcome.results),
            outcome.has_errors,
        )
        return ExecuteResponse(
            results=[ExecutionResultModel.from_result(result) for result in outcome.results],
            has_errors=outcome.has_errors,
            summary=outcome.summary,
            warning=warning,
        )

    @app.get("/api/session/{session_id}/results", response_model=ResultsResponse)
    def list_results(session_id: str) -> ResultsResponse:
        session = _require_session(session_id)
        return ResultsResponse(
            results=[ExecutionResultModel.from_result(result) for result in session.workspace.results]
        )

    @app.delete("/api/session/{session_id}/results", status_code=status.HTTP_204_NO_CONTENT)
    def clear_results(session_id: str) -> Response:
        session = _require_session(session_id)
        session.workspace.clear_results()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/api/session/{session_id}/results/{result_id}/export.csv")
    def export_result(session_id: str, result_id: str) -> Response:
        session = _require_session(session_id)
        try:
            document = session.workspace.export_result(result_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Result not found") from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _download(document)

    @app.get("/api/session/{session_id}/editor", response_model=EditorPayload)
    def get_editor(session_id: str) -> EditorPayload:
        return EditorPayload(text=_require_session(session_id).workspace.editor)

    @app.put("/api/session/{session_id}/editor", response_model=EditorPayload)
    def update_editor(session_id: str, payload: EditorPayload) -> EditorPayload:
        session = _require_session(session_id)
        session.workspace.editor = payload.text
        return EditorPayload(text=session.workspace.editor)

    @app.post("/api/session/{session_id}/editor/format", response_model=EditorPayload)
    def format_editor(session_id: str) -> EditorPayload:
        return EditorPayload(text=_require_session(session_id).workspace.format_editor())

    @app.get("/api/session/{session_id}/editor/export.sql")
    def export_editor(session_id: str) -> Response:
        return _download(_require_session(session_id).workspace.export_editor())

    @app.get("/api/session/{session_id}/terminal", response_model=list[TerminalLineModel])
    def terminal_lines(session_id: str) -> list[TerminalLineModel]:
        session = _require_session(session_id)
        return [TerminalLineModel.from_line(line) for line in session.terminal.lines]

    @app.post("/api/session/{session_id}/terminal", response_model=TerminalResponse)
    async def terminal_command(session_id: str, payload: TerminalRequest) -> TerminalResponse:
        session = _require_session(session_id)
        LOGGER.info(
            "Terminal command for session_id=%s command=%s",
            session_id,
            _truncate_for_log(payload.command),
        )
        try:
            appended = await session.terminal.submit(payload.command)
        except ConsoleBusyError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return TerminalResponse(
            appended=[TerminalLineModel.from_line(line) for line in appended],
            lines=[TerminalLineModel.from_line(line) for line in session.terminal.lines],
        )

    @app.post("/api/session/{session_id}/history/previous", response_model=HistoryResponse)
    def history_previous(session_id: str) -> HistoryResponse:
        terminal = _require_session(session_id).terminal
        entry = terminal.recall_previous()
        return HistoryResponse(entry=entry, index=terminal.history.cursor)

    @app.post("/api/session/{session_id}/history/next", response_model=HistoryResponse)
    def history_next(session_id: str) -> HistoryResponse:
        terminal = _require_session(session_id).terminal
        entry = terminal.recall_next()
        return HistoryResponse(entry=entry, index=terminal.history.cursor)

    @app.post("/api/session/{session_id}/suggest", response_model=SuggestResponse)
    def suggest(session_id: str, payload: SuggestRequest) -> SuggestResponse:
        workspace = _require_session(session_id).workspace
        return SuggestResponse(suggestions=workspace.suggest(payload.text, payload.cursor))

    @app.post("/api/session/{session_id}/complete", response_model=CompleteResponse)
    def complete(session_id: str, payload: CompleteRequest) -> CompleteResponse:
        workspace = _require_session(session_id).workspace
        completion = workspace.complete(payload.text, payload.cursor, payload.candidate)
        return CompleteResponse(text=completion.text, cursor=completion.cursor)

    return app


def _session_response(session: ConsoleSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        editor=session.workspace.editor,
        terminal=[TerminalLineModel.from_line(line) for line in session.terminal.lines],
        tables=[
            TableModel(schema_name=table.schema, name=table.name, type=table.type)
            for table in session.schema.tables
        ],
    )


def _download(document: ExportDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


def _configure_logging(debug: bool) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        if debug:
            root_logger.setLevel(logging.DEBUG)
        return
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def _truncate_for_log(value: str, limit: int = 200) -> str:
    text = value.strip()
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def main() -> None:
    parser = argparse.ArgumentParser(description="Launch the SQL console API")
    parser.add_argument("--config", default="configs/dev.yaml", help="Path to configuration file")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind the server")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind the server")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    _configure_logging(debug=args.debug)
    app = create_app(config_path=args.config)

    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise SystemExit("uvicorn must be installed to run the console API") from exc

    LOGGER.info("Starting uvicorn on %s:%s", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
