"""PDF export orchestration and outcome classification."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from quarkdown_export.command import build_pdf_export_command
from quarkdown_export.errors import (
    ExportExecutionError,
    ExportInProgressError,
    ExportValidationError,
)
from quarkdown_export.logging_utils import DiagnosticSink, LoggerSink
from quarkdown_export.models import (
    CommandDescriptor,
    ExportEvents,
    ExportOutcome,
    ExportRequest,
    InvocationState,
    OutcomeKind,
)
from quarkdown_export.process import (
    AsyncioProcessHandle,
    ProcessConfig,
    ProcessHandle,
    is_not_found,
)
from quarkdown_export.stderr import extract_relevant_stderr

LOGGER = logging.getLogger(__name__)

SOURCE_SUFFIX = ".qd"
TOOL_NOT_FOUND_MESSAGE = "Quarkdown not found. Please install Quarkdown first."
CANCELLED_MESSAGE = "PDF export cancelled"

CommandBuilder = Callable[[str, Path, Path], CommandDescriptor]


class _Invocation:
    """State machine for one process run.

    Each process signal has one entry point and every terminal outcome goes
    through ``_finish``, which reports at most once. The completion future
    is resolved as soon as the outcome is decided.
    """

    def __init__(
        self,
        events: ExportEvents,
        sink: DiagnosticSink,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._events = events
        self._sink = sink
        self._stderr: list[str] = []
        self._cancel_requested = False
        self.outcome: ExportOutcome | None = None
        self.completion: asyncio.Future[ExportOutcome] = loop.create_future()

    @property
    def terminated(self) -> bool:
        return self.outcome is not None

    def on_stdout(self, chunk: str) -> None:
        self._sink.info(chunk.strip())
        self._progress(chunk)

    def on_stderr(self, chunk: str) -> None:
        if not self.terminated:
            self._stderr.append(chunk)
        self._sink.warn(chunk.strip())
        self._progress(chunk)

    def on_spawn_error(self, exc: OSError) -> None:
        if is_not_found(exc):
            kind, message = OutcomeKind.TOOL_NOT_FOUND, TOOL_NOT_FOUND_MESSAGE
        else:
            kind, message = OutcomeKind.SPAWN_FAILED, str(exc)
        self._finish(ExportOutcome(kind, message), log_message=f"Process error: {message}")

    def on_exit(self, code: int) -> None:
        if self.terminated:
            return
        if self._cancel_requested:
            self._finish(ExportOutcome(OutcomeKind.CANCELLED, CANCELLED_MESSAGE, code))
            return
        if code != 0:
            message = f"PDF export failed with exit code {code}"
            self._finish(ExportOutcome(OutcomeKind.NONZERO_EXIT, message, code))
            return

        relevant = extract_relevant_stderr("".join(self._stderr))
        if relevant:
            message = f"PDF export failed: {relevant}"
            self._finish(ExportOutcome(OutcomeKind.SILENT_FAILURE, message, code))
        else:
            self._finish(ExportOutcome(OutcomeKind.SUCCESS, exit_code=code))

    def on_start_failed(self, exc: BaseException) -> str:
        message = f"Failed to start PDF export: {exc}"
        self._finish(ExportOutcome(OutcomeKind.START_FAILED, message))
        return message

    def request_cancel(self) -> None:
        self._cancel_requested = True

    def finish_cancelled(self) -> None:
        if not self.terminated:
            self._finish(ExportOutcome(OutcomeKind.CANCELLED, CANCELLED_MESSAGE))

    def _progress(self, chunk: str) -> None:
        if not self.terminated:
            _notify(self._events.on_progress, chunk)

    def _finish(self, outcome: ExportOutcome, log_message: str | None = None) -> None:
        if self.terminated:
            return
        self.outcome = outcome
        self._stderr.clear()
        if not self.completion.done():
            self.completion.set_result(outcome)

        if outcome.ok:
            self._sink.info("PDF export completed successfully")
            _notify(self._events.on_success)
            return

        self._sink.error(log_message or outcome.message)
        _notify(self._events.on_error, outcome.message)


def _notify(callback: Callable[..., None] | None, *args: str) -> None:
    # A failing caller callback must not stop output draining or classification.
    if callback is None:
        return
    try:
        callback(*args)
    except Exception:  # noqa: BLE001
        LOGGER.exception("Export event callback %r failed", callback)


class PdfExporter:
    """Runs Quarkdown PDF exports, one at a time per instance."""

    def __init__(
        self,
        process_factory: Callable[[], ProcessHandle] = AsyncioProcessHandle,
        command_builder: CommandBuilder = build_pdf_export_command,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self._process_factory = process_factory
        self._command_builder = command_builder
        self._sink = sink or LoggerSink(LOGGER)
        self._handle: ProcessHandle | None = None
        self._invocation: _Invocation | None = None

    @property
    def state(self) -> InvocationState:
        if self._invocation is None:
            return InvocationState.IDLE
        if self._invocation.terminated:
            return InvocationState.TERMINATED
        return InvocationState.RUNNING

    @property
    def last_outcome(self) -> ExportOutcome | None:
        if self._invocation is None:
            return None
        return self._invocation.outcome

    def is_exporting(self) -> bool:
        """Return the liveness of the current process, False before any export."""
        return self._handle is not None and self._handle.is_running()

    async def export(self, request: ExportRequest, events: ExportEvents | None = None) -> None:
        """Compile ``request.source_path`` to PDF.

        Progress and the terminal outcome are reported through ``events``;
        the coroutine returns once the outcome is decided. Failing to start
        the process is reported to ``events.on_error`` and also raised as
        ``ExportExecutionError``. Raises ``ExportInProgressError`` without
        touching ``events`` while another export on this instance runs.
        """
        if self.state is InvocationState.RUNNING:
            raise ExportInProgressError("PDF export already in progress")

        events = events or ExportEvents()
        sink = request.sink if request.sink is not None else self._sink
        command = self._command_builder(
            request.executable_path,
            request.source_path,
            request.output_dir,
        )
        sink.info(f"Starting PDF export: {command.command_line}")

        invocation = _Invocation(events, sink, asyncio.get_running_loop())
        handle = self._process_factory()
        self._invocation = invocation
        self._handle = handle

        config = ProcessConfig(
            command=command.command,
            args=command.args,
            cwd=command.cwd,
            on_stdout=invocation.on_stdout,
            on_stderr=invocation.on_stderr,
            on_error=invocation.on_spawn_error,
            on_exit=invocation.on_exit,
        )
        try:
            await handle.start(config)
        except asyncio.CancelledError:
            invocation.request_cancel()
            if handle.is_running():
                await handle.stop()
            invocation.finish_cancelled()
            raise
        except Exception as exc:  # noqa: BLE001
            message = invocation.on_start_failed(exc)
            raise ExportExecutionError(message) from exc

        if invocation.terminated and handle.is_running():
            # Cancelled while the process was still being spawned.
            await handle.stop()

        try:
            await asyncio.shield(invocation.completion)
        except asyncio.CancelledError:
            await self.cancel()
            raise

    async def cancel(self) -> None:
        """Stop the running process and report the invocation as cancelled.

        Does nothing when no export is running. If the process had already
        reached its own terminal outcome, that outcome stands.
        """
        invocation, handle = self._invocation, self._handle
        if invocation is None or handle is None or invocation.terminated:
            return
        invocation.request_cancel()
        await handle.stop()
        invocation.finish_cancelled()


def validate_request(request: ExportRequest) -> None:
    """Validate an export request."""
    if not request.executable_path.strip():
        raise ExportValidationError("Quarkdown executable path must not be empty.")
    if not request.source_path.exists():
        raise ExportValidationError(f"Source file not found: {request.source_path}")
    if not request.source_path.is_file():
        raise ExportValidationError(f"Source path is not a file: {request.source_path}")
    if request.source_path.suffix.lower() != SOURCE_SUFFIX:
        raise ExportValidationError("Source document must use the .qd extension.")
    if request.output_dir.exists() and not request.output_dir.is_dir():
        raise ExportValidationError(f"Output path is not a directory: {request.output_dir}")


def export_pdf(
    request: ExportRequest,
    events: ExportEvents | None = None,
    *,
    exporter: PdfExporter | None = None,
) -> ExportOutcome:
    """Validate ``request`` and run one export to completion."""
    validate_request(request)
    exporter = exporter or PdfExporter()
    asyncio.run(exporter.export(request, events))
    outcome = exporter.last_outcome
    if outcome is None:
        raise ExportExecutionError("PDF export finished without an outcome")
    return outcome
