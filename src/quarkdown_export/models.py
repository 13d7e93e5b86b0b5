"""Data models for export requests, events and outcomes."""

from __future__ import annotations

import shlex
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quarkdown_export.logging_utils import DiagnosticSink


class InvocationState(str, Enum):
    """Lifecycle of one export invocation."""

    IDLE = "idle"
    RUNNING = "running"
    TERMINATED = "terminated"


class OutcomeKind(str, Enum):
    """How an invocation ended."""

    SUCCESS = "success"
    TOOL_NOT_FOUND = "tool_not_found"
    SPAWN_FAILED = "spawn_failed"
    NONZERO_EXIT = "nonzero_exit"
    SILENT_FAILURE = "silent_failure"
    START_FAILED = "start_failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class ExportRequest:
    """Normalized PDF export request."""

    executable_path: str
    source_path: Path
    output_dir: Path
    sink: DiagnosticSink | None = None


@dataclass(slots=True)
class ExportEvents:
    """Caller callbacks for one export invocation."""

    on_progress: Callable[[str], None] | None = None
    on_success: Callable[[], None] | None = None
    on_error: Callable[[str], None] | None = None


@dataclass(frozen=True, slots=True)
class CommandDescriptor:
    """Executable, positional arguments and working directory for one export."""

    command: str
    args: tuple[str, ...]
    cwd: Path

    @property
    def command_line(self) -> str:
        return shlex.join([self.command, *self.args])


@dataclass(frozen=True, slots=True)
class ExportOutcome:
    """Terminal outcome of an invocation."""

    kind: OutcomeKind
    message: str = ""
    exit_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS
