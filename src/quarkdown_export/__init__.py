"""Public package API for quarkdown-export."""

from quarkdown_export.command import build_pdf_export_command
from quarkdown_export.errors import (
    ExportError,
    ExportExecutionError,
    ExportInProgressError,
    ExportValidationError,
    ProcessStartError,
)
from quarkdown_export.exporter import PdfExporter, export_pdf, validate_request
from quarkdown_export.logging_utils import DiagnosticSink, LoggerSink, NullSink
from quarkdown_export.models import (
    CommandDescriptor,
    ExportEvents,
    ExportOutcome,
    ExportRequest,
    InvocationState,
    OutcomeKind,
)
from quarkdown_export.process import AsyncioProcessHandle, ProcessConfig, ProcessHandle
from quarkdown_export.stderr import extract_relevant_stderr

__all__ = [
    "AsyncioProcessHandle",
    "CommandDescriptor",
    "DiagnosticSink",
    "ExportError",
    "ExportEvents",
    "ExportExecutionError",
    "ExportInProgressError",
    "ExportOutcome",
    "ExportRequest",
    "ExportValidationError",
    "InvocationState",
    "LoggerSink",
    "NullSink",
    "OutcomeKind",
    "PdfExporter",
    "ProcessConfig",
    "ProcessHandle",
    "ProcessStartError",
    "build_pdf_export_command",
    "export_pdf",
    "extract_relevant_stderr",
    "validate_request",
]
