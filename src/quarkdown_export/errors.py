"""Application exceptions."""


class ExportError(Exception):
    """Base error for export operations."""


class ExportValidationError(ExportError):
    """Raised when CLI input or export parameters are invalid."""


class ExportExecutionError(ExportError):
    """Raised when the export process could not be started."""


class ExportInProgressError(ExportError):
    """Raised when an export is requested while another one is still running."""


class ProcessStartError(ExportError):
    """Raised by a process handle that rejects its own start call."""
