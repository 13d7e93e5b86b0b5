"""Logging helpers and diagnostic sinks."""

from __future__ import annotations

import logging
from typing import Protocol


class DiagnosticSink(Protocol):
    """Leveled text messages emitted while an export runs."""

    def info(self, text: str) -> None:
        ...

    def warn(self, text: str) -> None:
        ...

    def error(self, text: str) -> None:
        ...


class LoggerSink:
    """Diagnostic sink backed by a standard library logger."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def info(self, text: str) -> None:
        if text:
            self._logger.info(text)

    def warn(self, text: str) -> None:
        if text:
            self._logger.warning(text)

    def error(self, text: str) -> None:
        if text:
            self._logger.error(text)


class NullSink:
    """Diagnostic sink that drops everything."""

    def info(self, text: str) -> None:
        pass

    def warn(self, text: str) -> None:
        pass

    def error(self, text: str) -> None:
        pass


def configure_logging(verbose: bool) -> None:
    """Configure CLI logging output."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")
