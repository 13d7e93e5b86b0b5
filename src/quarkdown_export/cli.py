"""Command-line interface for quarkdown-export."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from quarkdown_export.command import build_pdf_export_command
from quarkdown_export.errors import ExportExecutionError, ExportValidationError
from quarkdown_export.exporter import export_pdf, validate_request
from quarkdown_export.logging_utils import NullSink, configure_logging
from quarkdown_export.models import ExportEvents, ExportOutcome, ExportRequest, OutcomeKind
from quarkdown_export.preflight import preflight_executable

LOGGER = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "quarkdown"
DEFAULT_OUTPUT_DIR = "output"
INTERRUPTED_EXIT_CODE = 130


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="quarkdown-export",
        description="Export a Quarkdown document to PDF",
    )
    parser.add_argument("source", type=Path, help="Path to the source .qd document")
    parser.add_argument(
        "--executable",
        "-e",
        default=os.environ.get("QUARKDOWN_PATH", DEFAULT_EXECUTABLE),
        help="Quarkdown executable (default: $QUARKDOWN_PATH or 'quarkdown')",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=Path(os.environ.get("QUARKDOWN_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)),
        help="Directory where the PDF is written (default: $QUARKDOWN_OUTPUT_DIR or 'output')",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Do not echo compiler output")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and print the export command",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.verbose)

    request = _request_from_args(args)
    preflight = preflight_executable(request.executable_path)
    for warning in preflight.warnings:
        print(f"warning: {warning}", file=sys.stderr)

    if args.dry_run:
        try:
            validate_request(request)
        except ExportValidationError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        command = build_pdf_export_command(
            request.executable_path,
            request.source_path,
            request.output_dir,
        )
        print(f"Dry run OK: cwd={command.cwd}")
        print(command.command_line)
        return 0

    events = ExportEvents(on_progress=None if args.quiet or args.verbose else _echo_progress)
    try:
        outcome = export_pdf(request, events)
    except ExportValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ExportExecutionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("error: export interrupted", file=sys.stderr)
        return INTERRUPTED_EXIT_CODE

    if not outcome.ok:
        print(f"error: {_describe_failure(outcome)}", file=sys.stderr)
        return 1

    print(f"Export complete: source={request.source_path} output={request.output_dir}")
    return 0


def _request_from_args(args: argparse.Namespace) -> ExportRequest:
    request = ExportRequest(
        executable_path=args.executable,
        source_path=args.source.absolute(),
        output_dir=args.output_dir.absolute(),
        # Without --verbose the compiler output is echoed raw instead of logged.
        sink=None if args.verbose else NullSink(),
    )
    LOGGER.debug("Resolved export request: %s", request)
    return request


def _echo_progress(chunk: str) -> None:
    sys.stderr.write(chunk)
    sys.stderr.flush()


def _describe_failure(outcome: ExportOutcome) -> str:
    if outcome.kind is OutcomeKind.TOOL_NOT_FOUND:
        return (
            f"{outcome.message} Point --executable or QUARKDOWN_PATH at the "
            "Quarkdown launcher if it is installed elsewhere."
        )
    if outcome.kind is OutcomeKind.NONZERO_EXIT:
        return f"{outcome.message}. Rerun with --verbose to see the compiler output."
    return outcome.message


if __name__ == "__main__":
    raise SystemExit(main())
