"""Quarkdown command line construction."""

from __future__ import annotations

from pathlib import Path

from quarkdown_export.models import CommandDescriptor

COMPILE_SUBCOMMAND = "c"


def build_pdf_export_command(
    executable_path: str,
    source_path: Path | str,
    output_dir: Path | str,
) -> CommandDescriptor:
    """Build the command that compiles ``source_path`` to PDF into ``output_dir``.

    Relative paths are anchored to the caller's working directory before the
    command is built. The process itself runs from the source file's
    directory so that relative includes in the document resolve the same way
    they do for the author.
    """
    source = Path(source_path).absolute()
    output = Path(output_dir).absolute()
    args = (
        COMPILE_SUBCOMMAND,
        str(source),
        "--pdf",
        "--out",
        str(output),
    )
    return CommandDescriptor(command=executable_path, args=args, cwd=source.parent)
