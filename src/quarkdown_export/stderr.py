"""Relevance filtering for diagnostics a compiler writes to stderr."""

from __future__ import annotations

import re

ERROR_SIGNATURE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"error", re.IGNORECASE),
    re.compile(r"exception", re.IGNORECASE),
    re.compile(r"failed", re.IGNORECASE),
    re.compile(r"not\s+found", re.IGNORECASE),
    re.compile(r"cannot", re.IGNORECASE),
    re.compile(r"missing", re.IGNORECASE),
    re.compile(r"stack", re.IGNORECASE),
)

MAX_RELEVANT_LINES = 5
LINE_DELIMITER = " | "


def extract_relevant_stderr(buffer: str) -> str:
    """Return the stderr lines most likely to describe a failure.

    Lines matching any of ``ERROR_SIGNATURE_PATTERNS`` are preferred. When
    nothing matches, every non-empty line is kept so that unexplained output
    is never silently approved. At most ``MAX_RELEVANT_LINES`` lines are
    returned, joined with ``" | "``. An empty or blank buffer yields ``""``.
    """
    trimmed = buffer.strip()
    if not trimmed:
        return ""

    lines = [line.strip() for line in re.split(r"\r?\n", trimmed)]
    lines = [line for line in lines if line]
    relevant = [line for line in lines if _looks_like_error(line)]
    chosen = relevant or lines
    return LINE_DELIMITER.join(chosen[:MAX_RELEVANT_LINES])


def _looks_like_error(line: str) -> bool:
    return any(pattern.search(line) for pattern in ERROR_SIGNATURE_PATTERNS)
