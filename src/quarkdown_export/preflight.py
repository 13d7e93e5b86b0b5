"""Executable preflight checks."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class PreflightResult:
    """Preflight result including warnings."""

    executable: str
    resolved_path: Path | None
    warnings: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.resolved_path is not None


def preflight_executable(executable_path: str) -> PreflightResult:
    """Resolve the Quarkdown executable and warn when it cannot be found.

    A missing executable is only a warning here: the export reports it as a
    tool-not-found failure with its own message.
    """
    warnings: list[str] = []
    resolved = shutil.which(executable_path)
    if resolved is None:
        warnings.append(
            f"Quarkdown executable '{executable_path}' was not found on PATH. "
            "Install Quarkdown or point --executable / QUARKDOWN_PATH at it."
        )
        return PreflightResult(executable=executable_path, resolved_path=None, warnings=warnings)
    return PreflightResult(
        executable=executable_path,
        resolved_path=Path(resolved),
        warnings=warnings,
    )
