"""Asynchronous external process handle."""

from __future__ import annotations

import asyncio
import codecs
import errno
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from quarkdown_export.errors import ProcessStartError

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096
DEFAULT_STOP_TIMEOUT = 5.0


@dataclass(slots=True)
class ProcessConfig:
    """Command to run plus the callbacks that receive its signals."""

    command: str
    args: Sequence[str]
    cwd: Path | str | None = None
    on_stdout: Callable[[str], None] | None = None
    on_stderr: Callable[[str], None] | None = None
    on_error: Callable[[OSError], None] | None = None
    on_exit: Callable[[int], None] | None = None


class ProcessHandle(Protocol):
    """A single external process."""

    async def start(self, config: ProcessConfig) -> None:
        ...

    async def stop(self) -> None:
        ...

    def is_running(self) -> bool:
        ...


def is_not_found(exc: BaseException) -> bool:
    """Return True when a spawn error means the executable does not exist."""
    if isinstance(exc, FileNotFoundError):
        return True
    return getattr(exc, "errno", None) == errno.ENOENT


class AsyncioProcessHandle:
    """Process handle built on ``asyncio.create_subprocess_exec``.

    Output is read in chunks from both pipes concurrently and decoded
    incrementally, so a multi-byte character split across two reads is
    delivered intact. Every output chunk is delivered before ``on_exit``,
    and ``is_running()`` is already False when ``on_exit`` fires.

    An ``OSError`` raised while spawning (missing executable, bad working
    directory, permission denied) is reported through ``on_error`` and
    ``start`` returns normally. Anything else wrong with the start call
    raises ``ProcessStartError``.
    """

    def __init__(
        self,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        stop_timeout: float = DEFAULT_STOP_TIMEOUT,
        encoding: str = "utf-8",
    ) -> None:
        self._chunk_size = chunk_size
        self._stop_timeout = stop_timeout
        self._encoding = encoding
        self._process: asyncio.subprocess.Process | None = None
        self._pump: asyncio.Task[None] | None = None
        self._running = False

    def is_running(self) -> bool:
        return self._running

    async def start(self, config: ProcessConfig) -> None:
        if self._running:
            raise ProcessStartError("process is already running")
        if not config.command:
            raise ProcessStartError("no command given")

        try:
            process = await asyncio.create_subprocess_exec(
                config.command,
                *config.args,
                cwd=None if config.cwd is None else str(config.cwd),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            LOGGER.debug("Spawning %s failed: %s", config.command, exc)
            if config.on_error is not None:
                config.on_error(exc)
            return
        except (TypeError, ValueError) as exc:
            raise ProcessStartError(f"invalid command for {config.command}: {exc}") from exc

        LOGGER.debug("Started %s (pid %s)", config.command, process.pid)
        self._process = process
        self._running = True
        self._pump = asyncio.create_task(self._drive(process, config))

    async def stop(self) -> None:
        process = self._process
        if process is None or not self._running:
            return

        if process.returncode is None:
            try:
                process.terminate()
            except ProcessLookupError:
                pass
            else:
                try:
                    await asyncio.wait_for(process.wait(), self._stop_timeout)
                except asyncio.TimeoutError:
                    LOGGER.debug("Process %s ignored SIGTERM, killing it", process.pid)
                    process.kill()
                    await process.wait()

        if self._pump is not None:
            await self._pump

    async def _drive(self, process: asyncio.subprocess.Process, config: ProcessConfig) -> None:
        try:
            await asyncio.gather(
                self._read_stream(process.stdout, config.on_stdout),  # type: ignore[arg-type]
                self._read_stream(process.stderr, config.on_stderr),  # type: ignore[arg-type]
            )
            code = await process.wait()
        finally:
            self._running = False

        LOGGER.debug("Process %s exited with code %s", process.pid, code)
        if config.on_exit is not None:
            config.on_exit(code)

    async def _read_stream(
        self,
        stream: asyncio.StreamReader,
        callback: Callable[[str], None] | None,
    ) -> None:
        decoder = codecs.getincrementaldecoder(self._encoding)(errors="replace")
        while True:
            data = await stream.read(self._chunk_size)
            text = decoder.decode(data, final=not data)
            if text and callback is not None:
                callback(text)
            if not data:
                return
