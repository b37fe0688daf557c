from __future__ import annotations

import asyncio
import logging
from typing import Optional

from uciclient.protocol.channel import LineChannel
from uciclient.protocol.constants import Command
from uciclient.protocol.errors import AlreadyRunning, NotRunning, SpawnFailed
from uciclient.protocol.interface import EngineInterface

logger = logging.getLogger(__name__)

# Upper bound for a single output line; long principal variations stay well below it
LINE_LIMIT = 1 << 20


class EngineProcess(EngineInterface):
    """Owns the engine child process and its stdin/stdout/stderr pipes."""

    def __init__(self, path: str, encoding: str = "utf-8", quit_timeout: float = 0.5):
        super().__init__()
        self.path = path
        self.encoding = encoding
        self.quit_timeout = quit_timeout
        self.stdout: Optional[LineChannel] = None
        self.stderr: Optional[LineChannel] = None
        self._process: Optional[asyncio.subprocess.Process] = None
        self._write_lock: Optional[asyncio.Lock] = None

    # ------------------------------------------------------------------
    # EngineInterface lifecycle
    # ------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        """True while the child is alive and its stdout is still open."""
        return (
            self._process is not None
            and self._process.returncode is None
            and self.stdout is not None
            and not self.stdout.closed
        )

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode if self._process is not None else None

    async def start(self):
        if self._process is not None:
            raise AlreadyRunning(f"Engine {self.path} is already running")

        try:
            process = await asyncio.create_subprocess_exec(
                self.path,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=LINE_LIMIT,
            )
        except OSError as exc:
            raise SpawnFailed(self.path, exc) from exc

        self._process = process
        self._write_lock = asyncio.Lock()

        self.stdout = LineChannel("stdout", encoding=self.encoding)
        self.stdout.add_listener(self._on_stdout_line)
        self.stderr = LineChannel("stderr", encoding=self.encoding)
        self.stderr.add_listener(self._on_stderr_line)
        self.stdout.attach(process.stdout)
        self.stderr.attach(process.stderr)
        logger.info("Started engine %s (pid %s)", self.path, process.pid)

    async def stop(self):
        process = self._process
        if process is None:
            return

        try:
            await self.send_command(Command.QUIT)
        except (NotRunning, OSError):
            logger.debug("Could not deliver quit to %s", self.path, exc_info=True)

        if process.returncode is None and self.quit_timeout > 0:
            try:
                await asyncio.wait_for(process.wait(), self.quit_timeout)
            except asyncio.TimeoutError:
                logger.debug("Engine %s ignored quit, killing it", self.path)

        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()

        if process.stdin is not None:
            process.stdin.close()
        for channel in (self.stdout, self.stderr):
            if channel is not None:
                await channel.wait_closed()

        self._process = None
        self._write_lock = None
        logger.info("Stopped engine %s (exit code %s)", self.path, process.returncode)

    # ------------------------------------------------------------------
    # Command handling
    # ------------------------------------------------------------------
    async def send_command(self, command: str):
        if "\n" in command or "\r" in command:
            raise ValueError(f"Command must be a single line: {command!r}")

        process = self._process
        if process is None or process.stdin is None or self._write_lock is None:
            raise NotRunning("Engine process not running")

        async with self._write_lock:
            logger.debug(">> %s", command)
            try:
                process.stdin.write(f"{command}\n".encode(self.encoding))
                await process.stdin.drain()
            except (BrokenPipeError, ConnectionResetError) as exc:
                raise NotRunning(f"Engine {self.path} closed its input") from exc

    # ------------------------------------------------------------------
    # Output listeners
    # ------------------------------------------------------------------
    def _on_stdout_line(self, line: str):
        logger.debug("<< %s", line)
        self._emit(line)

    def _on_stderr_line(self, line: str):
        logger.debug("stderr: %s", line)
