from __future__ import annotations

import contextlib
import enum
import logging
from types import TracebackType
from typing import Any, Dict, Iterable, Iterator, List, Optional, Type, Union

from uciclient.engine.analysis import AnalysisStream
from uciclient.engine.config import EngineConfig
from uciclient.engine.correlator import NO_MATCH, request
from uciclient.engine.metadata import UNKNOWN_AUTHOR, EngineInfo
from uciclient.engine.move import Move
from uciclient.engine.process import EngineProcess
from uciclient.protocol.constants import NULL_MOVES, Command, GoParam, PositionToken, Response
from uciclient.protocol.errors import (
    HandshakeTimeout,
    MissingEngineIdentity,
    NotInitialized,
    NotRunning,
    RequestInProgress,
    SessionClosed,
)

logger = logging.getLogger(__name__)

MoveLike = Union[Move, str]


class SessionState(enum.Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"
    INITIALIZED = "initialized"
    STOPPED = "stopped"


class _Handshake:
    """Collects ``id`` and ``option`` lines until ``uciok``."""

    def __init__(self):
        self.name: Optional[str] = None
        self.author: Optional[str] = None
        self.options: Dict[str, str] = {}

    def feed(self, line: str) -> object:
        if line.startswith("id name "):
            self.name = line[len("id name "):]
        elif line.startswith("id author "):
            self.author = line[len("id author "):]
        elif line.startswith("option name "):
            parts = line.split()
            if len(parts) >= 3:
                self.options[parts[2]] = line
        elif line.strip() == Response.UCIOK:
            return self.finish()
        return NO_MATCH

    def finish(self) -> EngineInfo:
        if self.name is None:
            raise MissingEngineIdentity("Engine did not provide a name")
        return EngineInfo(
            name=self.name,
            author=self.author if self.author is not None else UNKNOWN_AUTHOR,
            options=self.options,
        )


def _match_ready(line: str) -> object:
    return True if line.strip() == Response.READYOK else NO_MATCH


def _match_bestmove(line: str) -> object:
    parts = line.split()
    if not parts or parts[0] != Response.BESTMOVE:
        return NO_MATCH
    if len(parts) < 2 or parts[1] in NULL_MOVES:
        return None
    return Move.from_uci(parts[1])


def _render_option_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _go_command(depth: Optional[int], time_ms: Optional[int], nodes: Optional[int]) -> List[str]:
    parts = [Command.GO]
    if depth is not None:
        parts += [GoParam.DEPTH, str(depth)]
    if time_ms is not None:
        parts += [GoParam.MOVETIME, str(time_ms)]
    if nodes is not None:
        parts += [GoParam.NODES, str(nodes)]
    return parts


class UciEngine:
    """
    One UCI engine process and the protocol session running over it.

    Typical use::

        async with UciEngine("/usr/bin/stockfish") as engine:
            await engine.set_position(moves=["e2e4", "d7d5"])
            move = await engine.get_best_move(depth=12)

    The protocol is serial: only one correlated request (handshake,
    ready check, best-move search or analysis) may be outstanding at a time.
    Starting another raises :class:`RequestInProgress`.
    """

    def __init__(self, engine_path: str, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.process = EngineProcess(
            engine_path,
            encoding=self.config.encoding,
            quit_timeout=self.config.quit_timeout,
        )
        self._state = SessionState.NOT_STARTED
        self._info: Optional[EngineInfo] = None
        self._outstanding: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def info(self) -> Optional[EngineInfo]:
        return self._info

    @property
    def is_running(self) -> bool:
        return self.process.is_running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self) -> None:
        if self._state is SessionState.STOPPED:
            raise SessionClosed("Engine session was stopped; create a new session")
        await self.process.start()
        self._state = SessionState.STARTED

    async def stop(self) -> None:
        await self.process.stop()
        self._state = SessionState.STOPPED
        self._outstanding = None

    async def initialize(self) -> EngineInfo:
        """Run the ``uci`` handshake and return the engine's identity."""
        if self._state is SessionState.INITIALIZED and self._info is not None:
            return self._info
        if self._state is not SessionState.STARTED or not self.process.is_running:
            raise NotRunning("Engine not started. Call start() first.")

        handshake = _Handshake()
        with self._claim(Command.UCI):
            info = await request(
                self.process,
                Command.UCI,
                handshake.feed,
                self.config.handshake_timeout,
                timeout_error=HandshakeTimeout,
            )

        logger.info("Initialized %s by %s (%d options)", info.name, info.author, len(info.options))
        self._info = info
        self._state = SessionState.INITIALIZED
        return info

    def _ensure_ready(self) -> None:
        if self._state is not SessionState.INITIALIZED or not self.process.is_running:
            raise NotInitialized("Engine not initialized. Call initialize() first.")

    # ------------------------------------------------------------------
    # Fire-and-forget commands
    # ------------------------------------------------------------------
    async def new_game(self) -> None:
        self._ensure_ready()
        await self.process.send_command(Command.UCINEWGAME)

    async def set_position(
        self,
        fen: Optional[str] = None,
        moves: Optional[Iterable[MoveLike]] = None,
    ) -> None:
        """Set the position from ``fen`` (or the start position) plus ``moves``."""
        self._ensure_ready()

        parts = [Command.POSITION]
        if fen is not None:
            parts += [PositionToken.FEN, fen]
        else:
            parts.append(PositionToken.STARTPOS)

        move_texts = [
            move.uci() if isinstance(move, Move) else Move.from_uci(move).uci()
            for move in (moves or [])
        ]
        if move_texts:
            parts.append(PositionToken.MOVES)
            parts += move_texts

        await self.process.send_command(" ".join(parts))

    async def set_option(self, name: str, value: Any = None) -> None:
        """Send ``setoption``. ``value=None`` triggers a button option."""
        self._ensure_ready()
        command = f"{Command.SETOPTION} name {name}"
        if value is not None:
            command += f" value {_render_option_value(value)}"
        await self.process.send_command(command)

    async def stop_analysis(self) -> None:
        self._ensure_ready()
        await self.process.send_command(Command.STOP)

    # ------------------------------------------------------------------
    # Correlated requests
    # ------------------------------------------------------------------
    async def is_ready(self) -> bool:
        if self._state is not SessionState.INITIALIZED or not self.process.is_running:
            return False
        with self._claim(Command.ISREADY):
            return await request(
                self.process,
                Command.ISREADY,
                _match_ready,
                self.config.ready_timeout,
            )

    async def get_best_move(
        self,
        depth: Optional[int] = None,
        time_ms: Optional[int] = None,
        nodes: Optional[int] = None,
    ) -> Optional[Move]:
        """
        Search the current position and return the engine's best move.

        Without any limit the search is bounded by
        ``config.default_movetime_ms``. The wait itself is bounded by
        ``config.request_timeout`` whatever the limits; on timeout the
        engine keeps searching and the session should be restarted.
        Returns None when the engine reports no legal move.
        """
        self._ensure_ready()
        if depth is None and time_ms is None and nodes is None:
            time_ms = self.config.default_movetime_ms
        command = " ".join(_go_command(depth, time_ms, nodes))

        with self._claim(command):
            return await request(
                self.process,
                command,
                _match_bestmove,
                self.config.request_timeout,
            )

    async def analyze(
        self,
        depth: Optional[int] = None,
        time_ms: Optional[int] = None,
        nodes: Optional[int] = None,
    ) -> AnalysisStream:
        """Start a search and return a stream of its progress events.

        Without any limit the engine searches until :meth:`stop_analysis`.
        """
        self._ensure_ready()
        parts = _go_command(depth, time_ms, nodes)
        if len(parts) == 1:
            parts.append(GoParam.INFINITE)
        command = " ".join(parts)

        self._acquire(command)
        lines = self.process.stdout.subscribe()
        try:
            await self.process.send_command(command)
        except BaseException:
            lines.close()
            self._release()
            raise
        return AnalysisStream(
            lines,
            stop=self.stop_analysis,
            on_finished=self._release,
            drain_timeout=self.config.request_timeout,
        )

    # ------------------------------------------------------------------
    # Single outstanding request
    # ------------------------------------------------------------------
    def _acquire(self, command: str) -> None:
        if self._outstanding is not None:
            raise RequestInProgress(
                f"Cannot send {command!r} while {self._outstanding!r} awaits its reply"
            )
        self._outstanding = command

    def _release(self) -> None:
        self._outstanding = None

    @contextlib.contextmanager
    def _claim(self, command: str) -> Iterator[None]:
        self._acquire(command)
        try:
            yield
        finally:
            self._release()

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------
    async def __aenter__(self) -> "UciEngine":
        await self.start()
        try:
            await self.initialize()
        except BaseException:
            await self.stop()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.stop()
