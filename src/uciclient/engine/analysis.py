from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Awaitable, Callable, Optional, Type

from uciclient.engine.info import AnalysisEvent, parse_info_line
from uciclient.engine.move import Move
from uciclient.protocol.channel import Subscription
from uciclient.protocol.constants import NULL_MOVES, Response
from uciclient.protocol.errors import EngineTerminated, UciError

logger = logging.getLogger(__name__)


class AnalysisStream:
    """
    Handle to a running search. Returned by :meth:`UciEngine.analyze`.

    Iterate with ``async for event in stream`` to receive one
    :class:`AnalysisEvent` per parseable ``info`` line. Iteration ends when
    the engine sends ``bestmove``; the move is then available as
    :attr:`best_move`. The stream is one-shot and cannot be restarted.

    Leaving ``async with`` (or calling :meth:`aclose`) before ``bestmove``
    stops the search and waits up to ``drain_timeout`` seconds for its
    ``bestmove``, so the reply cannot be mistaken for a later request's.
    """

    def __init__(
        self,
        lines: Subscription,
        stop: Optional[Callable[[], Awaitable[None]]] = None,
        on_finished: Optional[Callable[[], None]] = None,
        drain_timeout: Optional[float] = None,
    ):
        self._lines = lines
        self._stop = stop
        self._on_finished = on_finished
        self._drain_timeout = drain_timeout
        self._finished = False
        self.best_move: Optional[Move] = None

    @property
    def finished(self) -> bool:
        return self._finished

    async def stop(self) -> None:
        """Ask the engine to stop searching; iteration still ends on ``bestmove``."""
        if self._stop is not None and not self._finished:
            await self._stop()

    async def aclose(self) -> None:
        """
        Stop the search and consume its ``bestmove`` before releasing the session.

        If the engine does not answer within ``drain_timeout`` the session
        stays busy and further requests raise :class:`RequestInProgress`
        until it is stopped.
        """
        if self._finished:
            return
        try:
            await self.stop()
        except UciError as exc:
            logger.debug("Could not stop search: %s", exc)

        try:
            await asyncio.wait_for(self._drain(), self._drain_timeout)
        except asyncio.TimeoutError:
            self._finished = True
            self._lines.close()
            logger.warning(
                "No bestmove within %ss of stopping the search; session left busy",
                self._drain_timeout,
            )
            return
        self._finish()

    async def _drain(self) -> None:
        while True:
            line = await self._lines.get()
            if line is None or line.split()[:1] == [Response.BESTMOVE]:
                return

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._lines.close()
        if self._on_finished is not None:
            self._on_finished()

    def __aiter__(self) -> "AnalysisStream":
        return self

    async def __anext__(self) -> AnalysisEvent:
        while not self._finished:
            line = await self._lines.get()
            if line is None:
                self._finish()
                raise EngineTerminated("Engine output closed before bestmove")

            parts = line.split()
            if not parts:
                continue
            if parts[0] == Response.BESTMOVE:
                self._finish()
                if len(parts) > 1 and parts[1] not in NULL_MOVES:
                    self.best_move = Move.from_uci(parts[1])
                break
            if parts[0] == Response.INFO:
                event = parse_info_line(line)
                if event is not None:
                    return event
        raise StopAsyncIteration

    async def __aenter__(self) -> "AnalysisStream":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
