from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Callable, List, Optional, Type

logger = logging.getLogger(__name__)

LineListener = Callable[[str], None]


class Subscription:
    """
    One consumer's view of a :class:`LineChannel`.

    Lines published after the subscription was created are queued in order
    and can be read with :meth:`get` or ``async for``. ``None`` from
    :meth:`get` (or the end of ``async for``) means the channel closed.
    """

    def __init__(self, channel: "LineChannel"):
        self._channel = channel
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue()
        self._ended = False
        self._released = False

    def _put(self, line: Optional[str]) -> None:
        self._queue.put_nowait(line)

    async def get(self) -> Optional[str]:
        """Wait for the next line, or return None once the channel closed."""
        if self._ended:
            return None
        line = await self._queue.get()
        if line is None:
            self._ended = True
        return line

    def close(self) -> None:
        """Stop receiving lines. Safe to call more than once."""
        if not self._released:
            self._released = True
            self._channel._unsubscribe(self)

    @property
    def closed(self) -> bool:
        return self._released

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> str:
        line = await self.get()
        if line is None:
            raise StopAsyncIteration
        return line

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


class LineChannel:
    """
    Decoded, newline-split lines of one process pipe, broadcast to all consumers.

    Every line goes to each open :class:`Subscription` and to every listener
    callback, so consumers never compete for a line: a handshake reader, a
    pending request and an analysis stream can all watch stdout at once.
    """

    def __init__(self, name: str, encoding: str = "utf-8"):
        self.name = name
        self.encoding = encoding
        self._subscribers: List[Subscription] = []
        self._listeners: List[LineListener] = []
        self._closed = False
        self._pump_task: Optional[asyncio.Task] = None

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------
    def subscribe(self) -> Subscription:
        """Return a new subscription that sees every line published from now on."""
        subscription = Subscription(self)
        if self._closed:
            subscription._put(None)
        else:
            self._subscribers.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)

    def add_listener(self, listener: LineListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: LineListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------
    def attach(self, reader: asyncio.StreamReader) -> None:
        """Start pumping lines from ``reader`` until it reaches EOF."""
        if self._pump_task is not None:
            raise RuntimeError(f"{self.name} channel is already attached")
        self._pump_task = asyncio.ensure_future(self._pump(reader))

    async def _pump(self, reader: asyncio.StreamReader) -> None:
        # set while skipping the rest of an overlong line
        discarding = False
        try:
            while True:
                try:
                    raw = await reader.readuntil(b"\n")
                except asyncio.IncompleteReadError as e:
                    raw = e.partial
                except asyncio.LimitOverrunError as e:
                    if not discarding:
                        logger.warning("Dropped overlong line on %s channel", self.name)
                    discarding = True
                    await reader.readexactly(e.consumed)
                    continue
                if not raw:
                    break
                if discarding:
                    discarding = False
                    continue
                self.publish(raw.decode(self.encoding, errors="replace").rstrip("\r\n"))
        finally:
            self.close()

    def publish(self, line: str) -> None:
        if self._closed:
            return
        for subscription in list(self._subscribers):
            subscription._put(line)
        for listener in list(self._listeners):
            try:
                listener(line)
            except Exception:
                logger.exception("Listener on %s channel failed for line %r", self.name, line)

    def close(self) -> None:
        """Mark the end of the stream for every subscriber."""
        if self._closed:
            return
        self._closed = True
        subscribers, self._subscribers = self._subscribers, []
        for subscription in subscribers:
            subscription._put(None)

    async def wait_closed(self) -> None:
        """Wait until the pump task has drained the pipe."""
        if self._pump_task is not None:
            await self._pump_task
