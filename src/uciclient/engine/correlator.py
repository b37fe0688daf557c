from __future__ import annotations

import asyncio
from typing import Callable, Type

from uciclient.engine.process import EngineProcess
from uciclient.protocol.channel import Subscription
from uciclient.protocol.errors import EngineTerminated, NotRunning, RequestTimeout

NO_MATCH = object()


async def request(
    process: EngineProcess,
    command: str,
    match: Callable[[str], object],
    timeout: float | None,
    timeout_error: Type[RequestTimeout] = RequestTimeout,
):
    """
    Send ``command`` and return the first value ``match`` produces.

    UCI replies carry no request id, so a reply is recognised by its shape
    alone. Stdout is subscribed before the command is written, so a reply
    that arrives immediately cannot be missed. Every line is fed to ``match``
    until it returns something other than :data:`NO_MATCH`.
    """
    if process.stdout is None:
        raise NotRunning("Engine process not running")

    with process.stdout.subscribe() as lines:
        await process.send_command(command)
        try:
            return await asyncio.wait_for(_first_match(lines, command, match), timeout)
        except asyncio.TimeoutError:
            raise timeout_error(command, timeout) from None


async def _first_match(lines: Subscription, command: str, match: Callable[[str], object]):
    async for line in lines:
        result = match(line)
        if result is not NO_MATCH:
            return result
    raise EngineTerminated(f"Engine output closed while waiting for a reply to {command!r}")
