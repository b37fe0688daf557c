from __future__ import annotations

from typing import Optional


class UciError(RuntimeError):
    """Runtime error caused by a misbehaving engine or incorrect usage."""


class AlreadyRunning(UciError):
    """The session already owns a running engine process."""


class SpawnFailed(UciError):
    """The engine executable could not be launched."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Failed to start engine at {path}: {cause}")
        self.path = path
        self.cause = cause


class NotRunning(UciError):
    """No engine process is owned, or its input pipe is gone."""


class NotInitialized(UciError):
    """The command requires a completed handshake."""


class SessionClosed(UciError):
    """The session was stopped and cannot be started again."""


class MissingEngineIdentity(UciError):
    """The engine finished the handshake without sending ``id name``."""


class RequestTimeout(UciError):
    """No matching reply arrived before the request deadline."""

    def __init__(self, command: str, timeout: Optional[float]):
        super().__init__(f"No reply to {command!r} within {timeout} seconds")
        self.command = command
        self.timeout = timeout


class HandshakeTimeout(RequestTimeout):
    """The engine never acknowledged the ``uci`` command."""


class RequestInProgress(UciError):
    """Another correlated request is still waiting for its reply."""


class EngineTerminated(UciError):
    """The engine output closed while a reply was still expected."""


class MalformedMoveText(UciError, ValueError):
    """Text that is not a move in long algebraic notation."""

    def __init__(self, text: str):
        super().__init__(f"Invalid move string: {text!r}")
        self.text = text
