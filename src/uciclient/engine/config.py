from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Timeouts (seconds, None for no bound) and defaults for one engine session."""

    request_timeout: float | None = 30.0
    handshake_timeout: float | None = 30.0
    ready_timeout: float | None = 30.0
    default_movetime_ms: int = 1000
    quit_timeout: float = 0.5
    encoding: str = "utf-8"

    def __post_init__(self):
        if self.default_movetime_ms <= 0:
            raise ValueError("default_movetime_ms must be positive")
        if self.quit_timeout < 0:
            raise ValueError("quit_timeout cannot be negative")
