from abc import ABC, abstractmethod
from typing import Callable, Optional


class EngineInterface(ABC):
    """
    Abstract base class for a UCI engine transport.
    This decouples the protocol session from how command lines reach the
    engine and how its output lines come back.
    """

    def __init__(self):
        self.on_message: Optional[Callable[[str], None]] = None

    def set_callback(self, callback: Optional[Callable[[str], None]]):
        """Set the callback function to handle lines from the engine."""
        self.on_message = callback

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """True while a live engine process is owned."""

    @abstractmethod
    async def start(self):
        """Start the engine process."""
        pass

    @abstractmethod
    async def send_command(self, command: str):
        """Send a text command line to the engine."""
        pass

    @abstractmethod
    async def stop(self):
        """Stop the engine."""
        pass

    def _emit(self, message: str):
        """Helper to emit message to callback."""
        if self.on_message:
            self.on_message(message)
