from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from uciclient.protocol.errors import MalformedMoveText

_SQUARE_RE = re.compile(r"^[a-h][1-8]$")
PROMOTION_PIECES = "qrbn"


@dataclass(frozen=True)
class Move:
    """A move in long algebraic notation, e.g. ``e2e4`` or ``e7e8q``."""

    from_square: str
    to_square: str
    promotion: Optional[str] = None

    def __post_init__(self):
        if not _SQUARE_RE.match(self.from_square) or not _SQUARE_RE.match(self.to_square):
            raise MalformedMoveText(f"{self.from_square}{self.to_square}{self.promotion or ''}")
        if self.promotion is not None and (
            len(self.promotion) != 1 or self.promotion not in PROMOTION_PIECES
        ):
            raise MalformedMoveText(f"{self.from_square}{self.to_square}{self.promotion}")

    @classmethod
    def from_uci(cls, text: str) -> "Move":
        """Creates a Move from a string like "e2e4" or "e7e8q"."""
        if len(text) not in (4, 5):
            raise MalformedMoveText(text)
        return cls(
            from_square=text[0:2],
            to_square=text[2:4],
            promotion=text[4:] or None,
        )

    def uci(self) -> str:
        return f"{self.from_square}{self.to_square}{self.promotion or ''}"

    def __str__(self) -> str:
        return self.uci()
