from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from uciclient.engine.move import Move
from uciclient.protocol.constants import Response
from uciclient.protocol.errors import MalformedMoveText

_INT_FIELDS = ("depth", "seldepth", "multipv", "nodes", "nps", "time")


@dataclass(frozen=True)
class AnalysisEvent:
    depth: int
    score_centipawns: int
    principal_variation: Tuple[Move, ...]
    nodes: int = 0
    time_ms: int = 0
    seldepth: Optional[int] = None
    multipv: int = 1
    nps: Optional[int] = None

    def __str__(self) -> str:
        pv = " ".join(move.uci() for move in self.principal_variation)
        return f"Depth: {self.depth}, Score: {self.score_centipawns}, PV: {pv}"


def _to_int(token: Optional[str]) -> Optional[int]:
    if token is None:
        return None
    try:
        return int(token)
    except ValueError:
        return None


def parse_info_line(line: str) -> Optional[AnalysisEvent]:
    """
    Return the event described by ``line``, or None if it lacks depth or score.

    Unknown keys are skipped and a non-numeric value counts as missing. The
    principal variation stops at the first token that is not a move.
    """
    tokens = line.split()
    if tokens and tokens[0] == Response.INFO:
        tokens = tokens[1:]

    fields: Dict[str, int] = {}
    score_cp: Optional[int] = None
    pv: List[Move] = []

    i = 0
    count = len(tokens)
    while i < count:
        key = tokens[i]
        if key in _INT_FIELDS:
            value = _to_int(tokens[i + 1] if i + 1 < count else None)
            if value is not None:
                fields[key] = value
            i += 2
        elif key == "score":
            kind = tokens[i + 1] if i + 1 < count else None
            value = _to_int(tokens[i + 2] if i + 2 < count else None)
            if kind == "cp" and value is not None:
                score_cp = value
            i += 3
        elif key == "pv":
            i += 1
            pv = []
            while i < count:
                try:
                    pv.append(Move.from_uci(tokens[i]))
                except MalformedMoveText:
                    break
                i += 1
        elif key == "string":
            # free text up to the end of the line
            break
        else:
            i += 1

    if "depth" not in fields or score_cp is None:
        return None

    return AnalysisEvent(
        depth=fields["depth"],
        score_centipawns=score_cp,
        principal_variation=tuple(pv),
        nodes=fields.get("nodes", 0),
        time_ms=fields.get("time", 0),
        seldepth=fields.get("seldepth"),
        multipv=fields.get("multipv", 1),
        nps=fields.get("nps"),
    )
