from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from uciclient.engine.config import EngineConfig
from uciclient.engine.info import AnalysisEvent
from uciclient.engine.metadata import EngineInfo
from uciclient.engine.move import Move
from uciclient.engine.session import UciEngine


@dataclass
class ProbeSpec:
    mode: str  # "info", "bestmove" or "analyze"
    fen: str | None = None
    moves: List[str] = field(default_factory=list)
    depth: int | None = None
    time_ms: int | None = None
    nodes: int | None = None
    options: dict | None = None


@dataclass
class ProbeResult:
    info: EngineInfo
    best_move: Optional[Move] = None
    events: List[AnalysisEvent] = field(default_factory=list)


async def run_probe(engine_path: str, spec: ProbeSpec, config: EngineConfig | None = None) -> ProbeResult:
    """Start the engine, run one probe and always shut the engine down."""
    async with UciEngine(engine_path, config) as engine:
        result = ProbeResult(info=engine.info)
        if spec.mode == "info":
            return result

        for name, value in (spec.options or {}).items():
            await engine.set_option(name, value)
        await engine.new_game()
        await engine.set_position(fen=spec.fen, moves=spec.moves)

        if spec.mode == "bestmove":
            result.best_move = await engine.get_best_move(
                depth=spec.depth,
                time_ms=spec.time_ms,
                nodes=spec.nodes,
            )
        elif spec.mode == "analyze":
            if spec.depth is None and spec.time_ms is None and spec.nodes is None:
                raise ValueError("analyze needs a depth, movetime or node limit")
            async with await engine.analyze(
                depth=spec.depth,
                time_ms=spec.time_ms,
                nodes=spec.nodes,
            ) as stream:
                async for event in stream:
                    result.events.append(event)
            result.best_move = stream.best_move
        else:
            raise ValueError(f"Unknown probe mode '{spec.mode}'")
        return result
