import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from uciclient.cli.probe import ProbeResult, ProbeSpec, run_probe
from uciclient.engine.config import EngineConfig
from uciclient.protocol.errors import UciError


def _parse_option(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{text}'")
    return name, value


def build_spec(args: argparse.Namespace) -> ProbeSpec:
    return ProbeSpec(
        mode=args.command,
        fen=getattr(args, "fen", None),
        moves=list(getattr(args, "moves", None) or []),
        depth=getattr(args, "depth", None),
        time_ms=getattr(args, "movetime", None),
        nodes=getattr(args, "nodes", None),
        options=dict(getattr(args, "option", None) or []),
    )


def build_config(args: argparse.Namespace) -> EngineConfig:
    timeout = args.timeout if args.timeout and args.timeout > 0 else None
    return EngineConfig(
        request_timeout=timeout,
        handshake_timeout=timeout,
        ready_timeout=timeout,
    )


def print_result(spec: ProbeSpec, result: ProbeResult) -> None:
    print(result.info)
    if spec.mode == "analyze":
        print("\nAnalysis:")
        for event in result.events:
            print(
                f"- {event} | nodes {event.nodes}, time {event.time_ms} ms"
            )
    if spec.mode in ("bestmove", "analyze"):
        print(f"\nBest move: {result.best_move if result.best_move else '(none)'}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="UCI engine client")
    parser.add_argument("--timeout", type=float, default=30.0, help="Reply timeout in seconds, 0 to wait forever (default: 30)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log the protocol traffic")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    info_parser = subparsers.add_parser("info", help="Print engine identity and options")
    info_parser.add_argument("engine", help="Path to the engine executable")

    for name, help_text in (
        ("bestmove", "Search a position and print the best move"),
        ("analyze", "Stream search progress for a position"),
    ):
        search_parser = subparsers.add_parser(name, help=help_text)
        search_parser.add_argument("engine", help="Path to the engine executable")
        search_parser.add_argument("--fen", help="Position in FEN (default: start position)")
        search_parser.add_argument("--moves", nargs="*", default=[], help="Moves played from the position, e.g. e2e4 e7e5")
        search_parser.add_argument("--depth", type=int, help="Search depth in plies")
        search_parser.add_argument("--movetime", type=int, help="Search time in milliseconds")
        search_parser.add_argument("--nodes", type=int, help="Node budget for the search")
        search_parser.add_argument(
            "--option",
            type=_parse_option,
            action="append",
            metavar="NAME=VALUE",
            help="Engine option to set before searching (repeatable)",
        )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    spec = build_spec(args)
    try:
        result = asyncio.run(run_probe(args.engine, spec, build_config(args)))
    except (UciError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print_result(spec, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
