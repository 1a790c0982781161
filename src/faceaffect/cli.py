"""CLI for faceaffect: ``faceaffect replay`` and ``faceaffect list``."""

import argparse
import json
import logging
import sys
from typing import List, Optional

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faceaffect",
        description="Debounced emotion detection from facial Action Units",
    )
    sub = parser.add_subparsers(dest="command")

    # faceaffect replay
    replay_p = sub.add_parser("replay", help="Replay a JSONL AU trace through the engine")
    replay_p.add_argument("trace", help="Path to a JSONL AU trace")
    replay_p.add_argument(
        "--config", "-c",
        default=None,
        help="YAML engine configuration",
    )
    replay_p.add_argument(
        "--on-non-monotonic",
        choices=["raise", "clamp"],
        default=None,
        help="Backwards timestamp policy (overrides config)",
    )
    replay_p.add_argument(
        "--trace-level",
        choices=["off", "minimal", "normal", "verbose"],
        default=None,
        help="Observability trace level (default: minimal with --trace-file, else off)",
    )
    replay_p.add_argument(
        "--trace-file",
        default=None,
        help="Write trace records as JSONL to this file",
    )
    replay_p.add_argument(
        "--json",
        action="store_true",
        help="Print events as JSON lines",
    )
    replay_p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    # faceaffect list
    list_p = sub.add_parser("list", help="List built-in emotion kinds")
    list_p.add_argument(
        "--verbose",
        action="store_true",
        help="Show activation formulas",
    )

    return parser


def _cmd_list(args: argparse.Namespace) -> None:
    """Handle ``faceaffect list``."""
    from faceaffect.activations import FORMULAS
    from faceaffect.types import EmotionKind

    for kind in EmotionKind:
        if args.verbose:
            print(f"  {kind.value:12s}  {FORMULAS[kind]}")
        else:
            print(f"  {kind.value}")


def _cmd_replay(args: argparse.Namespace) -> int:
    """Handle ``faceaffect replay``."""
    from faceaffect.config import EngineConfig
    from faceaffect.engine import create_default_engine
    from faceaffect.errors import EmotionEngineError
    from faceaffect.observability import ConsoleSink, FileSink, ObservabilityHub, TraceLevel
    from faceaffect.replay import replay_trace

    hub = ObservabilityHub()
    try:
        config = EngineConfig.from_yaml(args.config) if args.config else EngineConfig()
        if args.on_non_monotonic:
            config.on_non_monotonic = args.on_non_monotonic
        engine = create_default_engine(config, hub=hub)
    except (OSError, TypeError, ValueError) as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return 1

    if args.trace_level is None:
        level = TraceLevel.MINIMAL if args.trace_file else TraceLevel.OFF
    else:
        level = TraceLevel.from_string(args.trace_level)
    if args.trace_file and level == TraceLevel.OFF:
        print("Warning: --trace-file ignored with --trace-level off", file=sys.stderr)
    if level > TraceLevel.OFF:
        sinks = [FileSink(args.trace_file)] if args.trace_file else [ConsoleSink()]
        hub.configure(level=level, sinks=sinks)

    def on_event(event) -> None:
        if args.json:
            print(json.dumps(event.to_dict()))
        else:
            state = "ON " if event.is_activation else "OFF"
            print(f"  {event.timestamp:10.3f}s  {event.emotion_kind:10s} {state} I={event.intensity:.2f}")

    try:
        result = replay_trace(args.trace, engine=engine, on_event=on_event)
    except (EmotionEngineError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        hub.shutdown()

    for ts, error in result.errors:
        print(f"  {ts:10.3f}s  {error.kind}: {error.cause!r}", file=sys.stderr)
    if not args.json:
        print(
            f"\nDone: {result.frame_count} frames ({result.duration_sec:.2f}s), "
            f"{len(result.events)} events, {len(result.errors)} channel errors"
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) and args.command == "replay" else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "list":
        _cmd_list(args)
        return 0
    if args.command == "replay":
        return _cmd_replay(args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
