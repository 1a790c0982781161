"""Replay recorded AU traces through an emotion engine.

Trace files are JSON Lines, one tick per line::

    {"t": 0.000, "aus": {"AU12": 0.82, "AU6": 0.31}}
    {"t": 0.033, "aus": {"AU12": 0.85, "AU6": 0.35}, "confidences": {"AU6": 0.7}}

``timestamp`` is accepted in place of ``t``. Blank lines are skipped.

Example:
    >>> result = replay_trace("session.jsonl")
    >>> for event in result.events:
    ...     print(event.to_dict())
"""

from dataclasses import dataclass, field
import json
import logging
import math
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from faceaffect.engine import EmotionEngine, create_default_engine
from faceaffect.errors import ChannelEvaluationError, TraceFormatError
from faceaffect.output import ActivationEvent
from faceaffect.types import FaceFrame

logger = logging.getLogger(__name__)

EventCallback = Callable[[ActivationEvent], None]


@dataclass(frozen=True)
class TraceTick:
    """One parsed trace line."""

    timestamp: float
    frame: FaceFrame


@dataclass
class ReplayResult:
    """Result of a replay.

    Attributes:
        events: All activation events, in emission order.
        errors: (timestamp, error) for every channel failure.
        frame_count: Ticks evaluated.
        first_timestamp: Timestamp of the first tick.
        last_timestamp: Timestamp of the last tick.
    """

    events: List[ActivationEvent] = field(default_factory=list)
    errors: List[Tuple[float, ChannelEvaluationError]] = field(default_factory=list)
    frame_count: int = 0
    first_timestamp: Optional[float] = None
    last_timestamp: Optional[float] = None

    @property
    def duration_sec(self) -> float:
        if self.first_timestamp is None or self.last_timestamp is None:
            return 0.0
        return self.last_timestamp - self.first_timestamp


def parse_trace_line(line: str, line_no: Optional[int] = None) -> Optional[TraceTick]:
    """Parse one JSONL trace line.

    Returns:
        TraceTick, or None for blank lines.

    Raises:
        TraceFormatError: If the line is not a valid tick.
    """
    line = line.strip()
    if not line:
        return None

    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise TraceFormatError(f"invalid JSON ({e.msg})", line_no) from e
    if not isinstance(data, dict):
        raise TraceFormatError("tick must be a JSON object", line_no)

    ts = data.get("t", data.get("timestamp"))
    if isinstance(ts, bool) or not isinstance(ts, (int, float)):
        raise TraceFormatError("missing or non-numeric timestamp ('t')", line_no)
    if not math.isfinite(ts):
        raise TraceFormatError(f"timestamp must be finite, got {ts!r}", line_no)

    aus = data.get("aus", {})
    confidences = data.get("confidences") or {}
    if not isinstance(aus, dict) or not isinstance(confidences, dict):
        raise TraceFormatError("'aus' and 'confidences' must be objects", line_no)

    try:
        frame = FaceFrame.from_intensities(aus, confidences)
    except (TypeError, ValueError) as e:
        raise TraceFormatError(str(e), line_no) from e
    return TraceTick(timestamp=float(ts), frame=frame)


def read_trace(source: Union[str, Path, Iterable[str]]) -> Iterator[TraceTick]:
    """Iterate over ticks of a trace file (or any iterable of lines)."""
    if isinstance(source, (str, Path)):
        with open(source, encoding="utf-8") as f:
            yield from _parse_lines(f)
    else:
        yield from _parse_lines(source)


def _parse_lines(lines: Iterable[str]) -> Iterator[TraceTick]:
    for line_no, line in enumerate(lines, start=1):
        tick = parse_trace_line(line, line_no)
        if tick is not None:
            yield tick


def replay(
    ticks: Iterable[TraceTick],
    engine: Optional[EmotionEngine] = None,
    on_event: Optional[EventCallback] = None,
) -> ReplayResult:
    """Evaluate ticks in order.

    Args:
        ticks: Parsed ticks.
        engine: Engine to drive (default: all built-in channels).
        on_event: Callback fired per activation event.

    Raises:
        NonMonotonicTimestamp: If a tick goes backwards and the engine
            rejects it.
    """
    engine = engine if engine is not None else create_default_engine()
    result = ReplayResult()

    for tick in ticks:
        evaluation = engine.evaluate(tick.frame, tick.timestamp)
        if result.first_timestamp is None:
            result.first_timestamp = tick.timestamp
        result.last_timestamp = tick.timestamp
        result.frame_count += 1

        for event in evaluation.events:
            result.events.append(event)
            if on_event is not None:
                on_event(event)
        for error in evaluation.errors:
            result.errors.append((tick.timestamp, error))

    logger.info(
        "Replayed %d ticks (%.2fs): %d events, %d channel errors",
        result.frame_count, result.duration_sec, len(result.events), len(result.errors),
    )
    return result


def replay_trace(
    path: Union[str, Path],
    engine: Optional[EmotionEngine] = None,
    on_event: Optional[EventCallback] = None,
) -> ReplayResult:
    """Read a JSONL trace file and replay it."""
    return replay(read_trace(path), engine=engine, on_event=on_event)


__all__ = [
    "TraceTick",
    "ReplayResult",
    "parse_trace_line",
    "read_trace",
    "replay",
    "replay_trace",
]
