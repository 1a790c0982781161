"""Pull-driven facial tracking loop around an EmotionEngine.

EmotionTracker asks a FaceFrameSource for the latest frame once per
tick, stamps it with a clock reading, evaluates the engine and fans
results out to callbacks:

- on_data_updated(frame, timestamp): fired when the frame differs from
  the previous one (or on every tick with detect_on_change=False)
- on_emotion_changed(event, frame): fired per activation event

If the source reports it is unavailable the tracker logs an error and
stops itself.

Example:
    >>> tracker = EmotionTracker(
    ...     source,
    ...     on_emotion_changed=lambda ev, fr: print(ev.emotion_kind, ev.transition.value),
    ... )
    >>> tracker.run(max_ticks=300, interval_sec=1 / 30)
"""

from dataclasses import dataclass
import logging
import time
from typing import Callable, Optional, Protocol

from faceaffect.engine import EmotionEngine, create_default_engine
from faceaffect.output import ActivationEvent, EvaluationResult
from faceaffect.types import FaceFrame

logger = logging.getLogger(__name__)

DataCallback = Callable[[FaceFrame, float], None]
EventCallback = Callable[[ActivationEvent, FaceFrame], None]


class FaceFrameSource(Protocol):
    """Protocol for AU providers (face trackers, replays, simulators)."""

    @property
    def is_available(self) -> bool:
        """Whether the source can currently deliver frames."""
        ...

    def fetch(self) -> Optional[FaceFrame]:
        """Latest AU snapshot, or None if no face this tick."""
        ...


@dataclass
class TickResult:
    """Outcome of one EmotionTracker.tick().

    Attributes:
        timestamp: Clock reading used for the tick.
        frame: Frame fetched from the source (None if no face).
        result: Engine result (None if no frame was evaluated).
        data_updated: Whether on_data_updated fired.
    """

    timestamp: float
    frame: Optional[FaceFrame] = None
    result: Optional[EvaluationResult] = None
    data_updated: bool = False


class EmotionTracker:
    """Drives an EmotionEngine from a FaceFrameSource.

    Args:
        source: Frame provider.
        engine: Engine to evaluate (default: all built-in channels).
        detect_on_change: Only fire on_data_updated when the frame changed.
        clock: Timestamp source in seconds (default: time.monotonic).
        on_data_updated: Callback ``(frame, timestamp)``.
        on_emotion_changed: Callback ``(event, frame)``.
    """

    def __init__(
        self,
        source: FaceFrameSource,
        engine: Optional[EmotionEngine] = None,
        *,
        detect_on_change: bool = True,
        clock: Callable[[], float] = time.monotonic,
        on_data_updated: Optional[DataCallback] = None,
        on_emotion_changed: Optional[EventCallback] = None,
    ):
        self._source = source
        self._engine = engine if engine is not None else create_default_engine()
        self._detect_on_change = detect_on_change
        self._clock = clock
        self._on_data_updated = on_data_updated
        self._on_emotion_changed = on_emotion_changed
        self._last_frame: Optional[FaceFrame] = None
        self._stopped = False

    @property
    def engine(self) -> EmotionEngine:
        return self._engine

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def last_frame(self) -> Optional[FaceFrame]:
        return self._last_frame

    def stop(self) -> None:
        self._stopped = True

    def tick(self, timestamp: Optional[float] = None) -> Optional[TickResult]:
        """Fetch, evaluate and dispatch one frame.

        Args:
            timestamp: Tick time in seconds (default: clock reading).

        Returns:
            TickResult, or None if the tracker is stopped.
        """
        if self._stopped:
            return None

        if not self._source.is_available:
            logger.error("Face source is not available, stopping tracker")
            self.stop()
            return None

        if timestamp is None:
            timestamp = self._clock()

        frame = self._source.fetch()
        if frame is None:
            return TickResult(timestamp=timestamp)

        changed = self._last_frame is None or frame != self._last_frame
        data_updated = not self._detect_on_change or changed
        if data_updated and self._on_data_updated is not None:
            self._on_data_updated(frame, timestamp)

        result = self._engine.evaluate(frame, timestamp)
        if self._on_emotion_changed is not None:
            for event in result.events:
                self._on_emotion_changed(event, frame)

        self._last_frame = frame
        return TickResult(
            timestamp=timestamp,
            frame=frame,
            result=result,
            data_updated=data_updated,
        )

    def run(self, max_ticks: Optional[int] = None, interval_sec: float = 0.0) -> int:
        """Tick until stopped or max_ticks is reached.

        Args:
            max_ticks: Upper bound on ticks (None = until stopped).
            interval_sec: Sleep between ticks.

        Returns:
            Number of ticks executed.
        """
        ticks = 0
        while not self._stopped and (max_ticks is None or ticks < max_ticks):
            if self.tick() is None:
                break
            ticks += 1
            if interval_sec > 0:
                time.sleep(interval_sec)
        logger.debug("Tracker ran %d ticks", ticks)
        return ticks


__all__ = ["FaceFrameSource", "TickResult", "EmotionTracker"]
