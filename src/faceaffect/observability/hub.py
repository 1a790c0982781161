"""Trace levels, sink protocol and the observability hub.

Unlike a process-wide singleton, a hub is a plain object: create one,
configure it, and hand it to the engines that should report to it.

Example:
    >>> hub = ObservabilityHub()
    >>> hub.configure(level=TraceLevel.NORMAL, sinks=[MemorySink()])
    >>> engine = EmotionEngine(hub=hub)
"""

from enum import IntEnum
import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from faceaffect.observability.records import TraceRecord

logger = logging.getLogger(__name__)


class TraceLevel(IntEnum):
    """Trace verbosity.

    - OFF: No tracing (default)
    - MINIMAL: Emotion transitions and channel failures
    - NORMAL: Plus per-tick summaries
    - VERBOSE: Plus per-channel samples on every tick
    """

    OFF = 0
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3

    @classmethod
    def from_string(cls, value: str) -> "TraceLevel":
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(
                f"Unknown trace level: {value!r} "
                f"(expected one of {', '.join(m.name.lower() for m in cls)})"
            ) from None


class Sink:
    """Base class for trace sinks."""

    def write(self, record: "TraceRecord") -> None:
        raise NotImplementedError

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()


class ObservabilityHub:
    """Routes trace records to sinks, filtered by trace level."""

    def __init__(
        self,
        level: TraceLevel = TraceLevel.OFF,
        sinks: Optional[Sequence[Sink]] = None,
    ):
        self._level = level
        self._sinks: List[Sink] = list(sinks or [])

    @property
    def level(self) -> TraceLevel:
        return self._level

    @property
    def enabled(self) -> bool:
        return self._level > TraceLevel.OFF

    @property
    def sinks(self) -> List[Sink]:
        return list(self._sinks)

    def configure(
        self,
        level: TraceLevel = TraceLevel.NORMAL,
        sinks: Optional[Sequence[Sink]] = None,
    ) -> None:
        """Set trace level and optionally add sinks."""
        self._level = level
        for sink in sinks or []:
            self.add_sink(sink)
        logger.debug("Observability configured: level=%s sinks=%d", level.name, len(self._sinks))

    def is_level_enabled(self, level: TraceLevel) -> bool:
        return self.enabled and level <= self._level

    def add_sink(self, sink: Sink) -> None:
        if sink not in self._sinks:
            self._sinks.append(sink)

    def remove_sink(self, sink: Sink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def emit(self, record: "TraceRecord") -> None:
        """Send a record to all sinks if its level is enabled."""
        if not self.is_level_enabled(record.min_level):
            return
        for sink in self._sinks:
            sink.write(record)

    def flush(self) -> None:
        for sink in self._sinks:
            sink.flush()

    def shutdown(self) -> None:
        """Close all sinks and disable tracing."""
        for sink in self._sinks:
            sink.close()
        self._sinks.clear()
        self._level = TraceLevel.OFF


__all__ = ["TraceLevel", "Sink", "ObservabilityHub"]
