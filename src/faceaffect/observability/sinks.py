"""Trace output sinks.

Sinks receive trace records and handle their output:
- FileSink: JSONL file output (buffered)
- ConsoleSink: Formatted one-line console output
- MemorySink: In-memory ring buffer for tests and analysis
- NullSink: Discards everything
"""

from collections import deque
from pathlib import Path
import sys
from typing import Deque, List, Optional, TextIO, Union

from faceaffect.observability.hub import Sink
from faceaffect.observability.records import (
    ChannelErrorRecord,
    EmotionTransitionRecord,
    FrameEvaluateRecord,
    TraceRecord,
)


class NullSink(Sink):
    """Sink that drops all records."""

    def write(self, record: TraceRecord) -> None:
        pass


class MemorySink(Sink):
    """Keeps the most recent records in memory.

    Args:
        max_records: Capacity; oldest records are dropped first.
    """

    def __init__(self, max_records: int = 10000):
        self._records: Deque[TraceRecord] = deque(maxlen=max_records)

    def write(self, record: TraceRecord) -> None:
        self._records.append(record)

    def get_records(self) -> List[TraceRecord]:
        return list(self._records)

    def get_by_type(self, record_type: str) -> List[TraceRecord]:
        return [r for r in self._records if r.record_type == record_type]

    def get_by_kind(self, kind: str) -> List[TraceRecord]:
        return [r for r in self._records if getattr(r, "kind", None) == kind]

    def get_transitions(self) -> List[EmotionTransitionRecord]:
        return [r for r in self._records if isinstance(r, EmotionTransitionRecord)]

    def get_errors(self) -> List[ChannelErrorRecord]:
        return [r for r in self._records if isinstance(r, ChannelErrorRecord)]

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class FileSink(Sink):
    """Writes records as JSON lines.

    Args:
        path: Output file; parent directories are created.
        buffer_size: Records buffered before an automatic flush.
    """

    def __init__(self, path: Union[str, Path], buffer_size: int = 100):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._buffer_size = max(1, buffer_size)
        self._buffer: List[str] = []
        self._file: Optional[TextIO] = open(self._path, "w", encoding="utf-8")

    @property
    def path(self) -> Path:
        return self._path

    def write(self, record: TraceRecord) -> None:
        if self._file is None:
            return
        self._buffer.append(record.to_json())
        if len(self._buffer) >= self._buffer_size:
            self.flush()

    def flush(self) -> None:
        if self._file is None or not self._buffer:
            return
        self._file.write("\n".join(self._buffer) + "\n")
        self._file.flush()
        self._buffer.clear()

    def close(self) -> None:
        if self._file is None:
            return
        self.flush()
        self._file.close()
        self._file = None


class ConsoleSink(Sink):
    """Prints transitions and channel errors as colored one-liners.

    Per-tick summaries are printed too when the hub runs at NORMAL or
    above; per-channel samples are skipped.

    Args:
        stream: Output stream (default: stderr).
        color: Use ANSI colors (default: only when stream is a TTY).
    """

    _COLORS = {
        "green": "\033[32m",
        "yellow": "\033[33m",
        "red": "\033[31m",
        "cyan": "\033[36m",
        "dim": "\033[2m",
    }
    _RESET = "\033[0m"

    def __init__(self, stream: Optional[TextIO] = None, color: Optional[bool] = None):
        self._stream = stream or sys.stderr
        if color is None:
            color = hasattr(self._stream, "isatty") and self._stream.isatty()
        self._color = color

    def _colorize(self, text: str, color: str) -> str:
        if not self._color:
            return text
        return f"{self._COLORS[color]}{text}{self._RESET}"

    def write(self, record: TraceRecord) -> None:
        line = self._format_record(record)
        if line is not None:
            print(line, file=self._stream)

    def flush(self) -> None:
        self._stream.flush()

    def _format_record(self, record: TraceRecord) -> Optional[str]:
        if isinstance(record, EmotionTransitionRecord):
            return self._format_transition(record)
        elif isinstance(record, ChannelErrorRecord):
            return self._format_error(record)
        elif isinstance(record, FrameEvaluateRecord):
            return self._format_frame(record)
        return None

    def _format_transition(self, record: EmotionTransitionRecord) -> str:
        if record.transition == "activated":
            state = self._colorize("ON ", "green")
        else:
            state = self._colorize("OFF", "yellow")
        kind = self._colorize(record.kind, "cyan")
        return f"[EMOTION] {kind} {state} @ {record.timestamp:.3f}s I={record.intensity:.2f}"

    def _format_error(self, record: ChannelErrorRecord) -> str:
        tag = self._colorize("[ERROR]", "red")
        return f"{tag} {record.kind} @ {record.timestamp:.3f}s {record.error_type}: {record.message}"

    def _format_frame(self, record: FrameEvaluateRecord) -> str:
        active = ",".join(record.active_kinds) or "-"
        return self._colorize(
            f"[TICK] #{record.frame_index} @ {record.timestamp:.3f}s "
            f"events={record.event_count} errors={record.error_count} active={active} "
            f"({record.processing_ms:.2f}ms)",
            "dim",
        )


__all__ = ["NullSink", "MemorySink", "FileSink", "ConsoleSink"]
