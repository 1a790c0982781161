"""Observability system for faceaffect.

Provides structured tracing of the emotion engine:
- Emotion transitions and channel failures
- Per-tick evaluation summaries
- Per-channel smoothing samples

Trace Levels:
- OFF: No tracing (default)
- MINIMAL: Transitions and failures only
- NORMAL: Plus tick summaries
- VERBOSE: Plus per-channel samples

Example:
    >>> from faceaffect.observability import ObservabilityHub, TraceLevel, FileSink
    >>> hub = ObservabilityHub()
    >>> hub.configure(level=TraceLevel.NORMAL, sinks=[FileSink("/tmp/trace.jsonl")])
    >>> engine = create_default_engine(hub=hub)
"""

from faceaffect.observability.hub import ObservabilityHub, Sink, TraceLevel
from faceaffect.observability.records import (
    ChannelErrorRecord,
    ChannelSampleRecord,
    EmotionTransitionRecord,
    FrameEvaluateRecord,
    TraceRecord,
)
from faceaffect.observability.sinks import ConsoleSink, FileSink, MemorySink, NullSink

__all__ = [
    # Core
    "TraceLevel",
    "Sink",
    "ObservabilityHub",
    # Records
    "TraceRecord",
    "EmotionTransitionRecord",
    "ChannelErrorRecord",
    "FrameEvaluateRecord",
    "ChannelSampleRecord",
    # Sinks
    "FileSink",
    "ConsoleSink",
    "MemorySink",
    "NullSink",
]
