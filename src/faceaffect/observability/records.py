"""Trace record data classes for emotion engine observability.

Record Categories:
- Transition records: emotion activations/deactivations (MINIMAL)
- Error records: activation function failures (MINIMAL)
- Tick records: per-evaluate summaries (NORMAL)
- Sample records: per-channel smoothing details (VERBOSE)
"""

from dataclasses import asdict, dataclass, field
import json
import time
from typing import Any, Dict, List

from faceaffect.observability.hub import TraceLevel


@dataclass
class TraceRecord:
    """Base class for all trace records.

    Subclasses override record_type (non-init) and, where needed,
    min_level.
    """

    record_type: str = field(default="base", init=False)
    min_level: TraceLevel = field(default=TraceLevel.MINIMAL, repr=False)
    wall_time: float = field(default_factory=time.time, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d.pop("min_level", None)
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


# =============================================================================
# Transition Records
# =============================================================================


@dataclass
class EmotionTransitionRecord(TraceRecord):
    """Record of an emotion channel changing state."""
    record_type: str = field(default="emotion_transition", init=False)

    kind: str = ""
    transition: str = ""  # "activated", "deactivated"
    timestamp: float = 0.0
    intensity: float = 0.0
    frame_index: int = 0


@dataclass
class ChannelErrorRecord(TraceRecord):
    """Record of an activation function failing on a tick."""
    record_type: str = field(default="channel_error", init=False)

    kind: str = ""
    timestamp: float = 0.0
    error_type: str = ""
    message: str = ""
    frame_index: int = 0


# =============================================================================
# Tick Records
# =============================================================================


@dataclass
class FrameEvaluateRecord(TraceRecord):
    """Summary of one evaluate() call."""
    record_type: str = field(default="frame_evaluate", init=False)
    min_level: TraceLevel = field(default=TraceLevel.NORMAL, repr=False)

    frame_index: int = 0
    timestamp: float = 0.0
    channel_count: int = 0
    event_count: int = 0
    error_count: int = 0
    active_kinds: List[str] = field(default_factory=list)
    processing_ms: float = 0.0


@dataclass
class ChannelSampleRecord(TraceRecord):
    """Per-channel smoothing state after a tick."""
    record_type: str = field(default="channel_sample", init=False)
    min_level: TraceLevel = field(default=TraceLevel.VERBOSE, repr=False)

    frame_index: int = 0
    kind: str = ""
    timestamp: float = 0.0
    raw: float = 0.0
    intensity: float = 0.0
    is_active: bool = False
    onset_pending: bool = False
    offset_pending: bool = False


__all__ = [
    "TraceRecord",
    "EmotionTransitionRecord",
    "ChannelErrorRecord",
    "FrameEvaluateRecord",
    "ChannelSampleRecord",
]
