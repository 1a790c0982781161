"""Output types produced by the emotion engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from faceaffect.errors import ChannelEvaluationError


class Transition(Enum):
    """Direction of an emotion state change."""

    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"


@dataclass(frozen=True)
class ActivationEvent:
    """A debounced emotion state change.

    Attributes:
        emotion_kind: Kind of the channel that changed state.
        transition: ACTIVATED or DEACTIVATED.
        timestamp: Tick timestamp (seconds) at which the change fired.
        intensity: Smoothed intensity at that tick, in [0, 1].
    """

    emotion_kind: str
    transition: Transition
    timestamp: float
    intensity: float

    @property
    def is_activation(self) -> bool:
        return self.transition is Transition.ACTIVATED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "emotion_kind": str(self.emotion_kind),
            "transition": self.transition.value,
            "timestamp": self.timestamp,
            "intensity": self.intensity,
        }


@dataclass(frozen=True)
class ChannelSnapshot:
    """Read-only view of a channel's state, for diagnostics."""

    kind: str
    current_intensity: float
    is_active: bool


@dataclass
class EvaluationResult:
    """Result of one EmotionEngine.evaluate() tick.

    Iterating (or taking len of) the result walks the events, so callers
    that only care about events can treat it as the event list. Truth
    value is True when the tick produced events or errors.

    Attributes:
        timestamp: Tick timestamp in seconds.
        events: Events in channel registration order.
        errors: Per-channel activation failures for this tick.
    """

    timestamp: Optional[float] = None
    events: List[ActivationEvent] = field(default_factory=list)
    errors: List[ChannelEvaluationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __iter__(self) -> Iterator[ActivationEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def __bool__(self) -> bool:
        return bool(self.events or self.errors)


__all__ = ["Transition", "ActivationEvent", "ChannelSnapshot", "EvaluationResult"]
