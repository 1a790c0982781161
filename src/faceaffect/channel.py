"""Per-emotion smoothing and hysteresis state machine.

An EmotionChannel turns the raw activation of one emotion into
debounced ACTIVATED / DEACTIVATED events:

1. raw = clamp01(activation_fn(frame))
2. EMA smoothing with ``ema_alpha`` (first sample seeds the average)
3. Inactive: intensity >= on_threshold must hold for
   ``min_onset_duration_ms`` before activating.
4. Active: intensity < off_threshold must hold for
   ``min_offset_duration_ms`` before deactivating.

Durations are measured on caller timestamps (seconds), not tick counts,
so irregular frame spacing is fine.

Example:
    >>> from faceaffect.activations import smile_activation
    >>> channel = EmotionChannel("smile", smile_activation)
    >>> event = channel.evaluate(frame, timestamp=12.5)
    >>> if event is not None:
    ...     print(event.transition, event.intensity)
"""

from dataclasses import dataclass, replace
import logging
import math
from typing import Optional

from faceaffect.activations import ActivationFunction
from faceaffect.errors import ChannelEvaluationError, NonMonotonicTimestamp
from faceaffect.output import ActivationEvent, ChannelSnapshot, Transition
from faceaffect.types import FaceFrame

logger = logging.getLogger(__name__)


def clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


@dataclass(frozen=True)
class EmotionChannelConfig:
    """Detection parameters for one channel.

    Attributes:
        on_threshold: Intensity at or above which onset starts (default: 0.6).
        off_threshold: Intensity strictly below which offset starts (default: 0.4).
        min_onset_duration_ms: Onset hold time before activating (default: 180).
        min_offset_duration_ms: Offset hold time before deactivating (default: 250).
        ema_alpha: Weight of the newest sample in the EMA (default: 0.25).
    """

    on_threshold: float = 0.6
    off_threshold: float = 0.4
    min_onset_duration_ms: float = 180.0
    min_offset_duration_ms: float = 250.0
    ema_alpha: float = 0.25

    def __post_init__(self) -> None:
        for name in ("on_threshold", "off_threshold", "ema_alpha"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        for name in ("min_onset_duration_ms", "min_offset_duration_ms"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        if self.on_threshold <= self.off_threshold:
            logger.warning(
                "on_threshold (%.3f) <= off_threshold (%.3f): channel may chatter",
                self.on_threshold, self.off_threshold,
            )


@dataclass
class EmotionChannelState:
    """Mutable runtime state, owned by exactly one channel."""

    ema_value: Optional[float] = None
    is_active: bool = False
    onset_candidate_ts: Optional[float] = None
    offset_candidate_ts: Optional[float] = None
    current_intensity: float = 0.0
    last_raw: float = 0.0
    last_timestamp: Optional[float] = None
    sample_count: int = 0


class EmotionChannel:
    """Hysteresis/EMA state machine for a single emotion kind.

    Args:
        kind: Emotion kind this channel tracks.
        activation_fn: Pure function FaceFrame -> raw activation.
        config: Detection parameters (defaults if omitted).
        clamp_elapsed: If True, a timestamp earlier than the previous
            call is accepted and elapsed durations are clamped to >= 0.
            If False, such a call raises NonMonotonicTimestamp.
    """

    def __init__(
        self,
        kind: str,
        activation_fn: ActivationFunction,
        config: Optional[EmotionChannelConfig] = None,
        clamp_elapsed: bool = False,
    ):
        if not callable(activation_fn):
            raise TypeError(f"activation_fn for {kind!r} is not callable")
        self._kind = kind
        self._activation_fn = activation_fn
        self._config = config or EmotionChannelConfig()
        self._clamp_elapsed = clamp_elapsed
        self._state = EmotionChannelState()

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def config(self) -> EmotionChannelConfig:
        return self._config

    @property
    def activation_fn(self) -> ActivationFunction:
        return self._activation_fn

    @property
    def state(self) -> EmotionChannelState:
        """Copy of the current state."""
        return replace(self._state)

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    @property
    def current_intensity(self) -> float:
        return self._state.current_intensity

    def snapshot(self) -> ChannelSnapshot:
        return ChannelSnapshot(
            kind=self._kind,
            current_intensity=self._state.current_intensity,
            is_active=self._state.is_active,
        )

    def reset(self) -> None:
        """Return to the initial inactive state with no samples."""
        self._state = EmotionChannelState()

    def compute_raw(self, frame: FaceFrame) -> float:
        """Evaluate the activation function and clamp to [0, 1].

        Raises:
            ChannelEvaluationError: If the function raises, or returns a
                non-numeric or NaN value.
        """
        try:
            raw = float(self._activation_fn(frame))
            if math.isnan(raw):
                raise ValueError("activation is NaN")
        except Exception as e:
            raise ChannelEvaluationError(self._kind, e) from e
        return clamp01(raw)

    def evaluate(self, frame: FaceFrame, timestamp: float) -> Optional[ActivationEvent]:
        """Consume one frame and return a transition event, if any.

        Nothing is written to the channel state unless the activation
        function succeeds, so a failure leaves the channel exactly as it
        was after the previous tick.

        Args:
            frame: AU snapshot for this tick.
            timestamp: Tick time in seconds, non-decreasing across calls.

        Returns:
            ActivationEvent on a state change, None otherwise.

        Raises:
            ChannelEvaluationError: If the activation function fails.
            NonMonotonicTimestamp: If timestamp moved backwards and
                clamp_elapsed is False.
            ValueError: If timestamp is NaN or infinite.
        """
        if not math.isfinite(timestamp):
            raise ValueError(f"timestamp must be finite, got {timestamp!r}")
        state = self._state
        if (
            not self._clamp_elapsed
            and state.last_timestamp is not None
            and timestamp < state.last_timestamp
        ):
            raise NonMonotonicTimestamp(state.last_timestamp, timestamp)

        raw = self.compute_raw(frame)

        # EMA smoothing
        alpha = self._config.ema_alpha
        if state.ema_value is None:
            ema = raw
        else:
            ema = alpha * raw + (1.0 - alpha) * state.ema_value

        state.ema_value = ema
        state.last_raw = raw
        state.current_intensity = clamp01(ema)
        state.last_timestamp = timestamp
        state.sample_count += 1

        if not state.is_active:
            return self._update_onset(timestamp)
        return self._update_offset(timestamp)

    def _elapsed_ms(self, timestamp: float, since: float) -> float:
        elapsed_ms = (timestamp - since) * 1000.0
        if self._clamp_elapsed:
            return max(0.0, elapsed_ms)
        return elapsed_ms

    def _update_onset(self, timestamp: float) -> Optional[ActivationEvent]:
        state = self._state
        if state.current_intensity < self._config.on_threshold:
            state.onset_candidate_ts = None
            return None

        if state.onset_candidate_ts is None:
            state.onset_candidate_ts = timestamp
        if self._elapsed_ms(timestamp, state.onset_candidate_ts) >= self._config.min_onset_duration_ms:
            state.is_active = True
            state.onset_candidate_ts = None
            state.offset_candidate_ts = None
            return ActivationEvent(
                emotion_kind=self._kind,
                transition=Transition.ACTIVATED,
                timestamp=timestamp,
                intensity=state.current_intensity,
            )
        return None

    def _update_offset(self, timestamp: float) -> Optional[ActivationEvent]:
        state = self._state
        # Strict: intensity == off_threshold keeps the channel active
        if not state.current_intensity < self._config.off_threshold:
            state.offset_candidate_ts = None
            return None

        if state.offset_candidate_ts is None:
            state.offset_candidate_ts = timestamp
        if self._elapsed_ms(timestamp, state.offset_candidate_ts) >= self._config.min_offset_duration_ms:
            state.is_active = False
            state.onset_candidate_ts = None
            state.offset_candidate_ts = None
            return ActivationEvent(
                emotion_kind=self._kind,
                transition=Transition.DEACTIVATED,
                timestamp=timestamp,
                intensity=state.current_intensity,
            )
        return None

    def __repr__(self) -> str:
        return (
            f"EmotionChannel(kind={self._kind!r}, active={self._state.is_active}, "
            f"intensity={self._state.current_intensity:.3f})"
        )


__all__ = [
    "clamp01",
    "EmotionChannelConfig",
    "EmotionChannelState",
    "EmotionChannel",
]
