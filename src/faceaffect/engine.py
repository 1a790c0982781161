"""Emotion engine: a registry of independent emotion channels.

The engine owns one EmotionChannel per emotion kind, feeds every
incoming frame to all of them in registration order, and collects the
resulting events. A channel whose activation function fails is reported
in the tick's error list; the other channels are unaffected.

The engine is synchronous and holds no locks: call evaluate() from one
thread at a time, once per frame tick, with non-decreasing timestamps.

Example:
    >>> engine = create_default_engine()
    >>> for t, frame in frames:
    ...     result = engine.evaluate(frame, t)
    ...     for event in result.events:
    ...         print(event.emotion_kind, event.transition.value)
    ...     for error in result.errors:
    ...         print("failed:", error.kind, error.cause)
"""

from enum import Enum
import logging
import math
import time
from typing import Dict, List, Optional

from faceaffect.activations import ActivationFunction, get_activation
from faceaffect.channel import EmotionChannel, EmotionChannelConfig
from faceaffect.config import NON_MONOTONIC_POLICIES, EngineConfig
from faceaffect.errors import (
    ChannelEvaluationError,
    DuplicateChannel,
    NonMonotonicTimestamp,
    UnknownChannel,
)
from faceaffect.observability import (
    ChannelErrorRecord,
    ChannelSampleRecord,
    EmotionTransitionRecord,
    FrameEvaluateRecord,
    ObservabilityHub,
    TraceLevel,
)
from faceaffect.output import ActivationEvent, ChannelSnapshot, EvaluationResult
from faceaffect.types import EmotionKind, FaceFrame

logger = logging.getLogger(__name__)


def _normalize_kind(kind) -> str:
    if isinstance(kind, Enum):
        return kind.value
    return kind


class EmotionEngine:
    """Dispatches frames to registered emotion channels.

    Args:
        on_non_monotonic: "raise" (default) rejects a timestamp earlier
            than the previous call with NonMonotonicTimestamp before any
            channel is touched. "clamp" accepts it and clamps elapsed
            durations to zero.
        hub: Optional observability hub for trace records.
    """

    def __init__(
        self,
        on_non_monotonic: str = "raise",
        hub: Optional[ObservabilityHub] = None,
    ):
        if on_non_monotonic not in NON_MONOTONIC_POLICIES:
            raise ValueError(
                f"on_non_monotonic must be one of {NON_MONOTONIC_POLICIES}, "
                f"got {on_non_monotonic!r}"
            )
        self._on_non_monotonic = on_non_monotonic
        self._hub = hub
        self._channels: Dict[str, EmotionChannel] = {}
        self._last_timestamp: Optional[float] = None
        self._frame_index = 0

    @property
    def on_non_monotonic(self) -> str:
        return self._on_non_monotonic

    @property
    def hub(self) -> Optional[ObservabilityHub]:
        return self._hub

    @property
    def kinds(self) -> List[str]:
        """Registered kinds, in registration order."""
        return list(self._channels)

    @property
    def last_timestamp(self) -> Optional[float]:
        return self._last_timestamp

    @property
    def frame_count(self) -> int:
        return self._frame_index

    def __len__(self) -> int:
        return len(self._channels)

    def __contains__(self, kind) -> bool:
        return _normalize_kind(kind) in self._channels

    def register_channel(
        self,
        kind,
        activation_fn: ActivationFunction,
        config: Optional[EmotionChannelConfig] = None,
    ) -> EmotionChannel:
        """Add a channel for a new emotion kind.

        Args:
            kind: Unique kind key (string or EmotionKind).
            activation_fn: Pure function FaceFrame -> raw activation.
            config: Channel parameters (defaults if omitted).

        Returns:
            The created channel.

        Raises:
            DuplicateChannel: If kind is already registered.
        """
        kind = _normalize_kind(kind)
        if kind in self._channels:
            raise DuplicateChannel(kind)

        channel = EmotionChannel(
            kind,
            activation_fn,
            config,
            clamp_elapsed=self._on_non_monotonic == "clamp",
        )
        self._channels[kind] = channel
        logger.debug("Registered channel %r (%s)", kind, channel.config)
        return channel

    def unregister_channel(self, kind) -> None:
        """Remove a channel and discard its state.

        Raises:
            UnknownChannel: If kind is not registered.
        """
        kind = _normalize_kind(kind)
        if kind not in self._channels:
            raise UnknownChannel(kind)
        del self._channels[kind]

    def get_channel(self, kind) -> EmotionChannel:
        kind = _normalize_kind(kind)
        try:
            return self._channels[kind]
        except KeyError:
            raise UnknownChannel(kind) from None

    def get_channel_state(self, kind) -> ChannelSnapshot:
        """Current intensity and activation of a channel.

        Raises:
            UnknownChannel: If kind is not registered.
        """
        return self.get_channel(kind).snapshot()

    def get_all_states(self) -> Dict[str, ChannelSnapshot]:
        return {kind: ch.snapshot() for kind, ch in self._channels.items()}

    def reset(self) -> None:
        """Reset all channels and forget the last timestamp."""
        for channel in self._channels.values():
            channel.reset()
        self._last_timestamp = None
        self._frame_index = 0

    def evaluate(self, frame: FaceFrame, timestamp: float) -> EvaluationResult:
        """Feed one frame to every channel.

        Args:
            frame: AU snapshot for this tick.
            timestamp: Tick time in seconds. Must not be earlier than the
                previous call's timestamp unless the engine clamps.

        Returns:
            EvaluationResult with this tick's events (registration order)
            and per-channel failures.

        Raises:
            NonMonotonicTimestamp: If the timestamp went backwards and the
                policy is "raise". No channel state is modified.
            ValueError: If the timestamp is NaN or infinite.
        """
        if not math.isfinite(timestamp):
            raise ValueError(f"timestamp must be finite, got {timestamp!r}")
        if self._last_timestamp is not None and timestamp < self._last_timestamp:
            if self._on_non_monotonic == "raise":
                raise NonMonotonicTimestamp(self._last_timestamp, timestamp)
            logger.debug(
                "Timestamp went backwards (%.6fs < %.6fs), clamping elapsed time",
                timestamp, self._last_timestamp,
            )

        start = time.perf_counter()
        hub = self._hub if self._hub is not None and self._hub.enabled else None
        result = EvaluationResult(timestamp=timestamp)

        for kind, channel in self._channels.items():
            try:
                event = channel.evaluate(frame, timestamp)
            except ChannelEvaluationError as e:
                logger.warning("Channel %r failed at t=%.3fs: %r", kind, timestamp, e.cause)
                result.errors.append(e)
                if hub is not None:
                    hub.emit(ChannelErrorRecord(
                        kind=str(kind),
                        timestamp=timestamp,
                        error_type=type(e.cause).__name__,
                        message=str(e.cause),
                        frame_index=self._frame_index,
                    ))
                continue

            if event is not None:
                result.events.append(event)
                self._log_event(event)
                if hub is not None:
                    hub.emit(EmotionTransitionRecord(
                        kind=str(kind),
                        transition=event.transition.value,
                        timestamp=timestamp,
                        intensity=event.intensity,
                        frame_index=self._frame_index,
                    ))

            if hub is not None and hub.is_level_enabled(TraceLevel.VERBOSE):
                state = channel.state
                hub.emit(ChannelSampleRecord(
                    frame_index=self._frame_index,
                    kind=str(kind),
                    timestamp=timestamp,
                    raw=state.last_raw,
                    intensity=state.current_intensity,
                    is_active=state.is_active,
                    onset_pending=state.onset_candidate_ts is not None,
                    offset_pending=state.offset_candidate_ts is not None,
                ))

        if hub is not None:
            hub.emit(FrameEvaluateRecord(
                frame_index=self._frame_index,
                timestamp=timestamp,
                channel_count=len(self._channels),
                event_count=len(result.events),
                error_count=len(result.errors),
                active_kinds=[str(k) for k, ch in self._channels.items() if ch.is_active],
                processing_ms=(time.perf_counter() - start) * 1000.0,
            ))

        if self._last_timestamp is None or timestamp > self._last_timestamp:
            self._last_timestamp = timestamp
        self._frame_index += 1
        return result

    @staticmethod
    def _log_event(event: ActivationEvent) -> None:
        logger.debug(
            "%s %s @ %.3fs I=%.2f",
            event.emotion_kind,
            "ON" if event.is_activation else "OFF",
            event.timestamp,
            event.intensity,
        )


def create_default_engine(
    config: Optional[EngineConfig] = None,
    hub: Optional[ObservabilityHub] = None,
) -> EmotionEngine:
    """Create an engine with all built-in emotion channels registered.

    Channels are registered in EmotionKind order. Kinds disabled in the
    config are skipped; per-kind overrides and activation parameters
    (e.g. happiness cheek_weight) are applied.

    Args:
        config: Engine configuration (defaults if omitted).
        hub: Optional observability hub.

    Raises:
        ValueError: If the config names a kind with no built-in activation.
    """
    config = config or EngineConfig()
    builtin = {k.value for k in EmotionKind}
    unknown = set(config.channels) - builtin
    if unknown:
        raise ValueError(
            f"No built-in activation for configured kinds: {sorted(unknown)}"
        )

    engine = EmotionEngine(on_non_monotonic=config.on_non_monotonic, hub=hub)
    for kind in EmotionKind:
        settings = config.settings_for(kind.value)
        if not settings.enabled:
            logger.debug("Channel %r disabled by config", kind.value)
            continue
        engine.register_channel(
            kind,
            get_activation(kind, **settings.params),
            config.channel_config(kind.value),
        )
    return engine


__all__ = ["EmotionEngine", "create_default_engine"]
