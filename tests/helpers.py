"""Shared test helpers for faceaffect tests."""

from typing import Iterable, List, Optional, Sequence

from faceaffect.channel import EmotionChannelConfig
from faceaffect.types import FaceFrame

# ~60 fps tick spacing used by the debounce scenarios
TICK_SEC = 0.01667


def make_frame(**aus: float) -> FaceFrame:
    """Create a frame from AU keyword args, e.g. make_frame(AU12=0.8)."""
    return FaceFrame.from_intensities(aus)


def tick_times(count: int, dt: float = TICK_SEC, start: float = 0.0) -> List[float]:
    """Timestamps for `count` evenly spaced ticks."""
    return [start + i * dt for i in range(count)]


def instant_config(**overrides) -> EmotionChannelConfig:
    """Channel config with no smoothing lag (ema_alpha=1.0).

    Intensity then equals the raw activation on every tick, which keeps
    threshold tests independent of the EMA.
    """
    params = dict(ema_alpha=1.0)
    params.update(overrides)
    return EmotionChannelConfig(**params)


class ScriptedActivation:
    """Activation function that plays back a list of raw values.

    Entries that are exceptions are raised instead of returned.
    """

    def __init__(self, values: Sequence):
        self._values = list(values)
        self.calls = 0

    def __call__(self, frame: FaceFrame) -> float:
        value = self._values[min(self.calls, len(self._values) - 1)]
        self.calls += 1
        if isinstance(value, BaseException):
            raise value
        return value


class FakeFaceSource:
    """FaceFrameSource stand-in that yields frames from a list.

    Returns None once the list is exhausted.
    """

    def __init__(self, frames: Iterable[Optional[FaceFrame]], available: bool = True):
        self._frames = list(frames)
        self._index = 0
        self.is_available = available

    def fetch(self) -> Optional[FaceFrame]:
        if self._index >= len(self._frames):
            return None
        frame = self._frames[self._index]
        self._index += 1
        return frame


class FakeClock:
    """Deterministic clock advancing by a fixed step per call."""

    def __init__(self, start: float = 0.0, step: float = TICK_SEC):
        self._now = start
        self._step = step

    def __call__(self) -> float:
        now = self._now
        self._now += self._step
        return now
