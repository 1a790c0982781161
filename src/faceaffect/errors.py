"""Exception types for the emotion engine.

All engine errors derive from EmotionEngineError so callers can catch
the whole family at once.

Example:
    >>> try:
    ...     engine.get_channel_state("contempt")
    ... except UnknownChannel as e:
    ...     print(e.kind)
"""

from typing import Optional


class EmotionEngineError(Exception):
    """Base class for emotion engine errors."""


class DuplicateChannel(EmotionEngineError):
    """A channel with the same kind is already registered."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Channel already registered: {kind!r}")


class UnknownChannel(EmotionEngineError):
    """No channel is registered for the requested kind."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No channel registered for kind: {kind!r}")


class NonMonotonicTimestamp(EmotionEngineError):
    """Timestamp moved backwards between two evaluate() calls.

    Attributes:
        previous: Timestamp of the previous call (seconds).
        current: Offending timestamp (seconds).
    """

    def __init__(self, previous: float, current: float):
        self.previous = previous
        self.current = current
        super().__init__(
            f"Timestamp went backwards: {current:.6f}s < previous {previous:.6f}s"
        )


class ChannelEvaluationError(EmotionEngineError):
    """Activation function of a channel failed on a frame.

    The engine collects these per tick instead of raising them, so one
    broken channel never blocks the others.

    Attributes:
        kind: Emotion kind of the failing channel.
        cause: The underlying exception.
    """

    def __init__(self, kind: str, cause: BaseException):
        self.kind = kind
        self.cause = cause
        super().__init__(f"Channel {kind!r} failed: {cause!r}")

    def __eq__(self, other):
        if not isinstance(other, ChannelEvaluationError):
            return NotImplemented
        return self.kind == other.kind and self.cause is other.cause

    __hash__ = Exception.__hash__


class TraceFormatError(EmotionEngineError):
    """Malformed line in an AU trace file."""

    def __init__(self, message: str, line_no: Optional[int] = None):
        self.line_no = line_no
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)


__all__ = [
    "EmotionEngineError",
    "DuplicateChannel",
    "UnknownChannel",
    "NonMonotonicTimestamp",
    "ChannelEvaluationError",
    "TraceFormatError",
]
