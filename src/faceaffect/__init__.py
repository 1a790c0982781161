"""faceaffect - debounced emotion detection from facial Action Units.

Converts per-frame AU intensities into discrete emotion activation and
deactivation events using per-emotion EMA smoothing and hysteresis.

Example:
    >>> from faceaffect import FaceFrame, create_default_engine
    >>> engine = create_default_engine()
    >>> result = engine.evaluate(FaceFrame.from_intensities({"AU12": 0.9}), 0.0)
    >>> result.events
    []
"""

from faceaffect.activations import (
    BUILTIN_ACTIVATIONS,
    ActivationFunction,
    get_activation,
    make_happiness_activation,
)
from faceaffect.channel import EmotionChannel, EmotionChannelConfig, EmotionChannelState
from faceaffect.config import ChannelSettings, EngineConfig
from faceaffect.engine import EmotionEngine, create_default_engine
from faceaffect.errors import (
    ChannelEvaluationError,
    DuplicateChannel,
    EmotionEngineError,
    NonMonotonicTimestamp,
    TraceFormatError,
    UnknownChannel,
)
from faceaffect.output import ActivationEvent, ChannelSnapshot, EvaluationResult, Transition
from faceaffect.tracker import EmotionTracker, FaceFrameSource
from faceaffect.types import AU_NAMES, EmotionKind, FaceActionUnit, FaceFrame

__version__ = "0.1.0"

__all__ = [
    # Data types
    "FaceActionUnit",
    "AU_NAMES",
    "FaceFrame",
    "EmotionKind",
    # Activation functions
    "ActivationFunction",
    "BUILTIN_ACTIVATIONS",
    "get_activation",
    "make_happiness_activation",
    # State machine
    "EmotionChannel",
    "EmotionChannelConfig",
    "EmotionChannelState",
    # Engine
    "EmotionEngine",
    "create_default_engine",
    "EmotionTracker",
    "FaceFrameSource",
    # Config
    "EngineConfig",
    "ChannelSettings",
    # Output
    "ActivationEvent",
    "Transition",
    "ChannelSnapshot",
    "EvaluationResult",
    # Errors
    "EmotionEngineError",
    "DuplicateChannel",
    "UnknownChannel",
    "NonMonotonicTimestamp",
    "ChannelEvaluationError",
    "TraceFormatError",
]
