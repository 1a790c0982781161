"""Built-in activation functions.

Each function maps a FaceFrame to the raw activation of one emotion.
They are pure: no state, no side effects, no clamping (the channel
clamps). Any callable with the same signature can be registered with
the engine, so this table is a convenience, not a closed set.

| Emotion   | Formula                                   |
|-----------|-------------------------------------------|
| anger     | (AU4 + AU7 + max(AU23, AU24)) / 3         |
| disgust   | (AU9 + AU10) * 0.5                        |
| fear      | (max(AU1, AU2) + AU5 + AU20) / 3          |
| happiness | (1 - w) * AU12 + w * AU6, w = cheek_weight|
| sadness   | (AU1 + AU15 + AU17) / 3                   |
| smile     | AU12                                      |
| surprise  | (max(AU1, AU2) + AU5 + AU26) / 3          |
"""

from functools import partial
from typing import Callable, Dict, Union

from faceaffect.types import EmotionKind, FaceActionUnit as AU, FaceFrame

ActivationFunction = Callable[[FaceFrame], float]

DEFAULT_CHEEK_WEIGHT = 0.35


def anger_activation(frame: FaceFrame) -> float:
    lips = max(frame.intensity(AU.AU23), frame.intensity(AU.AU24))
    return (frame.intensity(AU.AU4) + frame.intensity(AU.AU7) + lips) / 3.0


def disgust_activation(frame: FaceFrame) -> float:
    return (frame.intensity(AU.AU9) + frame.intensity(AU.AU10)) * 0.5


def fear_activation(frame: FaceFrame) -> float:
    brow = max(frame.intensity(AU.AU1), frame.intensity(AU.AU2))
    return (brow + frame.intensity(AU.AU5) + frame.intensity(AU.AU20)) / 3.0


def happiness_activation(
    frame: FaceFrame, cheek_weight: float = DEFAULT_CHEEK_WEIGHT
) -> float:
    """Lip corner pull blended with cheek raise (Duchenne component)."""
    return (1.0 - cheek_weight) * frame.intensity(AU.AU12) + cheek_weight * frame.intensity(AU.AU6)


def sadness_activation(frame: FaceFrame) -> float:
    return (
        frame.intensity(AU.AU1) + frame.intensity(AU.AU15) + frame.intensity(AU.AU17)
    ) / 3.0


def smile_activation(frame: FaceFrame) -> float:
    # Pure lip corner pull, no cheek involvement
    return frame.intensity(AU.AU12)


def surprise_activation(frame: FaceFrame) -> float:
    brow = max(frame.intensity(AU.AU1), frame.intensity(AU.AU2))
    return (brow + frame.intensity(AU.AU5) + frame.intensity(AU.AU26)) / 3.0


def make_happiness_activation(cheek_weight: float = DEFAULT_CHEEK_WEIGHT) -> ActivationFunction:
    """Bind a cheek weight into a happiness activation function.

    Args:
        cheek_weight: Share of AU6 in the blend, in [0, 1].

    Raises:
        ValueError: If cheek_weight is outside [0, 1].
    """
    if not 0.0 <= cheek_weight <= 1.0:
        raise ValueError(f"cheek_weight must be in [0, 1], got {cheek_weight}")
    return partial(happiness_activation, cheek_weight=cheek_weight)


BUILTIN_ACTIVATIONS: Dict[EmotionKind, ActivationFunction] = {
    EmotionKind.ANGER: anger_activation,
    EmotionKind.DISGUST: disgust_activation,
    EmotionKind.FEAR: fear_activation,
    EmotionKind.HAPPINESS: happiness_activation,
    EmotionKind.SADNESS: sadness_activation,
    EmotionKind.SMILE: smile_activation,
    EmotionKind.SURPRISE: surprise_activation,
}

# Human-readable formulas, used by ``faceaffect list --verbose``
FORMULAS: Dict[EmotionKind, str] = {
    EmotionKind.ANGER: "(AU4 + AU7 + max(AU23, AU24)) / 3",
    EmotionKind.DISGUST: "(AU9 + AU10) * 0.5",
    EmotionKind.FEAR: "(max(AU1, AU2) + AU5 + AU20) / 3",
    EmotionKind.HAPPINESS: "(1 - cheek_weight) * AU12 + cheek_weight * AU6",
    EmotionKind.SADNESS: "(AU1 + AU15 + AU17) / 3",
    EmotionKind.SMILE: "AU12",
    EmotionKind.SURPRISE: "(max(AU1, AU2) + AU5 + AU26) / 3",
}


def get_activation(kind: Union[EmotionKind, str], **params) -> ActivationFunction:
    """Look up a built-in activation function by kind.

    Args:
        kind: Emotion kind (enum member or value, e.g. "happiness").
        **params: Formula parameters. Only happiness takes one
            (``cheek_weight``).

    Returns:
        The activation function, with parameters bound.

    Raises:
        KeyError: If kind is not a built-in.
        TypeError: If params are given for a kind that takes none.
    """
    try:
        emotion = EmotionKind(kind)
    except ValueError:
        raise KeyError(f"Unknown built-in emotion kind: {kind!r}") from None

    if emotion is EmotionKind.HAPPINESS:
        return make_happiness_activation(**params)
    if params:
        raise TypeError(f"{emotion.value} activation takes no parameters, got {sorted(params)}")
    return BUILTIN_ACTIVATIONS[emotion]


__all__ = [
    "ActivationFunction",
    "DEFAULT_CHEEK_WEIGHT",
    "anger_activation",
    "disgust_activation",
    "fear_activation",
    "happiness_activation",
    "sadness_activation",
    "smile_activation",
    "surprise_activation",
    "make_happiness_activation",
    "BUILTIN_ACTIVATIONS",
    "FORMULAS",
    "get_activation",
]
