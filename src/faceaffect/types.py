"""Facial Action Unit and face frame domain types.

A FaceFrame is the immutable per-tick snapshot handed to the engine by
the face-tracking side. Intensities and confidences live in fixed-order
tuples (see AU_NAMES) so frames are hashable and compare by value.

Example:
    >>> frame = FaceFrame.from_intensities({"AU12": 0.8, FaceActionUnit.AU6: 0.2})
    >>> frame.intensity(FaceActionUnit.AU12)
    0.8
    >>> frame.confidence("AU4")  # unset AUs report full confidence
    1.0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np


class FaceActionUnit(Enum):
    """FACS Action Units consumed by the built-in activation functions.

    Values are the canonical AU names used in traces and configs.
    """

    AU1 = "AU1"    # inner brow raiser
    AU2 = "AU2"    # outer brow raiser
    AU4 = "AU4"    # brow lowerer
    AU5 = "AU5"    # upper lid raiser
    AU6 = "AU6"    # cheek raiser
    AU7 = "AU7"    # lid tightener
    AU9 = "AU9"    # nose wrinkler
    AU10 = "AU10"  # upper lip raiser
    AU12 = "AU12"  # lip corner puller
    AU15 = "AU15"  # lip corner depressor
    AU17 = "AU17"  # chin raiser
    AU20 = "AU20"  # lip stretcher
    AU23 = "AU23"  # lip tightener
    AU24 = "AU24"  # lip pressor
    AU26 = "AU26"  # jaw drop

    @property
    def description(self) -> str:
        return _AU_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: Union["FaceActionUnit", str]) -> "FaceActionUnit":
        """Resolve an enum member from a member, name or value.

        Matching is case-insensitive ("au12" works).

        Raises:
            ValueError: If the AU is not part of the enumeration.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls.__members__[key]
        raise ValueError(f"Unknown action unit: {value!r}")


_AU_DESCRIPTIONS: Dict[FaceActionUnit, str] = {
    FaceActionUnit.AU1: "inner brow raiser",
    FaceActionUnit.AU2: "outer brow raiser",
    FaceActionUnit.AU4: "brow lowerer",
    FaceActionUnit.AU5: "upper lid raiser",
    FaceActionUnit.AU6: "cheek raiser",
    FaceActionUnit.AU7: "lid tightener",
    FaceActionUnit.AU9: "nose wrinkler",
    FaceActionUnit.AU10: "upper lip raiser",
    FaceActionUnit.AU12: "lip corner puller",
    FaceActionUnit.AU15: "lip corner depressor",
    FaceActionUnit.AU17: "chin raiser",
    FaceActionUnit.AU20: "lip stretcher",
    FaceActionUnit.AU23: "lip tightener",
    FaceActionUnit.AU24: "lip pressor",
    FaceActionUnit.AU26: "jaw drop",
}

# Canonical AU order for array-backed frames
AU_ORDER: Tuple[FaceActionUnit, ...] = tuple(FaceActionUnit)
AU_NAMES = [au.value for au in AU_ORDER]

_AU_INDEX: Dict[FaceActionUnit, int] = {au: i for i, au in enumerate(AU_ORDER)}

AULike = Union[FaceActionUnit, str]


class EmotionKind(str, Enum):
    """Built-in emotion kinds.

    The engine itself keys channels by plain strings, so custom kinds
    do not need to be added here.
    """

    ANGER = "anger"
    DISGUST = "disgust"
    FEAR = "fear"
    HAPPINESS = "happiness"
    SADNESS = "sadness"
    SMILE = "smile"
    SURPRISE = "surprise"

    def __str__(self) -> str:
        return self.value


class AUReading(NamedTuple):
    """Intensity and confidence of one AU, both in [0, 1]."""

    intensity: float
    confidence: float


def _clip01(values: Sequence[float], size: int, name: str) -> Tuple[float, ...]:
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if arr.shape[0] != size:
        raise ValueError(f"{name} must have {size} values, got {arr.shape[0]}")
    nan = np.isnan(arr)
    if nan.any():
        bad = [AU_NAMES[i] for i in np.flatnonzero(nan)]
        raise ValueError(f"{name} contain NaN for {bad}")
    return tuple(float(v) for v in np.clip(arr, 0.0, 1.0))


@dataclass(frozen=True)
class FaceFrame:
    """Immutable AU snapshot for one capture tick.

    Values outside [0, 1] are clamped on construction; NaN is rejected
    with ValueError. Unset AUs read as intensity 0.0 with confidence 1.0.

    Attributes:
        intensities: Per-AU intensity in AU_ORDER.
        confidences: Per-AU confidence in AU_ORDER.
    """

    intensities: Tuple[float, ...] = field(
        default=(0.0,) * len(AU_ORDER)
    )
    confidences: Tuple[float, ...] = field(
        default=(1.0,) * len(AU_ORDER)
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "intensities", _clip01(self.intensities, len(AU_ORDER), "intensities")
        )
        object.__setattr__(
            self, "confidences", _clip01(self.confidences, len(AU_ORDER), "confidences")
        )

    @classmethod
    def from_intensities(
        cls,
        intensities: Mapping[AULike, float],
        confidences: Optional[Mapping[AULike, float]] = None,
    ) -> "FaceFrame":
        """Build a frame from sparse AU mappings.

        Args:
            intensities: AU (member or name) -> intensity.
            confidences: Optional AU -> confidence.

        Raises:
            ValueError: If a key is not a known action unit.
        """
        values = [0.0] * len(AU_ORDER)
        for au, v in intensities.items():
            values[_AU_INDEX[FaceActionUnit.parse(au)]] = float(v)

        confs = [1.0] * len(AU_ORDER)
        for au, c in (confidences or {}).items():
            confs[_AU_INDEX[FaceActionUnit.parse(au)]] = float(c)

        return cls(intensities=tuple(values), confidences=tuple(confs))

    @classmethod
    def from_arrays(
        cls,
        weights: Sequence[float],
        confidences: Optional[Sequence[float]] = None,
    ) -> "FaceFrame":
        """Build a frame from dense arrays in AU_ORDER.

        Args:
            weights: One intensity per AU (list or numpy array).
            confidences: One confidence per AU; defaults to all 1.0.
        """
        if confidences is None:
            confidences = np.ones(len(AU_ORDER))
        return cls(intensities=tuple(weights), confidences=tuple(confidences))

    def intensity(self, au: AULike) -> float:
        return self.intensities[_AU_INDEX[FaceActionUnit.parse(au)]]

    def confidence(self, au: AULike) -> float:
        return self.confidences[_AU_INDEX[FaceActionUnit.parse(au)]]

    def reading(self, au: AULike) -> AUReading:
        idx = _AU_INDEX[FaceActionUnit.parse(au)]
        return AUReading(self.intensities[idx], self.confidences[idx])

    def __getitem__(self, au: AULike) -> AUReading:
        return self.reading(au)

    def __iter__(self) -> Iterator[FaceActionUnit]:
        return iter(AU_ORDER)

    def __len__(self) -> int:
        return len(AU_ORDER)

    def as_array(self) -> np.ndarray:
        """Intensities as a float64 array in AU_ORDER."""
        return np.array(self.intensities, dtype=np.float64)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        """Serialize non-default readings, keyed by AU name."""
        aus = {}
        confs = {}
        for au, value, conf in zip(AU_ORDER, self.intensities, self.confidences):
            if value != 0.0:
                aus[au.value] = value
            if conf != 1.0:
                confs[au.value] = conf
        return {"aus": aus, "confidences": confs}


__all__ = [
    "FaceActionUnit",
    "AU_ORDER",
    "AU_NAMES",
    "AULike",
    "EmotionKind",
    "AUReading",
    "FaceFrame",
]
