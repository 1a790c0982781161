"""Tests for AU and face frame types."""

import numpy as np
import pytest

from faceaffect.types import AU_NAMES, AU_ORDER, AUReading, EmotionKind, FaceActionUnit, FaceFrame


class TestFaceActionUnit:
    def test_fifteen_aus(self):
        assert len(FaceActionUnit) == 15
        assert len(AU_NAMES) == 15

    def test_key_aus_present(self):
        assert "AU12" in AU_NAMES  # lip corner puller
        assert "AU6" in AU_NAMES   # cheek raiser
        assert "AU26" in AU_NAMES  # jaw drop

    def test_parse_variants(self):
        assert FaceActionUnit.parse(FaceActionUnit.AU4) is FaceActionUnit.AU4
        assert FaceActionUnit.parse("AU4") is FaceActionUnit.AU4
        assert FaceActionUnit.parse("au4") is FaceActionUnit.AU4

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            FaceActionUnit.parse("AU99")
        with pytest.raises(ValueError):
            FaceActionUnit.parse(12)

    def test_description(self):
        assert FaceActionUnit.AU9.description == "nose wrinkler"


class TestEmotionKind:
    def test_values(self):
        assert [k.value for k in EmotionKind] == [
            "anger", "disgust", "fear", "happiness", "sadness", "smile", "surprise",
        ]

    def test_str_compat(self):
        assert EmotionKind.SMILE == "smile"
        assert str(EmotionKind.SMILE) == "smile"


class TestFaceFrame:
    def test_defaults(self):
        frame = FaceFrame()
        for au in FaceActionUnit:
            assert frame.intensity(au) == 0.0
            assert frame.confidence(au) == 1.0

    def test_from_intensities(self):
        frame = FaceFrame.from_intensities(
            {"AU12": 0.8, FaceActionUnit.AU6: 0.2},
            confidences={"AU6": 0.5},
        )
        assert frame.intensity("AU12") == 0.8
        assert frame.intensity(FaceActionUnit.AU6) == 0.2
        assert frame.confidence("AU6") == 0.5
        assert frame.confidence("AU12") == 1.0
        assert frame.intensity("AU4") == 0.0

    def test_reading(self):
        frame = FaceFrame.from_intensities({"AU12": 0.8}, {"AU12": 0.9})
        assert frame["AU12"] == AUReading(0.8, 0.9)
        assert frame.reading(FaceActionUnit.AU12).intensity == 0.8

    def test_out_of_range_clamped(self):
        frame = FaceFrame.from_intensities(
            {"AU12": 1.7, "AU6": -0.3},
            confidences={"AU12": 2.0, "AU6": -1.0},
        )
        assert frame.intensity("AU12") == 1.0
        assert frame.intensity("AU6") == 0.0
        assert frame.confidence("AU12") == 1.0
        assert frame.confidence("AU6") == 0.0

    def test_unknown_au_rejected(self):
        with pytest.raises(ValueError):
            FaceFrame.from_intensities({"AU45": 0.5})

    def test_from_arrays(self):
        weights = np.linspace(0.0, 1.4, len(AU_ORDER))
        frame = FaceFrame.from_arrays(weights)
        assert frame.intensity(AU_ORDER[0]) == 0.0
        assert frame.intensity(AU_ORDER[-1]) == 1.0  # clamped from 1.4
        assert all(c == 1.0 for c in frame.confidences)

    def test_from_arrays_wrong_length(self):
        with pytest.raises(ValueError):
            FaceFrame.from_arrays([0.5, 0.5])

    def test_immutable(self):
        frame = FaceFrame()
        with pytest.raises(Exception):
            frame.intensities = (1.0,) * len(AU_ORDER)

    def test_equality(self):
        a = FaceFrame.from_intensities({"AU12": 0.5})
        b = FaceFrame.from_intensities({FaceActionUnit.AU12: 0.5})
        c = FaceFrame.from_intensities({"AU12": 0.6})
        assert a == b
        assert hash(a) == hash(b)
        assert a != c

    def test_as_array(self):
        frame = FaceFrame.from_intensities({"AU1": 0.25})
        arr = frame.as_array()
        assert arr.dtype == np.float64
        assert arr[AU_NAMES.index("AU1")] == 0.25

    def test_to_dict_sparse(self):
        frame = FaceFrame.from_intensities({"AU12": 0.8}, {"AU6": 0.5})
        assert frame.to_dict() == {"aus": {"AU12": 0.8}, "confidences": {"AU6": 0.5}}

    def test_iteration(self):
        frame = FaceFrame()
        assert list(frame) == list(AU_ORDER)
        assert len(frame) == 15


class TestNaNInputs:
    @pytest.mark.parametrize("aus", [
        {"AU1": float("nan"), "AU2": 0.5},
        {"AU1": 0.5, "AU2": float("nan")},
        {"AU23": float("nan"), "AU24": 0.5},
        {"AU23": 0.5, "AU24": float("nan")},
    ])
    def test_nan_intensity_rejected_in_either_position(self, aus):
        with pytest.raises(ValueError, match="NaN"):
            FaceFrame.from_intensities(aus)

    def test_nan_confidence_rejected(self):
        with pytest.raises(ValueError, match="AU6"):
            FaceFrame.from_intensities({}, confidences={"AU6": float("nan")})

    def test_nan_in_dense_array_rejected(self):
        weights = np.zeros(len(AU_ORDER))
        weights[3] = np.nan
        with pytest.raises(ValueError):
            FaceFrame.from_arrays(weights)

    def test_infinity_still_clamped(self):
        frame = FaceFrame.from_intensities({"AU1": float("inf"), "AU2": float("-inf")})
        assert frame.intensity("AU1") == 1.0
        assert frame.intensity("AU2") == 0.0
