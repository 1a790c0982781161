"""Tests for EmotionEngine and create_default_engine."""

import pytest

from helpers import ScriptedActivation, instant_config, make_frame, tick_times

from faceaffect.activations import smile_activation
from faceaffect.channel import EmotionChannelConfig
from faceaffect.config import ChannelSettings, EngineConfig
from faceaffect.engine import EmotionEngine, create_default_engine
from faceaffect.errors import (
    ChannelEvaluationError,
    DuplicateChannel,
    EmotionEngineError,
    NonMonotonicTimestamp,
    UnknownChannel,
)
from faceaffect.output import Transition
from faceaffect.types import EmotionKind


def constant(value):
    return lambda frame: value


def ramp(frame):
    # Raw activation read straight from AU1, so tests can script it per frame
    return frame.intensity("AU1")


# =============================================================================
# Registry
# =============================================================================


class TestRegistry:
    def test_register_and_lookup(self, engine):
        channel = engine.register_channel("smile", smile_activation)
        assert engine.get_channel("smile") is channel
        assert "smile" in engine
        assert len(engine) == 1

    def test_enum_and_string_keys_are_equivalent(self, engine):
        engine.register_channel(EmotionKind.SMILE, smile_activation)
        assert "smile" in engine
        assert EmotionKind.SMILE in engine
        assert engine.kinds == ["smile"]
        with pytest.raises(DuplicateChannel):
            engine.register_channel("smile", smile_activation)

    def test_duplicate_rejected(self, engine):
        engine.register_channel("smile", smile_activation)
        with pytest.raises(DuplicateChannel) as exc_info:
            engine.register_channel("smile", constant(0.1))
        assert exc_info.value.kind == "smile"
        # First registration survives
        assert engine.get_channel("smile").activation_fn is smile_activation

    def test_unknown_kind(self, engine):
        with pytest.raises(UnknownChannel) as exc_info:
            engine.get_channel_state("contempt")
        assert exc_info.value.kind == "contempt"
        assert isinstance(exc_info.value, EmotionEngineError)

    def test_unregister(self, engine):
        engine.register_channel("smile", smile_activation)
        engine.unregister_channel("smile")
        assert "smile" not in engine
        with pytest.raises(UnknownChannel):
            engine.unregister_channel("smile")

    def test_kinds_in_registration_order(self, engine):
        for kind in ("c", "a", "b"):
            engine.register_channel(kind, constant(0.0))
        assert engine.kinds == ["c", "a", "b"]

    def test_custom_config_used(self, engine):
        config = EmotionChannelConfig(on_threshold=0.8)
        channel = engine.register_channel("smile", smile_activation, config)
        assert channel.config is config

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            EmotionEngine(on_non_monotonic="ignore")


# =============================================================================
# Evaluation
# =============================================================================


class TestEvaluate:
    def test_empty_engine(self, engine, smile_frame):
        result = engine.evaluate(smile_frame, 0.0)
        assert result.events == []
        assert result.errors == []
        assert result.ok
        assert result.timestamp == 0.0

    def test_state_query(self, engine, smile_frame):
        engine.register_channel("smile", smile_activation, instant_config())
        engine.evaluate(smile_frame, 0.0)
        snap = engine.get_channel_state("smile")
        assert snap.current_intensity == pytest.approx(0.9)
        assert snap.is_active is False

    def test_get_all_states(self, engine, smile_frame):
        engine.register_channel("smile", smile_activation)
        engine.register_channel("flat", constant(0.0))
        engine.evaluate(smile_frame, 0.0)
        states = engine.get_all_states()
        assert list(states) == ["smile", "flat"]
        assert states["flat"].current_intensity == 0.0

    def test_events_in_registration_order(self, engine):
        config = instant_config(min_onset_duration_ms=0)
        engine.register_channel("b", constant(0.9), config)
        engine.register_channel("a", constant(0.9), config)
        result = engine.evaluate(make_frame(), 0.0)
        assert [e.emotion_kind for e in result] == ["b", "a"]
        assert len(result) == 2

    def test_channels_are_independent(self, engine):
        engine.register_channel(
            "low", ramp, instant_config(on_threshold=0.5, off_threshold=0.3, min_onset_duration_ms=0)
        )
        engine.register_channel(
            "high", ramp, instant_config(on_threshold=0.7, off_threshold=0.3, min_onset_duration_ms=0)
        )
        fired = {}
        for i in range(10):
            result = engine.evaluate(make_frame(AU1=i / 10), i * 0.1)
            for event in result:
                fired[event.emotion_kind] = i
        assert fired == {"low": 5, "high": 7}

    def test_frame_count_and_last_timestamp(self, engine):
        engine.register_channel("smile", smile_activation)
        for t in tick_times(4):
            engine.evaluate(make_frame(), t)
        assert engine.frame_count == 4
        assert engine.last_timestamp == pytest.approx(3 * 0.01667)


class TestDefaultEngine:
    def test_registers_all_builtins(self, default_engine):
        assert default_engine.kinds == [k.value for k in EmotionKind]

    def test_smile_scenario(self, default_engine):
        frame = make_frame(AU12=0.9, AU6=0.8)
        activated = {}
        for i, t in enumerate(tick_times(30)):
            for event in default_engine.evaluate(frame, t):
                assert event.transition is Transition.ACTIVATED
                activated[event.emotion_kind] = i
        # smile = 0.9, happiness = 0.65 * 0.9 + 0.35 * 0.8 = 0.865
        assert set(activated) == {"smile", "happiness"}
        assert activated["smile"] == 11
        assert default_engine.get_channel_state("smile").is_active
        assert not default_engine.get_channel_state("anger").is_active

    def test_config_overrides(self):
        config = EngineConfig(
            defaults=EmotionChannelConfig(ema_alpha=0.5),
            channels={
                "happiness": ChannelSettings(on_threshold=0.7, params={"cheek_weight": 0.5}),
                "disgust": ChannelSettings(enabled=False),
            },
            on_non_monotonic="clamp",
        )
        engine = create_default_engine(config)
        assert "disgust" not in engine
        assert engine.on_non_monotonic == "clamp"

        happiness = engine.get_channel("happiness")
        assert happiness.config.on_threshold == 0.7
        assert happiness.config.ema_alpha == 0.5
        assert happiness.compute_raw(make_frame(AU12=0.8, AU6=0.2)) == pytest.approx(0.5)
        assert engine.get_channel("anger").config.on_threshold == 0.6

    def test_unknown_configured_kind(self):
        config = EngineConfig(channels={"contempt": ChannelSettings()})
        with pytest.raises(ValueError):
            create_default_engine(config)

    def test_bad_params_propagate(self):
        config = EngineConfig(channels={"anger": ChannelSettings(params={"cheek_weight": 0.2})})
        with pytest.raises(TypeError):
            create_default_engine(config)


# =============================================================================
# Failure isolation
# =============================================================================


class TestFailureIsolation:
    def test_failing_channel_reported(self, engine, caplog):
        boom = RuntimeError("boom")
        engine.register_channel("bad", ScriptedActivation([boom]))
        engine.register_channel("good", constant(0.9), instant_config(min_onset_duration_ms=0))

        with caplog.at_level("WARNING", logger="faceaffect.engine"):
            result = engine.evaluate(make_frame(), 0.0)

        assert not result.ok
        assert result.errors == [ChannelEvaluationError("bad", boom)]
        assert [e.emotion_kind for e in result.events] == ["good"]
        assert "bad" in caplog.text

    def test_other_channels_unaffected(self):
        values = [0.9] * 12
        values[5] = ValueError("glitch")

        isolated = EmotionEngine()
        isolated.register_channel("bad", ScriptedActivation(values))
        isolated.register_channel("good", smile_activation, instant_config())

        reference = EmotionEngine()
        reference.register_channel("good", smile_activation, instant_config())

        for i, t in enumerate(tick_times(12)):
            frame = make_frame(AU12=0.5 + 0.04 * i)
            a = isolated.evaluate(frame, t)
            b = reference.evaluate(frame, t)
            assert [e for e in a if e.emotion_kind == "good"] == list(b)
            assert isolated.get_channel("good").state == reference.get_channel("good").state

    def test_failing_channel_keeps_state(self, engine):
        values = [0.9, 0.9, RuntimeError("boom")]
        engine.register_channel("bad", ScriptedActivation(values), instant_config())
        engine.evaluate(make_frame(), 0.0)
        engine.evaluate(make_frame(), 0.1)
        before = engine.get_channel("bad").state

        result = engine.evaluate(make_frame(), 0.2)
        assert len(result.errors) == 1
        assert engine.get_channel("bad").state == before


# =============================================================================
# Timestamps
# =============================================================================


class TestTimestampPolicy:
    def test_raise_leaves_channels_untouched(self, engine):
        engine.register_channel("smile", smile_activation)
        engine.evaluate(make_frame(AU12=0.5), 1.0)
        before = engine.get_channel("smile").state

        with pytest.raises(NonMonotonicTimestamp):
            engine.evaluate(make_frame(AU12=0.9), 0.5)
        assert engine.get_channel("smile").state == before
        assert engine.last_timestamp == 1.0
        assert engine.frame_count == 1

    def test_clamp_accepts_backwards(self):
        engine = EmotionEngine(on_non_monotonic="clamp")
        engine.register_channel("x", constant(0.9), instant_config())
        assert not engine.evaluate(make_frame(), 1.0).events
        assert not engine.evaluate(make_frame(), 0.5).events
        result = engine.evaluate(make_frame(), 1.2)
        assert [e.transition for e in result] == [Transition.ACTIVATED]
        assert engine.last_timestamp == 1.2

    def test_reset(self, engine):
        engine.register_channel("x", constant(0.9), instant_config(min_onset_duration_ms=0))
        engine.evaluate(make_frame(), 5.0)
        assert engine.get_channel_state("x").is_active

        engine.reset()
        assert not engine.get_channel_state("x").is_active
        assert engine.last_timestamp is None
        assert engine.frame_count == 0
        # Earlier timestamps are fine after a reset
        assert len(engine.evaluate(make_frame(), 0.0)) == 1


class TestNonFiniteTimestamps:
    @pytest.mark.parametrize("policy", ["raise", "clamp"])
    def test_nan_rejected(self, policy):
        engine = EmotionEngine(on_non_monotonic=policy)
        engine.register_channel("x", constant(0.9), instant_config())
        engine.evaluate(make_frame(), 0.0)
        before = engine.get_channel("x").state

        with pytest.raises(ValueError):
            engine.evaluate(make_frame(), float("nan"))
        assert engine.get_channel("x").state == before
        assert engine.last_timestamp == 0.0
        assert engine.frame_count == 1

    def test_engine_recovers_after_nan(self, engine):
        engine.register_channel("x", constant(0.9), instant_config())
        with pytest.raises(ValueError):
            engine.evaluate(make_frame(), float("nan"))

        fired = []
        for i in range(1, 6):
            fired.extend(engine.evaluate(make_frame(), i * 0.1))
        assert [e.timestamp for e in fired] == [pytest.approx(0.3)]

        engine.evaluate(make_frame(), 10.0)
        assert engine.last_timestamp == 10.0

    def test_infinite_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.evaluate(make_frame(), float("inf"))


class TestResultTruthiness:
    def test_errors_only_tick_is_truthy(self, engine):
        engine.register_channel("bad", ScriptedActivation([RuntimeError("boom")]))
        result = engine.evaluate(make_frame(), 0.0)
        assert len(result) == 0
        assert result
        assert not result.ok

    def test_quiet_tick_is_falsy(self, engine):
        engine.register_channel("x", constant(0.0))
        assert not engine.evaluate(make_frame(), 0.0)
