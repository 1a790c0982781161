"""Configuration classes for the emotion engine.

Example:
    >>> config = EngineConfig(
    ...     defaults=EmotionChannelConfig(ema_alpha=0.3),
    ...     channels={
    ...         "happiness": ChannelSettings(on_threshold=0.55, params={"cheek_weight": 0.4}),
    ...         "disgust": ChannelSettings(enabled=False),
    ...     },
    ...     on_non_monotonic="clamp",
    ... )
    >>> engine = create_default_engine(config)

The same configuration as YAML::

    on_non_monotonic: clamp
    defaults:
      ema_alpha: 0.3
    channels:
      happiness:
        on_threshold: 0.55
        cheek_weight: 0.4
      disgust:
        enabled: false
"""

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

from faceaffect.channel import EmotionChannelConfig

NON_MONOTONIC_POLICIES = ("raise", "clamp")

_CHANNEL_FIELDS = tuple(f.name for f in fields(EmotionChannelConfig))


@dataclass
class ChannelSettings:
    """Per-kind overrides on top of EngineConfig.defaults.

    Attributes:
        on_threshold: Override, or None to inherit.
        off_threshold: Override, or None to inherit.
        min_onset_duration_ms: Override, or None to inherit.
        min_offset_duration_ms: Override, or None to inherit.
        ema_alpha: Override, or None to inherit.
        enabled: Whether the channel is registered at all.
        params: Activation function parameters (e.g. cheek_weight).
    """

    on_threshold: Optional[float] = None
    off_threshold: Optional[float] = None
    min_onset_duration_ms: Optional[float] = None
    min_offset_duration_ms: Optional[float] = None
    ema_alpha: Optional[float] = None
    enabled: bool = True
    params: Dict[str, Any] = field(default_factory=dict)

    def apply(self, base: EmotionChannelConfig) -> EmotionChannelConfig:
        """Return base with this entry's non-None overrides applied."""
        overrides = {}
        for name in _CHANNEL_FIELDS:
            value = getattr(self, name)
            if value is not None:
                overrides[name] = float(value)
        return replace(base, **overrides)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChannelSettings":
        """Create from a mapping.

        Keys that are not channel settings are treated as activation
        parameters, so ``{"cheek_weight": 0.4}`` and
        ``{"params": {"cheek_weight": 0.4}}`` are equivalent.
        """
        if data is not None and not isinstance(data, Mapping):
            raise ValueError(f"channel settings must be a mapping, got {type(data).__name__}")
        data = dict(data or {})
        params = dict(data.pop("params", {}) or {})
        kwargs: Dict[str, Any] = {}
        for name in _CHANNEL_FIELDS:
            if name in data:
                kwargs[name] = data.pop(name)
        enabled = data.pop("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError(f"enabled must be true or false, got {enabled!r}")
        params.update(data)
        return cls(enabled=enabled, params=params, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            name: getattr(self, name)
            for name in _CHANNEL_FIELDS
            if getattr(self, name) is not None
        }
        d["enabled"] = self.enabled
        if self.params:
            d["params"] = dict(self.params)
        return d


@dataclass
class EngineConfig:
    """Complete configuration for an emotion engine.

    Attributes:
        defaults: Channel parameters used unless a kind overrides them.
        channels: Per-kind overrides, keyed by emotion kind.
        on_non_monotonic: What to do when a timestamp goes backwards:
            "raise" rejects the call with NonMonotonicTimestamp,
            "clamp" accepts it and clamps elapsed durations to zero.
    """

    defaults: EmotionChannelConfig = field(default_factory=EmotionChannelConfig)
    channels: Dict[str, ChannelSettings] = field(default_factory=dict)
    on_non_monotonic: str = "raise"

    def __post_init__(self) -> None:
        if self.on_non_monotonic not in NON_MONOTONIC_POLICIES:
            raise ValueError(
                f"on_non_monotonic must be one of {NON_MONOTONIC_POLICIES}, "
                f"got {self.on_non_monotonic!r}"
            )

    @property
    def clamp_elapsed(self) -> bool:
        return self.on_non_monotonic == "clamp"

    def settings_for(self, kind: str) -> ChannelSettings:
        return self.channels.get(str(kind)) or ChannelSettings()

    def channel_config(self, kind: str) -> EmotionChannelConfig:
        """Effective EmotionChannelConfig for a kind."""
        return self.settings_for(kind).apply(self.defaults)

    def is_enabled(self, kind: str) -> bool:
        return self.settings_for(kind).enabled

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EngineConfig":
        """Create EngineConfig from a dictionary (e.g., loaded from YAML).

        Args:
            data: Dictionary with configuration data. None yields defaults.

        Returns:
            EngineConfig instance.

        Raises:
            ValueError: If a value is out of range or unknown.
        """
        data = data or {}
        if not isinstance(data, Mapping):
            raise ValueError(f"config must be a mapping, got {type(data).__name__}")
        defaults_data = data.get("defaults") or {}
        channels_data = data.get("channels") or {}
        for section, value in (("defaults", defaults_data), ("channels", channels_data)):
            if not isinstance(value, Mapping):
                raise ValueError(f"'{section}' must be a mapping, got {type(value).__name__}")
        unknown = set(defaults_data) - set(_CHANNEL_FIELDS)
        if unknown:
            raise ValueError(f"Unknown default channel settings: {sorted(unknown)}")
        defaults = EmotionChannelConfig(**{k: float(v) for k, v in defaults_data.items()})

        channels = {
            str(kind): ChannelSettings.from_dict(entry)
            for kind, entry in channels_data.items()
        }

        return cls(
            defaults=defaults,
            channels=channels,
            on_non_monotonic=data.get("on_non_monotonic", "raise"),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "EngineConfig":
        """Load EngineConfig from a YAML file.

        Args:
            yaml_path: Path to the YAML configuration file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the file is not valid YAML or not a valid config.
        """
        import yaml

        with open(yaml_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"{yaml_path}: invalid YAML ({e})") from e

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "defaults": asdict(self.defaults),
            "channels": {kind: s.to_dict() for kind, s in self.channels.items()},
            "on_non_monotonic": self.on_non_monotonic,
        }


__all__ = ["NON_MONOTONIC_POLICIES", "ChannelSettings", "EngineConfig"]
