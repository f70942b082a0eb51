"""Configuration helpers for pitch tracking sessions."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from .exceptions import ConfigError

_DEFAULT_CONFIG_NAME = "pitch_meter_config.json"


def _whole(value: Any, name: str) -> int:
    """Return ``value`` as an ``int``; JSON may hand whole numbers over as floats."""
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise ConfigError(f"{name} must be an integer, got {value!r}.")
    if not np.isfinite(value) or int(value) != value:
        raise ConfigError(f"{name} must be an integer, got {value!r}.")
    return int(value)


@dataclasses.dataclass
class SessionConfig:
    """Options for a :class:`~pitch_meter.session.PitchTrackingSession`."""

    noise_cancellation_enabled: bool = False
    calibration_duration_seconds: float = 5.0
    smoothing_radius: int = 0
    history_capacity: int = 100
    display_max_hz: float = 1000.0
    sample_rate: int = 44100
    frame_size: int = 2048
    frame_rate_hz: float = 60.0
    min_frequency: float = 50.0
    max_frequency: float = 2000.0
    silence_rms: float = 1e-3
    spectrum_window: str = "blackman"
    device: Optional[str] = None

    @property
    def spectrum_bins(self) -> int:
        return self.frame_size // 2

    def validate(self) -> "SessionConfig":
        """Raise :class:`ConfigError` if any option is out of range."""

        self.smoothing_radius = _whole(self.smoothing_radius, "smoothing_radius")
        if self.smoothing_radius < 0:
            raise ConfigError("smoothing_radius must be an integer >= 0.")
        self.history_capacity = _whole(self.history_capacity, "history_capacity")
        if self.history_capacity <= 0:
            raise ConfigError("history_capacity must be an integer > 0.")
        self.sample_rate = _whole(self.sample_rate, "sample_rate")
        self.frame_size = _whole(self.frame_size, "frame_size")
        if not np.isfinite(self.calibration_duration_seconds) or self.calibration_duration_seconds < 0:
            raise ConfigError("calibration_duration_seconds must be >= 0.")
        for name in ("display_max_hz", "frame_rate_hz"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise ConfigError(f"{name} must be positive.")
        if self.sample_rate <= 0:
            raise ConfigError("sample_rate must be positive.")
        if self.frame_size < 2:
            raise ConfigError("frame_size must be at least 2 samples.")
        if not 0 < self.min_frequency < self.max_frequency:
            raise ConfigError("min_frequency must be positive and below max_frequency.")
        if self.max_frequency > self.sample_rate / 2.0:
            raise ConfigError("max_frequency must not exceed the Nyquist frequency.")
        if self.silence_rms < 0:
            raise ConfigError("silence_rms must be >= 0.")
        return self

    def replace(self, **changes: Any) -> "SessionConfig":
        """Return a validated copy with ``changes`` applied."""

        known = {f.name for f in dataclasses.fields(SessionConfig)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration option(s): {', '.join(unknown)}")
        return dataclasses.replace(self, **changes).validate()

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "SessionConfig":
        known = {f.name for f in dataclasses.fields(SessionConfig)}
        filtered = {k: v for k, v in raw.items() if k in known}
        return SessionConfig(**filtered).validate()


def load_config(path: Path) -> SessionConfig:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ConfigError(f"{path} does not contain a JSON object.")
    return SessionConfig.from_dict(data)


def load_default_config() -> SessionConfig:
    """Load the configuration shipped alongside this module."""
    return load_config(Path(__file__).with_name(_DEFAULT_CONFIG_NAME))


__all__ = ["SessionConfig", "load_config", "load_default_config"]
