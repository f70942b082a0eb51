"""Exception hierarchy for the pitch meter."""

from __future__ import annotations


class PitchMeterError(Exception):
    """Base exception for all pitch meter errors."""


class DeviceUnavailable(PitchMeterError):
    """Raised when the audio input device cannot be opened."""


class PermissionDenied(PitchMeterError):
    """Raised when the platform refuses access to the microphone."""


class NotCapturing(PitchMeterError):
    """Raised when an operation needs an active capture but the session is idle."""


class ConfigError(PitchMeterError, ValueError):
    """Raised when a :class:`~pitch_meter.config.SessionConfig` is invalid."""


__all__ = [
    "PitchMeterError",
    "DeviceUnavailable",
    "PermissionDenied",
    "NotCapturing",
    "ConfigError",
]
