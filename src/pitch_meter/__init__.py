"""Real-time pitch tracking: noise calibration, gating, smoothing and note names."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "Frame",
    "FrameSource",
    "DemoSource",
    "MicSource",
    "SessionConfig",
    "load_config",
    "load_default_config",
    "PitchEstimator",
    "YinEstimator",
    "NoiseProfile",
    "NoiseGate",
    "Note",
    "NOTE_NAMES",
    "note_for",
    "smooth",
    "ManualScheduler",
    "SchedScheduler",
    "PitchSnapshot",
    "PitchTrackingSession",
    "SessionState",
    "DeviceUnavailable",
    "NotCapturing",
    "PermissionDenied",
    "PitchMeterError",
    "main",
]

_EXPORT_MAP = {
    "Frame": ("pitch_meter.audio", "Frame"),
    "FrameSource": ("pitch_meter.audio", "FrameSource"),
    "DemoSource": ("pitch_meter.audio", "DemoSource"),
    "MicSource": ("pitch_meter.audio", "MicSource"),
    "SessionConfig": ("pitch_meter.config", "SessionConfig"),
    "load_config": ("pitch_meter.config", "load_config"),
    "load_default_config": ("pitch_meter.config", "load_default_config"),
    "PitchEstimator": ("pitch_meter.estimators", "PitchEstimator"),
    "YinEstimator": ("pitch_meter.estimators", "YinEstimator"),
    "NoiseProfile": ("pitch_meter.noise", "NoiseProfile"),
    "NoiseGate": ("pitch_meter.noise", "NoiseGate"),
    "Note": ("pitch_meter.notes", "Note"),
    "NOTE_NAMES": ("pitch_meter.notes", "NOTE_NAMES"),
    "note_for": ("pitch_meter.notes", "note_for"),
    "smooth": ("pitch_meter.smoothing", "smooth"),
    "ManualScheduler": ("pitch_meter.scheduler", "ManualScheduler"),
    "SchedScheduler": ("pitch_meter.scheduler", "SchedScheduler"),
    "PitchSnapshot": ("pitch_meter.session", "PitchSnapshot"),
    "PitchTrackingSession": ("pitch_meter.session", "PitchTrackingSession"),
    "SessionState": ("pitch_meter.session", "SessionState"),
    "DeviceUnavailable": ("pitch_meter.exceptions", "DeviceUnavailable"),
    "NotCapturing": ("pitch_meter.exceptions", "NotCapturing"),
    "PermissionDenied": ("pitch_meter.exceptions", "PermissionDenied"),
    "PitchMeterError": ("pitch_meter.exceptions", "PitchMeterError"),
    "main": ("pitch_meter.cli", "main"),
}


if TYPE_CHECKING:  # pragma: no cover - only for type checkers
    from pitch_meter.audio import DemoSource, Frame, FrameSource, MicSource
    from pitch_meter.cli import main
    from pitch_meter.config import SessionConfig, load_config, load_default_config
    from pitch_meter.estimators import PitchEstimator, YinEstimator
    from pitch_meter.exceptions import (
        DeviceUnavailable,
        NotCapturing,
        PermissionDenied,
        PitchMeterError,
    )
    from pitch_meter.noise import NoiseGate, NoiseProfile
    from pitch_meter.notes import NOTE_NAMES, Note, note_for
    from pitch_meter.scheduler import ManualScheduler, SchedScheduler
    from pitch_meter.session import PitchSnapshot, PitchTrackingSession, SessionState
    from pitch_meter.smoothing import smooth


def __getattr__(name: str) -> Any:
    """Lazily import heavy submodules on demand."""

    if name in _EXPORT_MAP:
        module_name, attribute = _EXPORT_MAP[name]
        module = import_module(module_name)
        value = getattr(module, attribute)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(set(__all__))
