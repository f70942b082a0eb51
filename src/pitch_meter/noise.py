"""Ambient noise calibration and gating."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .audio import Frame

logger = logging.getLogger(__name__)


class NoiseProfile:
    """Bin-wise running maximum of the spectra seen during calibration.

    The profile is empty until a calibration window completes. While a window
    is in progress the partial profile is private; :attr:`values` and
    :attr:`noise_floor` only expose a finished calibration.
    """

    def __init__(self) -> None:
        self._values: Optional[np.ndarray] = None
        self._pending: Optional[np.ndarray] = None
        self._target_frames = 0
        self._frames_seen = 0
        self._calibrating = False
        self._noise_floor: Optional[float] = None

    @property
    def is_calibrating(self) -> bool:
        return self._calibrating

    @property
    def is_ready(self) -> bool:
        return self._values is not None

    @property
    def values(self) -> Optional[np.ndarray]:
        return self._values

    @property
    def noise_floor(self) -> Optional[float]:
        return self._noise_floor

    @property
    def target_frames(self) -> int:
        return self._target_frames

    @property
    def frames_remaining(self) -> int:
        if not self._calibrating:
            return 0
        return self._target_frames - self._frames_seen

    def __len__(self) -> int:
        return 0 if self._values is None else int(self._values.size)

    def reset(self) -> None:
        """Discard any finished or partial calibration."""

        self._values = None
        self._pending = None
        self._noise_floor = None
        self._target_frames = 0
        self._frames_seen = 0
        self._calibrating = False

    def begin(self, duration_seconds: float, expected_frame_rate_hz: float) -> int:
        """Start a fresh calibration window and return its length in frames.

        At least one frame is always consumed, so a zero duration still
        produces a profile from the next frame.
        """

        if duration_seconds < 0 or expected_frame_rate_hz <= 0:
            raise ValueError("calibration needs a non-negative duration and a positive frame rate.")
        self.reset()
        self._target_frames = max(1, int(duration_seconds * expected_frame_rate_hz))
        self._calibrating = True
        logger.info(
            "Calibrating noise profile over %d frames (%.2f s)",
            self._target_frames,
            duration_seconds,
        )
        return self._target_frames

    def update(self, spectrum: np.ndarray) -> bool:
        """Fold one spectrum into the running maximum.

        Returns ``True`` when this spectrum completed the calibration window.
        """

        if not self._calibrating:
            return False
        spectrum = np.asarray(spectrum, dtype=np.float32).reshape(-1)
        if self._pending is None:
            self._pending = spectrum.copy()
        else:
            if spectrum.size != self._pending.size:
                raise ValueError(
                    f"spectrum has {spectrum.size} bins, profile has {self._pending.size}"
                )
            np.maximum(self._pending, spectrum, out=self._pending)
        self._frames_seen += 1

        if self._frames_seen < self._target_frames:
            return False

        self._pending.setflags(write=False)
        self._values = self._pending
        self._pending = None
        self._noise_floor = float(np.max(self._values))
        self._calibrating = False
        logger.info("Noise calibration complete; noise floor %.2f", self._noise_floor)
        return True


class NoiseGate:
    """Attenuates frames with a :class:`NoiseProfile` and rejects weak pitches."""

    def __init__(self, profile: NoiseProfile, enabled: bool = False) -> None:
        self.profile = profile
        self.enabled = enabled

    @property
    def active(self) -> bool:
        return self.enabled and self.profile.is_ready

    def apply(self, frame: Frame) -> Frame:
        """Subtract the profile, tiled over the frame, and clamp at zero."""

        if not self.active:
            return frame
        profile = self.profile.values
        reps = -(-len(frame) // profile.size)
        tiled = np.tile(profile, reps)[: len(frame)]
        gated = np.maximum(frame.samples - tiled, 0.0)
        return Frame(gated, frame.sample_rate)

    def accept(self, pitch: float) -> bool:
        if not self.enabled:
            return True
        floor = self.profile.noise_floor
        if floor is None:
            return True
        return pitch > floor


__all__ = ["NoiseProfile", "NoiseGate"]
