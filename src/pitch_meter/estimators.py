"""Pitch estimators consumed by the tracking session."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

try:  # Optional dependency - full audio analysis toolkit
    import librosa  # type: ignore
except Exception:  # pragma: no cover - dependency may be absent
    librosa = None  # type: ignore

from .utils import frame_rms


class PitchEstimator:
    """Estimate the fundamental frequency of one frame.

    Implementations return a positive, finite frequency in Hertz or ``None``
    when no periodic signal is detected.
    """

    def estimate(self, samples: np.ndarray, sample_rate: int) -> Optional[float]:  # pragma: no cover - interface method
        raise NotImplementedError


class YinEstimator(PitchEstimator):
    """YIN fundamental frequency estimate of a single frame via ``librosa.yin``."""

    def __init__(
        self,
        min_frequency: float = 50.0,
        max_frequency: float = 2000.0,
        silence_rms: float = 1e-3,
        trough_threshold: float = 0.1,
    ) -> None:
        if librosa is None:
            raise RuntimeError("librosa is required for YIN pitch estimation but is not available.")
        if not 0 < min_frequency < max_frequency:
            raise ValueError("min_frequency must be positive and below max_frequency.")
        self.min_frequency = float(min_frequency)
        self.max_frequency = float(max_frequency)
        self.silence_rms = float(silence_rms)
        self.trough_threshold = float(trough_threshold)

    def _frame_supports(self, n: int, sample_rate: int) -> bool:
        # YIN compares the frame against lags up to one period of the lowest pitch.
        return sample_rate / self.min_frequency < n // 2 - 1 and self.max_frequency <= sample_rate / 2

    def estimate(self, samples: np.ndarray, sample_rate: int) -> Optional[float]:
        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        if not self._frame_supports(samples.size, sample_rate):
            return None
        if frame_rms(samples - samples.mean()) < self.silence_rms:
            return None

        f0 = librosa.yin(
            samples,
            fmin=self.min_frequency,
            fmax=self.max_frequency,
            sr=sample_rate,
            frame_length=samples.size,
            trough_threshold=self.trough_threshold,
            center=False,
        )
        if f0.size == 0:
            return None
        pitch = float(f0[0])
        if not math.isfinite(pitch) or pitch <= 0:
            return None
        if not self.min_frequency <= pitch <= self.max_frequency:
            return None
        return pitch


__all__ = ["PitchEstimator", "YinEstimator"]
