"""Utility helpers for spectrum analysis of captured frames."""

from __future__ import annotations

import numpy as np
from scipy import signal

EPS = 1e-12


def dbfs(x: np.ndarray) -> np.ndarray:
    """Convert a linear magnitude array into dBFS."""
    return 20.0 * np.log10(np.maximum(x, EPS))


def analysis_window(name: str, n: int) -> np.ndarray:
    """Return the periodic ``scipy`` window ``name`` of length ``n`` as ``float32``."""
    return signal.get_window(name, n, fftbins=True).astype(np.float32)


def spectrum_db(samples: np.ndarray, window: np.ndarray) -> np.ndarray:
    """Return the dB magnitude spectrum of ``samples``.

    The result has ``len(samples) // 2`` bins: the DC bin up to, but not
    including, the Nyquist bin. The magnitude is normalised by the window sum
    so a full-scale sine peaks near 0 dBFS.
    """

    samples = np.asarray(samples, dtype=np.float32)
    if samples.size != window.size:
        raise ValueError(
            f"frame has {samples.size} samples but the window has {window.size}"
        )
    spec = np.fft.rfft(samples * window)
    mag = np.abs(spec[: samples.size // 2]) * (2.0 / float(np.sum(window)))
    return dbfs(mag).astype(np.float32)


def frame_rms(samples: np.ndarray) -> float:
    if samples.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(samples, dtype=np.float64))))


__all__ = ["EPS", "dbfs", "analysis_window", "spectrum_db", "frame_rms"]
