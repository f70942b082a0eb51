"""Centered moving-average smoothing for pitch histories."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def smooth(values: Sequence[float], radius: int) -> np.ndarray:
    """Return the centered moving average of ``values`` with half-width ``radius``.

    Position ``i`` averages ``values[max(0, i - radius):i + radius + 1]``, so
    windows shrink at both ends instead of padding or wrapping. ``radius == 0``
    returns an unchanged copy.
    """

    data = np.asarray(values, dtype=np.float64).reshape(-1)
    if radius < 0:
        raise ValueError("radius must be >= 0.")
    if radius == 0 or data.size == 0:
        return data.copy()

    n = data.size
    out = np.empty(n, dtype=np.float64)
    for i in range(n):
        start = max(0, i - radius)
        end = min(n, i + radius + 1)
        out[i] = data[start:end].mean()
    return out


__all__ = ["smooth"]
