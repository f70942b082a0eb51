from pathlib import Path
import sys

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pitch_meter.smoothing import smooth


def test_radius_zero_is_identity():
    xs = [440.0, 441.5, 439.25, 880.0]
    out = smooth(xs, 0)
    assert np.array_equal(out, np.array(xs))


def test_length_is_preserved():
    rng = np.random.default_rng(seed=7)
    for n in (1, 2, 5, 17):
        xs = rng.uniform(100.0, 1000.0, size=n)
        for radius in range(0, 6):
            assert smooth(xs, radius).size == n


def test_windows_shrink_at_the_edges():
    out = smooth([100.0, 200.0, 300.0, 400.0], 1)
    assert np.allclose(out, [150.0, 200.0, 300.0, 350.0])


def test_radius_larger_than_input_averages_everything():
    out = smooth([1.0, 2.0, 3.0], 10)
    assert np.allclose(out, [2.0, 2.0, 2.0])


def test_interior_points_are_plain_means():
    xs = np.arange(20, dtype=float) ** 2
    out = smooth(xs, 2)
    for i in range(2, 18):
        assert out[i] == pytest.approx(xs[i - 2 : i + 3].mean())


def test_input_is_not_modified():
    xs = np.array([1.0, 5.0, 9.0])
    smooth(xs, 0)[0] = 42.0
    smooth(xs, 1)
    assert np.array_equal(xs, [1.0, 5.0, 9.0])


def test_negative_radius_raises():
    with pytest.raises(ValueError):
        smooth([1.0], -1)
