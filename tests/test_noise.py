from pathlib import Path
import sys

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pitch_meter.audio import Frame
from pitch_meter.noise import NoiseGate, NoiseProfile


def _calibrated(spectra) -> NoiseProfile:
    profile = NoiseProfile()
    profile.begin(len(spectra), 1.0)
    for spectrum in spectra:
        profile.update(np.asarray(spectrum, dtype=np.float32))
    return profile


def test_profile_is_elementwise_maximum():
    rng = np.random.default_rng(seed=1234)
    for n in (1, 2, 7):
        spectra = rng.normal(-60.0, 10.0, size=(n, 32)).astype(np.float32)
        profile = _calibrated(spectra)
        assert profile.is_ready
        assert not profile.is_calibrating
        assert np.array_equal(profile.values, spectra.max(axis=0))
        assert profile.noise_floor == pytest.approx(float(spectra.max()))


def test_frame_count_is_truncated_duration_times_rate():
    profile = NoiseProfile()
    assert profile.begin(2.5, 3.0) == 7
    assert profile.frames_remaining == 7


def test_zero_duration_still_consumes_one_frame():
    profile = NoiseProfile()
    assert profile.begin(0.0, 60.0) == 1
    assert profile.update(np.array([-10.0, -20.0])) is True
    assert profile.noise_floor == pytest.approx(-10.0)


def test_partial_profile_is_not_exposed():
    profile = NoiseProfile()
    profile.begin(3, 1.0)
    profile.update(np.array([1.0, 2.0]))
    assert profile.is_calibrating
    assert profile.values is None
    assert profile.noise_floor is None
    assert profile.frames_remaining == 2


def test_recalibration_discards_previous_profile():
    profile = _calibrated([[5.0, 5.0]])
    profile.begin(1, 1.0)
    assert not profile.is_ready
    profile.update(np.array([1.0, 2.0]))
    assert np.array_equal(profile.values, [1.0, 2.0])
    assert profile.noise_floor == pytest.approx(2.0)


def test_profile_is_read_only_after_calibration():
    profile = _calibrated([[1.0, 2.0]])
    with pytest.raises(ValueError):
        profile.values[0] = 9.0


def test_update_outside_calibration_is_ignored():
    profile = _calibrated([[1.0, 2.0]])
    assert profile.update(np.array([100.0, 100.0])) is False
    assert np.array_equal(profile.values, [1.0, 2.0])


def test_spectrum_length_mismatch_raises():
    profile = NoiseProfile()
    profile.begin(2, 1.0)
    profile.update(np.zeros(4))
    with pytest.raises(ValueError):
        profile.update(np.zeros(5))


def test_gate_is_identity_when_disabled_or_uncalibrated():
    frame = Frame(np.array([0.5, -0.5, 0.25]), 8000)
    assert NoiseGate(NoiseProfile(), enabled=True).apply(frame) is frame
    assert NoiseGate(_calibrated([[0.1]]), enabled=False).apply(frame) is frame


def test_gate_subtracts_tiled_profile_and_clamps():
    gate = NoiseGate(_calibrated([[1.0, 2.0]]), enabled=True)
    frame = Frame(np.array([5.0, 5.0, 5.0, 0.5, 1.5]), 8000)
    gated = gate.apply(frame)
    assert np.allclose(gated.samples, [4.0, 3.0, 4.0, 0.0, 0.5])
    assert gated.sample_rate == 8000
    assert np.allclose(frame.samples, [5.0, 5.0, 5.0, 0.5, 1.5])


def test_accept_compares_strictly_against_floor():
    gate = NoiseGate(_calibrated([[100.0, 150.0]]), enabled=True)
    assert not gate.accept(149.0)
    assert not gate.accept(150.0)
    assert gate.accept(150.5)


def test_accept_passes_everything_when_disabled_or_uncalibrated():
    assert NoiseGate(_calibrated([[500.0]]), enabled=False).accept(10.0)
    assert NoiseGate(NoiseProfile(), enabled=True).accept(10.0)
