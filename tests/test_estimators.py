from pathlib import Path
import sys

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

pytest.importorskip("librosa")

from pitch_meter.audio import DemoSource
from pitch_meter.config import SessionConfig
from pitch_meter.estimators import YinEstimator
from pitch_meter.scheduler import ManualScheduler
from pitch_meter.session import PitchTrackingSession

SR = 44100
N = 2048


def _sine(freq: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(N) / SR
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.mark.parametrize("freq", [110.0, 261.63, 440.0, 880.0])
def test_yin_recovers_sine_frequency(freq):
    estimator = YinEstimator(min_frequency=50.0, max_frequency=2000.0)
    pitch = estimator.estimate(_sine(freq), SR)
    assert pitch is not None
    assert pitch == pytest.approx(freq, rel=5e-3)


def test_yin_reports_no_pitch_for_silence():
    estimator = YinEstimator()
    assert estimator.estimate(np.zeros(N, dtype=np.float32), SR) is None
    assert estimator.estimate(np.full(N, 0.3, dtype=np.float32), SR) is None


def test_yin_reports_no_pitch_when_frame_is_too_short():
    estimator = YinEstimator(min_frequency=50.0)
    assert estimator.estimate(_sine(440.0)[:256], SR) is None


def test_yin_rejects_invalid_band():
    with pytest.raises(ValueError):
        YinEstimator(min_frequency=500.0, max_frequency=100.0)


def test_end_to_end_sine_yields_a4():
    config = SessionConfig(noise_cancellation_enabled=False)
    source = DemoSource(config.sample_rate, config.frame_size, frequency=440.0)
    estimator = YinEstimator(
        min_frequency=config.min_frequency,
        max_frequency=config.max_frequency,
        silence_rms=config.silence_rms,
    )
    scheduler = ManualScheduler()
    session = PitchTrackingSession(source, estimator, scheduler, config)

    session.start()
    scheduler.run_ticks(5)

    assert session.current_note == ("A", 4)
    assert session.history.size == 5
    assert session.history[-1] == pytest.approx(440.0, rel=5e-3)
    session.stop()
