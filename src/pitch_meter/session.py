"""Continuous pitch tracking session: capture, gate, estimate, smooth, publish."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import numpy as np

from .audio import Frame, FrameSource
from .config import SessionConfig
from .estimators import PitchEstimator
from .exceptions import NotCapturing
from .noise import NoiseGate, NoiseProfile
from .notes import Note, note_for
from .scheduler import TickScheduler
from .smoothing import smooth
from .utils import analysis_window, spectrum_db

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    IDLE = "idle"
    CAPTURING = "capturing"


@dataclass(frozen=True, eq=False)
class PitchSnapshot:
    """What a display needs after each tick."""

    history: np.ndarray
    current_note: Optional[Note]
    current_pitch: Optional[float]
    is_calibrating: bool
    calibration_remaining_seconds: float
    display_max_hz: float


Listener = Callable[[PitchSnapshot], None]


class PitchTrackingSession:
    """Owns the capture lifecycle, noise profile and pitch history.

    Frames are pulled from ``source`` once per scheduler tick. Each tick feeds
    an in-progress calibration, gates the frame, estimates its pitch and, when
    the estimate passes the noise floor, appends it to the raw history before
    re-smoothing the retained window.
    """

    def __init__(
        self,
        source: FrameSource,
        estimator: PitchEstimator,
        scheduler: TickScheduler,
        config: Optional[SessionConfig] = None,
    ) -> None:
        self.source = source
        self.estimator = estimator
        self.scheduler = scheduler
        self._config = (config if config is not None else SessionConfig()).validate()

        self.profile = NoiseProfile()
        self.gate = NoiseGate(self.profile)
        self._state = SessionState.IDLE
        self._pending: Any = None
        self._raw: List[float] = []
        self._history = np.zeros(0, dtype=np.float64)
        self._current_note: Optional[Note] = None
        self._current_pitch: Optional[float] = None
        self._window: Optional[np.ndarray] = None
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_capturing(self) -> bool:
        return self._state is SessionState.CAPTURING

    @property
    def is_calibrating(self) -> bool:
        return self.profile.is_calibrating

    @property
    def calibration_remaining_seconds(self) -> float:
        return self.profile.frames_remaining / self._config.frame_rate_hz

    @property
    def history(self) -> np.ndarray:
        return self._history.copy()

    @property
    def current_note(self) -> Optional[Note]:
        return self._current_note

    @property
    def current_pitch(self) -> Optional[float]:
        return self._current_pitch

    def snapshot(self) -> PitchSnapshot:
        return PitchSnapshot(
            history=self.history,
            current_note=self._current_note,
            current_pitch=self._current_pitch,
            is_calibrating=self.is_calibrating,
            calibration_remaining_seconds=self.calibration_remaining_seconds,
            display_max_hz=self._config.display_max_hz,
        )

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _publish(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Open the source and begin ticking.

        Raises whatever the source raises on open (``DeviceUnavailable`` or
        ``PermissionDenied``); the session is then still idle and the source
        has been closed.
        """

        if self.is_capturing:
            logger.warning("start() called while already capturing; ignoring")
            return

        self._clear()
        try:
            self.source.open()
            self._state = SessionState.CAPTURING
            if self._config.noise_cancellation_enabled:
                self._begin_calibration()
            self._pending = self.scheduler.call_later(0.0, self._tick)
        except BaseException:
            self._state = SessionState.IDLE
            self._pending = None
            self.profile.reset()
            self.source.close()
            raise
        logger.info(
            "Pitch tracking started (noise cancellation %s)",
            "on" if self._config.noise_cancellation_enabled else "off",
        )

    def stop(self) -> None:
        """Cancel the pending tick, release the source and clear all results."""

        pending, self._pending = self._pending, None
        was_capturing = self.is_capturing
        self._state = SessionState.IDLE
        try:
            if pending is not None:
                self.scheduler.cancel(pending)
        finally:
            try:
                self.source.close()
            finally:
                self._clear()
        if was_capturing:
            logger.info("Pitch tracking stopped")
            self._publish()

    def _clear(self) -> None:
        self.profile.reset()
        self._raw = []
        self._history = np.zeros(0, dtype=np.float64)
        self._current_note = None
        self._current_pitch = None
        self._window = None

    # ------------------------------------------------------------------
    # Calibration & configuration
    # ------------------------------------------------------------------
    def calibrate(self) -> bool:
        """Start a new noise calibration window.

        Returns ``False`` without restarting when a calibration is already in
        progress. Raises :class:`NotCapturing` when the session is idle.
        """

        if not self.is_capturing:
            raise NotCapturing("Calibration requires an active capture.")
        if self.is_calibrating:
            logger.debug("Calibration already in progress; ignoring request")
            return False
        self._begin_calibration()
        return True

    def _begin_calibration(self) -> None:
        self.profile.begin(
            self._config.calibration_duration_seconds, self._config.frame_rate_hz
        )

    def update_config(self, **changes: Any) -> SessionConfig:
        """Apply ``changes`` from the next processed frame onwards.

        Turning noise cancellation on while capturing starts a fresh
        calibration immediately.
        """

        previous = self._config
        self._config = previous.replace(**changes)
        if previous.spectrum_window != self._config.spectrum_window:
            self._window = None
        if (
            self._config.noise_cancellation_enabled
            and not previous.noise_cancellation_enabled
            and self.is_capturing
        ):
            self._begin_calibration()
        return self._config

    # ------------------------------------------------------------------
    # Tick processing
    # ------------------------------------------------------------------
    def _tick(self) -> None:
        self._pending = None
        if not self.is_capturing:
            return
        try:
            frame = self.source.read()
            if frame is not None:
                self.process_frame(frame)
        except Exception:
            logger.exception("Pitch tracking tick failed; stopping capture")
            self.stop()
            raise
        if self.is_capturing:
            self._pending = self.scheduler.call_later(
                1.0 / self._config.frame_rate_hz, self._tick
            )

    def _spectrum(self, frame: Frame) -> np.ndarray:
        if self._window is None or self._window.size != len(frame):
            self._window = analysis_window(self._config.spectrum_window, len(frame))
        return spectrum_db(frame.samples, self._window)

    def process_frame(self, frame: Frame) -> Optional[float]:
        """Run one frame through the pipeline and publish the result.

        Returns the accepted raw pitch, or ``None`` if the frame produced no
        accepted estimate. Frames offered while idle are ignored.
        """

        if not self.is_capturing:
            return None
        if self.profile.is_calibrating:
            self.profile.update(self._spectrum(frame))

        self.gate.enabled = self._config.noise_cancellation_enabled
        gated = self.gate.apply(frame)
        pitch = self.estimator.estimate(gated.samples, gated.sample_rate)

        accepted: Optional[float] = None
        if pitch is not None and np.isfinite(pitch) and pitch > 0:
            if self.gate.accept(pitch):
                accepted = float(pitch)
                self._append(accepted)
            else:
                logger.debug("Rejected %.2f Hz below noise floor %s", pitch, self.profile.noise_floor)

        self._publish()
        return accepted

    def _append(self, pitch: float) -> None:
        capacity = self._config.history_capacity
        radius = self._config.smoothing_radius
        self._raw.append(pitch)
        # Keep enough trailing context for the oldest retained point's window.
        keep = capacity + radius
        if len(self._raw) > keep:
            del self._raw[: len(self._raw) - keep]
        self._history = smooth(self._raw, radius)[-capacity:]
        self._current_pitch = pitch
        self._current_note = note_for(pitch)


__all__ = ["SessionState", "PitchSnapshot", "PitchTrackingSession"]
