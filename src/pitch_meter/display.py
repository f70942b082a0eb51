"""Matplotlib-based live pitch chart."""

from __future__ import annotations

import logging
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

from .exceptions import NotCapturing, PitchMeterError
from .scheduler import SchedScheduler
from .session import PitchSnapshot, PitchTrackingSession

logger = logging.getLogger(__name__)

MAX_SMOOTHING = 10
DISPLAY_MAX_HZ_LIMITS = (200.0, 1200.0)
DISPLAY_STEP_HZ = 100.0


class PitchMeterDisplay:
    """Interactive pitch-over-time chart bound to a tracking session."""

    def __init__(self, session: PitchTrackingSession, scheduler: SchedScheduler) -> None:
        self.session = session
        self.scheduler = scheduler
        self.status: Optional[str] = None

        capacity = session.config.history_capacity
        self.fig, self.ax = plt.subplots(figsize=(10, 6))
        (self.line,) = self.ax.plot([], [], lw=1.5, color=(75 / 255, 192 / 255, 192 / 255))
        self.ax.set_xlim(0, max(capacity - 1, 1))
        self.ax.set_ylim(0, session.config.display_max_hz)
        self.ax.set_xlabel("Sample")
        self.ax.set_ylabel("Pitch (Hz)")
        self.ax.grid(True, alpha=0.25)
        self.headline = self.fig.suptitle("", fontsize=18, fontweight="bold")
        self.fig.canvas.mpl_connect("key_press_event", self.on_key)
        self.fig.canvas.mpl_connect("close_event", self.on_close)

        session.add_listener(self.update)
        self.update(session.snapshot())

    # ------------------------------------------------------------------
    # Event handlers & UI updates
    # ------------------------------------------------------------------
    def _set_titles(self, snap: PitchSnapshot) -> None:
        parts = []
        if snap.current_note is not None:
            parts.append(str(snap.current_note))
        if snap.history.size:
            parts.append(f"{snap.history[-1]:.2f} Hz")
        self.headline.set_text("   ".join(parts))

        cfg = self.session.config
        nc = "ON" if cfg.noise_cancellation_enabled else "OFF"
        title = (
            f"{'Listening' if self.session.is_capturing else 'Stopped'}  |  "
            f"Noise cancel: {nc}  |  Smoothness: {cfg.smoothing_radius}  |  "
            f"Max range: {cfg.display_max_hz:.0f} Hz"
        )
        if snap.is_calibrating:
            title += f"  |  Calibrating... {snap.calibration_remaining_seconds:.1f}s"
        if self.status:
            title += f"\n{self.status}"
        self.ax.set_title(title, fontsize=10)

    def update(self, snap: PitchSnapshot) -> None:
        self.line.set_data(np.arange(snap.history.size), snap.history)
        self.ax.set_ylim(0, snap.display_max_hz)
        self._set_titles(snap)
        self.fig.canvas.draw_idle()

    def _reconfigure(self, **changes) -> None:
        self.session.update_config(**changes)
        self.update(self.session.snapshot())

    def on_key(self, event) -> None:
        cfg = self.session.config
        self.status = None
        if event.key in ("q", "escape"):
            plt.close(self.fig)
        elif event.key == " ":
            self.toggle_listening()
        elif event.key == "c":
            try:
                self.session.calibrate()
            except NotCapturing:
                self.status = "Start listening before calibrating."
            self.update(self.session.snapshot())
        elif event.key == "n":
            self._reconfigure(noise_cancellation_enabled=not cfg.noise_cancellation_enabled)
        elif event.key == "[":
            self._reconfigure(smoothing_radius=max(0, cfg.smoothing_radius - 1))
        elif event.key == "]":
            self._reconfigure(smoothing_radius=min(MAX_SMOOTHING, cfg.smoothing_radius + 1))
        elif event.key == "-":
            lo, _ = DISPLAY_MAX_HZ_LIMITS
            self._reconfigure(display_max_hz=max(lo, cfg.display_max_hz - DISPLAY_STEP_HZ))
        elif event.key in ("=", "+"):
            _, hi = DISPLAY_MAX_HZ_LIMITS
            self._reconfigure(display_max_hz=min(hi, cfg.display_max_hz + DISPLAY_STEP_HZ))

    def on_close(self, _event) -> None:
        self.session.stop()

    def toggle_listening(self) -> None:
        if self.session.is_calibrating:
            self.status = "Wait for calibration to finish."
            self.update(self.session.snapshot())
            return
        if self.session.is_capturing:
            self.session.stop()
            return
        try:
            self.session.start()
        except PitchMeterError as exc:
            logger.error("Could not start listening: %s", exc)
            self.status = str(exc)
        self.update(self.session.snapshot())

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def pause_interval(self, wait: Optional[float]) -> float:
        """Seconds to spend in the GUI event loop before polling the scheduler again."""
        interval = 1.0 / self.session.config.frame_rate_hz
        if wait is None:
            return interval
        return min(max(wait, 1e-3), interval)

    def run(self, autostart: bool = True) -> None:
        if autostart:
            self.toggle_listening()
        plt.show(block=False)
        try:
            while plt.fignum_exists(self.fig.number):
                wait = self.scheduler.run(blocking=False)
                plt.pause(self.pause_interval(wait))
        finally:
            self.session.stop()


__all__ = ["PitchMeterDisplay"]
