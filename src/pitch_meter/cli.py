"""Command-line entrypoint for the live pitch meter."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .audio import DemoSource, FrameSource, MicSource, sd
from .config import SessionConfig, load_config, load_default_config
from .estimators import YinEstimator
from .exceptions import PitchMeterError
from .notes import Note
from .scheduler import SchedScheduler
from .session import PitchSnapshot, PitchTrackingSession

logger = logging.getLogger("pitch_meter")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Live pitch meter: estimate the sung or played note from a microphone"
    )
    parser.add_argument("--config", type=Path, default=None, help="JSON configuration file")
    parser.add_argument("--device", type=str, default=None)
    parser.add_argument("--demo", action="store_true", help="Use a synthetic tone instead of the microphone")
    parser.add_argument("--demo-frequency", type=float, default=440.0)
    parser.add_argument("--noise-cancel", action="store_true", default=None)
    parser.add_argument("--calibration-seconds", type=float, default=None)
    parser.add_argument("--smoothing", type=int, default=None)
    parser.add_argument("--max-hz", type=float, default=None)
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (headless mode only)",
    )
    parser.add_argument("--plot", action="store_true", help="Show the live matplotlib chart")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SessionConfig:
    config = load_config(args.config) if args.config else load_default_config()
    overrides = {
        "noise_cancellation_enabled": args.noise_cancel,
        "calibration_duration_seconds": args.calibration_seconds,
        "smoothing_radius": args.smoothing,
        "display_max_hz": args.max_hz,
        "device": args.device,
    }
    return config.replace(**{k: v for k, v in overrides.items() if v is not None})


def create_source(args: argparse.Namespace, config: SessionConfig) -> FrameSource:
    if args.demo or sd is None:
        return DemoSource(
            config.sample_rate,
            config.frame_size,
            frequency=args.demo_frequency,
            noise_level=0.01,
        )
    return MicSource(config.sample_rate, config.frame_size, device=config.device)


class _NoteLogger:
    """Headless listener logging each change of the detected note."""

    def __init__(self) -> None:
        self.last: Optional[Note] = None
        self.was_calibrating = False

    def __call__(self, snap: PitchSnapshot) -> None:
        if snap.is_calibrating and not self.was_calibrating:
            logger.info("Calibrating... %.1fs", snap.calibration_remaining_seconds)
        self.was_calibrating = snap.is_calibrating
        if snap.current_note is not None and snap.current_note != self.last:
            logger.info("%s  %.2f Hz", snap.current_note, snap.history[-1])
        self.last = snap.current_note


def _start_with_fallback(
    session: PitchTrackingSession, args: argparse.Namespace, config: SessionConfig
) -> None:
    try:
        session.start()
    except PitchMeterError as exc:
        if args.demo:
            raise
        logger.warning("Could not initialize microphone input: %s", exc)
        logger.warning("Falling back to demo mode. Use --device to select input.")
        session.source = DemoSource(
            config.sample_rate, config.frame_size, frequency=args.demo_frequency, noise_level=0.01
        )
        session.start()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    config = build_config(args)
    source = create_source(args, config)
    estimator = YinEstimator(
        min_frequency=config.min_frequency,
        max_frequency=config.max_frequency,
        silence_rms=config.silence_rms,
    )
    scheduler = SchedScheduler()
    session = PitchTrackingSession(source, estimator, scheduler, config)

    if args.plot:
        from .display import PitchMeterDisplay

        display = PitchMeterDisplay(session, scheduler)
        _start_with_fallback(session, args, config)
        display.run(autostart=False)
        return 0

    session.add_listener(_NoteLogger())
    _start_with_fallback(session, args, config)
    if args.duration is not None:
        scheduler.call_later(args.duration, session.stop)
    try:
        scheduler.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        session.stop()
    return 0


__all__ = ["parse_args", "build_config", "create_source", "main"]


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
