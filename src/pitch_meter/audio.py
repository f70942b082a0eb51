"""Frame sources feeding the pitch tracking session."""
from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .exceptions import DeviceUnavailable, PermissionDenied

try:  # Optional dependency
    import sounddevice as sd
except Exception:  # pragma: no cover - optional dependency may be absent in CI
    sd = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Frame:
    """A block of mono time-domain samples and the rate they were captured at."""

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        if int(self.sample_rate) <= 0:
            raise ValueError("sample_rate must be a positive integer.")
        data = np.array(self.samples, dtype=np.float32, copy=True).reshape(-1)
        data.setflags(write=False)
        object.__setattr__(self, "samples", data)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    def __len__(self) -> int:
        return int(self.samples.size)


class FrameSource:
    """Abstract frame stream interface.

    ``read`` never blocks: it returns the most recent full frame or ``None``
    when no frame is available yet.
    """

    sample_rate: int
    frame_size: int

    def open(self) -> None:  # pragma: no cover - interface method
        raise NotImplementedError

    def read(self) -> Optional[Frame]:  # pragma: no cover - interface method
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - interface method
        raise NotImplementedError


def _map_portaudio_error(exc: Exception) -> Exception:
    text = str(exc)
    if "permission" in text.lower() or "not permitted" in text.lower():
        return PermissionDenied(f"Microphone access denied: {text}")
    return DeviceUnavailable(f"Could not open audio input: {text}")


class MicSource(FrameSource):
    """Frame source backed by a system microphone through sounddevice."""

    def __init__(
        self,
        samplerate: int,
        frame_size: int,
        device: Optional[str] = None,
        blocksize: Optional[int] = None,
    ) -> None:
        self.sample_rate = int(samplerate)
        self.frame_size = int(frame_size)
        self.device = device
        self.blocksize = int(blocksize) if blocksize else max(self.frame_size // 4, 1)
        self.q: "queue.Queue[np.ndarray]" = queue.Queue(maxsize=64)
        self.stream = None
        self._buffer = np.zeros(0, dtype=np.float32)

    def _callback(self, indata, frames, time_info, status):  # pragma: no cover - sounddevice callback
        if status:
            logger.debug("Input stream status: %s", status)
        if indata.ndim == 2 and indata.shape[1] > 1:
            mono = indata.mean(axis=1).copy()
        else:
            mono = indata[:, 0].copy() if indata.ndim == 2 else indata.copy()
        try:
            self.q.put_nowait(mono)
        except queue.Full:
            pass

    def open(self) -> None:
        if sd is None:
            raise DeviceUnavailable(
                "sounddevice is not available. Install it or use --demo."
            )
        if self.stream is not None:
            return
        self._buffer = np.zeros(0, dtype=np.float32)
        stream = None
        try:
            stream = sd.InputStream(
                channels=1,
                samplerate=self.sample_rate,
                blocksize=self.blocksize,
                device=self.device,
                callback=self._callback,
                dtype="float32",
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as exc:
            if stream is not None:
                stream.close()
            raise _map_portaudio_error(exc) from exc
        self.stream = stream
        logger.info(
            "Opened microphone (device=%s, %d Hz, %d-sample frames)",
            self.device,
            self.sample_rate,
            self.frame_size,
        )

    def read(self) -> Optional[Frame]:
        chunks = []
        while True:
            try:
                chunks.append(self.q.get_nowait())
            except queue.Empty:
                break
        if chunks:
            joined = np.concatenate([self._buffer, *chunks])
            self._buffer = joined[-self.frame_size :]
        if self._buffer.size < self.frame_size:
            return None
        return Frame(self._buffer, self.sample_rate)

    def close(self) -> None:
        stream, self.stream = self.stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
            self._buffer = np.zeros(0, dtype=np.float32)
            logger.info("Closed microphone")


class DemoSource(FrameSource):
    """Synthetic tone source used when no microphone is available."""

    def __init__(
        self,
        samplerate: int,
        frame_size: int,
        frequency: float = 440.0,
        amplitude: float = 0.5,
        noise_level: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        self.sample_rate = int(samplerate)
        self.frame_size = int(frame_size)
        self.frequency = float(frequency)
        self.amplitude = float(amplitude)
        self.noise_level = float(noise_level)
        self.seed = seed
        self.t = 0
        self.is_open = False
        self._rng = np.random.default_rng(seed)

    def open(self) -> None:
        self.t = 0
        self._rng = np.random.default_rng(self.seed)
        self.is_open = True

    def read(self) -> Optional[Frame]:
        if not self.is_open:
            return None
        n = self.frame_size
        t = (self.t + np.arange(n)) / self.sample_rate
        y = self.amplitude * np.sin(2 * np.pi * self.frequency * t)
        if self.noise_level > 0.0:
            y = y + self.noise_level * self._rng.standard_normal(n)
        self.t += n
        return Frame(y, self.sample_rate)

    def close(self) -> None:
        self.is_open = False


__all__ = ["Frame", "FrameSource", "MicSource", "DemoSource", "sd"]
