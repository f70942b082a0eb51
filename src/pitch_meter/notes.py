"""Frequency to note-name conversion in 12-tone equal temperament."""

from __future__ import annotations

import math
from typing import NamedTuple

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

A4_FREQUENCY = 440.0
A4_MIDI = 69


class Note(NamedTuple):
    name: str
    octave: int

    def __str__(self) -> str:
        return f"{self.name}{self.octave}"


def semitones_from_a4(hz: float) -> float:
    """Return the (fractional) distance of ``hz`` from A4 in semitones."""
    return 12.0 * math.log2(hz / A4_FREQUENCY)


def note_for(hz: float) -> Note:
    """Return the nearest equal-tempered note for ``hz``.

    The semitone offset from A4 is rounded half up to the nearest MIDI number, whose
    floor division and non-negative remainder by 12 give the octave and pitch
    class, so notes below A4 land on the right name and octave.
    """

    if not math.isfinite(hz) or hz <= 0:
        raise ValueError(f"frequency must be positive and finite, got {hz!r}")
    midi = math.floor(semitones_from_a4(hz) + 0.5) + A4_MIDI
    return Note(NOTE_NAMES[midi % 12], midi // 12 - 1)


__all__ = ["NOTE_NAMES", "A4_FREQUENCY", "Note", "semitones_from_a4", "note_for"]
