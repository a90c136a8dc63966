"""Type definitions for the Piano Pitch project."""

from typing import Optional
from dataclasses import dataclass

# Pitch estimate: None means no pitch, otherwise a frequency in Hz
PitchEstimate = Optional[float]
NO_PITCH: PitchEstimate = None

NO_NOTE_LABEL = "--"

# Pitch classes in chromatic order, index 0 is C
NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]


@dataclass(frozen=True)
class NoteIdentity:
    """A pitch class and octave in 12-tone equal temperament."""

    pitch_class: str  # One of C, C#, D, ... B
    octave: int  # Scientific pitch notation, C4 is middle C

    @property
    def label(self) -> str:
        return f"{self.pitch_class}{self.octave}"

    @property
    def midi_number(self) -> int:
        return (self.octave + 1) * 12 + NOTE_NAMES.index(self.pitch_class)

    def __str__(self):
        return self.label


@dataclass
class DetectedNote:
    """Represents a detected musical note with its properties."""

    note: NoteIdentity
    frequency: float  # Estimated fundamental in Hz
    rms: float  # Frame energy that passed the silence gate
    timestamp: float  # Time the frame was processed

    @property
    def label(self) -> str:
        return self.note.label
