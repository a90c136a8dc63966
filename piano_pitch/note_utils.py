"""Utility functions for working with musical notes and frequencies."""

import math
import numbers
import re
from typing import Optional

from .logger import get_logger
from .note_types import NO_NOTE_LABEL, NOTE_NAMES, NoteIdentity, PitchEstimate

logger = get_logger(__name__)

# Standard reference: A4 = 440Hz, which is 69 in MIDI
A4_FREQUENCY = 440.0
MIDI_NOTE_A4 = 69

# Plausible range for a human voice or acoustic instrument
MIN_NOTE_FREQUENCY = 20.0
MAX_NOTE_FREQUENCY = 2000.0

_LABEL_PATTERN = re.compile(r"^([A-G]#?)(-?\d+)$")


def is_valid_frequency(
    frequency: PitchEstimate,
    min_frequency: float = MIN_NOTE_FREQUENCY,
    max_frequency: float = MAX_NOTE_FREQUENCY,
) -> bool:
    """Check whether a pitch estimate is worth labelling."""
    if frequency is None:
        return False
    if not isinstance(frequency, numbers.Real) or not math.isfinite(frequency):
        logger.debug(f"Invalid frequency value: {frequency}")
        return False
    return min_frequency <= frequency <= max_frequency


def frequency_to_midi(frequency: float) -> int:
    """Round a frequency to the nearest MIDI note number.

    Ties round upward so that equal inputs always land on the same note.
    """
    note_number = 12 * math.log2(frequency / A4_FREQUENCY) + MIDI_NOTE_A4
    return math.floor(note_number + 0.5)


def midi_to_note(midi_number: int) -> NoteIdentity:
    """Convert a MIDI note number to a note identity (MIDI 60 is C4)."""
    # Floor division and modulo keep the index in 0-11 for any integer
    return NoteIdentity(NOTE_NAMES[midi_number % 12], midi_number // 12 - 1)


def frequency_to_note(
    frequency: PitchEstimate,
    min_frequency: float = MIN_NOTE_FREQUENCY,
    max_frequency: float = MAX_NOTE_FREQUENCY,
) -> Optional[NoteIdentity]:
    """Convert a frequency in Hz to the nearest note.

    Args:
        frequency: The pitch estimate in Hz, or None for no pitch
        min_frequency: Lowest frequency accepted as a note
        max_frequency: Highest frequency accepted as a note

    Returns:
        The nearest NoteIdentity, or None if the estimate is missing or
        outside the accepted range

    Examples:
        >>> frequency_to_note(440.0)
        NoteIdentity(pitch_class='A', octave=4)
        >>> frequency_to_note(5000.0) is None
        True
    """
    if not is_valid_frequency(frequency, min_frequency, max_frequency):
        return None
    return midi_to_note(frequency_to_midi(frequency))


def frequency_to_label(
    frequency: PitchEstimate,
    min_frequency: float = MIN_NOTE_FREQUENCY,
    max_frequency: float = MAX_NOTE_FREQUENCY,
) -> str:
    """Convert a frequency to a note label such as 'A4', or '--' if there is no note."""
    note = frequency_to_note(frequency, min_frequency, max_frequency)
    return note.label if note is not None else NO_NOTE_LABEL


def note_to_frequency(note: NoteIdentity) -> float:
    """Return the equal-tempered frequency of a note."""
    return A4_FREQUENCY * 2.0 ** ((note.midi_number - MIDI_NOTE_A4) / 12.0)


def parse_note(label: str) -> NoteIdentity:
    """Parse a note label in scientific pitch notation.

    Args:
        label: Note label such as 'C4', 'F#2' or 'B-1'

    Returns:
        The parsed NoteIdentity

    Raises:
        ValueError: If the label is not a sharp-notation note name with octave
    """
    match = _LABEL_PATTERN.match(label.strip()) if label else None
    if match is None:
        raise ValueError(f"Invalid note label: {label!r}")
    return NoteIdentity(match.group(1), int(match.group(2)))
