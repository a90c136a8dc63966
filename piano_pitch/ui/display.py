"""Console display that highlights detected notes on a text keyboard."""

from typing import Callable, List, Optional

import click

from ..logger import get_logger
from ..note_types import NO_NOTE_LABEL, DetectedNote, NoteIdentity
from ..note_utils import midi_to_note, parse_note
from ..core.events import DetectionEvents

logger = get_logger(__name__)


class ConsoleDisplay:
    """Shows the current note and a keyboard strip in the terminal.

    Notes outside the keyboard range still show their label, with no key
    highlighted.
    """

    def __init__(
        self,
        low_note: str = "C4",
        high_note: str = "B5",
        echo: Callable[..., None] = click.echo,
        color: Optional[bool] = None,
    ):
        """Initialize the display.

        Args:
            low_note: Lowest key on the keyboard
            high_note: Highest key on the keyboard
            echo: Output function, click.echo by default
            color: Force styling on or off, or None to let click decide
        """
        low, high = parse_note(low_note), parse_note(high_note)
        if low.midi_number > high.midi_number:
            raise ValueError(f"Keyboard range is empty: {low_note}..{high_note}")
        self.keys: List[NoteIdentity] = [
            midi_to_note(m) for m in range(low.midi_number, high.midi_number + 1)
        ]
        self._echo = echo
        self._color = color
        self.highlighted: Optional[NoteIdentity] = None
        self.label = NO_NOTE_LABEL

    def attach(self, events: DetectionEvents) -> None:
        """Subscribe to detection events."""
        events.on_note_changed(self.on_note_changed)
        events.on_pitch_lost(self.on_pitch_lost)
        events.on_capture_error(self.on_capture_error)

    def render_keyboard(self) -> str:
        """Render the keyboard, with the highlighted key in brackets."""
        cells = []
        for key in self.keys:
            name = key.pitch_class
            if key == self.highlighted:
                cells.append(click.style(f"[{name}]", fg="green", bold=True))
            else:
                cells.append(f" {name} ")
        return "|".join(cells)

    def _show(self, detail: str = "") -> None:
        line = f"{self.label:>4} {detail:>9}  {self.render_keyboard()}"
        self._echo(line, color=self._color)

    def on_note_changed(self, label: str, detected: DetectedNote) -> None:
        self.label = label
        self.highlighted = detected.note if detected.note in self.keys else None
        self._show(f"{detected.frequency:.1f}Hz")

    def on_pitch_lost(self) -> None:
        self.label = NO_NOTE_LABEL
        self.highlighted = None
        self._show()

    def on_capture_error(self, error: Exception) -> None:
        self._echo(
            click.style(
                f"Could not start audio input: {error}. Check that audio input "
                "permission is granted and no other application is using it.",
                fg="red",
            ),
            err=True,
            color=self._color,
        )
