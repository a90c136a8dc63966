import click
import pytest

from piano_pitch.core.events import DetectionEvents
from piano_pitch.note_types import DetectedNote, NoteIdentity
from piano_pitch.ui.display import ConsoleDisplay


class Screen:
    def __init__(self):
        self.lines = []
        self.errors = []

    def echo(self, message, err=False, color=None):
        (self.errors if err else self.lines).append(click.unstyle(message))


@pytest.fixture
def screen():
    return Screen()


@pytest.fixture
def display(screen):
    events = DetectionEvents()
    display = ConsoleDisplay(echo=screen.echo, color=False)
    display.attach(events)
    display.events = events
    return display


def detected(pitch_class, octave, frequency):
    return DetectedNote(NoteIdentity(pitch_class, octave), frequency, 0.3, 0.0)


def test_two_octave_keyboard():
    display = ConsoleDisplay()
    assert len(display.keys) == 24
    assert display.keys[0] == NoteIdentity("C", 4)
    assert display.keys[-1] == NoteIdentity("B", 5)


def test_empty_range_rejected():
    with pytest.raises(ValueError):
        ConsoleDisplay(low_note="C5", high_note="B4")


def test_note_in_range_is_highlighted(display, screen):
    display.events.emit_note_changed("A4", detected("A", 4, 440.0))
    assert display.label == "A4"
    assert display.highlighted == NoteIdentity("A", 4)
    assert "[A]" in click.unstyle(display.render_keyboard())
    assert screen.lines[-1].startswith("  A4")
    assert "440.0Hz" in screen.lines[-1]


def test_note_outside_range_shows_label_only(display, screen):
    display.events.emit_note_changed("A2", detected("A", 2, 110.0))
    assert display.label == "A2"
    assert display.highlighted is None
    assert "[" not in click.unstyle(display.render_keyboard())
    assert "A2" in screen.lines[-1]


def test_pitch_lost_clears(display, screen):
    display.events.emit_note_changed("C#5", detected("C#", 5, 554.37))
    display.events.emit_pitch_lost()
    assert display.label == "--"
    assert display.highlighted is None
    assert screen.lines[-1].lstrip().startswith("--")


def test_capture_error_is_shown_each_time(display, screen):
    display.events.emit_capture_error(PermissionError("denied"))
    display.events.emit_capture_error(PermissionError("denied"))
    assert len(screen.errors) == 2
    assert "denied" in screen.errors[0]
    assert "permission" in screen.errors[0]
    assert screen.lines == []


def test_keyboard_only_highlights_one_octave(display):
    display.events.emit_note_changed("C5", detected("C", 5, 523.25))
    keyboard = click.unstyle(display.render_keyboard())
    assert keyboard.count("[C]") == 1
    assert keyboard.split("|").index("[C]") == 12
