"""Event system connecting the detection pipeline to display collaborators."""

from typing import Dict, List, Callable, Any
from enum import Enum, auto

from ..logger import get_logger
from ..note_types import DetectedNote

logger = get_logger(__name__)


class DetectionEventType(Enum):
    """Event types for note detection."""

    NOTE_CHANGED = auto()
    PITCH_LOST = auto()
    CAPTURE_ERROR = auto()


class EventEmitter:
    """Synchronous event emitter."""

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []

        if callback not in self._listeners[event_type]:
            self._listeners[event_type].append(callback)
            logger.debug(f"Added listener for event {event_type}")

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Emit an event.

        A failing listener is logged and does not stop the others.

        Args:
            event_type: Event type to emit
            *args: Positional arguments to pass to listeners
            **kwargs: Keyword arguments to pass to listeners
        """
        for callback in list(self._listeners.get(event_type, ())):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_type}: {e}")

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners = {}
        logger.debug("Cleared all event listeners")


class DetectionEvents:
    """Event emitter specifically for note detection events."""

    def __init__(self):
        self._emitter = EventEmitter()

    def on_note_changed(self, callback: Callable[[str, DetectedNote], None]) -> None:
        """Register a callback for a change of the detected note."""
        self._emitter.on(DetectionEventType.NOTE_CHANGED, callback)

    def on_pitch_lost(self, callback: Callable[[], None]) -> None:
        """Register a callback for loss of pitch after a note was shown."""
        self._emitter.on(DetectionEventType.PITCH_LOST, callback)

    def on_capture_error(self, callback: Callable[[Exception], None]) -> None:
        """Register a callback for audio capture failures."""
        self._emitter.on(DetectionEventType.CAPTURE_ERROR, callback)

    def emit_note_changed(self, label: str, detected: DetectedNote) -> None:
        """Emit a note changed event.

        Args:
            label: The new note label (e.g. 'C#4')
            detected: The detected note with its frequency and timing
        """
        self._emitter.emit(DetectionEventType.NOTE_CHANGED, label, detected)

    def emit_pitch_lost(self) -> None:
        self._emitter.emit(DetectionEventType.PITCH_LOST)

    def emit_capture_error(self, error: Exception) -> None:
        self._emitter.emit(DetectionEventType.CAPTURE_ERROR, error)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._emitter.clear()
