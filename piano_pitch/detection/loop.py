"""The detection loop: frame source to estimator to note mapper to display."""

from __future__ import annotations
import time
from typing import Optional

from ..logger import get_logger
from ..note_types import DetectedNote, NoteIdentity
from ..note_utils import MAX_NOTE_FREQUENCY, MIN_NOTE_FREQUENCY, frequency_to_note
from ..audio.autocorrelation import frame_rms
from ..core.events import DetectionEvents
from ..core.interfaces import IFrameSource, IPitchEstimator, ITicker
from .session import DetectionSession

logger = get_logger(__name__)


class DetectionLoop:
    """Repeatedly turns the latest audio frame into note events.

    Events are edge-triggered: NOTE_CHANGED fires only when the note differs
    from the one currently highlighted, and PITCH_LOST fires only when a
    highlighted note is cleared.
    """

    def __init__(
        self,
        frame_source: IFrameSource,
        estimator: IPitchEstimator,
        events: DetectionEvents,
        ticker: ITicker,
        min_frequency: float = MIN_NOTE_FREQUENCY,
        max_frequency: float = MAX_NOTE_FREQUENCY,
    ) -> None:
        self._frame_source = frame_source
        self._estimator = estimator
        self._events = events
        self._ticker = ticker
        self._min_frequency = min_frequency
        self._max_frequency = max_frequency

    @property
    def frame_source(self) -> IFrameSource:
        return self._frame_source

    @property
    def events(self) -> DetectionEvents:
        return self._events

    def run_cycle(self, session: DetectionSession) -> Optional[NoteIdentity]:
        """Process the newest frame once.

        Args:
            session: The running session

        Returns:
            The note highlighted after this cycle, or None
        """
        handle = session.handle
        frame = self._frame_source.read_latest_frame(handle)
        frequency = self._estimator.estimate(frame, handle.sample_rate)
        note = frequency_to_note(frequency, self._min_frequency, self._max_frequency)

        if note is None:
            if session.current_note is not None:
                logger.debug(f"Pitch lost (was {session.current_note.label})")
                session.current_note = None
                self._events.emit_pitch_lost()
            return None

        if note != session.current_note:
            detected = DetectedNote(
                note=note,
                frequency=frequency,
                rms=frame_rms(frame),
                timestamp=time.time(),
            )
            logger.debug(f"Note changed: {note.label} ({frequency:.1f}Hz)")
            session.current_note = note
            self._events.emit_note_changed(note.label, detected)
        return note

    def run(self, session: DetectionSession) -> None:
        """Run cycles until the session is cancelled or the ticker ends the loop."""
        logger.info("Detection loop started")
        cycles = 0
        while not session.cancelled:
            self.run_cycle(session)
            cycles += 1
            if not self._ticker.tick(session.cancel_event):
                break
        logger.info(f"Detection loop finished after {cycles} cycles")
