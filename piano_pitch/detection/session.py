"""Per-capture detection state."""

from __future__ import annotations
import threading
from dataclasses import dataclass, field
from typing import Optional

from ..core.interfaces import InputHandle
from ..note_types import NoteIdentity


@dataclass
class DetectionSession:
    """State owned by one capture, from start until stop.

    Only the detection loop changes current_note while the session runs;
    stop() sets the cancel event and waits for the loop thread before
    touching the handle.
    """

    handle: InputHandle
    current_note: Optional[NoteIdentity] = None
    cancel_event: threading.Event = field(default_factory=threading.Event)
    thread: Optional[threading.Thread] = None

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def is_running(self) -> bool:
        return not self.cancelled and not self.handle.released
