"""Fakes and signal builders shared by the tests."""

import threading
from typing import List, Optional

import numpy as np

from piano_pitch.errors import CaptureError
from piano_pitch.core.events import DetectionEvents
from piano_pitch.core.interfaces import IFrameSource, IPitchEstimator, InputHandle

SAMPLE_RATE = 44100


def sine_frame(frequency, size=2048, sample_rate=SAMPLE_RATE, amplitude=0.5, phase=0.0):
    """A pure sine frame starting at the given phase."""
    t = np.arange(size) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t + phase)).astype(np.float32)


class FakeFrameSource(IFrameSource):
    """Frame source that replays a list of frames and records its use.

    After the list runs out the last frame is repeated, the way a real
    source keeps exposing its most recent frame.
    """

    def __init__(self, frames=None, sample_rate=SAMPLE_RATE, frame_size=2048, fail_with=None):
        self.frames: List[np.ndarray] = list(frames or [np.zeros(frame_size, np.float32)])
        self.sample_rate = sample_rate
        self.frame_size = frame_size
        self.fail_with: Optional[Exception] = fail_with
        self.read_fails_with: Optional[Exception] = None
        self.release_fails_with: Optional[Exception] = None
        self.acquire_count = 0
        self.release_count = 0
        self.reads = 0
        self.reads_after_release = 0
        self._index = 0
        self._lock = threading.Lock()

    def acquire(self) -> InputHandle:
        self.acquire_count += 1
        if self.fail_with is not None:
            raise self.fail_with
        return InputHandle(sample_rate=self.sample_rate, frame_size=self.frame_size)

    def read_latest_frame(self, handle: InputHandle) -> np.ndarray:
        with self._lock:
            if handle.released:
                self.reads_after_release += 1
                raise CaptureError("read from released handle")
            self.reads += 1
            if self.read_fails_with is not None:
                raise self.read_fails_with
            frame = self.frames[min(self._index, len(self.frames) - 1)]
            self._index += 1
            return frame

    def release(self, handle: InputHandle) -> None:
        with self._lock:
            if handle.released:
                return
            handle.released = True
            self.release_count += 1
            if self.release_fails_with is not None:
                raise self.release_fails_with


class StubEstimator(IPitchEstimator):
    """Returns a scripted sequence of estimates, repeating the last one."""

    def __init__(self, estimates):
        self.estimates = list(estimates)
        self.calls = 0

    def estimate(self, frame, sample_rate):
        value = self.estimates[min(self.calls, len(self.estimates) - 1)]
        self.calls += 1
        return value


class EventRecorder:
    """Collects detection events in arrival order."""

    def __init__(self, events: DetectionEvents):
        self.log = []
        self.note_changed = threading.Event()
        events.on_note_changed(self._on_note_changed)
        events.on_pitch_lost(self._on_pitch_lost)
        events.on_capture_error(self._on_capture_error)

    def _on_note_changed(self, label, detected):
        self.log.append(("note_changed", label))
        self.note_changed.set()

    def _on_pitch_lost(self):
        self.log.append(("pitch_lost",))

    def _on_capture_error(self, error):
        self.log.append(("capture_error", error))

    def count(self, kind):
        return sum(1 for entry in self.log if entry[0] == kind)

