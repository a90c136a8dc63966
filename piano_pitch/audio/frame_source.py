"""Shared behaviour for audio frame sources."""

from __future__ import annotations
import threading
from abc import ABC
from typing import Optional

import numpy as np

from ..errors import CaptureError
from ..core.interfaces import IFrameSource, InputHandle


class FrameSource(IFrameSource, ABC):
    """Base class holding the latest completed frame behind a lock.

    Subclasses publish frames with _publish_frame from whatever thread
    produces them; read_latest_frame hands out the newest one and never waits.
    """

    def __init__(self, frame_size: int) -> None:
        self._frame_size = frame_size
        self._lock = threading.Lock()
        self._latest: Optional[np.ndarray] = None
        self._handle: Optional[InputHandle] = None

    @property
    def frame_size(self) -> int:
        return self._frame_size

    def is_running(self) -> bool:
        """Check if an input handle is currently open."""
        return self._handle is not None and not self._handle.released

    def _publish_frame(self, frame: np.ndarray) -> None:
        frame = np.array(frame, dtype=np.float32)  # copy, the caller may reuse its buffer
        frame.setflags(write=False)
        with self._lock:
            self._latest = frame

    def _check_handle(self, handle: InputHandle) -> None:
        if handle.released or handle is not self._handle:
            raise CaptureError("Audio input handle has been released")

    def read_latest_frame(self, handle: InputHandle) -> np.ndarray:
        """Return the most recently completed frame, or silence if none has arrived yet."""
        self._check_handle(handle)
        with self._lock:
            latest = self._latest
        if latest is None:
            return np.zeros(handle.frame_size, dtype=np.float32)
        return latest

    def _reset(self) -> None:
        with self._lock:
            self._latest = None
