"""Frame source that plays back a WAV file."""

from __future__ import annotations
from typing import Optional

import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..errors import CaptureError
from ..core.interfaces import InputHandle
from .frame_source import FrameSource

logger = get_logger(__name__)


class WavFileInput(FrameSource):
    """Provides audio frames by reading from a sound file.

    Each read consumes the next frame of the file, so frames arrive as fast
    as the detection loop asks for them. At the end of the file, reads
    return silence unless looping is enabled.
    """

    def __init__(
        self, file_path: str, frame_size: int = 2048, loop: bool = False, gain: float = 1.0
    ) -> None:
        super().__init__(frame_size)
        self._file_path = file_path
        self._loop = loop
        self._gain = gain
        self._file: Optional[sf.SoundFile] = None

    def acquire(self) -> InputHandle:
        try:
            self._file = sf.SoundFile(self._file_path)
        except (RuntimeError, OSError) as e:
            # soundfile reports unreadable files as RuntimeError subclasses
            raise CaptureError(f"Could not open {self._file_path}: {e}") from e

        self._reset()
        self._handle = InputHandle(
            sample_rate=self._file.samplerate,
            frame_size=self._frame_size,
            channels=self._file.channels,
            device=self._file_path,
        )
        logger.info(
            f"Playing {self._file_path}: rate={self._file.samplerate}Hz, "
            f"channels={self._file.channels}"
        )
        return self._handle

    def _next_frame(self) -> Optional[np.ndarray]:
        data = self._file.read(self._frame_size, dtype="float32", always_2d=True)
        if len(data) < self._frame_size and self._loop:
            self._file.seek(0)
            rest = self._file.read(self._frame_size - len(data), dtype="float32", always_2d=True)
            data = np.concatenate((data, rest))
        if len(data) == 0:
            return None

        mono = data.mean(axis=1)
        if len(mono) < self._frame_size:
            mono = np.concatenate((mono, np.zeros(self._frame_size - len(mono), dtype=np.float32)))
        if self._gain != 1.0:
            mono = np.clip(mono * self._gain, -1.0, 1.0)
        return mono

    def read_latest_frame(self, handle: InputHandle) -> np.ndarray:
        self._check_handle(handle)
        frame = self._next_frame()
        if frame is None:
            return np.zeros(self._frame_size, dtype=np.float32)
        self._publish_frame(frame)
        return super().read_latest_frame(handle)

    def frame_count(self) -> int:
        """Number of frames needed to read the whole file once."""
        try:
            total = sf.info(self._file_path).frames
        except (RuntimeError, OSError) as e:
            raise CaptureError(f"Could not read {self._file_path}: {e}") from e
        return max(1, -(-total // self._frame_size))

    def release(self, handle: InputHandle) -> None:
        if handle.released:
            return
        handle.released = True
        if self._file is not None:
            self._file.close()
            self._file = None
        self._handle = None
        self._reset()
        logger.info(f"Closed {self._file_path}")
