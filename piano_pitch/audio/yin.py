"""YIN pitch estimation delegated to aubio."""

from __future__ import annotations
from typing import ClassVar, Optional

import aubio
import numpy as np

from ..logger import get_logger
from ..note_types import NO_PITCH, PitchEstimate
from ..core.interfaces import IPitchEstimator
from .autocorrelation import frame_rms, to_mono

logger = get_logger(__name__)


class AubioYinEstimator(IPitchEstimator):
    """Pitch estimator backed by aubio's YIN implementation.

    aubio's pitch object is bound to one sample rate, so it is rebuilt when
    the sample rate changes. Frames are cut or zero-padded to frame_size.
    """

    DEFAULT_FRAME_SIZE: ClassVar[int] = 512
    DEFAULT_TOLERANCE: ClassVar[float] = 0.8
    DEFAULT_SILENCE_DB: ClassVar[float] = -40.0

    def __init__(
        self,
        frame_size: int = DEFAULT_FRAME_SIZE,
        tolerance: float = DEFAULT_TOLERANCE,
        silence_db: float = DEFAULT_SILENCE_DB,
        silence_threshold: float = 0.01,
    ) -> None:
        """Initialize the estimator.

        Args:
            frame_size: Expected samples per frame (the aubio hop size)
            tolerance: YIN threshold (0.0 to 1.0)
            silence_db: Level in dB under which aubio reports no pitch
            silence_threshold: RMS below which a frame is treated as silence
        """
        self._frame_size = frame_size
        self._tolerance = tolerance
        self._silence_db = silence_db
        self._silence_threshold = silence_threshold
        self._pitch_detector = None
        self._configured_for: Optional[tuple] = None

    def _detector_for(self, sample_rate: int, hop_size: int):
        if self._configured_for != (sample_rate, hop_size):
            detector = aubio.pitch("yin", hop_size * 2, hop_size, int(sample_rate))
            detector.set_unit("Hz")
            detector.set_tolerance(self._tolerance)
            detector.set_silence(self._silence_db)
            self._pitch_detector = detector
            self._configured_for = (sample_rate, hop_size)
            logger.info(
                f"aubio YIN initialized: sample_rate={sample_rate}, "
                f"win_size={hop_size * 2}, hop_size={hop_size}"
            )
        return self._pitch_detector

    def estimate(self, frame: np.ndarray, sample_rate: int) -> PitchEstimate:
        buffer = to_mono(frame)
        if buffer.size == 0 or not np.all(np.isfinite(buffer)):
            return NO_PITCH
        if frame_rms(buffer) < self._silence_threshold:
            return NO_PITCH

        # aubio requires exactly hop_size samples per call
        if buffer.size > self._frame_size:
            buffer = buffer[-self._frame_size :]
        elif buffer.size < self._frame_size:
            buffer = np.concatenate((buffer, np.zeros(self._frame_size - buffer.size)))

        detector = self._detector_for(sample_rate, self._frame_size)
        pitch = float(detector(buffer.astype(np.float32))[0])
        confidence = float(detector.get_confidence())
        logger.debug(f"YIN pitch={pitch:.1f}Hz confidence={confidence:.2f}")

        if pitch <= 0:
            return NO_PITCH
        return pitch
