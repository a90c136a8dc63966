"""Autocorrelation pitch estimation."""

from __future__ import annotations
from typing import ClassVar, Tuple

import numpy as np

from ..logger import get_logger
from ..note_types import NO_PITCH, PitchEstimate
from ..core.interfaces import IPitchEstimator

logger = get_logger(__name__)


def frame_rms(frame: np.ndarray) -> float:
    """Root-mean-square energy of a frame, 0.0 for an empty frame."""
    frame = np.asarray(frame)
    if frame.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(frame, dtype=np.float64))))


def to_mono(frame: np.ndarray) -> np.ndarray:
    """Flatten a (frames x channels) block to a 1D float64 signal."""
    frame = np.asarray(frame, dtype=np.float64)
    if frame.ndim > 1:
        frame = frame.mean(axis=1)
    return frame


class AutocorrelationEstimator(IPitchEstimator):
    """Estimates the fundamental frequency of a frame from its autocorrelation.

    The frame is gated on RMS energy, trimmed of its low-amplitude edges,
    autocorrelated, and the strongest correlation peak after the initial
    zero-lag descent is taken as the period. Resolution is one sample of lag;
    there is no interpolation around the peak.
    """

    DEFAULT_SILENCE_THRESHOLD: ClassVar[float] = 0.01  # RMS below this is silence
    DEFAULT_TRIM_THRESHOLD: ClassVar[float] = 0.2  # Edge amplitude to trim up to

    def __init__(
        self,
        silence_threshold: float = DEFAULT_SILENCE_THRESHOLD,
        trim_threshold: float = DEFAULT_TRIM_THRESHOLD,
    ) -> None:
        self._silence_threshold = silence_threshold
        self._trim_threshold = trim_threshold

    @property
    def silence_threshold(self) -> float:
        return self._silence_threshold

    @property
    def trim_threshold(self) -> float:
        return self._trim_threshold

    def estimate(self, frame: np.ndarray, sample_rate: int) -> PitchEstimate:
        """Estimate the fundamental frequency of one frame.

        Args:
            frame: Audio samples in [-1.0, 1.0], 1D or (frames x channels)
            sample_rate: Sample rate of the frame in Hz

        Returns:
            Frequency in Hz, or None if no pitch can be found
        """
        buffer = to_mono(frame)
        if buffer.size < 2 or not np.all(np.isfinite(buffer)):
            return NO_PITCH

        rms = frame_rms(buffer)
        if rms < self._silence_threshold:
            return NO_PITCH

        r1, r2 = self.trim_bounds(buffer)
        trimmed = buffer[r1:r2]
        if trimmed.size < 2:
            logger.debug(f"Degenerate frame: trimmed range [{r1}, {r2}) is too short")
            return NO_PITCH

        correlation = self.autocorrelate(trimmed)
        period = self.find_period(correlation)
        if period is None:
            logger.debug("Degenerate frame: no correlation peak after zero-lag descent")
            return NO_PITCH

        frequency = sample_rate / period
        logger.debug(
            f"rms={rms:.4f} trim=[{r1}, {r2}) period={period} freq={frequency:.1f}Hz"
        )
        return frequency

    def trim_bounds(self, buffer: np.ndarray) -> Tuple[int, int]:
        """Find the sub-range of the frame to correlate.

        Scans the first half forward and the last half backward for the first
        sample below the trim threshold.

        Returns:
            (r1, r2), the start and exclusive end of the range
        """
        size = buffer.size
        half = size // 2
        below = np.abs(buffer) < self._trim_threshold

        r1 = 0
        head = np.flatnonzero(below[:half])
        if head.size:
            r1 = int(head[0])

        r2 = size - 1
        # Indices size-1 down to size-half+1, nearest the end first
        tail = np.flatnonzero(below[size - 1 : size - half : -1])
        if tail.size:
            r2 = size - 1 - int(tail[0])

        return r1, r2

    @staticmethod
    def autocorrelate(buffer: np.ndarray) -> np.ndarray:
        """Unnormalized autocorrelation c[i] = sum_j buffer[j] * buffer[j + i] for lags 0..N-1."""
        return np.correlate(buffer, buffer, mode="full")[buffer.size - 1 :]

    @staticmethod
    def find_period(correlation: np.ndarray):
        """Return the lag of the strongest peak after the zero-lag descent, or None."""
        size = correlation.size
        if size < 2:
            return None

        # Walk down the slope from the zero-lag peak to the first local minimum
        rising = np.flatnonzero(correlation[:-1] <= correlation[1:])
        if rising.size == 0:
            return None
        descent_end = int(rising[0])

        max_pos = descent_end + int(np.argmax(correlation[descent_end:]))
        if max_pos <= 0 or correlation[max_pos] <= 0:
            return None
        return max_pos
