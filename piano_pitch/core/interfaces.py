"""Defines the core interfaces for the Piano Pitch application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import threading

import numpy as np

from ..note_types import PitchEstimate


@dataclass
class InputHandle:
    """An acquired audio input, valid until released."""

    sample_rate: int
    frame_size: int
    channels: int = 1
    device: object = None  # Device ID or file path the handle was opened on
    released: bool = False


class IPitchEstimator(ABC):
    """Interface for fundamental frequency estimators."""

    @abstractmethod
    def estimate(self, frame: np.ndarray, sample_rate: int) -> PitchEstimate:
        """Estimate the fundamental of one frame, or return None for no pitch."""
        pass


class IFrameSource(ABC):
    """Interface for sources of fixed-size audio frames."""

    @abstractmethod
    def acquire(self) -> InputHandle:
        """Open the audio input. Raises CaptureError on failure."""
        pass

    @abstractmethod
    def read_latest_frame(self, handle: InputHandle) -> np.ndarray:
        """Return the most recently completed frame without blocking."""
        pass

    @abstractmethod
    def release(self, handle: InputHandle) -> None:
        """Close the audio input."""
        pass


class ITicker(ABC):
    """Paces the detection loop between cycles."""

    @abstractmethod
    def tick(self, cancel_event: threading.Event) -> bool:
        """Wait until the next cycle is due.

        Returns:
            False if the loop should end, True otherwise
        """
        pass
