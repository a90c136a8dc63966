"""Detection loop and capture lifecycle."""

from .capture_manager import CaptureCommand, CaptureManager, CaptureState
from .loop import DetectionLoop
from .session import DetectionSession
from .ticker import CountingTicker, RefreshTicker

__all__ = [
    "CaptureCommand",
    "CaptureManager",
    "CaptureState",
    "CountingTicker",
    "DetectionLoop",
    "DetectionSession",
    "RefreshTicker",
]
