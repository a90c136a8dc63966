"""Core components for the Piano Pitch application."""

# Import interfaces for easier access
from .interfaces import (
    IFrameSource,
    IPitchEstimator,
    ITicker,
    InputHandle,
)

__all__ = ["IFrameSource", "IPitchEstimator", "ITicker", "InputHandle"]
