"""Audio capture and pitch estimation.

Device- and library-backed sources (sounddevice, soundfile, aubio) are
imported from their own modules so that importing this package does not
require PortAudio.
"""

from .autocorrelation import AutocorrelationEstimator
from .frame_source import FrameSource

__all__ = ["AutocorrelationEstimator", "FrameSource"]
