"""Exceptions raised at the audio capture boundary."""


class CaptureError(Exception):
    """Audio input could not be acquired or used."""


class CapturePermissionError(CaptureError):
    """Access to the audio input device was denied or it is in use elsewhere."""


class NoInputDeviceError(CaptureError):
    """No audio input device is available."""
