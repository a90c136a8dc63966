"""Microphone frame source using the sounddevice library."""

from __future__ import annotations
import numpy as np
import sounddevice as sd
from typing import Optional, List, ClassVar

from ..logger import get_logger
from ..errors import CapturePermissionError, NoInputDeviceError
from ..core.interfaces import InputHandle
from .frame_source import FrameSource

logger = get_logger(__name__)


class SoundDeviceInput(FrameSource):
    """Captures frames from an audio input device.

    The PortAudio callback runs on its own audio thread and only publishes
    the newest block; the detection loop picks up whatever is latest when it
    next reads, so blocks may be skipped under load.
    """

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAME_SIZE: ClassVar[int] = 2048  # Samples per frame, also the stream block size
    CHANNELS: ClassVar[int] = 1  # Mono audio
    FALLBACK_SAMPLE_RATES: ClassVar[List[int]] = [44100, 48000, 22050, 16000]

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frame_size: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the audio input.

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Preferred sample rate in Hz, or None for default (44100)
            frame_size: Samples per frame, or None for default (2048)
            channels: Number of channels to capture, or None for default (1)
        """
        super().__init__(frame_size or self.FRAME_SIZE)
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._channels = channels or self.CHANNELS
        self._stream: Optional[sd.InputStream] = None

    def _candidate_rates(self) -> List[int]:
        rates = [r for r in self.FALLBACK_SAMPLE_RATES if r != self._sample_rate]
        return [self._sample_rate] + rates

    def _check_device(self) -> None:
        try:
            devices = sd.query_devices()
        except sd.PortAudioError as e:
            raise NoInputDeviceError(f"Could not query audio devices: {e}") from e

        if not any(d["max_input_channels"] > 0 for d in devices):
            raise NoInputDeviceError("No audio input device available")

        if self._device_id is not None:
            try:
                info = sd.query_devices(self._device_id)
            except (ValueError, sd.PortAudioError) as e:
                raise NoInputDeviceError(f"Unknown audio device {self._device_id}: {e}") from e
            if info["max_input_channels"] <= 0:
                raise NoInputDeviceError(f"Device {self._device_id} has no inputs")

    def _select_sample_rate(self) -> int:
        """Return the first candidate sample rate the device accepts."""
        last_error: Optional[Exception] = None
        for rate in self._candidate_rates():
            try:
                sd.check_input_settings(
                    device=self._device_id, samplerate=rate, channels=self._channels
                )
                return rate
            except (ValueError, sd.PortAudioError) as e:
                logger.warning(f"Sample rate {rate} Hz not supported: {e}")
                last_error = e
        raise CapturePermissionError(
            f"Audio device rejected every sample rate: {last_error}"
        )

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info,
        status: sd.CallbackFlags,
    ) -> None:
        """Callback for audio data from the input stream.

        Note:
            This is called from a separate audio thread, so it should be fast
            and avoid any blocking operations to prevent audio glitches.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        # Extract mono audio data (take first channel if multi-channel)
        self._publish_frame(indata[:, 0] if indata.ndim > 1 else indata)

    def acquire(self) -> InputHandle:
        """Open the input stream.

        Raises:
            NoInputDeviceError: If there is no usable input device
            CapturePermissionError: If the device cannot be opened
        """
        self._check_device()
        rate = self._select_sample_rate()
        self._reset()

        try:
            self._stream = sd.InputStream(
                device=self._device_id,
                samplerate=rate,
                blocksize=self._frame_size,
                channels=self._channels,
                dtype="float32",
                callback=self._audio_callback,
            )
            self._stream.start()
        except sd.PortAudioError as e:
            if self._stream is not None:
                self._stream.close()
                self._stream = None
            raise CapturePermissionError(f"Could not open audio input: {e}") from e

        self._sample_rate = rate
        self._handle = InputHandle(
            sample_rate=rate,
            frame_size=self._frame_size,
            channels=self._channels,
            device=self._device_id,
        )
        logger.info(
            f"Audio input started: device={self._device_id}, rate={rate}Hz, "
            f"frame_size={self._frame_size}"
        )
        return self._handle

    def release(self, handle: InputHandle) -> None:
        """Stop and close the input stream."""
        if handle.released:
            return
        handle.released = True

        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except sd.PortAudioError as e:
                logger.error(f"Error stopping audio input: {e}")
            self._stream = None
        self._handle = None
        self._reset()
        logger.info("Audio input stopped")


def list_input_devices() -> List[dict]:
    """Return the devices that have at least one input channel, with their IDs."""
    devices = []
    for i, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] > 0:
            devices.append(dict(device, id=i))
    return devices


def supported_sample_rates(device_id: int, rates: Optional[List[int]] = None) -> List[int]:
    """Return which of the given sample rates a device accepts for mono input."""
    supported = []
    for rate in rates or [8000, 16000, 22050, 44100, 48000, 96000]:
        try:
            sd.check_input_settings(device=device_id, samplerate=rate, channels=1)
            supported.append(rate)
        except (ValueError, sd.PortAudioError):
            continue
    return supported
