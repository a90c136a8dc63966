"""Factory for creating Piano Pitch components."""

from typing import Optional

from ..logger import get_logger
from ..audio.autocorrelation import AutocorrelationEstimator
from ..detection.capture_manager import CaptureManager
from ..detection.loop import DetectionLoop
from ..detection.ticker import RefreshTicker
from .config import ConfigManager
from .events import DetectionEvents
from .interfaces import IFrameSource, IPitchEstimator, ITicker

logger = get_logger(__name__)

ESTIMATORS = ("autocorrelation", "yin")


class ComponentFactory:
    """Factory for creating Piano Pitch components from configuration."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

    def create_estimator(self, implementation: str = "autocorrelation", **kwargs) -> IPitchEstimator:
        """Create a pitch estimator.

        Args:
            implementation: 'autocorrelation' or 'yin'
            **kwargs: Parameters overriding the 'estimator' configuration

        Raises:
            ValueError: If the implementation is not known
        """
        config = self.config_manager.get_config("estimator")
        config.update(kwargs)

        if implementation == "autocorrelation":
            instance = AutocorrelationEstimator(
                silence_threshold=config["silence_threshold"],
                trim_threshold=config["trim_threshold"],
            )
        elif implementation == "yin":
            # Import here to avoid requiring aubio unless YIN is used
            from ..audio.yin import AubioYinEstimator

            frame_size = config.get(
                "frame_size", self.config_manager.get_config("audio_input")["frame_size"]
            )
            instance = AubioYinEstimator(
                frame_size=frame_size,
                silence_threshold=config["silence_threshold"],
            )
        else:
            raise ValueError(f"Unknown estimator implementation: {implementation}")

        logger.info(f"Created estimator: {implementation}")
        return instance

    def create_frame_source(
        self, wav_path: Optional[str] = None, loop: bool = False, gain: float = 1.0, **kwargs
    ) -> IFrameSource:
        """Create a frame source, reading a WAV file if a path is given, else the microphone.

        Args:
            wav_path: Sound file to play back instead of capturing
            loop: Restart the file when it ends
            gain: Gain applied to file samples
            **kwargs: Parameters overriding the 'audio_input' configuration
        """
        config = self.config_manager.get_config("audio_input")
        config.update({k: v for k, v in kwargs.items() if v is not None})

        if wav_path is not None:
            from ..audio.wav_input import WavFileInput

            source = WavFileInput(
                wav_path, frame_size=config["frame_size"], loop=loop, gain=gain
            )
            logger.info(f"Created WAV frame source: {wav_path}")
            return source

        # Import here to avoid requiring PortAudio unless capturing live
        from ..audio.audio_input import SoundDeviceInput

        source = SoundDeviceInput(
            device_id=config.get("device_id"),
            sample_rate=config["sample_rate"],
            frame_size=config["frame_size"],
            channels=config["channels"],
        )
        logger.info("Created microphone frame source")
        return source

    def create_ticker(self, duration: Optional[float] = None) -> ITicker:
        config = self.config_manager.get_config("detection_loop")
        return RefreshTicker(config["refresh_rate_hz"], duration=duration)

    def create_capture_manager(
        self,
        frame_source: IFrameSource,
        estimator: IPitchEstimator,
        events: Optional[DetectionEvents] = None,
        ticker: Optional[ITicker] = None,
    ) -> CaptureManager:
        """Wire a detection loop and its capture manager.

        Args:
            frame_source: Where frames come from
            estimator: Pitch estimator to run on each frame
            events: Event hub displays subscribe to, or None to create one
            ticker: Loop pacing, or None for the configured refresh rate
        """
        mapper = self.config_manager.get_config("note_mapper")
        loop = DetectionLoop(
            frame_source=frame_source,
            estimator=estimator,
            events=events or DetectionEvents(),
            ticker=ticker or self.create_ticker(),
            min_frequency=mapper["min_frequency"],
            max_frequency=mapper["max_frequency"],
        )
        return CaptureManager(loop)
