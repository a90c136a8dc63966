"""Capture lifecycle: acquiring audio input and running the detection loop."""

from __future__ import annotations
import threading
from enum import Enum, auto
from typing import Optional

from ..logger import get_logger
from ..errors import CaptureError
from ..core.events import DetectionEvents
from .loop import DetectionLoop
from .session import DetectionSession

logger = get_logger(__name__)


class CaptureState(Enum):
    """Lifecycle states of the capture manager."""

    IDLE = auto()
    STARTING = auto()
    RUNNING = auto()
    STOPPING = auto()


class CaptureCommand(Enum):
    """User or host actions that drive the lifecycle."""

    START_REQUESTED = auto()
    STOP_REQUESTED = auto()
    HOST_HIDDEN = auto()


class CaptureManager:
    """Owns the audio input and the detection loop thread.

    At most one session is active. start() while running returns the
    running session without acquiring another input; stop() while idle does
    nothing. Stopping cancels the loop and waits for its thread to finish
    before the input is released.
    """

    def __init__(self, loop: DetectionLoop) -> None:
        """Initialize the capture manager.

        Args:
            loop: Detection loop to run for each session
        """
        self._loop = loop
        self._lock = threading.Lock()
        self._state = CaptureState.IDLE
        self._session: Optional[DetectionSession] = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def session(self) -> Optional[DetectionSession]:
        return self._session

    @property
    def loop(self) -> DetectionLoop:
        return self._loop

    @property
    def events(self) -> DetectionEvents:
        return self._loop.events

    def is_running(self) -> bool:
        return self._state is CaptureState.RUNNING

    def start(self) -> DetectionSession:
        """Acquire the audio input and start the detection loop.

        A session whose loop has already ended (its input failed or its
        ticker ran out) is stopped first, so a fresh input is acquired.

        Returns:
            The running session (the existing one if already running)

        Raises:
            CaptureError: If the audio input could not be acquired. The
                failure is also emitted once as a CAPTURE_ERROR event and
                the manager is left idle.
        """
        ended = self._ended_session()
        if ended is not None:
            logger.info("Detection loop has ended, releasing its input before restarting")
            self.stop(ended)

        with self._lock:
            if self._state is CaptureState.RUNNING:
                logger.warning("Capture already running")
                return self._session
            if self._state is not CaptureState.IDLE:
                raise CaptureError(f"Cannot start capture while {self._state.name}")
            self._state = CaptureState.STARTING

            try:
                handle = self._loop.frame_source.acquire()
            except CaptureError as e:
                self._state = CaptureState.IDLE
                error = e
            else:
                error = None
                session = DetectionSession(handle=handle)
                session.thread = threading.Thread(
                    target=self._run_session,
                    args=(session,),
                    name="detection-loop",
                    daemon=True,
                )
                self._session = session
                self._state = CaptureState.RUNNING

        if error is not None:
            logger.error(f"Could not start capture: {error}")
            self.events.emit_capture_error(error)
            raise error

        session.thread.start()
        logger.info(
            f"Capture started at {session.handle.sample_rate}Hz, "
            f"{session.handle.frame_size} samples per frame"
        )
        return session

    def _ended_session(self) -> Optional[DetectionSession]:
        with self._lock:
            session = self._session
            if self._state is not CaptureState.RUNNING or session is None:
                return None
        thread = session.thread
        if session.cancelled and thread is not None and not thread.is_alive():
            return session
        return None

    def _run_session(self, session: DetectionSession) -> None:
        try:
            self._loop.run(session)
        except CaptureError as e:
            logger.error(f"Capture failed while running: {e}")
            self.events.emit_capture_error(e)
        except Exception as e:
            logger.exception(f"Detection loop crashed: {e}")
            self.events.emit_capture_error(e)
        finally:
            # The session stays owned by the manager until stop() releases it
            session.cancel()

    def stop(self, session: Optional[DetectionSession] = None) -> None:
        """Stop the detection loop and release the audio input.

        Args:
            session: The session to stop, or None for the current one. A
                session that is no longer current is ignored.
        """
        with self._lock:
            if self._state is not CaptureState.RUNNING:
                return
            if session is not None and session is not self._session:
                logger.debug("Ignoring stop for a session that is no longer active")
                return
            session = self._session
            self._state = CaptureState.STOPPING

        session.cancel()
        thread = session.thread
        if thread is not None and thread is not threading.current_thread() and thread.is_alive():
            thread.join()

        had_note = session.current_note is not None
        try:
            self._loop.frame_source.release(session.handle)
        finally:
            session.current_note = None
            with self._lock:
                self._session = None
                self._state = CaptureState.IDLE

        if had_note:
            self.events.emit_pitch_lost()
        logger.info("Capture stopped")

    def on_host_hidden(self) -> None:
        """Stop capturing when the host loses visibility."""
        if self.is_running():
            logger.info("Stopping capture because the host was hidden")
            self.stop()

    def handle(self, command: CaptureCommand) -> Optional[DetectionSession]:
        """Apply a lifecycle command.

        A failed start has already been reported through the CAPTURE_ERROR
        event, so it is not raised again here.

        Returns:
            The running session after the command, if any
        """
        logger.debug(f"Handling {command.name}")
        if command is CaptureCommand.START_REQUESTED:
            try:
                return self.start()
            except CaptureError:
                return None
        if command is CaptureCommand.STOP_REQUESTED:
            self.stop()
        elif command is CaptureCommand.HOST_HIDDEN:
            self.on_host_hidden()
        else:
            raise ValueError(f"Unknown capture command: {command}")
        return self._session

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the current loop thread to finish.

        Returns:
            True if no loop is running when the wait ends
        """
        session = self._session
        if session is None or session.thread is None:
            return True
        session.thread.join(timeout)
        return not session.thread.is_alive()
