"""Tickers that pace the detection loop."""

import threading
import time
from typing import Optional

from ..core.interfaces import ITicker


class RefreshTicker(ITicker):
    """Paces cycles at a display refresh rate.

    Waits on the cancel event rather than sleeping so a stop request ends
    the wait immediately. An optional duration ends the loop after that
    many seconds.
    """

    def __init__(self, refresh_rate_hz: float = 60.0, duration: Optional[float] = None):
        if refresh_rate_hz <= 0:
            raise ValueError(f"refresh_rate_hz must be positive, got {refresh_rate_hz}")
        self._interval = 1.0 / refresh_rate_hz
        self._duration = duration
        self._started: Optional[float] = None

    @property
    def interval(self) -> float:
        return self._interval

    def tick(self, cancel_event: threading.Event) -> bool:
        now = time.monotonic()
        if self._started is None:
            self._started = now
        if self._duration is not None and now - self._started >= self._duration:
            return False
        return not cancel_event.wait(self._interval)


class CountingTicker(ITicker):
    """Allows a fixed number of cycles without waiting."""

    def __init__(self, cycles: int):
        self._remaining = cycles

    def tick(self, cancel_event: threading.Event) -> bool:
        self._remaining -= 1
        return self._remaining > 0 and not cancel_event.is_set()
