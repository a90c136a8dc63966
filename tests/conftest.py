import pytest

from piano_pitch.core.events import DetectionEvents

from .helpers import EventRecorder


@pytest.fixture
def events():
    return DetectionEvents()


@pytest.fixture
def recorder(events):
    return EventRecorder(events)
