import numpy as np
import pytest
import soundfile as sf

from piano_pitch.audio.frame_source import FrameSource
from piano_pitch.audio.wav_input import WavFileInput
from piano_pitch.core.interfaces import InputHandle
from piano_pitch.errors import CaptureError

from .helpers import SAMPLE_RATE, sine_frame


class PushSource(FrameSource):
    """Frame source fed by the test, standing in for an audio callback."""

    def acquire(self):
        self._handle = InputHandle(sample_rate=SAMPLE_RATE, frame_size=self.frame_size)
        return self._handle

    def push(self, frame):
        self._publish_frame(frame)

    def release(self, handle):
        handle.released = True
        self._handle = None


@pytest.fixture
def wav_file(tmp_path):
    path = tmp_path / "a4.wav"
    sf.write(str(path), sine_frame(440.0, size=SAMPLE_RATE // 2), SAMPLE_RATE)
    return str(path)


def test_latest_frame_is_silence_before_audio_arrives():
    source = PushSource(frame_size=512)
    handle = source.acquire()
    frame = source.read_latest_frame(handle)
    assert frame.shape == (512,)
    assert not frame.any()


def test_latest_frame_wins():
    source = PushSource(frame_size=4)
    handle = source.acquire()
    source.push(np.array([0.1, 0.1, 0.1, 0.1]))
    source.push(np.array([0.2, 0.2, 0.2, 0.2]))
    np.testing.assert_allclose(source.read_latest_frame(handle), [0.2] * 4)
    assert source.is_running()


def test_published_frame_is_a_copy():
    source = PushSource(frame_size=2)
    handle = source.acquire()
    buffer = np.array([0.5, 0.5], dtype=np.float32)
    source.push(buffer)
    buffer[:] = 0.0
    np.testing.assert_allclose(source.read_latest_frame(handle), [0.5, 0.5])
    assert not source.read_latest_frame(handle).flags.writeable


def test_released_handle_cannot_be_read():
    source = PushSource(frame_size=4)
    handle = source.acquire()
    source.release(handle)
    with pytest.raises(CaptureError):
        source.read_latest_frame(handle)
    assert not source.is_running()


def test_wav_input_reads_frames_in_order(wav_file):
    source = WavFileInput(wav_file, frame_size=2048)
    handle = source.acquire()
    assert handle.sample_rate == SAMPLE_RATE
    assert handle.frame_size == 2048

    first = source.read_latest_frame(handle)
    second = source.read_latest_frame(handle)
    assert first.shape == second.shape == (2048,)
    np.testing.assert_allclose(first, sine_frame(440.0, size=2048), atol=1e-4)
    assert not np.allclose(first, second)
    source.release(handle)


def test_wav_input_frame_count(wav_file):
    source = WavFileInput(wav_file, frame_size=2048)
    # 22050 samples need 11 frames of 2048
    assert source.frame_count() == 11


def test_wav_input_silence_after_end(wav_file):
    source = WavFileInput(wav_file, frame_size=2048)
    handle = source.acquire()
    for _ in range(source.frame_count()):
        source.read_latest_frame(handle)
    assert not source.read_latest_frame(handle).any()
    source.release(handle)


def test_wav_input_loops(wav_file):
    source = WavFileInput(wav_file, frame_size=2048, loop=True)
    handle = source.acquire()
    for _ in range(source.frame_count() + 2):
        frame = source.read_latest_frame(handle)
    assert np.abs(frame).max() > 0.4
    source.release(handle)


def test_wav_input_stereo_mixdown_and_gain(tmp_path):
    path = tmp_path / "stereo.wav"
    mono = sine_frame(220.0, size=4096, amplitude=0.2)
    sf.write(str(path), np.column_stack((mono, mono)), SAMPLE_RATE)

    source = WavFileInput(str(path), frame_size=1024, gain=2.0)
    handle = source.acquire()
    assert handle.channels == 2
    frame = source.read_latest_frame(handle)
    assert frame.shape == (1024,)
    np.testing.assert_allclose(frame, mono[:1024] * 2.0, atol=1e-3)
    source.release(handle)


def test_wav_input_release_is_idempotent(wav_file):
    source = WavFileInput(wav_file)
    handle = source.acquire()
    source.release(handle)
    source.release(handle)
    with pytest.raises(CaptureError):
        source.read_latest_frame(handle)


def test_wav_input_unreadable_file(tmp_path):
    path = tmp_path / "not_audio.wav"
    path.write_text("this is not a sound file")
    with pytest.raises(CaptureError):
        WavFileInput(str(path)).acquire()
