import math

import numpy as np
import pytest

from piano_pitch.audio.autocorrelation import AutocorrelationEstimator, frame_rms, to_mono
from piano_pitch.note_utils import frequency_to_label

from .helpers import SAMPLE_RATE, sine_frame


def semitones_between(a, b):
    return abs(12 * math.log2(a / b))


@pytest.fixture
def estimator():
    return AutocorrelationEstimator()


@pytest.mark.parametrize("frequency", [82.41, 110.0, 196.0, 261.63, 440.0, 659.25, 987.77])
def test_sine_within_one_semitone(estimator, frequency):
    estimate = estimator.estimate(sine_frame(frequency, size=2048), SAMPLE_RATE)
    assert estimate is not None
    assert semitones_between(estimate, frequency) < 1.0


@pytest.mark.parametrize("frequency", [220.0, 440.0, 880.0])
def test_sine_smaller_frames(estimator, frequency):
    estimate = estimator.estimate(sine_frame(frequency, size=1024), SAMPLE_RATE)
    assert estimate is not None
    assert semitones_between(estimate, frequency) < 1.0


@pytest.mark.parametrize("sample_rate", [22050, 48000])
def test_other_sample_rates(estimator, sample_rate):
    frame = sine_frame(440.0, size=2048, sample_rate=sample_rate)
    assert frequency_to_label(estimator.estimate(frame, sample_rate)) == "A4"


def test_phase_does_not_matter(estimator):
    for phase in (0.5, 1.5, 3.0):
        frame = sine_frame(330.0, phase=phase)
        assert semitones_between(estimator.estimate(frame, SAMPLE_RATE), 330.0) < 1.0


def test_silence_is_no_pitch(estimator):
    assert estimator.estimate(np.zeros(2048, dtype=np.float32), SAMPLE_RATE) is None


def test_quiet_frame_is_no_pitch(estimator):
    # RMS of a 0.01 amplitude sine is about 0.007
    frame = sine_frame(440.0, amplitude=0.01)
    assert frame_rms(frame) < 0.01
    assert estimator.estimate(frame, SAMPLE_RATE) is None


def test_silence_threshold_is_configurable():
    frame = sine_frame(440.0, amplitude=0.1)
    assert AutocorrelationEstimator(silence_threshold=0.1).estimate(frame, SAMPLE_RATE) is None
    assert AutocorrelationEstimator(silence_threshold=0.01).estimate(frame, SAMPLE_RATE) is not None


def test_degenerate_frames(estimator):
    assert estimator.estimate(np.array([], dtype=np.float32), SAMPLE_RATE) is None
    assert estimator.estimate(np.array([0.9], dtype=np.float32), SAMPLE_RATE) is None
    assert estimator.estimate(np.full(2048, np.nan, dtype=np.float32), SAMPLE_RATE) is None


def test_constant_frame_has_no_period(estimator):
    # Autocorrelation of DC only ever decreases, so there is no peak to find
    assert estimator.estimate(np.full(2048, 0.5, dtype=np.float32), SAMPLE_RATE) is None


def test_stereo_frames_are_mixed_down(estimator):
    mono = sine_frame(440.0)
    stereo = np.column_stack((mono, mono))
    assert estimator.estimate(stereo, SAMPLE_RATE) == estimator.estimate(mono, SAMPLE_RATE)


def test_trim_bounds(estimator):
    buffer = np.array([0.5, 0.5, 0.1, 0.5, 0.5, 0.5, 0.1, 0.5])
    assert estimator.trim_bounds(buffer) == (2, 6)


def test_trim_bounds_without_quiet_samples(estimator):
    buffer = np.full(8, 0.9)
    assert estimator.trim_bounds(buffer) == (0, 7)


def test_find_period():
    correlation = np.array([10.0, 6.0, 1.0, 3.0, 8.0, 4.0, 7.0])
    assert AutocorrelationEstimator.find_period(correlation) == 4


def test_find_period_without_descent_end():
    assert AutocorrelationEstimator.find_period(np.array([5.0, 4.0, 3.0, 2.0])) is None
    assert AutocorrelationEstimator.find_period(np.array([5.0])) is None


def test_autocorrelate_matches_definition():
    buffer = np.array([1.0, 2.0, -1.0, 0.5])
    expected = [
        sum(buffer[j] * buffer[j + i] for j in range(len(buffer) - i))
        for i in range(len(buffer))
    ]
    np.testing.assert_allclose(AutocorrelationEstimator.autocorrelate(buffer), expected)


def test_helpers():
    assert frame_rms(np.array([])) == 0.0
    assert frame_rms(np.array([0.5, -0.5])) == pytest.approx(0.5)
    assert to_mono(np.array([[1.0, 0.0], [0.0, 1.0]])).tolist() == [0.5, 0.5]
