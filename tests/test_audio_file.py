"""Tests for the sample source and playback cursor."""

import numpy as np
import pytest

from notescope.audio_file import AudioBuffer, AudioFile
from notescope.exceptions import AudioLoadError
from notescope.player import PlaybackCursor
from notescope.ranges import NumberRange

SR = 8000


@pytest.fixture
def ramp_file():
    """One second of samples whose value is their own index."""
    return AudioFile.from_array(np.arange(SR, dtype=float), SR)


@pytest.fixture
def wav_file(tmp_path):
    file_path = tmp_path / "tone.wav"
    t = np.arange(SR) / SR
    y = 0.5 * np.sin(2 * np.pi * 440 * t)
    import soundfile as sf

    sf.write(str(file_path), y, SR)
    return str(file_path)


# --- Loading ---


class TestLoading:
    def test_unloaded_buffer_returns_zero_placeholder(self):
        audio = AudioFile(AudioBuffer.from_file("never-loaded.wav"))
        assert not audio.is_loaded
        samples = audio.samples
        assert samples is not None
        assert len(samples) == 2 << 14
        assert not samples.any()
        assert audio.duration == 0.0

    def test_placeholder_is_not_cached(self, wav_file):
        buffer = AudioBuffer.from_file(wav_file)
        audio = AudioFile(buffer)
        assert len(audio.samples) == 2 << 14
        buffer.load()
        assert len(audio.samples) == SR

    def test_load_from_file(self, wav_file):
        audio = AudioFile.from_file(wav_file)
        assert audio.is_loaded
        assert audio.sample_rate == SR
        assert audio.duration == pytest.approx(1.0)
        assert np.max(np.abs(audio.samples)) == pytest.approx(0.5, abs=1e-3)

    def test_missing_file_raises_load_error(self, tmp_path):
        with pytest.raises(AudioLoadError):
            AudioFile.from_file(str(tmp_path / "missing.wav"))

    def test_buffer_without_source_raises(self):
        with pytest.raises(AudioLoadError):
            AudioBuffer().load()

    def test_samples_are_materialized_once_and_read_only(self, ramp_file):
        first = ramp_file.samples
        assert ramp_file.samples is first
        with pytest.raises(ValueError):
            first[0] = 1.0

    def test_multichannel_uses_first_channel(self):
        stereo = np.stack([np.ones(100), -np.ones(100)])
        audio = AudioFile.from_array(stereo, SR)
        assert len(audio.samples) == 100
        assert np.all(audio.samples == 1.0)

    def test_source_array_is_not_aliased(self):
        source = np.ones(50)
        audio = AudioFile.from_array(source, SR)
        _ = audio.samples
        source[:] = 0
        assert np.all(audio.samples == 1.0)


# --- Windows ---


class TestGetData:
    @pytest.mark.parametrize("time", [0.0, 0.5, 1.0, 2.5, -1.0])
    @pytest.mark.parametrize("size", [8, 64, 2048])
    def test_window_is_always_twice_size(self, ramp_file, time, size):
        assert len(ramp_file.get_data(time, size)) == 2 * size

    def test_middle_window_is_centered(self, ramp_file):
        data = ramp_file.get_data(0.5, 4)
        assert list(data) == [3996, 3997, 3998, 3999, 4000, 4001, 4002, 4003]

    def test_half_sample_times_round_up(self):
        audio = AudioFile.from_array(np.arange(8, dtype=float), 2)
        assert audio.sample_index(0.25) == 1
        assert audio.sample_index(0.75) == 2
        assert audio.sample_index(1.25) == 3
        assert list(audio.get_data(0.25, 1)) == [0, 1]
        assert list(audio.get_data(1.25, 1)) == [2, 3]

    def test_start_is_zero_padded_in_front(self, ramp_file):
        data = ramp_file.get_data(0.0, 4)
        assert list(data) == [0, 0, 0, 0, 0, 1, 2, 3]

    def test_end_is_zero_padded_behind(self, ramp_file):
        data = ramp_file.get_data(1.0, 4)
        assert list(data) == [SR - 4, SR - 3, SR - 2, SR - 1, 0, 0, 0, 0]

    def test_window_past_the_end_is_silent(self, ramp_file):
        assert not ramp_file.get_data(10.0, 16).any()

    def test_window_larger_than_buffer(self):
        audio = AudioFile.from_array(np.ones(10), SR)
        data = audio.get_data(0.0, 32)
        assert len(data) == 64
        assert data.sum() == 10

    def test_unloaded_source_window_is_silent(self):
        audio = AudioFile(AudioBuffer.from_file("never-loaded.wav"))
        data = audio.get_data(0.1, 256)
        assert len(data) == 512
        assert not data.any()

    def test_slice_time_is_a_view(self, ramp_file):
        view = ramp_file.slice_time(NumberRange(0.25, 0.2505))
        assert len(view) == 4
        assert list(view) == [2000, 2001, 2002, 2003]


# --- Playback cursor ---


class TestPlaybackCursor:
    def test_position_is_clamped(self, ramp_file):
        cursor = PlaybackCursor(ramp_file)
        cursor.position = 5.0
        assert cursor.position == pytest.approx(1.0)
        cursor.position = -3.0
        assert cursor.position == 0.0

    def test_advance_and_finish(self, ramp_file):
        cursor = PlaybackCursor(ramp_file)
        cursor.advance(0.4)
        assert cursor.position == pytest.approx(0.4)
        assert not cursor.is_finished
        cursor.advance(1.0)
        assert cursor.is_finished

    def test_reassigning_audio_rewinds(self, ramp_file):
        cursor = PlaybackCursor(ramp_file)
        cursor.position = 0.5
        cursor.audio = AudioFile.from_array(np.zeros(SR * 2), SR)
        assert cursor.position == 0.0
        assert cursor.duration == pytest.approx(2.0)

    def test_no_audio(self):
        cursor = PlaybackCursor()
        assert not cursor.is_loaded
        assert cursor.duration == 0.0
