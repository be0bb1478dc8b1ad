import json

import numpy as np
import pytest
import soundfile as sf
from click.testing import CliRunner
from rich.console import Console

from notescope.analyzer import SpectralAnalyzer
from notescope.audio_file import AudioFile
from notescope.cli import cli, format_time
from notescope.config import DEFAULT_CONFIG
from notescope.peaks import detect_notes
from notescope.player import PlaybackCursor
from notescope.ranges import NumberRange
from notescope.visualizer import compute_column_levels, render_spectrum

SR = 22050


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tone_file(tmp_path):
    file_path = tmp_path / "tone.wav"
    t = np.arange(SR) / SR
    y = 0.5 * np.sin(2 * np.pi * 440 * t)
    sf.write(str(file_path), y, SR)
    return str(file_path)


@pytest.fixture
def melody_file(tmp_path):
    """A4 for the first second, E5 for the second."""
    file_path = tmp_path / "melody.wav"
    t = np.arange(SR) / SR
    y = np.concatenate([0.5 * np.sin(2 * np.pi * 440 * t), 0.5 * np.sin(2 * np.pi * 659.25 * t)])
    sf.write(str(file_path), y, SR)
    return str(file_path)


# --- notes ---


def test_notes_text_output(runner, tone_file):
    result = runner.invoke(cli, ["notes", tone_file, "-t", "0.5"])
    assert result.exit_code == 0
    assert "Analyzing:" in result.output
    assert "Time: 0:00.50" in result.output
    assert "A4" in result.output
    assert "440" in result.output or "441" in result.output


def test_notes_multiple_times(runner, tone_file):
    result = runner.invoke(cli, ["notes", tone_file, "-t", "0.25", "-t", "0.75"])
    assert result.exit_code == 0
    assert result.output.count("Time:") == 2


def test_notes_json_output(runner, tone_file):
    result = runner.invoke(cli, ["notes", tone_file, "-t", "0.5", "--format", "json"])
    assert result.exit_code == 0

    data = json.loads(result.output)
    assert data["file"] == tone_file
    assert len(data["frames"]) == 1
    frame = data["frames"][0]
    assert frame["time"] == 0.5
    assert frame["resolution"] == DEFAULT_CONFIG.default_resolution
    assert frame["frequency_bin_size"] == pytest.approx(SR / 4096, abs=1e-3)
    assert 69 in [n["pitch"] for n in frame["notes"]]
    for note in frame["notes"]:
        assert set(note) == {"name", "pitch", "frequency", "bin", "prominence"}


def test_notes_max_notes_limits_output(runner, tone_file):
    result = runner.invoke(cli, ["notes", tone_file, "-t", "0.5", "--max-notes", "1", "--format", "json"])
    assert result.exit_code == 0
    notes = json.loads(result.output)["frames"][0]["notes"]
    assert [n["name"] for n in notes] == ["A4"]


def test_notes_in_silence(runner, tmp_path):
    file_path = tmp_path / "silence.wav"
    sf.write(str(file_path), np.zeros(SR), SR)
    result = runner.invoke(cli, ["notes", str(file_path)])
    assert result.exit_code == 0
    assert "No notes detected" in result.output


def test_notes_missing_file(runner):
    result = runner.invoke(cli, ["notes", "nonexistent.wav"])
    assert result.exit_code == 1
    assert "Error: Unable to load audio file" in result.output


def test_notes_undecodable_file(runner, tmp_path):
    file_path = tmp_path / "garbage.wav"
    file_path.write_bytes(b"not audio at all")
    result = runner.invoke(cli, ["notes", str(file_path)])
    assert result.exit_code == 1
    assert "Error: Unable to load audio file" in result.output


@pytest.mark.parametrize("resolution", ["3", "17"])
def test_notes_invalid_resolution(runner, tone_file, resolution):
    result = runner.invoke(cli, ["notes", tone_file, "-r", resolution])
    assert result.exit_code == 1
    assert "Error: Invalid analyzer resolution" in result.output


def test_verbose_flag(runner, tone_file):
    result = runner.invoke(cli, ["-v", "notes", tone_file])
    assert result.exit_code == 0


def test_quiet_flag(runner, tone_file):
    result = runner.invoke(cli, ["-q", "notes", tone_file, "--format", "json"])
    assert result.exit_code == 0
    assert json.loads(result.output)["frames"]


# --- scan ---


def test_scan_reports_note_changes(runner, melody_file):
    result = runner.invoke(cli, ["scan", melody_file, "--hop", "0.1", "--smoothing", "0", "--max-notes", "1"])
    assert result.exit_code == 0
    assert "Scanning:" in result.output
    lines = result.output.splitlines()[1:]
    assert lines[0].startswith("0:00.00")
    assert "A4" in result.output
    assert "E5" in result.output


def test_scan_json_output(runner, melody_file):
    result = runner.invoke(
        cli, ["scan", melody_file, "--hop", "0.25", "--max-notes", "1", "--format", "json"]
    )
    assert result.exit_code == 0

    data = json.loads(result.output)
    assert data["hop"] == 0.25
    times = [f["time"] for f in data["frames"]]
    assert times[0] == 0.0
    assert times == sorted(times)
    assert all(t <= 2.0 for t in times)


def test_scan_window(runner, melody_file):
    result = runner.invoke(
        cli,
        ["scan", melody_file, "--start", "1.2", "--end", "1.8", "--smoothing", "0", "--max-notes", "1"],
    )
    assert result.exit_code == 0
    assert "E5" in result.output
    assert "A4" not in result.output


def test_scan_rejects_non_positive_hop(runner, tone_file):
    result = runner.invoke(cli, ["scan", tone_file, "--hop", "0"])
    assert result.exit_code == 1
    assert "Error: --hop must be positive" in result.output


def test_scan_invalid_smoothing(runner, tone_file):
    result = runner.invoke(cli, ["scan", tone_file, "--smoothing", "1.5"])
    assert result.exit_code == 1
    assert "Error: Invalid smoothing" in result.output


# --- spectrum ---


def test_spectrum_renders_panel(runner, tone_file):
    result = runner.invoke(cli, ["spectrum", tone_file, "-t", "0.5", "--max-notes", "1"])
    assert result.exit_code == 0
    assert "tone.wav" in result.output
    assert "Notes:" in result.output
    assert "A4" in result.output


def test_spectrum_missing_file(runner):
    result = runner.invoke(cli, ["spectrum", "nonexistent.wav"])
    assert result.exit_code == 1


# --- Rendering helpers ---


def test_format_time():
    assert format_time(65.25) == "1:05.25"
    assert format_time(0) == "0:00.00"
    assert format_time(None) == "N/A"


class TestVisualizer:
    def setup_method(self):
        t = np.arange(SR) / SR
        audio = AudioFile.from_array(np.sin(2 * np.pi * 440 * t), SR)
        cursor = PlaybackCursor(audio)
        cursor.position = 0.5
        self.analyzer = SpectralAnalyzer(cursor, smoothing=0)
        self.analyzer.re_analyze()

    def test_column_levels_are_normalized(self):
        band = NumberRange(DEFAULT_CONFIG.min_frequency, DEFAULT_CONFIG.max_frequency)
        levels = compute_column_levels(self.analyzer, 40, band)
        assert len(levels) == 40
        assert all(0.0 <= level <= 1.0 for level in levels)
        assert max(levels) == pytest.approx(1.0)

    def test_column_levels_without_frame(self):
        analyzer = SpectralAnalyzer(PlaybackCursor(AudioFile.from_array(np.zeros(SR), SR)))
        band = NumberRange(100, 1000)
        assert compute_column_levels(analyzer, 10, band) == [0.0] * 10

    def test_raising_resolution_before_next_frame(self):
        band = NumberRange(DEFAULT_CONFIG.min_frequency, DEFAULT_CONFIG.max_frequency)
        self.analyzer.resolution = 16
        assert compute_column_levels(self.analyzer, 72, band) == [0.0] * 72
        render_spectrum(self.analyzer, [], console=Console(record=True, width=120))

        self.analyzer.re_analyze()
        levels = compute_column_levels(self.analyzer, 72, band)
        assert max(levels) == pytest.approx(1.0)

    def test_render_marks_peaks_and_octaves(self):
        console = Console(record=True, width=120)
        peaks = sorted(detect_notes(self.analyzer), key=lambda p: p.magnitude)[-1:]
        render_spectrum(self.analyzer, peaks, width=72, height=4, title="test", console=console)
        text = console.export_text()
        assert "Resolution: 12" in text
        assert "Notes: A4" in text
        assert "^" in text
        assert "C4" in text
