"""Command-line interface for notescope spectral analysis."""

import json
import sys
from pathlib import Path

import click

from .analyzer import SpectralAnalyzer
from .audio_file import AudioFile
from .config import DEFAULT_CONFIG, AnalysisConfig
from .exceptions import AudioLoadError, ConfigurationError
from .logging_config import get_logger, setup_logging
from .models import FrameAnalysis
from .peaks import detect_frame
from .player import PlaybackCursor
from .visualizer import render_spectrum

logger = get_logger(__name__)


def format_time(seconds):
    """Formats seconds into M:SS.SS format.

    Args:
        seconds: Time in seconds, or None.

    Returns:
        str: Formatted time string or "N/A" if None.

    Example:
        >>> format_time(65.25)
        '1:05.25'
    """
    if seconds is None:
        return "N/A"
    minutes = int(seconds // 60)
    secs = seconds % 60
    return f"{minutes}:{secs:05.2f}"


def _strongest(frame: FrameAnalysis, max_notes: int) -> FrameAnalysis:
    """Keep the ``max_notes`` loudest peaks, in ascending frequency order."""
    if max_notes > 0 and len(frame.peaks) > max_notes:
        loudest = sorted(frame.peaks, key=lambda p: p.magnitude, reverse=True)[:max_notes]
        frame.peaks = sorted(loudest, key=lambda p: p.bin_index)
    return frame


def frame_to_dict(frame: FrameAnalysis) -> dict:
    """Convert a frame to a JSON-serializable dict."""
    return {
        "time": round(frame.time, 4),
        "resolution": frame.resolution,
        "frequency_bin_size": round(frame.frequency_bin_size, 4),
        "notes": [
            {
                "name": p.note_name,
                "pitch": p.pitch,
                "frequency": round(p.frequency, 2),
                "bin": p.bin_index,
                "prominence": round(p.prominence, 4),
            }
            for p in frame.peaks
        ],
    }


def format_frame(frame: FrameAnalysis) -> str:
    """Format a single frame for text output."""
    lines = [f"Time: {format_time(frame.time)}"]
    if not frame.peaks:
        lines.append("  No notes detected")
    for p in frame.peaks:
        lines.append(
            f"  {p.display_name:<4} pitch {p.pitch:>3}  {p.frequency:8.2f} Hz  "
            f"(prominence: {p.prominence:.2f})"
        )
    return "\n".join(lines)


def _build_analyzer(file_path, resolution, smoothing, config: AnalysisConfig = None):
    """Load the file and attach an analyzer, exiting with an error on failure."""
    if not Path(file_path).exists():
        click.echo("Error: Unable to load audio file", err=True)
        sys.exit(1)

    try:
        audio = AudioFile.from_file(file_path, config)
    except AudioLoadError:
        click.echo("Error: Unable to load audio file", err=True)
        sys.exit(1)

    try:
        return SpectralAnalyzer(
            PlaybackCursor(audio), config=config, resolution=resolution, smoothing=smoothing
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


resolution_option = click.option(
    "--resolution",
    "-r",
    default=DEFAULT_CONFIG.default_resolution,
    type=int,
    help=f"FFT resolution; window is 2**N samples (default: {DEFAULT_CONFIG.default_resolution})",
)
threshold_option = click.option(
    "--threshold",
    default=DEFAULT_CONFIG.prominence_threshold,
    type=float,
    help="Minimum peak prominence on the normalized log scale",
)
max_notes_option = click.option(
    "--max-notes", default=8, type=int, help="Report at most N loudest notes per frame (0 = all)"
)
format_option = click.option(
    "--format", "output_format", default="text", type=click.Choice(["text", "json"])
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Only report errors")
@click.pass_context
def cli(ctx, verbose, quiet):
    """notescope - Spectral analysis and note detection for musical audio."""
    setup_logging(verbose, quiet)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("audio_file")
@click.option("--time", "-t", "times", multiple=True, type=float, help="Time in seconds (repeatable)")
@resolution_option
@threshold_option
@max_notes_option
@format_option
def notes(audio_file, times, resolution, threshold, max_notes, output_format):
    """Detect notes at one or more times in an audio file.

    Each time is analyzed independently, without smoothing.

    Example:
        notescope notes chord.wav -t 0.5 -t 1.5 --format json
    """
    analyzer = _build_analyzer(audio_file, resolution, 0.0)
    frames = []
    for time in times or (0.0,):
        analyzer.player.position = time
        analyzer.re_analyze()
        frames.append(_strongest(detect_frame(analyzer, threshold=threshold), max_notes))

    if output_format == "json":
        output = {"file": audio_file, "frames": [frame_to_dict(f) for f in frames]}
        click.echo(json.dumps(output, indent=2))
    else:
        click.echo(f"Analyzing: {audio_file}")
        for frame in frames:
            click.echo(format_frame(frame))


@cli.command()
@click.argument("audio_file")
@click.option("--time", "-t", default=0.0, type=float, help="Time in seconds")
@resolution_option
@threshold_option
@max_notes_option
@click.option("--width", default=72, type=int, help="Chart width in characters")
@click.option("--height", default=8, type=int, help="Chart height in rows")
def spectrum(audio_file, time, resolution, threshold, max_notes, width, height):
    """Draw the spectrum at a point in time with detected notes marked.

    Example:
        notescope spectrum chord.wav -t 1.0 --width 100
    """
    analyzer = _build_analyzer(audio_file, resolution, 0.0)
    analyzer.player.position = time
    analyzer.re_analyze()
    frame = _strongest(detect_frame(analyzer, threshold=threshold), max_notes)
    render_spectrum(analyzer, frame.peaks, width=width, height=height, title=Path(audio_file).name)


@cli.command()
@click.argument("audio_file")
@click.option("--hop", default=0.05, type=float, help="Seconds between frames (default: 0.05)")
@click.option("--start", default=0.0, type=float, help="Start time in seconds")
@click.option("--end", default=None, type=float, help="End time in seconds (default: end of file)")
@resolution_option
@click.option(
    "--smoothing",
    "-s",
    default=DEFAULT_CONFIG.default_smoothing,
    type=float,
    help=f"Frame smoothing in [0, 1] (default: {DEFAULT_CONFIG.default_smoothing})",
)
@threshold_option
@max_notes_option
@format_option
def scan(audio_file, hop, start, end, resolution, smoothing, threshold, max_notes, output_format):
    """Step through a file, reporting notes whenever they change.

    Frames are smoothed into each other, as in a live display.

    Example:
        notescope scan melody.wav --hop 0.1 --smoothing 0.5
    """
    if hop <= 0:
        click.echo("Error: --hop must be positive", err=True)
        sys.exit(1)

    analyzer = _build_analyzer(audio_file, resolution, smoothing)
    cursor = analyzer.player
    stop = cursor.duration if end is None else min(end, cursor.duration)
    cursor.position = start

    frames = []
    previous_pitches = None
    while True:
        analyzer.re_analyze()
        frame = _strongest(detect_frame(analyzer, threshold=threshold), max_notes)
        if frame.pitches != previous_pitches:
            frames.append(frame)
            previous_pitches = frame.pitches
        if cursor.position + hop > stop or cursor.is_finished:
            break
        cursor.advance(hop)

    logger.debug("Scanned %s: %d change(s)", audio_file, len(frames))

    if output_format == "json":
        output = {"file": audio_file, "hop": hop, "frames": [frame_to_dict(f) for f in frames]}
        click.echo(json.dumps(output, indent=2))
    else:
        click.echo(f"Scanning: {audio_file}")
        for frame in frames:
            names = ", ".join(frame.note_names) or "-"
            click.echo(f"{format_time(frame.time)}  {names}")


if __name__ == "__main__":
    cli()
