"""Rich terminal spectrum renderer for analysis frames."""

from typing import List, Optional

import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .accumulators import MaximumFinder, MinMaxFinder
from .analyzer import SpectralAnalyzer
from .convertors import LinearValueConvertor, convert_range_forwards
from .models import PeakCandidate
from .pitch import display_convertor, pitch_convertor, pitch_to_name
from .ranges import IntRange, NumberRange

BLOCKS = " ▁▂▃▄▅▆▇█"
COLORS = ["blue", "cyan", "green", "yellow", "red"]


def _level_color(level: float) -> str:
    """Map a normalized level (0-1) to a color name."""
    idx = min(int(level * len(COLORS)), len(COLORS) - 1)
    return COLORS[idx]


def _format_time(seconds: float) -> str:
    """Format seconds as M:SS.S."""
    m = int(seconds) // 60
    s = seconds - m * 60
    return f"{m}:{s:04.1f}"


def _place(line: Text, pos: int, label: str, width: int) -> int:
    """Write label into a blank line at pos, clipped to width. Returns end."""
    for i, ch in enumerate(label):
        p = pos + i
        if 0 <= p < width:
            line.plain = line.plain[:p] + ch + line.plain[p + 1 :]
    return min(pos + len(label), width)


def compute_column_levels(analyzer: SpectralAnalyzer, width: int, frequency_range: NumberRange) -> List[float]:
    """Peak dB level per display column, normalized to 0-1.

    Column ``x`` covers the frequencies whose log-axis position falls in
    ``[x / width, (x + 1) / width)``. Columns with no bins or no signal are 0.
    """
    data = analyzer.analysis_data
    if len(data) == 0:
        return [0.0] * width

    axis = display_convertor(frequency_range)
    with np.errstate(divide="ignore"):
        decibels = 20 * np.log10(data)

    columns = []
    for x in range(width):
        band = NumberRange(axis.convert_backwards(x / width), axis.convert_backwards((x + 1) / width))
        bins = analyzer.get_bin_index_range_for_frequencies(band)
        peak = MaximumFinder()
        for i in bins:
            if np.isfinite(decibels[i]):
                peak.accept(decibels[i])
        columns.append(peak.get())

    bounds = MinMaxFinder().accept_all(c for c in columns if np.isfinite(c)).get()
    if not np.isfinite(bounds.length) or bounds.length <= 0:
        return [0.0] * width
    scale = LinearValueConvertor.normalizing(bounds)
    return [float(scale.convert_forwards(c)) if np.isfinite(c) else 0.0 for c in columns]


def _build_bar_lines(levels: List[float], height: int) -> List[Text]:
    """Build ``height`` rows of colored block characters, top row first."""
    lines = []
    for row in range(height, 0, -1):
        text = Text()
        for level in levels:
            fill = level * height - (row - 1)
            idx = int(min(max(fill, 0.0), 1.0) * (len(BLOCKS) - 1))
            text.append(BLOCKS[idx], style=_level_color(level))
        lines.append(text)
    return lines


def _build_note_ruler(width: int, frequency_range: NumberRange, analyzer: SpectralAnalyzer) -> Text:
    """Ruler with a label at every C within the displayed band."""
    line = Text(" " * width)
    axis = display_convertor(frequency_range)
    to_pitch = pitch_convertor(analyzer.config)
    pitches = IntRange.smallest_range_containing(convert_range_forwards(to_pitch, frequency_range))
    for pitch in pitches:
        if pitch % 12 != 0:
            continue
        name = pitch_to_name(pitch, analyzer.config.lowest_named_pitch)
        if name is None:
            continue
        frequency = to_pitch.convert_backwards(pitch)
        pos = int(axis.convert_forwards(frequency) * width)
        _place(line, pos, name, width)
    line.stylize("dim", 0, width)
    return line


def _build_peak_markers(width: int, frequency_range: NumberRange, peaks: List[PeakCandidate]) -> Text:
    """Marker line with a caret under every detected note."""
    line = Text(" " * width)
    axis = display_convertor(frequency_range)
    for peak in peaks:
        if not peak.frequency or not frequency_range.includes(peak.frequency):
            continue
        pos = min(int(axis.convert_forwards(peak.frequency) * width), width - 1)
        _place(line, pos, "^", width)
        line.stylize("bold red", pos, pos + 1)
    return line


def render_spectrum(
    analyzer: SpectralAnalyzer,
    peaks: List[PeakCandidate],
    width: int = 72,
    height: int = 8,
    title: str = "spectrum",
    console: Optional[Console] = None,
) -> Panel:
    """Render the analyzer's current frame as a log-frequency bar chart.

    Args:
        analyzer: Analyzer holding the frame to draw.
        peaks: Detected notes to mark below the chart.
        width: Character width of the chart.
        height: Rows of bars.
        title: Panel title.
        console: Console to print to. A new one is created if not provided.

    Returns:
        The rendered panel.
    """
    cfg = analyzer.config
    frequency_range = NumberRange(cfg.min_frequency, cfg.max_frequency)

    names = " ".join(p.display_name for p in peaks) or "none"
    header = Text(
        f"Time: {_format_time(analyzer.player.position)}  "
        f"Resolution: {analyzer.resolution} ({analyzer.num_bins} bins, "
        f"{analyzer.frequency_bin_size:.2f} Hz/bin)  Notes: {names}"
    )

    levels = compute_column_levels(analyzer, width, frequency_range)

    content = Text()
    content.append_text(header)
    content.append("\n\n")
    for line in _build_bar_lines(levels, height):
        content.append_text(line)
        content.append("\n")
    content.append_text(_build_peak_markers(width, frequency_range, peaks))
    content.append("\n")
    content.append_text(_build_note_ruler(width, frequency_range, analyzer))

    panel = Panel(content, title=title, expand=False)
    (console or Console()).print(panel)
    return panel
