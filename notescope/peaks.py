"""Peak detection: turn a magnitude spectrum into note candidates."""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from .accumulators import MaximumFinder, MinMaxFinder
from .analyzer import SpectralAnalyzer
from .convertors import LinearValueConvertor
from .logging_config import get_logger
from .models import FrameAnalysis, PeakCandidate
from .pitch import nearest_pitch, pitch_convertor, pitch_to_name
from .ranges import IntRange, NumberRange
from .subarray_view import SubarrayView

logger = get_logger(__name__)


def find_peaks(
    values: Sequence[float], threshold: float, index_range: Optional[IntRange] = None
) -> List[PeakCandidate]:
    """Find local maxima whose prominence depth exceeds ``threshold``.

    A bin is a candidate when it is strictly greater than both neighbours;
    the endpoints of the searched range are never candidates and plateaus are
    never peaks. From a candidate the scan walks outward in each direction for
    as long as the values keep strictly decreasing, and the prominence depth is
    the largest drop seen on either side (never negative).

    Args:
        values: Magnitudes (array, list or SubarrayView).
        threshold: Minimum prominence depth, exclusive.
        index_range: Indices of ``values`` to search. Defaults to all of them.

    Returns:
        Accepted peaks in ascending bin order; ``bin_index`` is an index into
        ``values``.
    """
    view = SubarrayView(values, index_range)
    base_offset = values.offset if isinstance(values, SubarrayView) else 0
    first_index = view.offset - base_offset
    indices = view.indices()

    peaks = []
    for i in range(1, len(view) - 1):
        value = view[i]
        if not (value > view[i - 1] and value > view[i + 1]):
            continue

        depth = MaximumFinder(0)

        pos = i + 1
        while indices.includes(pos) and view[pos] < view[pos - 1]:
            depth.accept(value - view[pos])
            pos += 1

        pos = i - 1
        while indices.includes(pos) and view[pos] < view[pos + 1]:
            depth.accept(value - view[pos])
            pos -= 1

        if depth.get() > threshold:
            peaks.append(
                PeakCandidate(
                    bin_index=first_index + i,
                    magnitude=float(value),
                    prominence=float(depth.get()),
                )
            )

    return peaks


def normalized_log_levels(magnitudes: Sequence[float]) -> Optional[np.ndarray]:
    """Log-compress magnitudes and scale them onto [0, 1].

    Zero magnitudes are floored at the smallest finite log level. Returns None
    when the input is silent or flat, since there is nothing to normalize.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        levels = np.log(np.asarray(magnitudes, dtype=np.float64))

    bounds = MinMaxFinder().accept_all(level for level in levels if np.isfinite(level)).get()
    if not np.isfinite(bounds.length) or bounds.length <= 0:
        return None

    levels = np.where(np.isfinite(levels), levels, bounds.start)
    return LinearValueConvertor.normalizing(bounds).convert_forwards(levels)


def detect_notes(
    analyzer: SpectralAnalyzer,
    frequency_range: Optional[NumberRange] = None,
    threshold: Optional[float] = None,
) -> List[PeakCandidate]:
    """Detect prominent peaks in the analyzer's current frame as notes.

    Magnitudes within ``frequency_range`` are log-compressed and normalized
    to [0, 1] over that band, so ``threshold`` is a fraction of the band's
    dynamic range.

    Args:
        analyzer: Analyzer holding the current smoothed frame.
        frequency_range: Band to search in Hz. Defaults to the configured
            ``min_frequency``..``max_frequency``.
        threshold: Minimum prominence. Defaults to
            ``config.prominence_threshold``.

    Returns:
        Peaks with pitch, frequency and note name filled in.
    """
    cfg = analyzer.config
    if frequency_range is None:
        frequency_range = NumberRange(cfg.min_frequency, cfg.max_frequency)
    if threshold is None:
        threshold = cfg.prominence_threshold

    data = analyzer.analysis_data
    if len(data) == 0:
        return []

    bins = analyzer.get_bin_index_range_for_frequencies(frequency_range)
    if bins.num_ints_in_range < 3:
        logger.debug("Frequency range %s covers too few bins to search", frequency_range)
        return []

    levels = normalized_log_levels(SubarrayView(data, bins).to_array())
    if levels is None:
        return []

    bin_size = analyzer.frequency_bin_size
    convertor = pitch_convertor(cfg)
    notes = []
    for peak in find_peaks(levels, threshold):
        peak.bin_index += int(bins.start)
        peak.frequency = peak.bin_index * bin_size
        if peak.frequency <= 0:
            continue
        peak.pitch = nearest_pitch(peak.frequency, convertor)
        peak.note_name = pitch_to_name(peak.pitch, cfg.lowest_named_pitch)
        notes.append(peak)

    logger.debug("Detected %d note(s): %s", len(notes), [n.display_name for n in notes])
    return notes


def detect_frame(
    analyzer: SpectralAnalyzer,
    frequency_range: Optional[NumberRange] = None,
    threshold: Optional[float] = None,
) -> FrameAnalysis:
    """Bundle the current frame's notes with its timing and resolution."""
    return FrameAnalysis(
        time=analyzer.player.position,
        resolution=analyzer.resolution,
        frequency_bin_size=analyzer.frequency_bin_size,
        peaks=detect_notes(analyzer, frequency_range, threshold),
    )


def isolate_peak_bins(
    analyzer: SpectralAnalyzer, threshold: Optional[float] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """Real and imaginary spectra with everything but prominent peaks zeroed.

    Peaks are found over the whole smoothed frame on the normalized log scale.
    The result can drive a periodic-wave resynthesis of the detected partials.
    """
    if threshold is None:
        threshold = analyzer.config.prominence_threshold

    raw = analyzer.raw_analysis_data
    real = raw[0::2]
    imag = raw[1::2]
    res_real = np.zeros(len(real))
    res_imag = np.zeros(len(imag))

    levels = normalized_log_levels(analyzer.analysis_data)
    if levels is None or len(levels) != len(real):
        return res_real, res_imag

    for peak in find_peaks(levels, threshold):
        res_real[peak.bin_index] = real[peak.bin_index]
        res_imag[peak.bin_index] = imag[peak.bin_index]
    return res_real, res_imag
