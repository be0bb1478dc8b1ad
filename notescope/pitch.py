"""Frequency to pitch-number mapping and note naming."""

from typing import Optional

from .config import DEFAULT_CONFIG, AnalysisConfig
from .convertors import LinearValueConvertor, ValueConvertor, log_transform
from .ranges import NumberRange

NOTE_NAMES = ["C", "C#", "D", "Eb", "E", "F", "F#", "G", "Ab", "A", "Bb", "B"]


def pitch_convertor(config: AnalysisConfig = None) -> ValueConvertor:
    """Frequency (Hz) to pitch number, affine in log-frequency.

    Calibrated by the two reference points in ``config`` (220 Hz -> 57 and
    440 Hz -> 69 by default), which gives 12 pitch units per octave.
    """
    cfg = config or DEFAULT_CONFIG
    return LinearValueConvertor.fitting_range_to_after(
        NumberRange(*cfg.reference_frequencies),
        NumberRange(*cfg.reference_pitches),
        log_transform,
    )


def display_convertor(frequency_range: NumberRange) -> ValueConvertor:
    """Frequency (Hz) to a 0-1 position on a logarithmic axis."""
    return LinearValueConvertor.normalizing_after(frequency_range, log_transform)


FREQ_TO_PITCH_CONVERTOR = pitch_convertor()


def frequency_to_pitch(frequency: float, convertor: ValueConvertor = FREQ_TO_PITCH_CONVERTOR) -> float:
    return float(convertor.convert_forwards(frequency))


def nearest_pitch(frequency: float, convertor: ValueConvertor = FREQ_TO_PITCH_CONVERTOR) -> int:
    """Nearest whole pitch number for a frequency."""
    return int(round(frequency_to_pitch(frequency, convertor)))


def pitch_to_frequency(pitch: float, convertor: ValueConvertor = FREQ_TO_PITCH_CONVERTOR) -> float:
    return float(convertor.convert_backwards(pitch))


def pitch_to_name(pitch: int, lowest_named_pitch: int = DEFAULT_CONFIG.lowest_named_pitch) -> Optional[str]:
    """Note name with octave, e.g. 69 -> "A4".

    Returns None for pitches below ``lowest_named_pitch``.
    """
    if pitch < lowest_named_pitch:
        return None
    return f"{NOTE_NAMES[pitch % 12]}{(pitch - 12) // 12}"
