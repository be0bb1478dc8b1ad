"""Configuration for notescope spectral analysis parameters."""

from dataclasses import dataclass
from typing import Tuple


@dataclass
class AnalysisConfig:
    """Configuration for spectral analysis and note detection."""

    # FFT resolution (window size is 2 ** resolution samples)
    default_resolution: int = 12
    min_resolution: int = 4
    max_resolution: int = 16

    # Exponential smoothing coefficient applied between frames
    default_smoothing: float = 0.8

    # Minimum prominence of a peak on the normalized log-magnitude scale
    prominence_threshold: float = 0.1

    # Frequency band searched for notes and drawn by the renderer (Hz)
    min_frequency: float = 27.5
    max_frequency: float = 4200.0

    # Sample rate reported while no audio is loaded
    default_sample_rate: int = 44100

    # Length of the zero-filled placeholder returned before audio has loaded
    placeholder_length: int = 2 << 14

    # Blackman window alpha
    window_alpha: float = 0.16

    # Pitch calibration: frequencies (Hz) and the pitch numbers they map to
    reference_frequencies: Tuple[float, float] = (220.0, 440.0)
    reference_pitches: Tuple[float, float] = (57.0, 69.0)

    # Pitches below this have no note name
    lowest_named_pitch: int = 21


# Default configuration instance
DEFAULT_CONFIG = AnalysisConfig()
