"""Spectral analysis of the audio under the playback cursor."""

from typing import Callable, Optional

import numpy as np

from .cache import WindowFunctionCache
from .config import DEFAULT_CONFIG, AnalysisConfig
from .convertors import LinearValueConvertor, convert_range_backwards
from .exceptions import ConfigurationError, TransformError
from .fft import forward_transform, magnitudes
from .logging_config import get_logger
from .player import PlaybackCursor
from .ranges import IntRange, NumberRange

logger = get_logger(__name__)


def smooth_frames(previous: Optional[np.ndarray], current: np.ndarray, smoothing: float) -> np.ndarray:
    """Blend a new magnitude frame into the previous one.

    Returns ``current`` unchanged when there is no previous frame or the bin
    counts differ. Otherwise each bin becomes ``prev * smoothing + new * (1 -
    smoothing)``, except where ``prev`` is not finite, which takes the new
    value as is.

    Args:
        previous: Last retained magnitude frame, or None.
        current: Newly computed magnitude frame.
        smoothing: Weight of the previous frame, in [0, 1].

    Returns:
        The frame to retain.
    """
    if previous is None or len(previous) != len(current):
        return current

    with np.errstate(invalid="ignore", over="ignore"):
        blended = previous * smoothing + current * (1 - smoothing)
    return np.where(np.isfinite(previous), blended, current)


class SpectralAnalyzer:
    """Windowed FFT analysis with exponential smoothing across frames.

    The analyzer is driven by repeated calls to :meth:`re_analyze`, each of
    which analyzes the window of samples centered on the cursor position.
    Calls must be serialized by the caller.
    """

    def __init__(
        self,
        player: PlaybackCursor,
        config: AnalysisConfig = None,
        resolution: int = None,
        smoothing: float = None,
        transform: Callable[[np.ndarray], np.ndarray] = forward_transform,
        window_cache: WindowFunctionCache = None,
    ):
        """Initialize analyzer with configuration.

        Args:
            player: Position provider whose audio is analyzed.
            config: Analysis configuration. Uses DEFAULT_CONFIG if not provided.
            resolution: FFT resolution; the window is ``2 ** resolution``
                samples. Defaults to ``config.default_resolution``.
            smoothing: Weight of the previous frame. Defaults to
                ``config.default_smoothing``.
            transform: FFT primitive returning an interleaved (real, imag)
                array; may raise TransformError.
            window_cache: Window table cache. A private one is created if not
                provided.

        Raises:
            ConfigurationError: If resolution or smoothing is out of range.
        """
        self.config = config or DEFAULT_CONFIG
        self.player = player
        self.transform = transform
        self.window_cache = (
            window_cache if window_cache is not None else WindowFunctionCache(self.config.window_alpha)
        )

        self._resolution: Optional[int] = None
        self._window: Optional[np.ndarray] = None
        self._smoothing = 0.0
        self._analysis_data: Optional[np.ndarray] = None
        self._raw_analysis_data: Optional[np.ndarray] = None

        self.reconfigure(self.config.default_resolution if resolution is None else resolution)
        self.smoothing = self.config.default_smoothing if smoothing is None else smoothing

    # --- Configuration ---

    def reconfigure(self, resolution: int):
        """Validate ``resolution`` and swap all state that depends on it.

        The window table and bin count change together, and the retained
        frames and smoothing state are dropped, since their bins no longer
        match. Frame consumers see an empty frame until the next
        :meth:`re_analyze`.

        Raises:
            ConfigurationError: If resolution is not an integer within
                ``[min_resolution, max_resolution]``. Nothing changes.
        """
        cfg = self.config
        if (
            isinstance(resolution, bool)
            or not isinstance(resolution, (int, np.integer))
            or not cfg.min_resolution <= resolution <= cfg.max_resolution
        ):
            raise ConfigurationError(
                f"Invalid analyzer resolution {resolution!r}: expected an integer in "
                f"[{cfg.min_resolution}, {cfg.max_resolution}]"
            )

        resolution = int(resolution)
        if resolution == self._resolution:
            return

        window = self.window_cache.get(resolution)
        self._resolution, self._window = resolution, window
        self._analysis_data = None
        self._raw_analysis_data = None
        logger.debug("Analyzer resolution set to %d (%d bins)", resolution, 1 << resolution)

    @property
    def resolution(self) -> int:
        return self._resolution

    @resolution.setter
    def resolution(self, resolution: int):
        self.reconfigure(resolution)

    @property
    def smoothing(self) -> float:
        return self._smoothing

    @smoothing.setter
    def smoothing(self, smoothing: float):
        if (
            isinstance(smoothing, bool)
            or not isinstance(smoothing, (int, float, np.number))
            or not 0.0 <= smoothing <= 1.0
        ):
            raise ConfigurationError(f"Invalid smoothing {smoothing!r}: expected a number in [0, 1]")
        self._smoothing = float(smoothing)

    # --- Frame data ---

    @property
    def analysis_data(self) -> np.ndarray:
        """Current smoothed magnitude frame (empty before the first frame)."""
        if self._analysis_data is None:
            return np.zeros(0)
        return self._analysis_data

    @property
    def raw_analysis_data(self) -> np.ndarray:
        """Current interleaved (real, imag) transform output."""
        if self._raw_analysis_data is None:
            return np.zeros(0)
        return self._raw_analysis_data

    # --- Derived values ---

    @property
    def sample_rate(self) -> int:
        audio = self.player.audio
        if audio is not None and audio.is_loaded:
            return audio.sample_rate
        return self.config.default_sample_rate

    @property
    def max_frequency(self) -> float:
        """Nyquist frequency."""
        return self.sample_rate / 2

    @property
    def num_bins(self) -> int:
        return 1 << self._resolution

    @property
    def frequency_bin_size(self) -> float:
        """Spacing of transform bins in Hz (sample rate over window size)."""
        return self.sample_rate / self.num_bins

    @property
    def bin_index_to_frequency_convertor(self) -> LinearValueConvertor:
        return LinearValueConvertor(self.frequency_bin_size, 0)

    def get_bin_index_range_for_frequencies(self, frequency_range: NumberRange) -> IntRange:
        """Smallest bin range covering a frequency range, trimmed to valid bins.

        The result may be empty (``num_ints_in_range <= 0``) when the range
        lies outside the analyzed band.
        """
        bin_range = convert_range_backwards(self.bin_index_to_frequency_convertor, frequency_range)
        return IntRange.smallest_range_containing(bin_range).trimmed_to_range(
            IntRange(0, self.num_bins - 1)
        )

    def get_frequency_strength_decibels(self, frequency: float) -> float:
        """Smoothed magnitude of the bin nearest ``frequency``, in dB."""
        data = self.analysis_data
        index = int(round(frequency / self.frequency_bin_size))
        if not 0 <= index < len(data):
            return float("-inf")
        with np.errstate(divide="ignore"):
            return float(20 * np.log10(data[index]))

    # --- Analysis ---

    def re_analyze(self) -> bool:
        """Analyze the window under the cursor and advance one frame.

        Returns:
            True if a new frame was produced; False if no audio is loaded or
            the transform failed, in which case the previous frame is kept.
        """
        if not self.player.is_loaded:
            return False

        # Read once so the window size, table and smoothing check agree
        resolution, window = self._resolution, self._window
        size = 1 << resolution
        position = self.player.position

        samples = self.player.audio.get_data(position, size // 2) * window

        try:
            raw = np.asarray(self.transform(samples), dtype=np.float64)
            if raw.shape != (2 * size,):
                raise TransformError(f"Expected {2 * size} interleaved values, got shape {raw.shape}")
        except TransformError as e:
            logger.warning("Skipping frame at %.3fs: %s", position, e)
            return False

        new_data = magnitudes(raw)
        self._analysis_data = smooth_frames(self._analysis_data, new_data, self._smoothing)
        self._raw_analysis_data = raw
        logger.debug("Analyzed frame at %.3fs (resolution %d)", position, resolution)
        return True
