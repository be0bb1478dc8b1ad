"""Sample source: lazily decoded audio and fixed-size analysis windows."""

from typing import Optional

import librosa
import numpy as np

from .config import DEFAULT_CONFIG, AnalysisConfig
from .exceptions import AudioLoadError
from .logging_config import get_logger
from .ranges import IntRange, NumberRange
from .subarray_view import SubarrayView

logger = get_logger(__name__)


def _read_only(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


class AudioBuffer:
    """A decodable audio source.

    Buffers built with :meth:`from_file` decode on :meth:`load`; buffers built
    with :meth:`from_array` are loaded immediately.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._data: Optional[np.ndarray] = None
        self._sample_rate: Optional[int] = None

    @classmethod
    def from_file(cls, path: str) -> "AudioBuffer":
        return cls(path)

    @classmethod
    def from_array(cls, samples, sample_rate: int) -> "AudioBuffer":
        buffer = cls()
        buffer._set(np.asarray(samples, dtype=np.float64), sample_rate)
        return buffer

    def _set(self, data: np.ndarray, sample_rate: int):
        self._data = data
        self._sample_rate = int(sample_rate)

    @property
    def loaded(self) -> bool:
        return self._data is not None

    @property
    def sample_rate(self) -> Optional[int]:
        return self._sample_rate

    def load(self) -> "AudioBuffer":
        """Decode the file at ``path`` at its native sample rate.

        Raises:
            AudioLoadError: If there is nothing to load or decoding fails.
        """
        if self.loaded:
            return self
        if self.path is None:
            raise AudioLoadError("No audio source to load")

        logger.debug("Loading audio file: %s", self.path)
        try:
            y, sr = librosa.load(self.path, sr=None, mono=True)
        except Exception as e:
            logger.error("Failed to load audio file: %s", e)
            raise AudioLoadError("Unable to load audio file")

        self._set(np.asarray(y, dtype=np.float64), sr)
        logger.debug("Loaded %d samples at %d Hz", len(y), sr)
        return self

    def to_array(self, channel: int = 0) -> np.ndarray:
        """Samples of a single channel.

        Multi-channel data is laid out as ``(channels, samples)``, the same
        layout librosa uses.
        """
        if self._data is None:
            raise AudioLoadError("Audio buffer is not loaded")
        if self._data.ndim > 1:
            return self._data[channel]
        return self._data


class AudioFile:
    """Wraps an :class:`AudioBuffer` and serves single-channel sample windows.

    Until the buffer has loaded, :attr:`samples` is a fixed-length, all-zero
    placeholder, so callers never have to special-case the unloaded state.
    Once loaded, the flattened samples are materialized once and are
    read-only from then on.
    """

    def __init__(self, buffer: AudioBuffer, config: AnalysisConfig = None):
        self.buffer = buffer
        self.config = config or DEFAULT_CONFIG
        self._samples: Optional[np.ndarray] = None
        self._placeholder = _read_only(np.zeros(self.config.placeholder_length))

    @classmethod
    def from_file(cls, path: str, config: AnalysisConfig = None) -> "AudioFile":
        """Open and decode an audio file.

        Raises:
            AudioLoadError: If the file cannot be decoded.
        """
        return cls(AudioBuffer.from_file(path).load(), config)

    @classmethod
    def from_array(cls, samples, sample_rate: int, config: AnalysisConfig = None) -> "AudioFile":
        return cls(AudioBuffer.from_array(samples, sample_rate), config)

    @property
    def is_loaded(self) -> bool:
        return self.buffer.loaded

    @property
    def sample_rate(self) -> int:
        return self.buffer.sample_rate or self.config.default_sample_rate

    @property
    def samples(self) -> np.ndarray:
        if self._samples is None:
            if not self.buffer.loaded:
                return self._placeholder
            self._samples = _read_only(np.array(self.buffer.to_array(0), dtype=np.float64))
        return self._samples

    @property
    def duration(self) -> float:
        """Length in seconds; 0 while not loaded."""
        if not self.is_loaded:
            return 0.0
        return len(self.samples) / self.sample_rate

    def sample_index(self, time: float) -> int:
        """Nearest sample index to ``time`` seconds, with halves rounding up."""
        return int(np.floor(time * self.sample_rate + 0.5))

    def get_data(self, time: float, size: int) -> np.ndarray:
        """Window of ``2 * size`` samples centered on ``time`` seconds.

        The window is the half-open index range ``[center - size, center +
        size)``; the part that falls outside the buffer is zero-filled, so the
        result is always exactly ``2 * size`` samples long.
        """
        samples = self.samples
        center = self.sample_index(time)
        start = center - size
        end = center + size

        out = np.zeros(2 * size)
        copy_start = max(start, 0)
        copy_end = min(end, len(samples))
        if copy_end > copy_start:
            out[copy_start - start : copy_end - start] = samples[copy_start:copy_end]
        return out

    def slice_time(self, time_range: NumberRange) -> SubarrayView:
        """Zero-copy view of the samples inside a time range (seconds)."""
        index_range = IntRange.from_endpoints_with_end_exclusive(
            self.sample_index(time_range.start),
            self.sample_index(time_range.end),
        )
        return SubarrayView(self.samples, index_range)
