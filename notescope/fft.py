"""FFT primitive and window functions."""

import numpy as np

from .exceptions import TransformError


def blackman_window(size: int, alpha: float = 0.16) -> np.ndarray:
    """Periodic Blackman window of ``size`` coefficients."""
    a0 = 0.5 * (1 - alpha)
    a1 = 0.5
    a2 = 0.5 * alpha
    x = np.arange(size) / size
    return a0 - a1 * np.cos(2 * np.pi * x) + a2 * np.cos(4 * np.pi * x)


def forward_transform(samples: np.ndarray) -> np.ndarray:
    """Complex FFT of a real, power-of-two-length sample block.

    Args:
        samples: 1-D array of ``N`` real samples, ``N`` a power of two.

    Returns:
        Interleaved ``(real, imag)`` array of length ``2 * N``.

    Raises:
        TransformError: If the input is not a finite 1-D power-of-two block
            or numpy fails to transform it.
    """
    samples = np.asarray(samples, dtype=np.float64)
    n = samples.shape[0] if samples.ndim == 1 else 0
    if n == 0 or n & (n - 1):
        raise TransformError(f"FFT input must be a 1-D power-of-two block, got shape {samples.shape}")
    if not np.all(np.isfinite(samples)):
        raise TransformError("FFT input contains non-finite samples")

    try:
        spectrum = np.fft.fft(samples)
    except (ValueError, MemoryError) as e:
        raise TransformError(f"FFT failed: {e}") from e

    out = np.empty(2 * n)
    out[0::2] = spectrum.real
    out[1::2] = spectrum.imag
    return out


def magnitudes(raw: np.ndarray) -> np.ndarray:
    """``hypot(raw[2i], raw[2i + 1])`` for every interleaved bin."""
    return np.hypot(raw[0::2], raw[1::2])
