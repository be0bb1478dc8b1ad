"""Custom exceptions for notescope."""


class AudioLoadError(Exception):
    """Raised when an audio file cannot be loaded or decoded."""

    pass


class ConfigurationError(ValueError):
    """Raised when an analyzer setting is outside its valid range."""

    pass


class TransformError(Exception):
    """Raised when the FFT primitive cannot transform a sample window."""

    pass


class DegenerateRangeError(ValueError):
    """Raised when a range fit is requested from a zero-length source range."""

    pass
