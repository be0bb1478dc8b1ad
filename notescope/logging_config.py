"""Logging configuration for notescope."""

import logging
import sys

NOISY_LOGGERS = ("librosa", "numba", "soundfile", "audioread")


def setup_logging(verbose: bool = False, quiet: bool = False):
    """Configure logging for the application.

    Args:
        verbose: Enable debug logging, tagged with the logger name.
        quiet: Only report errors. Ignored when ``verbose`` is set.
    """
    if verbose:
        level, fmt = logging.DEBUG, "%(levelname)s [%(name)s]: %(message)s"
    elif quiet:
        level, fmt = logging.ERROR, "%(levelname)s: %(message)s"
    else:
        level, fmt = logging.INFO, "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)
    logging.getLogger().setLevel(level)

    # Decoder backends log per-file chatter at INFO
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
