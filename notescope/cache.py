"""Window-function table cache for the spectral analyzer."""

from typing import Dict

import numpy as np

from .fft import blackman_window
from .logging_config import get_logger

logger = get_logger(__name__)


class WindowFunctionCache:
    """Blackman window tables keyed by resolution.

    Each table has ``2 ** resolution`` coefficients and is built on first use.
    Entries are written once and never replaced.
    """

    def __init__(self, alpha: float = 0.16):
        self.alpha = alpha
        self._tables: Dict[int, np.ndarray] = {}

    def __contains__(self, resolution: int) -> bool:
        return resolution in self._tables

    def __len__(self) -> int:
        return len(self._tables)

    def get(self, resolution: int) -> np.ndarray:
        """Window table for ``resolution``, building it if missing."""
        table = self._tables.get(resolution)
        if table is not None:
            logger.debug("Window cache hit: resolution %d", resolution)
            return table

        logger.debug("Window cache miss: building %d-point table", 1 << resolution)
        table = blackman_window(1 << resolution, self.alpha)
        table.flags.writeable = False
        self._tables[resolution] = table
        return table

    def clear(self):
        """Drop all cached tables."""
        self._tables.clear()
        logger.debug("Window cache cleared")
