"""Single-pass, constant-memory statistics used for normalization."""

import math
from typing import Iterable

from .ranges import NumberRange


class CumulativeResultFinder:
    """Base class: feed values with ``accept``, read the result with ``get``."""

    def accept(self, value: float):
        raise NotImplementedError

    def accept_all(self, values: Iterable[float]) -> "CumulativeResultFinder":
        for value in values:
            self.accept(value)
        return self

    def get(self):
        raise NotImplementedError


class MaximumFinder(CumulativeResultFinder):
    def __init__(self, initial_value: float = -math.inf):
        self._max = initial_value

    def accept(self, value: float):
        if value > self._max:
            self._max = value

    def get(self) -> float:
        return self._max


class MinimumFinder(CumulativeResultFinder):
    def __init__(self, initial_value: float = math.inf):
        self._min = initial_value

    def accept(self, value: float):
        if value < self._min:
            self._min = value

    def get(self) -> float:
        return self._min


class MinMaxFinder(CumulativeResultFinder):
    """Running minimum and maximum, reported together as a range."""

    def __init__(self):
        self._min_finder = MinimumFinder()
        self._max_finder = MaximumFinder()

    def accept(self, value: float):
        self._min_finder.accept(value)
        self._max_finder.accept(value)

    def get(self) -> NumberRange:
        return NumberRange(self._min_finder.get(), self._max_finder.get())


class AverageFinder(CumulativeResultFinder):
    def __init__(self):
        self._total = 0.0
        self._num_items = 0

    def accept(self, value: float):
        self._total += value
        self._num_items += 1

    def get(self) -> float:
        """Mean of accepted values, or NaN if none were accepted."""
        return math.nan if self._num_items == 0 else self._total / self._num_items


class VarianceFinder(CumulativeResultFinder):
    """Population variance as ``E[x^2] - E[x]^2``.

    Not numerically stabilized; large offsets relative to the spread lose
    precision.
    """

    def __init__(self):
        self._average_finder = AverageFinder()
        self._average_squared_finder = AverageFinder()

    def accept(self, value: float):
        self._average_finder.accept(value)
        self._average_squared_finder.accept(value**2)

    def get(self) -> float:
        return self._average_squared_finder.get() - self._average_finder.get() ** 2
