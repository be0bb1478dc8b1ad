"""Closed numeric and integer intervals used throughout the analysis pipeline."""

import math
from typing import Callable, Iterator, List, Sized, Tuple


class NumberRange:
    """A closed interval ``[start, end]`` of real numbers.

    The endpoints are not required to be ordered; ``length`` is negative for
    an unordered (or empty, after trimming) range. Use :meth:`from_endpoints`
    when order matters.
    """

    def __init__(self, start: float = 0, end: float = 0):
        self._start = start
        self._end = end

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._start!r}, {self._end!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, NumberRange):
            return NotImplemented
        return self.endpoints == other.endpoints

    def includes(self, x: float) -> bool:
        """Closed-interval membership."""
        return self.start <= x <= self.end

    @property
    def endpoints(self) -> Tuple[float, float]:
        """The start and end of the interval (inclusive)."""
        return self.start, self.end

    @property
    def length(self) -> float:
        return self.end - self.start

    @property
    def start(self) -> float:
        return self._start

    @start.setter
    def start(self, start: float):
        self._start = start

    def set_start(self, start: float) -> "NumberRange":
        self.start = start
        return self

    def modify_start(self, mapping: Callable[[float], float]) -> "NumberRange":
        self.start = mapping(self.start)
        return self

    @property
    def end(self) -> float:
        return self._end

    @end.setter
    def end(self, end: float):
        self._end = end

    def set_end(self, end: float) -> "NumberRange":
        self.end = end
        return self

    def modify_end(self, mapping: Callable[[float], float]) -> "NumberRange":
        self.end = mapping(self.end)
        return self

    def copy(self) -> "NumberRange":
        return type(self)(self.start, self.end)

    def trim_to_range(self, interval: "NumberRange") -> "NumberRange":
        """Clamp both endpoints into ``interval`` in place.

        Never raises. A disjoint interval leaves ``length < 0``; callers must
        check for emptiness before iterating.
        """
        self.start = max(self.start, interval.start)
        self.end = min(self.end, interval.end)
        return self

    def trimmed_to_range(self, interval: "NumberRange") -> "NumberRange":
        return self.copy().trim_to_range(interval)

    @classmethod
    def from_endpoints(cls, p1: float, p2: float) -> "NumberRange":
        """Build a range with ``start <= end`` from two unordered endpoints."""
        return cls(min(p1, p2), max(p1, p2))


class IntRange(NumberRange):
    """A closed interval of integers, enumerable from ``start`` to ``end``."""

    def __iter__(self) -> Iterator[int]:
        return iter(range(int(self.start), int(self.end) + 1))

    def __len__(self) -> int:
        return max(self.num_ints_in_range, 0)

    @property
    def num_ints_in_range(self) -> int:
        return int(self.length) + 1

    @property
    def values_in_range(self) -> List[int]:
        return list(self)

    def map(self, func: Callable[[int], object]) -> list:
        return [func(value) for value in self]

    def for_each(self, func: Callable[[int], object]):
        for value in self:
            func(value)

    @property
    def start_exclusive(self) -> int:
        return self.start - 1

    @start_exclusive.setter
    def start_exclusive(self, start_exclusive: int):
        self.start = start_exclusive + 1

    def set_start_exclusive(self, start_exclusive: int) -> "IntRange":
        self.start_exclusive = start_exclusive
        return self

    @property
    def end_exclusive(self) -> int:
        return self.end + 1

    @end_exclusive.setter
    def end_exclusive(self, end_exclusive: int):
        self.end = end_exclusive - 1

    def set_end_exclusive(self, end_exclusive: int) -> "IntRange":
        self.end_exclusive = end_exclusive
        return self

    @classmethod
    def from_endpoints_exclusive(cls, p1: int, p2: int) -> "IntRange":
        """Range strictly between two unordered endpoints."""
        return cls().set_start_exclusive(min(p1, p2)).set_end_exclusive(max(p1, p2))

    @classmethod
    def from_endpoints_with_start_exclusive(cls, p1: int, p2: int) -> "IntRange":
        return cls().set_start_exclusive(min(p1, p2)).set_end(max(p1, p2))

    @classmethod
    def from_endpoints_with_end_exclusive(cls, p1: int, p2: int) -> "IntRange":
        return cls().set_start(min(p1, p2)).set_end_exclusive(max(p1, p2))

    @classmethod
    def for_indices_of(cls, collection: Sized) -> "IntRange":
        """The valid indices ``[0, len - 1]`` of a collection."""
        return cls(0, len(collection) - 1)

    @classmethod
    def smallest_range_containing(cls, interval: NumberRange) -> "IntRange":
        """Round a continuous range outward to integers."""
        return cls(math.floor(interval.start), math.ceil(interval.end))

    @classmethod
    def largest_range_contained_in(cls, interval: NumberRange) -> "IntRange":
        """Round a continuous range inward to integers."""
        return cls(math.ceil(interval.start), math.floor(interval.end))
