"""Zero-copy indexed view over a sample buffer or another view."""

from typing import Any, Callable, Iterator, List, Optional

import numpy as np

from .ranges import IntRange


class SubarrayView:
    """A light view on a contiguous slice of a backing sequence.

    The requested index range is trimmed to the backing's valid indices, so
    an out-of-bounds range yields a shorter (possibly empty) view instead of
    an error. A view over another view is flattened at construction: every
    view holds the base sequence and an offset into it directly.
    """

    def __init__(self, backing, index_range: Optional[IntRange] = None):
        valid = IntRange.for_indices_of(backing)
        trimmed = index_range.trimmed_to_range(valid) if index_range is not None else valid

        if isinstance(backing, SubarrayView):
            self._base = backing._base
            self._offset = backing._offset + int(trimmed.start)
        else:
            self._base = backing
            self._offset = int(trimmed.start)
        self._length = max(trimmed.num_ints_in_range, 0)

    def __repr__(self) -> str:
        return f"SubarrayView(offset={self._offset}, length={self._length})"

    def __len__(self) -> int:
        return self._length

    @property
    def length(self) -> int:
        return self._length

    @property
    def offset(self) -> int:
        """Index of this view's first element in the base sequence."""
        return self._offset

    def _backing_index(self, index: int) -> int:
        if not 0 <= index < self._length:
            raise IndexError(f"SubarrayView index {index} out of range for length {self._length}")
        return self._offset + index

    def get(self, index: int):
        return self._base[self._backing_index(index)]

    def set(self, index: int, value):
        self._base[self._backing_index(index)] = value
        return value

    __getitem__ = get
    __setitem__ = set

    def __iter__(self) -> Iterator[Any]:
        base = self._base
        for i in range(self._offset, self._offset + self._length):
            yield base[i]

    def indices(self) -> IntRange:
        return IntRange.for_indices_of(self)

    def every(self, predicate: Callable[[Any, int], bool]) -> bool:
        return all(predicate(value, i) for i, value in enumerate(self))

    def some(self, predicate: Callable[[Any, int], bool]) -> bool:
        return any(predicate(value, i) for i, value in enumerate(self))

    def fill(self, value) -> "SubarrayView":
        for i in self.indices():
            self.set(i, value)
        return self

    def modify_each(self, func: Callable[[Any, int], Any]) -> "SubarrayView":
        """Replace every element in place with ``func(value, index)``."""
        for i in self.indices():
            self.set(i, func(self.get(i), i))
        return self

    def filter(self, predicate: Callable[[Any, int], bool]) -> List[Any]:
        return [value for i, value in enumerate(self) if predicate(value, i)]

    def find(self, predicate: Callable[[Any, int], bool]):
        for i, value in enumerate(self):
            if predicate(value, i):
                return value
        return None

    def find_index(self, predicate: Callable[[Any, int], bool]) -> int:
        for i, value in enumerate(self):
            if predicate(value, i):
                return i
        return -1

    def for_each(self, func: Callable[[Any, int], Any]):
        for i, value in enumerate(self):
            func(value, i)

    def join(self, separator: str = ",") -> str:
        return separator.join(str(value) for value in self)

    def map(self, func: Callable[[Any, int], Any]) -> List[Any]:
        return [func(value, i) for i, value in enumerate(self)]

    def to_array(self) -> np.ndarray:
        """Copy the viewed elements into a new numpy array."""
        return np.array(self._base[self._offset : self._offset + self._length])
