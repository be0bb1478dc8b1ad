"""Composable, invertible scalar transforms used for all unit mappings.

A convertor is a pair of inverse functions. Composition and inversion build
new pairs from existing ones, so pipelines such as "log, then fit a linear
range" stay invertible end to end. Both functions accept scalars or numpy
arrays.
"""

from typing import Callable

import numpy as np

from .exceptions import DegenerateRangeError
from .ranges import NumberRange


class ValueConvertor:
    """A ``(forward, backward)`` pair of inverse scalar functions."""

    __slots__ = ("_forward", "_backward")

    def __init__(self, forward: Callable, backward: Callable):
        self._forward = forward
        self._backward = backward

    def convert_forwards(self, amount):
        return self._forward(amount)

    def convert_backwards(self, amount):
        return self._backward(amount)

    def composed_with(self, other: "ValueConvertor") -> "ValueConvertor":
        """Apply ``self`` then ``other`` going forwards; the reverse going backwards."""
        first, second = self, other
        return ValueConvertor(
            lambda amount: second.convert_forwards(first.convert_forwards(amount)),
            lambda amount: first.convert_backwards(second.convert_backwards(amount)),
        )

    def inverted(self) -> "ValueConvertor":
        return ValueConvertor(self._backward, self._forward)


def convert_range_forwards(convertor: ValueConvertor, interval: NumberRange) -> NumberRange:
    return (
        interval.copy()
        .modify_start(convertor.convert_forwards)
        .modify_end(convertor.convert_forwards)
    )


def convert_range_backwards(convertor: ValueConvertor, interval: NumberRange) -> NumberRange:
    return (
        interval.copy()
        .modify_start(convertor.convert_backwards)
        .modify_end(convertor.convert_backwards)
    )


log_transform = ValueConvertor(np.log, np.exp)
exp_transform = log_transform.inverted()


class LinearValueConvertor(ValueConvertor):
    """A linear unit conversion.

    ``convert_forwards(x)`` returns ``x * factor + offset``, or
    ``(x + offset) * factor`` when ``apply_offset_first`` is set.
    """

    __slots__ = ("factor", "offset")

    def __init__(self, factor: float, offset: float = 0, apply_offset_first: bool = False):
        if factor == 0 or not np.isfinite(factor):
            raise DegenerateRangeError(f"Linear convertor factor must be finite and non-zero, got {factor}")

        self.factor = factor
        self.offset = factor * offset if apply_offset_first else offset
        super().__init__(
            lambda amount: amount * self.factor + self.offset,
            lambda amount: (amount - self.offset) / self.factor,
        )

    def __repr__(self) -> str:
        return f"LinearValueConvertor(factor={self.factor!r}, offset={self.offset!r})"

    @staticmethod
    def fitting_range_to(source: NumberRange, dest: NumberRange) -> "LinearValueConvertor":
        """Map ``source.start`` to ``dest.start`` and ``source.end`` to ``dest.end``.

        Raises:
            DegenerateRangeError: If ``source`` has zero length.
        """
        if source.length == 0:
            raise DegenerateRangeError(f"Cannot fit a zero-length range {source!r}")
        factor = dest.length / source.length
        return LinearValueConvertor(factor, dest.start - source.start * factor)

    @staticmethod
    def normalizing(source: NumberRange) -> "LinearValueConvertor":
        """Map ``source`` onto ``[0, 1]``."""
        return LinearValueConvertor.fitting_range_to(source, NumberRange(0, 1))

    @staticmethod
    def fitting_range_to_after(
        source: NumberRange, dest: NumberRange, transform: ValueConvertor
    ) -> ValueConvertor:
        """Apply ``transform``, then a linear fit computed in its output space."""
        return transform.composed_with(
            LinearValueConvertor.fitting_range_to(convert_range_forwards(transform, source), dest)
        )

    @staticmethod
    def normalizing_after(source: NumberRange, transform: ValueConvertor) -> ValueConvertor:
        return transform.composed_with(
            LinearValueConvertor.normalizing(convert_range_forwards(transform, source))
        )
