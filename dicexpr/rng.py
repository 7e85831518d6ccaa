"""
Random sources that supply die values.

A source is handed to the evaluator by the caller, nothing here is global.
One source must not be shared by evaluations running at the same time.
"""
from __future__ import absolute_import, print_function
import abc

import numpy.random

import dicexpr.exc
from dicexpr.util import ReprMixin, normalize_seed


class RandomSource(abc.ABC):
    """
    Supply uniform integers in a closed range.
    """
    @abc.abstractmethod
    def next_in_range(self, low, high):
        """
        Draw the next value.

        Args:
            low: The smallest value possible.
            high: The largest value possible, inclusive.

        Returns:
            An integer in [low, high].
        """
        raise NotImplementedError

    def roll(self, sides):
        """ Roll a single die with sides faces. """
        return self.next_in_range(1, sides)


class NumpySource(ReprMixin, RandomSource):
    """
    Production source backed by a numpy Generator.

    Attributes:
        seed: The seed the generator was created from.
    """
    _repr_keys = ['seed']

    def __init__(self, seed=None):
        self.seed = normalize_seed(seed)
        self.gen = numpy.random.default_rng(self.seed)

    def next_in_range(self, low, high):
        return int(self.gen.integers(low, high, endpoint=True))


class ScriptedSource(ReprMixin, RandomSource):
    """
    Replay a fixed sequence of values in order.

    Attributes:
        values: The values to hand out.
        index: Position of the next value to hand out.
    """
    _repr_keys = ['values', 'index']

    def __init__(self, values):
        self.values = list(values)
        self.index = 0

    @property
    def remaining(self):
        """ The number of values not yet handed out. """
        return len(self.values) - self.index

    def next_in_range(self, low, high):
        """
        Raises:
            SourceExhausted: No values left to replay.
            ScriptedValueOutOfRange: The next value is not in [low, high].
        """
        try:
            value = self.values[self.index]
        except IndexError:
            raise dicexpr.exc.SourceExhausted(
                "Scripted source exhausted after {} values.".format(len(self.values)))

        if not low <= value <= high:
            raise dicexpr.exc.ScriptedValueOutOfRange(
                "Scripted value {} not in [{}, {}].".format(value, low, high))

        self.index += 1
        return value
