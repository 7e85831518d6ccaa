# pylint: disable=redefined-outer-name,missing-function-docstring,unused-argument
"""
Used for pytest fixtures and anything else test setup/teardown related.
"""
from __future__ import absolute_import, print_function

import pytest

from dicexpr.rng import ScriptedSource
from dicexpr.roll import DiceTerm, DropCount, Explode, MultiRoll, Options, Reroll


@pytest.fixture
def f_scripted():
    """
    Factory for a ScriptedSource, call it with the rolls to replay.
    """
    yield lambda *values: ScriptedSource(values)


@pytest.fixture
def f_options():
    """
    Options with every field set.
    """
    yield Options(
        drop_lowest=DropCount(1),
        drop_highest=DropCount(1),
        reroll=Reroll(1),
        explode=Explode('max', cap=2),
        advantage=MultiRoll(20, 2),
        disadvantage=MultiRoll(12, 3),
    )


@pytest.fixture
def f_term():
    yield DiceTerm(sign=1, number=4, sides=6, inline_drop_lowest=1)
