# pylint: disable=redefined-outer-name,missing-function-docstring,unused-argument
"""
Tests for dicexpr.exc
"""
from __future__ import absolute_import, print_function

import mock

import dicexpr.exc
from dicexpr.roll import Options, Reroll


def test_dice_exception_reply():
    error = dicexpr.exc.DiceException("An exception happened :(", lvl='info')
    assert str(error) == "An exception happened :("
    assert error.log_level == 'info'


def test_eval_error_hierarchy():
    assert issubclass(dicexpr.exc.ParseError, dicexpr.exc.EvalError)
    assert issubclass(dicexpr.exc.UnrecognizedTerm, dicexpr.exc.ParseError)
    assert issubclass(dicexpr.exc.ConsecutiveSigns, dicexpr.exc.EvalError)
    assert issubclass(dicexpr.exc.EvalError, dicexpr.exc.UserException)
    assert issubclass(dicexpr.exc.SourceExhausted, dicexpr.exc.InternalException)


def test_eval_error_messages():
    assert str(dicexpr.exc.EmptyExpression()) == "Empty expression."
    assert str(dicexpr.exc.TrailingSign()) == "Expression cannot end with a sign"
    assert str(dicexpr.exc.EmptyTerm()) == "Empty term"
    assert str(dicexpr.exc.InvalidDiceCount(0)) == "Dice count must be >= 1."
    assert str(dicexpr.exc.InvalidSideCount(1)) == "Die sides must be >= 2."
    assert str(dicexpr.exc.InvalidDropCount(4, 4)) == "Drop count must be >= 0 and < dice count (4 >= 4)."


def test_consecutive_signs():
    error = dicexpr.exc.ConsecutiveSigns(3)
    assert error.position == 3
    assert str(error) == "Expression has consecutive signs at position 3"


def test_unrecognized_term():
    error = dicexpr.exc.UnrecognizedTerm('4x6')
    assert error.text == '4x6'
    assert str(error) == "Bad term: 4x6"


def test_internal_exception_level():
    assert dicexpr.exc.SourceExhausted("empty").log_level == 'exception'


def test_log_format():
    assert dicexpr.exc.log_format(expression='2d6+abc') == "Failed to evaluate: 2d6+abc"

    expect = """Failed to evaluate: 2d6
    Options: Options(drop_lowest=None, drop_highest=None, reroll=Reroll(lte=1), explode=None, advantage=None, disadvantage=None)"""
    assert dicexpr.exc.log_format(expression='2d6', options=Options(reroll=Reroll(1))) == expect


def test_write_log():
    log = mock.Mock()
    error = dicexpr.exc.UnrecognizedTerm('abc')
    dicexpr.exc.write_log(error, log, expression='2d6+abc')
    expect = """
UnrecognizedTerm: Bad term: abc
====================
Failed to evaluate: 2d6+abc"""
    log.info.assert_called_with(expect)


def test_write_log_internal():
    log = mock.Mock()
    error = dicexpr.exc.SourceExhausted("Scripted source exhausted after 0 values.")
    dicexpr.exc.write_log(error, log, expression='d6')
    assert log.exception.called
    assert not log.info.called
