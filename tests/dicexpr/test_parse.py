# pylint: disable=redefined-outer-name,missing-function-docstring,unused-argument
"""
Test command line parsing into Options
"""
from __future__ import absolute_import, print_function
import logging

import pytest

import dicexpr.exc
import dicexpr.parse
from dicexpr.roll import DropCount, Explode, MultiRoll, Options, Reroll


@pytest.fixture
def f_parser():
    yield dicexpr.parse.make_parser()


def test_throw_argument_parser():
    parser = dicexpr.parse.ThrowArggumentParser()
    with pytest.raises(dicexpr.exc.ArgumentHelpError):
        parser.print_help()
    with pytest.raises(dicexpr.exc.ArgumentParseError):
        parser.error('blank')
    with pytest.raises(dicexpr.exc.ArgumentParseError):
        parser.exit()


def test_make_parser_throws(f_parser):
    with pytest.raises(dicexpr.exc.ArgumentParseError):
        f_parser.parse_args([])
    with pytest.raises(dicexpr.exc.ArgumentHelpError):
        f_parser.parse_args(['--help'])
    with pytest.raises(dicexpr.exc.ArgumentParseError):
        f_parser.parse_args(['2d6', '--invalidflag=1'])
    with pytest.raises(dicexpr.exc.ArgumentParseError):
        f_parser.parse_args(['2d6', '--dl=-1'])
    with pytest.raises(dicexpr.exc.ArgumentParseError):
        f_parser.parse_args(['2d6', '--seed=abc'])
    with pytest.raises(dicexpr.exc.ArgumentParseError):
        f_parser.parse_args(['2d6', '--explode=min'])
    with pytest.raises(dicexpr.exc.ArgumentParseError):
        f_parser.parse_args(['2d6', '--explode=max,x'])
    with pytest.raises(dicexpr.exc.ArgumentParseError):
        f_parser.parse_args(['d20', '--adv=20'])


def test_make_parser_help(f_parser):
    with pytest.raises(dicexpr.exc.ArgumentHelpError) as exc_info:
        f_parser.parse_args(['-h'])
    assert 'usage: dicexpr' in str(exc_info.value)
    assert '--explode' in str(exc_info.value)


def test_make_parser(f_parser):
    args = f_parser.parse_args(['2d6', '--seed=5', '--dl=1', '--dh=2', '--rrlte=1',
                                '--explode=max,2', '--adv=20,2', '--dis=12,3'])
    assert args.spec == '2d6'
    assert args.seed == 5
    assert args.dl == 1
    assert args.dh == 2
    assert args.rrlte == 1
    assert args.explode == ('max', 2)
    assert args.adv == (20, 2)
    assert args.dis == (12, 3)


def test_make_parser_leading_sign(f_parser):
    args = f_parser.parse_args(['--seed=1', '--', '-d4+2'])
    assert args.spec == '-d4+2'


def test_explode_spec():
    assert dicexpr.parse.explode_spec('max') == ('max', 0)
    assert dicexpr.parse.explode_spec('5') == (5, 0)
    assert dicexpr.parse.explode_spec('5,3') == (5, 3)


def test_options_from_args(f_parser):
    args = f_parser.parse_args(['2d6', '--dl=1', '--dh=2', '--rrlte=1',
                                '--explode=max,2', '--adv=20,2', '--dis=12,3'])
    expect = Options(
        drop_lowest=DropCount(1),
        drop_highest=DropCount(2),
        reroll=Reroll(1),
        explode=Explode('max', 2),
        advantage=MultiRoll(20, 2),
        disadvantage=MultiRoll(12, 3),
    )
    assert dicexpr.parse.options_from_args(args) == expect


def test_options_from_args_empty(f_parser):
    assert dicexpr.parse.options_from_args(f_parser.parse_args(['2d6'])) == Options()


def test_options_from_args_raises(f_parser):
    with pytest.raises(dicexpr.exc.InvalidOption):
        dicexpr.parse.options_from_args(f_parser.parse_args(['d20', '--adv=20,1']))


def test_options_from_args_unbounded_warns(f_parser, caplog):
    with caplog.at_level(logging.WARNING, logger='dicexpr.parse'):
        opts = dicexpr.parse.options_from_args(f_parser.parse_args(['d6', '--explode=1']))
    assert opts.explode == Explode(1, 0)
    assert 'will never stop exploding' in caplog.text
