# pylint: disable=redefined-outer-name,missing-function-docstring,unused-argument
"""
Test util the grab all module.
"""
from __future__ import absolute_import, print_function
import logging
import os

import pytest
import yaml

import dicexpr.util


def test_repr_mixin():
    class Thing(dicexpr.util.ReprMixin):
        _repr_keys = ['name', 'count']

        def __init__(self):
            self.name = 'thing'
            self.count = 2

    assert repr(Thing()) == "Thing(name='thing', count=2)"


def test_modformatter_record():
    record = logging.LogRecord('dicexpr.roll', logging.INFO, dicexpr.util.rel_to_abs('dicexpr', 'roll.py'),
                               10, 'hello', None, None)
    formatter = dicexpr.util.ModFormatter('%(relmod)s %(message)s')
    assert formatter.format(record) == 'dicexpr/roll hello'
    assert record.__dict__['relmod'] == 'dicexpr/roll'


def test_get_config():
    assert dicexpr.util.get_config('paths', 'log_conf') == 'data/log.yml'
    assert dicexpr.util.get_config('output', 'separator') == ' '
    with pytest.raises(KeyError):
        dicexpr.util.get_config('zzzzz', 'not_there')


def test_get_config_default():
    assert dicexpr.util.get_config('zzzzz', 'not_there', default=True) is True


def test_get_config_missing_file(monkeypatch, tmpdir):
    monkeypatch.setattr(dicexpr.util, 'YAML_FILE', str(tmpdir.join('missing.yml')))
    assert dicexpr.util.get_config('output', 'separator', default=', ') == ', '
    with pytest.raises(FileNotFoundError):
        dicexpr.util.get_config('output', 'separator')


def test_log_config_loads():
    with open(dicexpr.util.rel_to_abs(dicexpr.util.get_config('paths', 'log_conf'))) as fin:
        lconf = yaml.safe_load(fin)

    assert lconf['version'] == 1
    assert lconf['formatters']['custom']['()'] == 'dicexpr.util.ModFormatter'
    assert 'dicexpr' in lconf['loggers']


def test_rel_to_abs():
    expect = os.path.join(dicexpr.util.ROOT_DIR, 'data', 'log.yml')
    assert dicexpr.util.rel_to_abs('data', 'log.yml') == expect


def test_generate_seed():
    seed = dicexpr.util.generate_seed()
    assert isinstance(seed, int)
    assert 0 <= seed < dicexpr.util.MAX_SEED


def test_normalize_seed():
    assert dicexpr.util.normalize_seed(5) == 5
    assert dicexpr.util.normalize_seed(dicexpr.util.MAX_SEED + 3) == 3
    assert 0 <= dicexpr.util.normalize_seed() < dicexpr.util.MAX_SEED
