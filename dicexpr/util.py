"""
Utility functions: configuration, logging and seeds.
"""
from __future__ import absolute_import, print_function
import datetime
import logging
import logging.handlers
import logging.config
import math
import os

import yaml
try:
    from yaml import CLoader as Loader
except ImportError:  # pragma: no cover
    from yaml import Loader

MAX_SEED = int(math.pow(2, 32) - 1)


class ReprMixin():
    """
    Generate a repr from the attributes named in _repr_keys.
    """
    _repr_keys = []

    def __repr__(self):
        kwargs = ['{}={!r}'.format(key, getattr(self, key)) for key in self._repr_keys]
        return '{}({})'.format(self.__class__.__name__, ', '.join(kwargs))


class ModFormatter(logging.Formatter):
    """
    Add a relmod key to record dict.
    This key tracks a module relative this project' root.
    """
    def format(self, record):
        relmod = record.__dict__['pathname'].replace(ROOT_DIR + os.path.sep, '')
        record.__dict__['relmod'] = relmod[:-3]
        return super().format(record)


def rel_to_abs(*path_parts):
    """
    Convert an internally relative path to an absolute one.
    """
    return os.path.join(ROOT_DIR, *path_parts)


def get_config(*keys, default=None):
    """
    Return keys straight from yaml config.

    Kwargs
        Default if provided, will be returned if config entry or file not found.

    Raises
        KeyError: No such key in the config.
        FileNotFoundError: Failed to load the configuration file.
    """
    try:
        with open(YAML_FILE) as fin:
            conf = yaml.load(fin, Loader=Loader)
    except FileNotFoundError:
        if default is not None:
            return default
        raise

    try:
        for key in keys:
            conf = conf[key]
    except KeyError:
        if default is not None:
            return default
        raise

    return conf


def init_logging():  # pragma: no cover
    """
    Initialize project wide logging. See config file for details and reference on module.

     - On every start the file logs are rolled over.
     - This must be the first invocation on startup to set up logging.

    Raises:
        FileNotFoundError: Failed to load the configuration file.
    """
    log_file = rel_to_abs(get_config('paths', 'log_conf'))
    with open(log_file) as fin:
        lconf = yaml.load(fin, Loader=Loader)

    for handler in lconf['handlers']:
        try:
            os.makedirs(os.path.dirname(lconf['handlers'][handler]['filename']))
        except (OSError, KeyError):
            pass

    logging.config.dictConfig(lconf)

    for handler in logging.getLogger('dicexpr').handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            handler.doRollover()


def generate_seed():
    """
    Generate a random seed number based on current time.
    Returns an integer.
    """
    now = datetime.datetime.now(datetime.timezone.utc)
    seconds = math.floor(now.timestamp())
    micro = now.microsecond

    while micro > 1:
        val = (micro % 10) + 1
        seconds *= val
        micro //= 10

    return int(seconds % MAX_SEED)


def normalize_seed(seed=None):
    """
    Bring a seed into the range accepted by the random sources.

    Args:
        seed: The seed to use, if not passed derive from timestamp.
    """
    if seed is None:
        seed = generate_seed()

    return int(seed % MAX_SEED)


ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
YAML_FILE = rel_to_abs('data', 'config.yml')
