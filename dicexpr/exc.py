"""
Common exceptions.

Every error raised while evaluating an expression subclasses EvalError,
the first one found aborts the whole expression.
"""
from __future__ import absolute_import, print_function


class DiceException(Exception):
    """
    All project exceptions subclass this.
    """
    def __init__(self, msg=None, lvl='info'):
        super().__init__(msg)
        self.log_level = lvl


class UserException(DiceException):
    """
    Exception occurred usually due to user error.

    Not unexpected but can indicate a problem.
    """


class ArgumentParseError(UserException):
    """ Error raised on failure to parse arguments. """


class ArgumentHelpError(UserException):
    """ Error raised on request to print help for command. """


class InvalidOption(UserException):
    """ An option was built with values that make no sense. """


class EvalError(UserException):
    """
    The expression could not be evaluated.
    """


class EmptyExpression(EvalError):
    """ Expression was empty, blank or not a string. """
    def __init__(self, msg="Empty expression."):
        super().__init__(msg)


class TrailingSign(EvalError):
    """ Expression ended with a dangling + or -. """
    def __init__(self, msg="Expression cannot end with a sign"):
        super().__init__(msg)


class ConsecutiveSigns(EvalError):
    """
    Two sign tokens in a row.

    Attributes:
        position: 1 based index of the first sign of the pair in the token sequence.
    """
    def __init__(self, position):
        super().__init__("Expression has consecutive signs at position {}".format(position))
        self.position = position


class ParseError(EvalError):
    """
    A single term failed to parse.
    """


class EmptyTerm(ParseError):
    """ Term had nothing in it after stripping whitespace. """
    def __init__(self, msg="Empty term"):
        super().__init__(msg)


class InvalidDiceCount(ParseError):
    """ Asked to roll fewer than 1 die. """
    def __init__(self, count):
        super().__init__("Dice count must be >= 1.")
        self.count = count


class InvalidSideCount(ParseError):
    """ Asked to roll a die with fewer than 2 sides. """
    def __init__(self, sides):
        super().__init__("Die sides must be >= 2.")
        self.sides = sides


class InvalidDropCount(ParseError):
    """ Inline drop would discard every die of the term. """
    def __init__(self, count, number):
        super().__init__("Drop count must be >= 0 and < dice count ({} >= {}).".format(count, number))
        self.count = count
        self.number = number


class UnrecognizedTerm(ParseError):
    """ Term did not match any known term syntax. """
    def __init__(self, text):
        super().__init__("Bad term: " + text)
        self.text = text


class InternalException(DiceException):
    """
    An internal exception that went uncaught.

    Indicates a severe problem.
    """
    def __init__(self, msg, lvl='exception'):
        super().__init__(msg, lvl)


class SourceExhausted(InternalException):
    """
    A scripted random source ran out of values.
    """


class ScriptedValueOutOfRange(InternalException):
    """
    A scripted random source held a value outside the range requested.
    """


def log_format(*, expression, options=None):
    """ Log useful information about the failed evaluation. """
    msg = "Failed to evaluate: {}".format(expression)
    if options is not None:
        msg += "\n    Options: {!r}".format(options)

    return msg


def write_log(exc, log, *, lvl='info', expression, options=None):
    """
    Log all relevant information about this evaluation.
    """
    log_func = getattr(log, getattr(exc, 'log_level', lvl))
    header = '\n{}\n{}\n'.format(exc.__class__.__name__ + ': ' + str(exc), '=' * 20)
    log_func(header + log_format(expression=expression, options=options))
