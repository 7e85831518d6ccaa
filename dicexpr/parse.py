"""
Everything related to parsing command line arguments into Options.
"""
from __future__ import absolute_import, print_function

import argparse
import logging
from argparse import RawDescriptionHelpFormatter as RawHelp

import dicexpr.exc
from dicexpr.roll import EXPLODE_MAX, DropCount, Explode, MultiRoll, Options, Reroll

DESCRIPTION = """Roll a dice expression and show how every term was rolled.

Expression examples:
    "2d6+1d20+3"
    "4d6dl1"                Roll 4d6 and drop the lowest.
    "d%+10"                 Percentile die, same as 1d100.

Examples:
    dicexpr "2d6+1d20+3" --seed=123
    dicexpr "4d6dl1" --dl=1
    dicexpr "3d6" --rrlte=1 --explode=max,2
    dicexpr "d20+5" --adv=20,2
    dicexpr -- "-d4+2"      Use -- when the expression starts with a sign.
"""


class ThrowArggumentParser(argparse.ArgumentParser):
    """
    ArgumentParser subclass that does NOT terminate the program.
    """
    def print_help(self, file=None):  # pylint: disable=redefined-builtin
        raise dicexpr.exc.ArgumentHelpError(self.format_help())

    def error(self, message):
        raise dicexpr.exc.ArgumentParseError(message)

    def exit(self, status=0, message=None):
        """
        Suppress default exit behaviour.
        """
        raise dicexpr.exc.ArgumentParseError(message)


def non_negative(text):
    """ Argument type for counts. """
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError("Expected an integer, got: " + text)
    if value < 0:
        raise argparse.ArgumentTypeError("Expected an integer >= 0, got: " + text)

    return value


def explode_spec(text):
    """
    Argument type for explode: 'max' or N, optionally followed by ',cap'.

    Returns:
        (threshold, cap)
    """
    threshold, _, cap = text.partition(',')
    if threshold != EXPLODE_MAX:
        try:
            threshold = int(threshold)
        except ValueError:
            raise argparse.ArgumentTypeError("Bad explode value: " + threshold)

    return threshold, non_negative(cap) if cap else 0


def multi_roll_spec(text):
    """
    Argument type for adv and dis: 'm,times'.

    Returns:
        (sides, times)
    """
    try:
        sides, times = [int(x) for x in text.split(',')]
    except ValueError:
        raise argparse.ArgumentTypeError("Bad value: {} (expected m,times)".format(text))

    return sides, times


def make_parser():
    """
    Returns the command line parser.
    """
    parser = ThrowArggumentParser(prog='dicexpr', description=DESCRIPTION, formatter_class=RawHelp)
    parser.add_argument('spec', help='The dice expression to roll.')
    parser.add_argument('--seed', type=int, help='Set custom RNG seed.')
    parser.add_argument('--dl', type=non_negative, help='Drop lowest n of every dice term.')
    parser.add_argument('--dh', type=non_negative, help='Drop highest n of every dice term.')
    parser.add_argument('--rrlte', type=int, help='Reroll values <= x once per die.')
    parser.add_argument('--explode', type=explode_spec, metavar='V[,CAP]',
                        help='Explode on "max" or v with optional cap per die.')
    parser.add_argument('--adv', type=multi_roll_spec, metavar='M,TIMES',
                        help="Advantage on single die terms with sides m, roll 'times' and keep best.")
    parser.add_argument('--dis', type=multi_roll_spec, metavar='M,TIMES',
                        help='Disadvantage, keeps worst.')

    return parser


def options_from_args(args):
    """
    Build the Options for an evaluation from the parsed arguments.

    Raises:
        InvalidOption: A value was accepted by the parser but is not a valid option.

    Returns:
        An Options object.
    """
    opts = Options()
    if args.dl is not None:
        opts.drop_lowest = DropCount(args.dl)
    if args.dh is not None:
        opts.drop_highest = DropCount(args.dh)
    if args.rrlte is not None:
        opts.reroll = Reroll(args.rrlte)
    if args.explode is not None:
        opts.explode = Explode(*args.explode)
        if opts.explode.unbounded:
            logging.getLogger(__name__).warning(
                "Explode on %s with no cap will never stop exploding.", opts.explode.threshold)
    if args.adv is not None:
        opts.advantage = MultiRoll(*args.adv)
    if args.dis is not None:
        opts.disadvantage = MultiRoll(*args.dis)

    return opts
