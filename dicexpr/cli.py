"""
Command line entry point. To invoke from root:
    python -m dicexpr.cli "2d6+1d20+3" --seed=123

Output on success:
    seed=<n>                    Only when no --seed was given.
    Roll <expression> = <total>
    Parts: <part> <part> ...
"""
from __future__ import absolute_import, print_function
import logging
import sys

import dicexpr.exc
import dicexpr.parse
import dicexpr.roll
import dicexpr.util
from dicexpr.rng import NumpySource


def main(argv=None):
    """
    Parse the arguments, roll the expression and print the result.

    Returns:
        The exit status, 0 on success and 1 on any error.
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        args = dicexpr.parse.make_parser().parse_args(argv)
    except dicexpr.exc.ArgumentHelpError as exc:
        print(exc)
        return 0
    except dicexpr.exc.ArgumentParseError as exc:
        print("Error: {}. Use --help for usage tips.".format(exc), file=sys.stderr)
        return 1

    dicexpr.util.init_logging()
    log = logging.getLogger('dicexpr.cli')

    seed = args.seed
    if seed is None:
        seed = dicexpr.util.generate_seed()
        print("seed={}".format(seed))

    options = None
    try:
        options = dicexpr.parse.options_from_args(args)
        total, parts = dicexpr.roll.evaluate(args.spec, options, NumpySource(seed))
    except dicexpr.exc.DiceException as exc:
        dicexpr.exc.write_log(exc, log, expression=args.spec, options=options)
        print("Error: {}".format(exc), file=sys.stderr)
        return 1

    log.info("Rolled %s with seed %d = %d", args.spec, seed, total)
    separator = dicexpr.util.get_config('output', 'separator', default=' ')
    print("Roll {} = {}".format(args.spec, total))
    print("Parts: " + separator.join(parts))

    return 0


if __name__ == "__main__":
    sys.exit(main())
