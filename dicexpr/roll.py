"""
Dice expression module, evaluates expressions like 2d6+1d20-3.

Grammar, terms joined by + or -:
    d%          Percentile die, same as 1d100.
    NdMdlK      Roll N dice with M sides and drop the K lowest.
    NdM         Roll N dice with M sides.
    dM          Roll a single die with M sides.
    K           A flat constant.

Fixed Order of Evaluation for dice terms:
    Initial roll (Advantage/Disadvantage), Reroll, Explode,
    Inline Drop Lowest, Drop Lowest, Drop Highest

Logic regarding modifiers:
    Advantage and Disadvantage only touch single die terms with matching sides.
    A die is rerolled at most once, the replacement is never checked again.
    Exploded dice chain until a new roll fails the trigger or the cap is hit.
    Drops select by value from a sorted copy, rolls keep their order for display.
    Dropped values are tracked as a value -> count map, so of [3, 3, 5] dropping
    one lowest only marks a single 3.
"""
from __future__ import absolute_import, print_function
import abc
import collections
import functools
import logging
import re

import dicexpr.exc
from dicexpr.rng import NumpySource
from dicexpr.util import ReprMixin

SIGNS = ('+', '-')
EXPLODE_MAX = 'max'
IS_PERCENTILE = re.compile(r'd%', re.ASCII)
IS_DROP_DIE = re.compile(r'(\d+)d(\d+)dl(\d+)', re.ASCII)
IS_DIE = re.compile(r'(\d+)d(\d+)', re.ASCII)
IS_SINGLE_DIE = re.compile(r'd(\d+)', re.ASCII)
IS_FLAT = re.compile(r'(\d+)', re.ASCII)


class Term(ReprMixin):
    """
    One signed unit of an expression.

    Attributes:
        sign: Either 1 or -1.
    """
    _repr_keys = ['sign']

    def __init__(self, *, sign=1):
        self.sign = sign

    def __eq__(self, other):
        return type(self) is type(other) and all(
            getattr(self, key) == getattr(other, key) for key in self._repr_keys)

    @property
    def sign_char(self):
        """ The sign as it should be displayed. """
        return '-' if self.sign < 0 else '+'


class FlatTerm(Term):
    """
    A constant added to or subtracted from the total.

    Attributes:
        sign: Either 1 or -1.
        value: The non negative constant.
    """
    _repr_keys = ['sign', 'value']

    def __init__(self, *, sign=1, value=0):
        super().__init__(sign=sign)
        self.value = value

    def __str__(self):
        return '{}{}'.format(self.sign_char, self.value)

    @property
    def signed_value(self):
        """ The contribution of this term to the total. """
        return self.sign * self.value


class DiceTerm(Term):
    """
    A number of dice with the same number of sides.

    Attributes:
        sign: Either 1 or -1.
        number: How many dice to roll, at least 1.
        sides: The sides on every die, at least 2.
        inline_drop_lowest: Drop this many of the lowest rolls, always less than number.

    Raises:
        InvalidDiceCount, InvalidSideCount, InvalidDropCount
    """
    _repr_keys = ['sign', 'number', 'sides', 'inline_drop_lowest']

    def __init__(self, *, sign=1, number=1, sides=6, inline_drop_lowest=0):
        super().__init__(sign=sign)
        if number < 1:
            raise dicexpr.exc.InvalidDiceCount(number)
        if sides < 2:
            raise dicexpr.exc.InvalidSideCount(sides)
        if not 0 <= inline_drop_lowest < number:
            raise dicexpr.exc.InvalidDropCount(inline_drop_lowest, number)

        self.number = number
        self.sides = sides
        self.inline_drop_lowest = inline_drop_lowest

    def __str__(self):
        msg = '{}{}d{}'.format(self.sign_char, self.number, self.sides)
        if self.inline_drop_lowest:
            msg += 'dl{}'.format(self.inline_drop_lowest)

        return msg


def make_percentile(_, sign):
    """ d% is a single hundred sided die. """
    return DiceTerm(sign=sign, number=1, sides=100)


def make_drop_die(match, sign):
    """ NdMdlK """
    return DiceTerm(sign=sign, number=int(match.group(1)), sides=int(match.group(2)),
                    inline_drop_lowest=int(match.group(3)))


def make_die(match, sign):
    """ NdM """
    return DiceTerm(sign=sign, number=int(match.group(1)), sides=int(match.group(2)))


def make_single_die(match, sign):
    """ dM """
    return DiceTerm(sign=sign, number=1, sides=int(match.group(1)))


def make_flat(match, sign):
    """ K """
    return FlatTerm(sign=sign, value=int(match.group(1)))


# Checked top to bottom, first full match wins.
TERM_RULES = [
    (IS_PERCENTILE, make_percentile),
    (IS_DROP_DIE, make_drop_die),
    (IS_DIE, make_die),
    (IS_SINGLE_DIE, make_single_die),
    (IS_FLAT, make_flat),
]


def tokenize(expression):
    """
    Split an expression into sign tokens and term bodies.
    Whitespace is dropped, no validation is done.

    Returns:
        A list like ['2d6', '+', '1d20', '-', '3'].
    """
    tokens, buf = [], ''
    for char in expression:
        if char in SIGNS:
            if buf:
                tokens += [buf]
                buf = ''
            tokens += [char]
        elif not char.isspace():
            buf += char

    if buf:
        tokens += [buf]

    return tokens


def check_tokens(tokens):
    """
    Ensure the token sequence can be walked term by term.

    Raises:
        EmptyExpression: No tokens at all.
        TrailingSign: The last token is a sign.
        ConsecutiveSigns: Two signs follow each other.

    Returns:
        The tokens that were passed in.
    """
    if not tokens:
        raise dicexpr.exc.EmptyExpression()

    if tokens[-1] in SIGNS:
        raise dicexpr.exc.TrailingSign()

    for pos, (prev, token) in enumerate(zip(tokens[:-1], tokens[1:]), start=1):
        if prev in SIGNS and token in SIGNS:
            raise dicexpr.exc.ConsecutiveSigns(pos)

    return tokens


def parse_term(line):
    """
    Parse a single signed term, matching forms in the order of TERM_RULES.

    Raises:
        EmptyTerm: Nothing left after stripping whitespace and the sign.
        UnrecognizedTerm: No rule matched.
        InvalidDiceCount, InvalidSideCount, InvalidDropCount: A rule matched with bad values.

    Returns:
        A DiceTerm or FlatTerm.
    """
    text = ''.join(line.split()).lower()
    if not text:
        raise dicexpr.exc.EmptyTerm()

    sign = 1
    if text[0] in SIGNS:
        sign = -1 if text[0] == '-' else 1
        text = text[1:]
    if not text:
        raise dicexpr.exc.EmptyTerm()

    for regex, make_term in TERM_RULES:
        match = regex.fullmatch(text)
        if match:
            return make_term(match, sign)

    raise dicexpr.exc.UnrecognizedTerm(text)


class OptionPart(ReprMixin):
    """
    Base for the parts of Options, compares by the repr keys.
    """
    def __eq__(self, other):
        return type(self) is type(other) and all(
            getattr(self, key) == getattr(other, key) for key in self._repr_keys)


def check_count(name, value):
    """ Ensure an option value is a non negative integer. """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise dicexpr.exc.InvalidOption("{} must be an integer >= 0, got: {!r}".format(name, value))

    return value


class DropCount(OptionPart):
    """
    Drop count lowest or highest values of every dice term.

    Attributes:
        count: The number of values to drop.
    """
    _repr_keys = ['count']

    def __init__(self, count=0):
        self.count = check_count('Drop count', count)


class Reroll(OptionPart):
    """
    Reroll once every die showing lte or less.

    Attributes:
        lte: The highest value that gets rerolled.
    """
    _repr_keys = ['lte']

    def __init__(self, lte=0):
        if isinstance(lte, bool) or not isinstance(lte, int):
            raise dicexpr.exc.InvalidOption("Reroll threshold must be an integer, got: {!r}".format(lte))
        self.lte = lte


class Explode(OptionPart):
    """
    Roll an extra die whenever a die meets the trigger.

    A cap of 0 never stops the chain, with a numeric threshold of 1 or less
    every roll triggers and the evaluation will not finish.

    Attributes:
        threshold: EXPLODE_MAX to trigger on the highest face, else trigger when >= threshold.
        cap: The most extra dice one original die may add, 0 for no limit.
    """
    _repr_keys = ['threshold', 'cap']

    def __init__(self, threshold=EXPLODE_MAX, cap=0):
        if threshold != EXPLODE_MAX and (isinstance(threshold, bool) or not isinstance(threshold, int)):
            raise dicexpr.exc.InvalidOption(
                "Explode threshold must be '{}' or an integer, got: {!r}".format(EXPLODE_MAX, threshold))
        self.threshold = threshold
        self.cap = check_count('Explode cap', cap)

    @property
    def unbounded(self):
        """ True if every roll would trigger with nothing to stop the chain. """
        return self.cap == 0 and self.threshold != EXPLODE_MAX and self.threshold <= 1

    def triggers(self, value, sides):
        """ True IFF value should add another die. """
        if self.threshold == EXPLODE_MAX:
            return value >= sides

        return value >= self.threshold


class MultiRoll(OptionPart):
    """
    Roll a single die several times and keep one of them.
    Used for both advantage and disadvantage.

    Attributes:
        sides: Only single die terms with this many sides are affected.
        times: The number of times to roll, at least 2.
    """
    _repr_keys = ['sides', 'times']

    def __init__(self, sides, times=2):
        self.sides = check_count('Target sides', sides)
        if isinstance(times, bool) or not isinstance(times, int) or times < 2:
            raise dicexpr.exc.InvalidOption("Times must be an integer >= 2, got: {!r}".format(times))
        self.times = times

    def applies(self, term):
        """ True IFF the term is a single die with the targeted sides. """
        return term.number == 1 and term.sides == self.sides


class Options(OptionPart):
    """
    All the options for one evaluation. Any left as None have no effect.

    Attributes:
        drop_lowest: A DropCount applied after inline drops.
        drop_highest: A DropCount applied after drop_lowest.
        reroll: A Reroll.
        explode: An Explode.
        advantage: A MultiRoll keeping the highest roll.
        disadvantage: A MultiRoll keeping the lowest roll.
    """
    _repr_keys = ['drop_lowest', 'drop_highest', 'reroll', 'explode', 'advantage', 'disadvantage']

    def __init__(self, *, drop_lowest=None, drop_highest=None, reroll=None,
                 explode=None, advantage=None, disadvantage=None):
        self.drop_lowest = drop_lowest
        self.drop_highest = drop_highest
        self.reroll = reroll
        self.explode = explode
        self.advantage = advantage
        self.disadvantage = disadvantage


class TermResult(ReprMixin):
    """
    The rolls of a DiceTerm and everything the modifiers did to them.

    Attributes:
        term: The DiceTerm rolled.
        rolls: Every roll after explosions, in roll order. Never reordered by drops.
        samples: All rolls made for advantage or disadvantage, empty if not applied.
        dropped: Counter of value -> number of times dropped.
        rerolled: The number of dice rerolled.
        exploded: The number of dice added by explosions.
        tags: Map of display order -> tag text for modifiers that applied.
    """
    _repr_keys = ['term', 'rolls', 'dropped']

    def __init__(self, *, term, rolls=None):
        self.term = term
        self.rolls = list(rolls) if rolls else []
        self.samples = []
        self.dropped = collections.Counter()
        self.rerolled = 0
        self.exploded = 0
        self.tags = {}

    def __str__(self):
        msg = str(self.term)
        if self.tags:
            msg += ' ' + ' '.join(self.tags[key] for key in sorted(self.tags))

        return '{} [{}]={}'.format(msg, self.annotated(), self.value)

    @property
    def kept(self):
        """ The rolls that survived every drop, in roll order. """
        left = collections.Counter(self.dropped)
        kept = []
        for roll in self.rolls:
            if left[roll]:
                left[roll] -= 1
            else:
                kept += [roll]

        return kept

    @property
    def value(self):
        """ The sum of the kept rolls, ignoring the sign. """
        return sum(self.kept)

    @property
    def signed_value(self):
        """ The contribution of this term to the total. """
        return self.term.sign * self.value

    def drop(self, num, *, high=False):
        """
        Drop num of the kept values, selecting lowest or highest by value.
        Asking for more than remain drops everything left.

        Returns:
            The values dropped.
        """
        if num <= 0:
            return []

        selected = sorted(self.kept, reverse=high)[:num]
        self.dropped.update(selected)

        return selected

    def annotated(self):
        """
        Comma separated rolls with dropped occurrences wrapped in parentheses.
        Occurrences of a value are marked left to right.
        """
        left = collections.Counter(self.dropped)
        parts = []
        for roll in self.rolls:
            if left[roll]:
                left[roll] -= 1
                parts += ['({})'.format(roll)]
            else:
                parts += [str(roll)]

        return ','.join(parts)


@functools.total_ordering
class ModifyDice(abc.ABC):
    """
    Standard interface to roll or modify the rolls of a TermResult.
    Class attribute WEIGHT orders modifiers before applying.
    Class attribute TAG_ORDER orders the tags in the display string.
    """
    WEIGHT = 0
    TAG_ORDER = 0

    def __eq__(self, other):
        return self.__class__.WEIGHT == other.__class__.WEIGHT

    def __lt__(self, other):
        return self.__class__.WEIGHT < other.__class__.WEIGHT

    @abc.abstractmethod
    def modify(self, result, source):
        """
        Apply the modifier to the rolls, modifies result directly.

        Args:
            result: The TermResult of a DiceTerm.
            source: The RandomSource to draw any new rolls from.
        """
        raise NotImplementedError


class RollDice(ReprMixin, ModifyDice):
    """
    The plain initial roll of every die in the term.
    """
    WEIGHT = 0

    def modify(self, result, source):
        result.rolls = [source.roll(result.term.sides) for _ in range(result.term.number)]


class PickRoll(ReprMixin, ModifyDice):
    """
    Initial roll for advantage or disadvantage.
    Roll a single die times and keep the highest or lowest.

    Attributes:
        times: The number of samples to draw.
        highest: True keeps the highest sample, False the lowest.
    """
    WEIGHT = 0
    TAG_ORDER = 5
    _repr_keys = ['times', 'highest']

    def __init__(self, *, times=2, highest=True):
        self.times = times
        self.highest = highest

    def modify(self, result, source):
        result.samples = [source.roll(result.term.sides) for _ in range(self.times)]
        choose = max if self.highest else min
        result.rolls = [choose(result.samples)]
        result.tags[self.TAG_ORDER] = 'adv/dis'


class RerollOnce(ReprMixin, ModifyDice):
    """
    Replace every roll <= lte with a fresh roll, exactly once.

    Attributes:
        lte: The highest value rerolled.
    """
    WEIGHT = 1
    TAG_ORDER = 3
    _repr_keys = ['lte']

    def __init__(self, *, lte=0):
        self.lte = lte

    def modify(self, result, source):
        new_rolls = []
        for roll in result.rolls:
            if roll <= self.lte:
                roll = source.roll(result.term.sides)
                result.rerolled += 1
            new_rolls += [roll]

        result.rolls = new_rolls
        if result.rerolled:
            result.tags[self.TAG_ORDER] = 'rr<={} x{}'.format(self.lte, result.rerolled)


class ExplodeDice(ReprMixin, ModifyDice):
    """
    Add a die after every roll meeting the trigger, chaining on the new roll.

    Attributes:
        explode: The Explode option with threshold and cap.
    """
    WEIGHT = 2
    TAG_ORDER = 4
    _repr_keys = ['explode']

    def __init__(self, *, explode):
        self.explode = explode

    def modify(self, result, source):
        sides, cap = result.term.sides, self.explode.cap
        parts = []
        for die in result.rolls:
            parts += [die]
            chain = 0
            while self.explode.triggers(die, sides) and (not cap or chain < cap):
                die = source.roll(sides)
                parts += [die]
                chain += 1
            result.exploded += chain

        result.rolls = parts
        if result.exploded:
            result.tags[self.TAG_ORDER] = 'explode@{} x{}'.format(self.explode.threshold, result.exploded)


class DropDice(ReprMixin, ModifyDice):
    """
    Drop num of the kept rolls, lowest or highest.

    Attributes:
        num: The number of rolls to drop.
    """
    HIGH = False
    TAG = None
    _repr_keys = ['num']

    def __init__(self, *, num=1):
        self.num = num

    def modify(self, result, _):
        result.drop(self.num, high=self.HIGH)
        if self.TAG:
            result.tags[self.TAG_ORDER] = '{}{}'.format(self.TAG, self.num)


class InlineDropLowest(DropDice):
    """ The dlK suffix of a term, shown as part of the term itself. """
    WEIGHT = 3


class DropLowest(DropDice):
    """ Drop lowest option applied to every dice term. """
    WEIGHT = 4
    TAG_ORDER = 1
    TAG = 'DL'


class DropHighest(DropDice):
    """ Drop highest option applied to every dice term. """
    WEIGHT = 5
    TAG_ORDER = 2
    TAG = 'DH'
    HIGH = True


class RollPipeline(ReprMixin):
    """
    Build and apply the modifiers the options call for on each DiceTerm.

    Attributes:
        options: The Options of this evaluation.
    """
    _repr_keys = ['options']

    def __init__(self, options=None):
        self.options = options if options else Options()

    def initial_roll(self, term):
        """ The roll modifier, advantage is checked before disadvantage. """
        opts = self.options
        for pick, highest in ((opts.advantage, True), (opts.disadvantage, False)):
            if pick and pick.applies(term):
                return PickRoll(times=pick.times, highest=highest)

        return RollDice()

    def mods_for(self, term):
        """
        Returns:
            The modifiers for term sorted in order of application.
        """
        opts = self.options
        mods = [self.initial_roll(term)]
        if opts.reroll:
            mods += [RerollOnce(lte=opts.reroll.lte)]
        if opts.explode:
            mods += [ExplodeDice(explode=opts.explode)]
        if term.inline_drop_lowest:
            mods += [InlineDropLowest(num=term.inline_drop_lowest)]
        if opts.drop_lowest and opts.drop_lowest.count:
            mods += [DropLowest(num=opts.drop_lowest.count)]
        if opts.drop_highest and opts.drop_highest.count:
            mods += [DropHighest(num=opts.drop_highest.count)]

        return sorted(mods)

    def run(self, term, source):
        """
        Roll the term and apply all modifiers.

        Returns:
            A TermResult.
        """
        result = TermResult(term=term)
        for mod in self.mods_for(term):
            mod.modify(result, source)

        logging.getLogger(__name__).debug("Rolled %s: rolls %s, dropped %s",
                                          term, result.rolls, dict(result.dropped))
        return result


def evaluate_terms(expression, options=None, source=None):
    """
    Parse and roll every term of the expression in order.

    Args:
        expression: The dice expression.
        options: The Options to apply, None for no modifiers.
        source: The RandomSource to roll with, None for a fresh NumpySource.

    Raises:
        EvalError: The first problem found, nothing is returned.

    Returns:
        A list of TermResult and FlatTerm objects in source order.
    """
    if not isinstance(expression, str) or not expression:
        raise dicexpr.exc.EmptyExpression("Invalid Expression.")

    tokens = check_tokens(tokenize(expression))
    pipeline = RollPipeline(options)
    if source is None:
        source = NumpySource()

    results, pending = [], '+'
    for token in tokens:
        if token in SIGNS:
            pending = token
            continue

        term = parse_term(pending + token)
        if isinstance(term, DiceTerm):
            term = pipeline.run(term, source)
        results += [term]
        pending = '+'

    return results


def evaluate(expression, options=None, source=None):
    """
    Evaluate a complete dice expression.

    Examples:
        evaluate('2d6+1d20+3') -> (24, ['+2d6 [4,6]=10', '+1d20 [11]=11', '+3'])

    Raises:
        EvalError: The first problem found, no partial total is returned.

    Returns:
        (total, parts)
            total: The signed sum of every term.
            parts: The formatted string of each term in source order.
    """
    results = evaluate_terms(expression, options, source)
    total = sum(part.signed_value for part in results)

    return total, [str(part) for part in results]
