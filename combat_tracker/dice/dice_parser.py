"""
Dice parser module for the combat tracker.

Parses dice expressions such as "2d6+3" or "2d20kh1+5" into terms, rolls
them against an injectable random source, and reports the total together with
a per-die breakdown in which dice dropped by keep-highest/keep-lowest are
retained but excluded from the sum.
"""

from __future__ import annotations

import random
import re
from collections.abc import Callable
from typing import Any, Protocol

from catchery import log_debug, log_warning
from pydantic import BaseModel, Field

from combat_tracker.core.constants import (
    MAX_DICE_COUNT,
    MAX_DICE_SIDES,
    CriticalResult,
)
from combat_tracker.core.error_handling import InvalidNotation


class RandomSource(Protocol):
    """Anything exposing random.Random's randint, e.g. a seeded Random."""

    def randint(self, a: int, b: int) -> int: ...


# A term is either an integer modifier or NdS with an optional keep suffix.
DICE_TERM_PATTERN = re.compile(
    r"^(?P<count>\d*)d(?P<sides>\d+|%)(?:k(?P<keep>[hl]?)(?P<keep_count>\d*))?$"
)
MODIFIER_PATTERN = re.compile(r"^\d+$")
OPERATOR_SPLIT = re.compile(r"([+-])")


class KeepRule(BaseModel):
    """Which dice of a group count towards the total."""

    highest: bool = Field(
        description="Keep the highest dice when True, the lowest otherwise.",
    )
    count: int = Field(
        description="How many dice are kept.",
        ge=1,
    )

    def __str__(self) -> str:
        return f"k{'h' if self.highest else 'l'}{self.count}"


class DiceTerm(BaseModel):
    """A group of identical dice, e.g. the '2d20kh1' in '2d20kh1+5'."""

    sign: int = Field(
        default=1,
        description="+1 when the group is added, -1 when subtracted.",
    )
    count: int = Field(
        description="Number of dice rolled.",
        ge=1,
        le=MAX_DICE_COUNT,
    )
    sides: int = Field(
        description="Number of faces on each die.",
        ge=1,
        le=MAX_DICE_SIDES,
    )
    keep: KeepRule | None = Field(
        default=None,
        description="Optional keep-highest / keep-lowest rule.",
    )

    def __str__(self) -> str:
        keep = str(self.keep) if self.keep is not None else ""
        return f"{self.count}d{self.sides}{keep}"


class ModifierTerm(BaseModel):
    """A flat integer added to or subtracted from the total."""

    sign: int = Field(
        default=1,
        description="+1 when the value is added, -1 when subtracted.",
    )
    value: int = Field(
        description="Absolute value of the modifier.",
        ge=0,
    )

    def __str__(self) -> str:
        return str(self.value)


class ParsedNotation(BaseModel):
    """A dice expression broken down into its ordered terms."""

    notation: str = Field(
        description="The expression as it was given.",
    )
    terms: list[DiceTerm | ModifierTerm] = Field(
        default_factory=list,
        description="Terms in the order they appear.",
    )

    @property
    def dice_terms(self) -> list[DiceTerm]:
        return [term for term in self.terms if isinstance(term, DiceTerm)]

    @property
    def modifier(self) -> int:
        """Net flat modifier of the expression."""
        return sum(
            term.sign * term.value
            for term in self.terms
            if isinstance(term, ModifierTerm)
        )


class DieResult(BaseModel):
    """A single die as it landed."""

    value: int = Field(
        description="Face value shown by the die.",
    )
    sides: int = Field(
        description="Number of faces on the die.",
    )
    used: bool = Field(
        default=True,
        description="Whether the die counts towards the total.",
    )

    def __str__(self) -> str:
        return f"{self.value}" if self.used else f"{self.value}d"


class DiceGroupResult(BaseModel):
    """All dice rolled for one dice term, in roll order."""

    term: DiceTerm = Field(
        description="The term these dice were rolled for.",
    )
    dice: list[DieResult] = Field(
        default_factory=list,
        description="Every die rolled for the term, dropped dice included.",
    )

    @property
    def used_dice(self) -> list[DieResult]:
        return [die for die in self.dice if die.used]

    @property
    def subtotal(self) -> int:
        """Signed sum of the dice that count towards the total."""
        return self.term.sign * sum(die.value for die in self.used_dice)

    def describe(self) -> str:
        """
        Returns the bracketed breakdown of the group, e.g. '[18, 7d]'.

        Returns:
            str: Every die in roll order, dropped dice suffixed with 'd'.

        """
        return "[" + ", ".join(str(die) for die in self.dice) + "]"


class RollResult(BaseModel):
    """Outcome of evaluating a dice expression."""

    notation: str = Field(
        description="The expression that was evaluated.",
    )
    total: int = Field(
        description="Sum of the used dice plus modifiers.",
    )
    output: str = Field(
        description="Human readable per-die breakdown ending with the total.",
    )
    groups: list[DiceGroupResult] = Field(
        default_factory=list,
        description="Per-term dice results, in expression order.",
    )
    critical: CriticalResult | None = Field(
        default=None,
        description="Natural 20 / natural 1 tag, only set for non-damage rolls.",
    )

    @property
    def rolls(self) -> list[int]:
        """Face values of every die rolled, in roll order."""
        return [die.value for group in self.groups for die in group.dice]

    def is_critical(self) -> bool:
        """Determines if the roll is a natural 20."""
        return self.critical is CriticalResult.NAT20

    def is_fumble(self) -> bool:
        """Determines if the roll is a natural 1."""
        return self.critical is CriticalResult.NAT1


# ---- Parsing ----


def _normalize(notation: Any) -> str:
    if not isinstance(notation, str):
        raise InvalidNotation(notation, "notation must be a string")
    expr = re.sub(r"\s+", "", notation).lower()
    if not expr:
        raise InvalidNotation(notation, "empty expression")
    return expr


def _parse_term(notation: str, token: str, sign: int) -> DiceTerm | ModifierTerm:
    if MODIFIER_PATTERN.match(token):
        return ModifierTerm(sign=sign, value=int(token))

    match = DICE_TERM_PATTERN.match(token)
    if not match:
        raise InvalidNotation(notation, f"unrecognized term '{token}'")

    count = int(match.group("count")) if match.group("count") else 1
    sides_str = match.group("sides")
    sides = 100 if sides_str == "%" else int(sides_str)

    if count < 1:
        raise InvalidNotation(notation, f"dice count must be positive, got {count}")
    if count > MAX_DICE_COUNT:
        raise InvalidNotation(
            notation, f"too many dice: {count} (limit: {MAX_DICE_COUNT})"
        )
    if sides < 1:
        raise InvalidNotation(notation, f"dice sides must be positive, got {sides}")
    if sides > MAX_DICE_SIDES:
        raise InvalidNotation(
            notation, f"too many sides: {sides} (limit: {MAX_DICE_SIDES})"
        )

    keep: KeepRule | None = None
    if match.group("keep") is not None:
        keep_count = int(match.group("keep_count")) if match.group("keep_count") else 1
        if not 1 <= keep_count <= count:
            raise InvalidNotation(
                notation, f"cannot keep {keep_count} of {count} dice"
            )
        keep = KeepRule(highest=match.group("keep") != "l", count=keep_count)

    return DiceTerm(sign=sign, count=count, sides=sides, keep=keep)


def parse_notation(notation: str) -> ParsedNotation:
    """
    Parses a dice expression into its terms.

    Args:
        notation (str): Dice expression like "1d20+5", "2d20kh1" or "8d8-2".

    Returns:
        ParsedNotation: The ordered terms of the expression.

    Raises:
        InvalidNotation: If the expression is malformed or exceeds the limits.

    """
    expr = _normalize(notation)
    tokens = OPERATOR_SPLIT.split(expr)

    terms: list[DiceTerm | ModifierTerm] = []
    sign = 1
    # Leading sign, e.g. "-1+d4" splits into ['', '-', '1', '+', 'd4'].
    if tokens[0] == "" and len(tokens) > 1:
        sign = -1 if tokens[1] == "-" else 1
        tokens = tokens[2:]

    for position, token in enumerate(tokens):
        if position % 2 == 1:
            sign = -1 if token == "-" else 1
            continue
        if token == "":
            raise InvalidNotation(notation, "missing term around operator")
        terms.append(_parse_term(notation, token, sign))

    if not terms:
        raise InvalidNotation(notation, "no terms found")
    return ParsedNotation(notation=notation, terms=terms)


def is_valid_notation(notation: str) -> bool:
    """
    Checks whether a dice expression can be parsed, without rolling it.

    Args:
        notation (str): The expression to check.

    Returns:
        bool: True if the expression is valid.

    """
    try:
        parse_notation(notation)
    except InvalidNotation:
        return False
    return True


# ---- Rolling ----


def _roll_individual_dice(rng: RandomSource) -> Callable[[int, int], list[int]]:
    def action(num: int, sides: int) -> list[int]:
        return [rng.randint(1, sides) for _ in range(num)]

    return action


def _assume_min_individual_dice(num: int, sides: int) -> list[int]:
    return [1] * num


def _assume_max_individual_dice(num: int, sides: int) -> list[int]:
    return [sides] * num


def _apply_keep(term: DiceTerm, values: list[int]) -> list[DieResult]:
    """Marks the dice dropped by the term's keep rule as unused."""
    kept: set[int] = set(range(len(values)))
    if term.keep is not None:
        # Among equal faces the earliest-rolled die is kept.
        ranked = sorted(
            range(len(values)),
            key=lambda i: (-values[i] if term.keep.highest else values[i], i),
        )
        kept = set(ranked[: term.keep.count])
    return [
        DieResult(value=value, sides=term.sides, used=index in kept)
        for index, value in enumerate(values)
    ]


def _describe(parsed: ParsedNotation, groups: list[DiceGroupResult], total: int) -> str:
    parts: list[str] = []
    group_iter = iter(groups)
    for position, term in enumerate(parsed.terms):
        if term.sign < 0:
            parts.append("-")
        elif position > 0:
            parts.append("+")
        if isinstance(term, DiceTerm):
            parts.append(next(group_iter).describe())
        else:
            parts.append(str(term))
    expr = re.sub(r"\s+", "", parsed.notation)
    return f"{expr}: {''.join(parts)} = {total}"


def _evaluate(
    parsed: ParsedNotation,
    dice_action: Callable[[int, int], list[int]],
) -> RollResult:
    groups: list[DiceGroupResult] = []
    for term in parsed.dice_terms:
        values = dice_action(term.count, term.sides)
        groups.append(DiceGroupResult(term=term, dice=_apply_keep(term, values)))
        log_debug(f"Rolled {term}", {"values": values})

    total = sum(group.subtotal for group in groups) + parsed.modifier
    return RollResult(
        notation=parsed.notation,
        total=total,
        output=_describe(parsed, groups, total),
        groups=groups,
    )


def roll_notation(notation: str, rng: RandomSource | None = None) -> RollResult:
    """
    Parses and rolls a dice expression.

    Args:
        notation (str): The dice expression to roll.
        rng (RandomSource | None): Random source. Defaults to the random module.

    Returns:
        RollResult: Total, breakdown and per-die results.

    Raises:
        InvalidNotation: If the expression is malformed.

    """
    parsed = parse_notation(notation)
    return _evaluate(parsed, _roll_individual_dice(rng or random))


def evaluate_notation(
    notation: str,
    rng: RandomSource | None = None,
) -> RollResult | InvalidNotation:
    """
    Evaluates a dice expression, reporting failures as a value.

    Args:
        notation (str): The dice expression to roll.
        rng (RandomSource | None): Random source. Defaults to the random module.

    Returns:
        RollResult | InvalidNotation:
            The roll outcome, or the error carrying the original notation.

    """
    try:
        return roll_notation(notation, rng)
    except InvalidNotation as e:
        log_warning(
            f"Could not parse dice notation: {notation!r}",
            {"notation": notation, "reason": e.reason},
        )
        return e


def _extreme_roll(notation: str, highest: bool) -> int:
    try:
        parsed = parse_notation(notation)
    except InvalidNotation as e:
        log_warning(
            f"Could not parse dice notation: {notation!r}",
            {"notation": notation, "reason": e.reason},
        )
        return 0
    total = parsed.modifier
    for term in parsed.dice_terms:
        # Subtracted groups reach the extreme from the opposite face.
        want_high = highest == (term.sign > 0)
        action = _assume_max_individual_dice if want_high else _assume_min_individual_dice
        dice = _apply_keep(term, action(term.count, term.sides))
        total += term.sign * sum(die.value for die in dice if die.used)
    return total


def min_roll(notation: str) -> int:
    """
    Gets the minimum possible result for a dice expression.

    Args:
        notation (str): The dice expression to analyze.

    Returns:
        int: The minimum result, or 0 for malformed notation.

    """
    return _extreme_roll(notation, highest=False)


def max_roll(notation: str) -> int:
    """
    Gets the maximum possible result for a dice expression.

    Args:
        notation (str): The dice expression to analyze.

    Returns:
        int: The maximum result, or 0 for malformed notation.

    """
    return _extreme_roll(notation, highest=True)
