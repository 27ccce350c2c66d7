"""
Roll modifier module for the combat tracker.

Rewrites a base notation for advantage, disadvantage or critical damage
before it reaches the dice parser, and classifies natural 20 / natural 1
results from the dice that were actually used.
"""

import re
from collections.abc import Iterable

from catchery import log_debug
from pydantic import BaseModel, Field

from combat_tracker.core.constants import CriticalResult, RollCategory, RollMode
from combat_tracker.dice.dice_parser import DiceGroupResult, RollResult

# A lone d20 term: 'd20' or '1d20', not '11d20' or 'd200'.
SINGLE_D20_PATTERN = re.compile(r"(?<!\d)1?d20(?!\d)", re.IGNORECASE)
# Any d20 term, used to decide whether advantage can apply at all.
ANY_D20_PATTERN = re.compile(r"d20(?!\d)", re.IGNORECASE)
# Any dice term with its (possibly implicit) count.
DICE_COUNT_PATTERN = re.compile(r"(?<!\d)(\d*)d(\d+|%)", re.IGNORECASE)

ADVANTAGE_TERM = "2d20kh1"
DISADVANTAGE_TERM = "2d20kl1"
CRITICAL_LABEL_SUFFIX = " (Critical)"


class RollModifier(BaseModel):
    """The notation actually rolled and the suffix for its label."""

    notation: str = Field(
        description="Notation after the roll mode has been applied.",
    )
    label_suffix: str = Field(
        default="",
        description="Text appended to the roll's display name.",
    )


def has_d20(notation: str) -> bool:
    """
    Checks whether a notation contains a d20 term.

    Args:
        notation (str): The dice notation.

    Returns:
        bool: True if any d20 term is present.

    """
    return bool(ANY_D20_PATTERN.search(notation))


def double_dice(notation: str) -> str:
    """
    Doubles the die count of every dice term, leaving flat modifiers alone.

    Args:
        notation (str): The dice notation, e.g. "2d6+3".

    Returns:
        str: The notation with doubled dice, e.g. "4d6+3".

    """

    def _double(match: re.Match[str]) -> str:
        count = int(match.group(1)) if match.group(1) else 1
        return f"{count * 2}d{match.group(2)}"

    return DICE_COUNT_PATTERN.sub(_double, notation)


def apply_roll_modifier(
    notation: str,
    category: RollCategory,
    mode: RollMode,
) -> RollModifier:
    """
    Rewrites a notation according to the requested roll mode.

    Advantage and disadvantage only touch d20 rolls and never damage;
    critical doubling only touches damage. Any other combination passes
    the notation through unchanged.

    Args:
        notation (str): The base dice notation.
        category (RollCategory): What the roll is for.
        mode (RollMode): How the roll should be modified.

    Returns:
        RollModifier: The final notation and label suffix.

    """
    if mode in (RollMode.ADVANTAGE, RollMode.DISADVANTAGE):
        if category is RollCategory.DAMAGE or not has_d20(notation):
            log_debug(
                f"Ignoring {mode} for {category} roll",
                {"notation": notation},
            )
            return RollModifier(notation=notation)
        replacement = ADVANTAGE_TERM if mode is RollMode.ADVANTAGE else DISADVANTAGE_TERM
        return RollModifier(notation=SINGLE_D20_PATTERN.sub(replacement, notation))

    if mode is RollMode.CRIT:
        if category is not RollCategory.DAMAGE:
            log_debug(
                f"Ignoring {mode} for {category} roll",
                {"notation": notation},
            )
            return RollModifier(notation=notation)
        return RollModifier(
            notation=double_dice(notation),
            label_suffix=CRITICAL_LABEL_SUFFIX,
        )

    return RollModifier(notation=notation)


def detect_critical(
    rolled: RollResult | Iterable[DiceGroupResult],
    category: RollCategory,
) -> CriticalResult | None:
    """
    Classifies a roll as a natural 20 or natural 1.

    Only the first d20 group is inspected, and only dice that were used in
    the total: a 20 dropped by disadvantage is not a critical.

    Args:
        rolled (RollResult | Iterable[DiceGroupResult]): The evaluated roll.
        category (RollCategory): What the roll was for.

    Returns:
        CriticalResult | None: The natural roll tag, if any.

    """
    if not category.checks_for_critical:
        return None
    groups = rolled.groups if isinstance(rolled, RollResult) else rolled
    for group in groups:
        if group.term.sides != 20:
            continue
        for die in group.used_dice:
            if die.value == 20:
                return CriticalResult.NAT20
            if die.value == 1:
                return CriticalResult.NAT1
        return None
    return None
