"""
Dice package for the combat tracker.

Contains the dice notation engine, the advantage/disadvantage/critical
roll modifier, the bounded roll log and the roller that ties them together.
"""

from .dice_parser import (
    DiceGroupResult,
    DiceTerm,
    DieResult,
    ModifierTerm,
    ParsedNotation,
    RandomSource,
    RollResult,
    evaluate_notation,
    is_valid_notation,
    max_roll,
    min_roll,
    parse_notation,
    roll_notation,
)
from .dice_roller import DiceRoller, RollOutcome, RollRequest
from .roll_log import RollEntry, RollLog
from .roll_modifier import (
    RollModifier,
    apply_roll_modifier,
    detect_critical,
    double_dice,
    has_d20,
)

__all__ = [
    "DiceGroupResult",
    "DiceRoller",
    "DiceTerm",
    "DieResult",
    "ModifierTerm",
    "ParsedNotation",
    "RandomSource",
    "RollEntry",
    "RollLog",
    "RollModifier",
    "RollOutcome",
    "RollRequest",
    "RollResult",
    "apply_roll_modifier",
    "detect_critical",
    "double_dice",
    "evaluate_notation",
    "has_d20",
    "is_valid_notation",
    "max_roll",
    "min_roll",
    "parse_notation",
    "roll_notation",
]
