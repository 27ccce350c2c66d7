"""
Core system module for the combat tracker.

This module contains the fundamental components shared by the dice, combat
and encounter-building packages: ruleset constants, error types, logging
setup and small numeric helpers.
"""

from .constants import (
    DND5E_CONDITIONS,
    ROLL_LOG_CAPACITY,
    CriticalResult,
    DifficultyRating,
    NiceEnum,
    RollCategory,
    RollMode,
    SourceType,
)
from .error_handling import (
    EmptyRoster,
    InvalidNotation,
    TrackerError,
    UnknownCombatant,
)
from .logging import (
    get_logger,
    setup_logging,
)
from .utils import (
    coerce_non_negative_int,
    coerce_number,
    get_stat_modifier,
)

__all__ = [
    # Import from constants.py
    "DND5E_CONDITIONS",
    "ROLL_LOG_CAPACITY",
    "CriticalResult",
    "DifficultyRating",
    "NiceEnum",
    "RollCategory",
    "RollMode",
    "SourceType",
    # Import from error_handling.py
    "EmptyRoster",
    "InvalidNotation",
    "TrackerError",
    "UnknownCombatant",
    # Import from logging.py
    "get_logger",
    "setup_logging",
    # Import from utils.py
    "coerce_non_negative_int",
    "coerce_number",
    "get_stat_modifier",
]
