"""
Combat tracker package.

Turn order, dice resolution and encounter difficulty for running D&D 5e
combat encounters. The package is a library: callers own persistence,
presentation and I/O.
"""

from .core.constants import (
    CriticalResult,
    DifficultyRating,
    RollCategory,
    RollMode,
    SourceType,
)
from .core.error_handling import (
    EmptyRoster,
    InvalidNotation,
    TrackerError,
    UnknownCombatant,
)
from .combat import (
    CombatSession,
    Combatant,
    RoundState,
    advance,
    resolve_turn_order,
    retreat,
)
from .dice import (
    DiceRoller,
    RollLog,
    RollRequest,
    RollResult,
    apply_roll_modifier,
    detect_critical,
    evaluate_notation,
)
from .encounter_builder import (
    EncounterDifficulty,
    MonsterEntry,
    compute_difficulty,
)

__all__ = [
    "CombatSession",
    "Combatant",
    "CriticalResult",
    "DiceRoller",
    "DifficultyRating",
    "EmptyRoster",
    "EncounterDifficulty",
    "InvalidNotation",
    "MonsterEntry",
    "RollCategory",
    "RollLog",
    "RollMode",
    "RollRequest",
    "RollResult",
    "RoundState",
    "SourceType",
    "TrackerError",
    "UnknownCombatant",
    "advance",
    "apply_roll_modifier",
    "compute_difficulty",
    "detect_critical",
    "evaluate_notation",
    "resolve_turn_order",
    "retreat",
]
