"""
Encounter builder package for the combat tracker.

Rates a planned encounter against a party using the XP tables of the
supported ruleset.
"""

from .difficulty import (
    EncounterDifficulty,
    MonsterEntry,
    PartyThresholds,
    adjusted_xp,
    compute_difficulty,
    difficulty_rating,
    encounter_multiplier,
    format_xp,
    monster_count,
    parse_challenge_rating,
    party_thresholds,
    party_thresholds_from_average,
    total_xp,
    xp_for_cr,
    xp_per_player,
)

__all__ = [
    "EncounterDifficulty",
    "MonsterEntry",
    "PartyThresholds",
    "adjusted_xp",
    "compute_difficulty",
    "difficulty_rating",
    "encounter_multiplier",
    "format_xp",
    "monster_count",
    "parse_challenge_rating",
    "party_thresholds",
    "party_thresholds_from_average",
    "total_xp",
    "xp_for_cr",
    "xp_per_player",
]
