"""
Encounter difficulty module for the combat tracker.

Converts a monster roster and a party description into total and adjusted
XP, the encounter multiplier, the party's summed XP thresholds and a
difficulty rating. Every function is pure and tolerant: malformed or
negative inputs count as 0 instead of raising, since the results feed a
display rather than a ledger.
"""

import math
from collections.abc import Iterable, Mapping
from fractions import Fraction
from typing import Any

from catchery import log_warning
from pydantic import BaseModel, Field

from combat_tracker.core.constants import (
    MAX_CHARACTER_LEVEL,
    MIN_CHARACTER_LEVEL,
    DifficultyRating,
)
from combat_tracker.core.utils import coerce_non_negative_int, coerce_number
from combat_tracker.encounter_builder.xp_tables import (
    CR_TO_XP,
    MULTIPLIER_TIER_LIMITS,
    MULTIPLIER_TIERS,
    XP_THRESHOLDS,
)


class MonsterEntry(BaseModel):
    """A monster picked for an encounter, with how many of it appear."""

    challenge_rating: Any = Field(
        description="Challenge rating: a number, a Fraction or a string like '1/4'.",
    )
    quantity: Any = Field(
        default=1,
        description="How many of this monster appear.",
    )

    @property
    def xp(self) -> int:
        """XP of a single monster."""
        return xp_for_cr(self.challenge_rating)

    @property
    def count(self) -> int:
        """Quantity, with malformed or negative values counted as 0."""
        return coerce_non_negative_int(self.quantity)


class PartyThresholds(BaseModel):
    """Summed XP thresholds of every party member."""

    easy: int = Field(default=0, description="Adjusted XP of an easy encounter.")
    medium: int = Field(default=0, description="Adjusted XP of a medium encounter.")
    hard: int = Field(default=0, description="Adjusted XP of a hard encounter.")
    deadly: int = Field(default=0, description="Adjusted XP of a deadly encounter.")


class EncounterDifficulty(BaseModel):
    """Everything the encounter builder shows about a planned encounter."""

    total_xp: int = Field(description="Unadjusted XP of all monsters.")
    monster_count: int = Field(description="Number of monsters.")
    multiplier: float = Field(description="Encounter multiplier applied.")
    adjusted_xp: int = Field(description="Total XP scaled by the multiplier.")
    thresholds: PartyThresholds = Field(description="Summed party thresholds.")
    rating: DifficultyRating = Field(description="Difficulty band reached.")
    xp_per_player: int = Field(description="Unadjusted XP award per character.")


MonsterLike = MonsterEntry | Mapping[str, Any] | tuple[Any, Any]


def parse_challenge_rating(cr: Any) -> Fraction | None:
    """
    Reads a challenge rating given as a number, a Fraction or a string.

    Args:
        cr (Any): The challenge rating, e.g. 0.25, Fraction(1, 4) or '1/4'.

    Returns:
        Fraction | None: The rating, None when it cannot be read.

    """
    if cr is None or isinstance(cr, bool):
        return None
    try:
        if isinstance(cr, str):
            return Fraction(cr.strip())
        if isinstance(cr, float) and not math.isfinite(cr):
            return None
        return Fraction(cr)
    except (TypeError, ValueError, ZeroDivisionError):
        return None


def xp_for_cr(cr: Any) -> int:
    """
    Looks up the XP of one monster of the given challenge rating.

    Args:
        cr (Any): The challenge rating.

    Returns:
        int: The XP value, 0 for unknown ratings.

    """
    rating = parse_challenge_rating(cr)
    if rating is None or rating not in CR_TO_XP:
        log_warning(f"Unknown challenge rating {cr!r}, counting 0 XP", {"cr": cr})
        return 0
    return CR_TO_XP[rating]


def _as_list(values: Any, what: str) -> list[Any]:
    """Returns the items of a roster or level list, nothing when malformed."""
    if values is None:
        return []
    if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, Iterable):
        log_warning(f"Ignoring malformed {what}", {what: repr(values)})
        return []
    return list(values)


def _as_entry(monster: MonsterLike) -> MonsterEntry:
    if isinstance(monster, MonsterEntry):
        return monster
    if isinstance(monster, Mapping):
        return MonsterEntry(
            challenge_rating=monster.get("challenge_rating", monster.get("cr")),
            quantity=monster.get("quantity", 1),
        )
    try:
        cr, quantity = monster
    except (TypeError, ValueError):
        log_warning(
            "Ignoring malformed monster entry",
            {"entry": repr(monster)},
        )
        return MonsterEntry(challenge_rating=None, quantity=0)
    return MonsterEntry(challenge_rating=cr, quantity=quantity)


def total_xp(monsters: Iterable[MonsterLike]) -> int:
    """
    Sums the XP of every monster.

    Args:
        monsters (Iterable[MonsterLike]): The monster roster.

    Returns:
        int: Sum of XP times quantity.

    """
    entries = [_as_entry(monster) for monster in _as_list(monsters, "monsters")]
    return sum(entry.xp * entry.count for entry in entries)


def monster_count(monsters: Iterable[MonsterLike]) -> int:
    """Counts the monsters in the roster, summing quantities."""
    return sum(
        _as_entry(monster).count for monster in _as_list(monsters, "monsters")
    )


def _base_tier(count: int) -> int:
    for tier, limit in enumerate(MULTIPLIER_TIER_LIMITS):
        if count <= limit:
            return tier
    return len(MULTIPLIER_TIERS) - 1


def encounter_multiplier(count: int, party_size: int) -> float:
    """
    Finds the encounter multiplier for a number of monsters.

    Small parties (fewer than 3) move one tier up, large parties (6 or more)
    one tier down, within the bounds of the table.

    Args:
        count (int): Number of monsters.
        party_size (int): Number of characters.

    Returns:
        float: The multiplier, 1 when there are no monsters.

    """
    count = coerce_non_negative_int(count)
    party_size = coerce_non_negative_int(party_size)
    if count == 0:
        return 1
    tier = _base_tier(count)
    if party_size < 3:
        tier = min(tier + 1, len(MULTIPLIER_TIERS) - 1)
    elif party_size >= 6:
        tier = max(tier - 1, 0)
    return MULTIPLIER_TIERS[tier]


def adjusted_xp(total: int, count: int, party_size: int) -> int:
    """
    Scales total XP by the encounter multiplier.

    Args:
        total (int): Unadjusted XP.
        count (int): Number of monsters.
        party_size (int): Number of characters.

    Returns:
        int: floor(total * multiplier).

    """
    total = coerce_non_negative_int(total)
    return math.floor(total * encounter_multiplier(count, party_size))


def _clamp_level(level: Any) -> int:
    value = int(coerce_number(level))
    return min(max(MIN_CHARACTER_LEVEL, value), MAX_CHARACTER_LEVEL)


def party_thresholds(levels: Iterable[Any]) -> PartyThresholds:
    """
    Sums the XP thresholds of every party member.

    Args:
        levels (Iterable[Any]): Character levels; each is clamped into [1, 20].

    Returns:
        PartyThresholds: The summed thresholds.

    """
    easy = medium = hard = deadly = 0
    for level in _as_list(levels, "levels"):
        level_easy, level_medium, level_hard, level_deadly = XP_THRESHOLDS[
            _clamp_level(level)
        ]
        easy += level_easy
        medium += level_medium
        hard += level_hard
        deadly += level_deadly
    return PartyThresholds(easy=easy, medium=medium, hard=hard, deadly=deadly)


def party_thresholds_from_average(party_size: int, average_level: float) -> PartyThresholds:
    """
    Sums thresholds for a party described only by size and average level.

    Args:
        party_size (int): Number of characters.
        average_level (float): Average level, rounded half up.

    Returns:
        PartyThresholds: The summed thresholds.

    """
    level = math.floor(coerce_number(average_level) + 0.5)
    return party_thresholds([level] * coerce_non_negative_int(party_size))


def difficulty_rating(adjusted: int, thresholds: PartyThresholds) -> DifficultyRating:
    """
    Finds the highest difficulty band the adjusted XP reaches.

    Args:
        adjusted (int): Adjusted XP.
        thresholds (PartyThresholds): Summed party thresholds.

    Returns:
        DifficultyRating: Deadly, Hard, Medium, Easy or Trivial.

    """
    adjusted = coerce_non_negative_int(adjusted)
    if not isinstance(thresholds, PartyThresholds):
        thresholds = PartyThresholds()
    if adjusted >= thresholds.deadly:
        return DifficultyRating.DEADLY
    if adjusted >= thresholds.hard:
        return DifficultyRating.HARD
    if adjusted >= thresholds.medium:
        return DifficultyRating.MEDIUM
    if adjusted >= thresholds.easy:
        return DifficultyRating.EASY
    return DifficultyRating.TRIVIAL


def xp_per_player(total: int, party_size: int) -> int:
    """
    Splits the unadjusted XP award between the characters.

    Args:
        total (int): Unadjusted XP.
        party_size (int): Number of characters.

    Returns:
        int: floor(total / party_size), 0 for an empty party.

    """
    total = coerce_non_negative_int(total)
    party_size = coerce_non_negative_int(party_size)
    if party_size == 0:
        return 0
    return total // party_size


def compute_difficulty(
    monsters: Iterable[MonsterLike],
    party_levels: Iterable[Any],
) -> EncounterDifficulty:
    """
    Computes every difficulty figure of a planned encounter.

    Args:
        monsters (Iterable[MonsterLike]): The monster roster.
        party_levels (Iterable[Any]): Level of each character.

    Returns:
        EncounterDifficulty: Total and adjusted XP, multiplier, thresholds,
            rating and per-player XP.

    """
    entries = [_as_entry(monster) for monster in _as_list(monsters, "monsters")]
    levels = _as_list(party_levels, "levels")
    party_size = len(levels)

    total = total_xp(entries)
    count = monster_count(entries)
    thresholds = party_thresholds(levels)
    adjusted = adjusted_xp(total, count, party_size)
    return EncounterDifficulty(
        total_xp=total,
        monster_count=count,
        multiplier=encounter_multiplier(count, party_size),
        adjusted_xp=adjusted,
        thresholds=thresholds,
        rating=difficulty_rating(adjusted, thresholds),
        xp_per_player=xp_per_player(total, party_size),
    )


def format_xp(xp: int) -> str:
    """Formats an XP amount with thousands separators, e.g. '1,600'."""
    return f"{coerce_non_negative_int(xp):,}"
