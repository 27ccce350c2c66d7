"""
Stats snapshot normalization for the combat tracker.

Stat blocks arrive in several shapes (SRD monsters, custom NPCs, player
characters). The helpers here read the known shapes once, when a combatant
is created, and return canonical flat values with documented fallbacks.
"""

import json
from typing import Any

from catchery import log_warning

from combat_tracker.core.constants import (
    DEFAULT_ARMOR_CLASS,
    DEFAULT_CONSTITUTION,
    DEFAULT_DEXTERITY,
    DEFAULT_HIT_POINTS,
)


def load_snapshot(raw: str | dict[str, Any] | None) -> dict[str, Any]:
    """
    Turns a stored snapshot into a dictionary.

    Args:
        raw (str | dict[str, Any] | None): A JSON string or an already decoded dict.

    Returns:
        dict[str, Any]: The decoded snapshot, empty when it cannot be decoded.

    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as e:
        log_warning(
            "Could not decode stats snapshot",
            {"error": str(e), "snapshot": str(raw)[:80]},
        )
        return {}
    if not isinstance(decoded, dict):
        log_warning(
            "Stats snapshot is not an object",
            {"type": type(decoded).__name__},
        )
        return {}
    return decoded


def _number(value: Any) -> int | None:
    """Returns the value as an int when it is a real, non-zero number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value) if value else None


def _nested(stats: dict[str, Any], *path: str) -> Any:
    current: Any = stats
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _probe_score(stats: dict[str, Any], paths: list[tuple[str, ...]], default: int) -> int:
    for path in paths:
        score = _number(_nested(stats, *path))
        if score is not None:
            return score
    return default


def extract_dexterity(stats: dict[str, Any]) -> int:
    """
    Finds the dexterity score used to break initiative ties.

    Probes, in order: attributes.dexterity (custom NPCs), abilities.DEX
    (player characters), dexterity (SRD monsters).

    Args:
        stats (dict[str, Any]): The decoded snapshot.

    Returns:
        int: The dexterity score, 10 if absent.

    """
    return _probe_score(
        stats,
        [("attributes", "dexterity"), ("abilities", "DEX"), ("dexterity",)],
        DEFAULT_DEXTERITY,
    )


def extract_constitution(stats: dict[str, Any]) -> int:
    """
    Finds the constitution score used for concentration saves.

    Args:
        stats (dict[str, Any]): The decoded snapshot.

    Returns:
        int: The constitution score, 10 if absent.

    """
    return _probe_score(
        stats,
        [("abilities", "CON"), ("attributes", "constitution"), ("constitution",)],
        DEFAULT_CONSTITUTION,
    )


def extract_armor_class(stats: dict[str, Any]) -> int:
    """
    Finds the armor class.

    Accepts 'armor_class' as a number or as the SRD list of
    {"value": n} entries, then 'ac'.

    Args:
        stats (dict[str, Any]): The decoded snapshot.

    Returns:
        int: The armor class, 10 if absent.

    """
    armor_class = stats.get("armor_class")
    if isinstance(armor_class, list):
        first = armor_class[0] if armor_class else None
        value = _number(first.get("value")) if isinstance(first, dict) else None
        return value if value is not None else DEFAULT_ARMOR_CLASS
    for key in ("armor_class", "ac"):
        value = _number(stats.get(key))
        if value is not None:
            return value
    return DEFAULT_ARMOR_CLASS


def extract_hit_points_roll(stats: dict[str, Any]) -> str | None:
    """Returns the hit dice notation, e.g. '8d8+16', if the snapshot has one."""
    hp_roll = stats.get("hit_points_roll")
    return hp_roll if isinstance(hp_roll, str) and hp_roll.strip() else None


def extract_average_hp(stats: dict[str, Any]) -> int:
    """
    Finds the average (printed) hit points of a stat block.

    Args:
        stats (dict[str, Any]): The decoded snapshot.

    Returns:
        int: hit_points, hp or hit_points.average, 10 if none is present.

    """
    for value in (
        stats.get("hit_points"),
        stats.get("hp"),
        _nested(stats, "hit_points", "average"),
    ):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return int(value)
    return DEFAULT_HIT_POINTS


def extract_reference_hp(stats: dict[str, Any]) -> int:
    """
    Finds the static hit points of a player character or stat block.

    Args:
        stats (dict[str, Any]): The decoded snapshot.

    Returns:
        int: total_hp for player characters, else the average HP.

    """
    total_hp = stats.get("total_hp")
    if isinstance(total_hp, (int, float)) and not isinstance(total_hp, bool):
        return int(total_hp)
    return extract_average_hp(stats)
