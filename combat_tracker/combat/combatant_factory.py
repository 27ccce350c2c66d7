"""
Combatant factory for the combat tracker.

Creates combatant instances from a source stat block: each instance rolls
its own initiative and, for non-player creatures, its own hit points.
"""

import random
import string
from collections.abc import Collection
from typing import Any

from catchery import log_warning

from combat_tracker.core.constants import MAX_SPAWN_QUANTITY, SourceType
from combat_tracker.core.error_handling import InvalidNotation
from combat_tracker.core.utils import get_stat_modifier
from combat_tracker.dice.dice_parser import RandomSource, evaluate_notation
from combat_tracker.combat.combatant import Combatant
from combat_tracker.combat.snapshot import (
    extract_armor_class,
    extract_average_hp,
    extract_dexterity,
    extract_hit_points_roll,
    extract_reference_hp,
    load_snapshot,
)


def roll_initiative(dexterity: int, rng: RandomSource) -> int:
    """
    Rolls initiative: d20 plus the dexterity modifier.

    Args:
        dexterity (int): The dexterity score.
        rng (RandomSource): Random source.

    Returns:
        int: The initiative result.

    """
    return rng.randint(1, 20) + get_stat_modifier(dexterity)


def roll_hit_points(stats: dict[str, Any], rng: RandomSource) -> int:
    """
    Rolls hit points from the stat block's hit dice, falling back to the average.

    Args:
        stats (dict[str, Any]): The decoded snapshot.
        rng (RandomSource): Random source.

    Returns:
        int: Rolled hit points (at least 1), or the average HP.

    """
    hp_roll = extract_hit_points_roll(stats)
    if hp_roll:
        result = evaluate_notation(hp_roll, rng)
        if not isinstance(result, InvalidNotation):
            return max(1, result.total)
    return extract_average_hp(stats)


def identifier_for(index: int) -> str:
    """
    Returns the letter tag of the n-th duplicate: A..Z, then AA, AB, ...

    Args:
        index (int): 0-based position among the duplicates.

    Returns:
        str: The identifier.

    """
    letters = string.ascii_uppercase
    tag = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, len(letters))
        tag = letters[remainder] + tag
    return tag


def next_identifiers(count: int, taken: Collection[str] = ()) -> list[str]:
    """
    Picks the first free identifiers, skipping those already in use.

    Args:
        count (int): How many identifiers are needed.
        taken (Collection[str]): Identifiers held by existing duplicates.

    Returns:
        list[str]: The identifiers, in letter order.

    """
    identifiers: list[str] = []
    index = 0
    while len(identifiers) < count:
        candidate = identifier_for(index)
        if candidate not in taken:
            identifiers.append(candidate)
        index += 1
    return identifiers


def resolve_name(name: str | None, snapshot: dict[str, Any]) -> str:
    """Returns the display name, falling back to the snapshot's name."""
    return name or snapshot.get("name") or "Unknown Creature"


def spawn_combatants(
    name: str,
    stats: str | dict[str, Any] | None,
    quantity: int = 1,
    source_type: SourceType = SourceType.CREATURE,
    start_sort_order: int = 0,
    source_id: str | None = None,
    rng: RandomSource | None = None,
    taken_identifiers: Collection[str] | None = None,
) -> list[Combatant]:
    """
    Creates combatant instances of one source creature.

    Args:
        name (str): Display name. Falls back to the snapshot's name.
        stats (str | dict[str, Any] | None): Stat block, as JSON or a dict.
        quantity (int): Number of instances, clamped to [1, 20].
        source_type (SourceType): Where the stat block came from.
        start_sort_order (int): sort_order of the first instance.
        source_id (str | None): Id of the source record.
        rng (RandomSource | None): Random source. Defaults to the random module.
        taken_identifiers (Collection[str] | None):
            Identifiers already used by duplicates of this creature. When
            given, every new instance is tagged and the taken letters are
            skipped; otherwise only groups of more than one are tagged.

    Returns:
        list[Combatant]: The new combatants, with consecutive sort orders.

    """
    rng = rng or random
    snapshot = load_snapshot(stats)
    name = resolve_name(name, snapshot)

    if not 1 <= quantity <= MAX_SPAWN_QUANTITY:
        log_warning(
            f"Spawn quantity {quantity} out of range, clamping",
            {"name": name, "limit": MAX_SPAWN_QUANTITY},
        )
        quantity = min(max(1, quantity), MAX_SPAWN_QUANTITY)

    # Read once, it is not rolled per instance.
    armor_class = extract_armor_class(snapshot)
    dexterity = extract_dexterity(snapshot)
    if taken_identifiers is not None or quantity > 1:
        identifiers: list[str | None] = list(
            next_identifiers(quantity, taken_identifiers or ())
        )
    else:
        identifiers = [None]

    combatants: list[Combatant] = []
    for index in range(quantity):
        if source_type is SourceType.PC:
            max_hp = extract_reference_hp(snapshot)
        else:
            max_hp = roll_hit_points(snapshot, rng)
        combatants.append(
            Combatant(
                name=name,
                identifier=identifiers[index],
                initiative=roll_initiative(dexterity, rng),
                current_hp=max_hp,
                max_hp=max_hp,
                armor_class=armor_class,
                sort_order=start_sort_order + index,
                source_type=source_type,
                source_id=source_id,
                stats_snapshot=snapshot,
                dexterity=dexterity,
            )
        )
    return combatants
