"""
Turn order module for the combat tracker.

The turn order is derived, never stored: it is recomputed from the live
roster every time it is needed, so initiative edits and roster changes are
always reflected. Round and turn position live in an immutable RoundState
that the transition functions replace rather than mutate.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from combat_tracker.core.error_handling import EmptyRoster
from combat_tracker.core.logging import log_debug
from combat_tracker.combat.combatant import Combatant


class RoundState(BaseModel):
    """Round counter and position in the turn order."""

    model_config = ConfigDict(frozen=True)

    round: int = Field(
        default=1,
        ge=1,
        description="Current round, starting at 1.",
    )
    turn_index: int = Field(
        default=0,
        ge=0,
        description="0-based position in the resolved turn order.",
    )


def turn_order_key(combatant: Combatant) -> tuple[int, int, int]:
    """
    Sort key: initiative desc, then dexterity desc, then insertion order.

    Args:
        combatant (Combatant): The combatant to rank.

    Returns:
        tuple[int, int, int]: A key for ascending sorts.

    """
    return (-combatant.initiative, -(combatant.dexterity or 0), combatant.sort_order)


def resolve_turn_order(roster: Iterable[Combatant]) -> list[Combatant]:
    """
    Produces the turn order of a roster.

    Args:
        roster (Iterable[Combatant]): The combatants, in any order.

    Returns:
        list[Combatant]: A new list in acting order.

    """
    return sorted(roster, key=turn_order_key)


def advance(state: RoundState, size: int) -> RoundState:
    """
    Moves to the next turn, starting a new round when the order wraps.

    Args:
        state (RoundState): The current state.
        size (int): Number of combatants in the roster.

    Returns:
        RoundState: The state after the transition.

    Raises:
        EmptyRoster: If the roster is empty.

    """
    if size <= 0:
        raise EmptyRoster("advance")
    turn_index = (state.turn_index + 1) % size
    round_number = state.round + 1 if turn_index == 0 else state.round
    log_debug(f"Advance to round {round_number}, turn {turn_index}")
    return RoundState(round=round_number, turn_index=turn_index)


def retreat(state: RoundState, size: int) -> RoundState:
    """
    Moves back one turn. The round never drops below 1.

    Args:
        state (RoundState): The current state.
        size (int): Number of combatants in the roster.

    Returns:
        RoundState: The state after the transition.

    Raises:
        EmptyRoster: If the roster is empty.

    """
    if size <= 0:
        raise EmptyRoster("retreat")
    if state.turn_index == 0:
        return RoundState(round=max(1, state.round - 1), turn_index=size - 1)
    return RoundState(round=state.round, turn_index=state.turn_index - 1)


def active_combatant(
    roster: Iterable[Combatant],
    state: RoundState,
) -> Combatant | None:
    """
    Finds whose turn it is, re-resolving the order from the live roster.

    Args:
        roster (Iterable[Combatant]): The current roster.
        state (RoundState): The current state.

    Returns:
        Combatant | None: The combatant at turn_index, None when out of range.

    """
    order = resolve_turn_order(roster)
    if 0 <= state.turn_index < len(order):
        return order[state.turn_index]
    return None


def clamp_after_removal(
    state: RoundState,
    removed_position: int,
    size_after: int,
) -> RoundState:
    """
    Re-targets the turn index after a combatant left the order.

    A combatant removed before the active one shifts the index back so the
    same combatant keeps its turn. Removing the active combatant hands the
    turn to whoever followed it; if it was last in the order, the next round
    begins at the top.

    Args:
        state (RoundState): The state before the removal.
        removed_position (int): Position the removed combatant held in the order.
        size_after (int): Roster size after the removal.

    Returns:
        RoundState: The corrected state.

    """
    if size_after <= 0:
        return RoundState(round=state.round, turn_index=0)
    turn_index = state.turn_index
    if removed_position < turn_index:
        turn_index -= 1
    if turn_index >= size_after:
        return RoundState(round=state.round + 1, turn_index=0)
    return RoundState(round=state.round, turn_index=turn_index)
