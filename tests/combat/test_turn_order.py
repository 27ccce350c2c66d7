"""
Tests for turn order resolution and round transitions.
"""

import pytest
from pydantic import ValidationError

from combat_tracker.core.error_handling import EmptyRoster
from combat_tracker.combat.combatant import Combatant
from combat_tracker.combat.turn_order import (
    RoundState,
    active_combatant,
    advance,
    clamp_after_removal,
    resolve_turn_order,
    retreat,
)


def make(name: str, initiative: int, dexterity: int = 10, sort_order: int = 0) -> Combatant:
    return Combatant(
        name=name,
        initiative=initiative,
        dexterity=dexterity,
        sort_order=sort_order,
        current_hp=10,
        max_hp=10,
    )


def test_initiative_descending():
    roster = [make("A", 5), make("B", 18), make("C", 11)]
    assert [c.name for c in resolve_turn_order(roster)] == ["B", "C", "A"]


def test_dexterity_breaks_initiative_ties():
    roster = [make("dex8", 10, 8, 0), make("dex12", 10, 12, 1), make("dex20", 5, 20, 2)]
    assert [c.name for c in resolve_turn_order(roster)] == ["dex12", "dex8", "dex20"]


def test_insertion_order_breaks_remaining_ties():
    roster = [make("late", 10, 14, 3), make("early", 10, 14, 1)]
    assert [c.name for c in resolve_turn_order(roster)] == ["early", "late"]


def test_negative_initiative_sorts_last():
    roster = [make("slow", -2), make("fast", 0)]
    assert [c.name for c in resolve_turn_order(roster)] == ["fast", "slow"]


def test_resolve_does_not_mutate_roster():
    roster = [make("A", 1), make("B", 20)]
    resolve_turn_order(roster)
    assert [c.name for c in roster] == ["A", "B"]


def test_advance_wraps_into_next_round():
    state = RoundState()
    state = advance(state, 3)
    assert state == RoundState(round=1, turn_index=1)
    state = advance(advance(state, 3), 3)
    assert state == RoundState(round=2, turn_index=0)


def test_advance_with_single_combatant_starts_new_round():
    assert advance(RoundState(round=4), 1) == RoundState(round=5, turn_index=0)


def test_retreat_moves_back_to_previous_round():
    assert retreat(RoundState(round=2, turn_index=0), 3) == RoundState(round=1, turn_index=2)
    assert retreat(RoundState(round=2, turn_index=2), 3) == RoundState(round=2, turn_index=1)


def test_retreat_never_goes_below_round_one():
    assert retreat(RoundState(), 3) == RoundState(round=1, turn_index=2)


def test_transitions_on_empty_roster_raise():
    with pytest.raises(EmptyRoster):
        advance(RoundState(), 0)
    with pytest.raises(EmptyRoster):
        retreat(RoundState(), 0)


def test_round_state_is_immutable():
    state = RoundState()
    with pytest.raises(ValidationError):
        state.round = 3


def test_active_combatant_follows_initiative_edits():
    fighter, goblin = make("Fighter", 10), make("Goblin", 15)
    roster = [fighter, goblin]
    assert active_combatant(roster, RoundState()).name == "Goblin"
    fighter.initiative = 20
    assert active_combatant(roster, RoundState()).name == "Fighter"


def test_active_combatant_out_of_range():
    assert active_combatant([], RoundState()) is None
    assert active_combatant([make("A", 1)], RoundState(turn_index=3)) is None


@pytest.mark.parametrize(
    "state, removed, size_after, expected",
    [
        # Removed before the active combatant: the same combatant keeps the turn.
        (RoundState(round=2, turn_index=2), 0, 3, RoundState(round=2, turn_index=1)),
        # Active combatant removed: the next one takes the turn.
        (RoundState(round=2, turn_index=1), 1, 3, RoundState(round=2, turn_index=1)),
        # Removed after the active combatant.
        (RoundState(round=2, turn_index=1), 3, 3, RoundState(round=2, turn_index=1)),
        # Last combatant in the order was active: next round starts at the top.
        (RoundState(round=2, turn_index=3), 3, 3, RoundState(round=3, turn_index=0)),
        # Roster emptied.
        (RoundState(round=4, turn_index=0), 0, 0, RoundState(round=4, turn_index=0)),
    ],
)
def test_clamp_after_removal(state, removed, size_after, expected):
    assert clamp_after_removal(state, removed, size_after) == expected


@pytest.mark.parametrize("size, start", [(1, 0), (3, 0), (3, 2), (5, 3)])
def test_full_cycle_returns_to_start_one_round_later(size, start):
    state = RoundState(round=2, turn_index=start)
    for _ in range(size):
        state = advance(state, size)
    assert state == RoundState(round=3, turn_index=start)
