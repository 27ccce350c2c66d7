"""
Tests for encounter XP, multipliers and difficulty ratings.
"""

from fractions import Fraction

import pytest

from combat_tracker.core.constants import DifficultyRating
from combat_tracker.encounter_builder.difficulty import (
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


@pytest.mark.parametrize(
    "cr, xp",
    [
        ("1/4", 50),
        (" 1/8 ", 25),
        (Fraction(1, 2), 100),
        (0.5, 100),
        (0.125, 25),
        (0, 10),
        ("0", 10),
        (5, 1800),
        ("30", 155000),
    ],
)
def test_xp_for_cr(cr, xp):
    assert xp_for_cr(cr) == xp


@pytest.mark.parametrize("cr", [31, "abc", None, True, 0.33, "1/0", float("nan")])
def test_unknown_cr_is_worth_nothing(cr):
    assert xp_for_cr(cr) == 0


def test_parse_challenge_rating():
    assert parse_challenge_rating("1/4") == Fraction(1, 4)
    assert parse_challenge_rating(2) == 2
    assert parse_challenge_rating("quarter") is None


@pytest.mark.parametrize(
    "count, party_size, multiplier",
    [
        (0, 4, 1),
        (1, 4, 1),
        (2, 4, 1.5),
        (3, 4, 2),
        (6, 4, 2),
        (7, 4, 2.5),
        (10, 4, 2.5),
        (11, 4, 3),
        (14, 4, 3),
        (15, 4, 4),
        (1, 2, 1.5),
        (15, 2, 4),
        (1, 6, 1),
        (3, 6, 1.5),
        (15, 6, 3),
    ],
)
def test_encounter_multiplier(count, party_size, multiplier):
    assert encounter_multiplier(count, party_size) == multiplier


def test_adjusted_xp_is_floored():
    assert adjusted_xp(450, 2, 4) == 675
    assert adjusted_xp(25, 2, 4) == 37
    assert adjusted_xp(-100, 2, 4) == 0


def test_monster_roster_forms():
    monsters = [
        MonsterEntry(challenge_rating="1/4", quantity=4),
        {"cr": "1/2", "quantity": 3},
        {"challenge_rating": 2},
        ("1", 1),
    ]
    assert total_xp(monsters) == 200 + 300 + 450 + 200
    assert monster_count(monsters) == 9


def test_malformed_monsters_count_as_zero():
    monsters = [("x",), MonsterEntry(challenge_rating=1, quantity=-2), ("1", "lots")]
    assert total_xp(monsters) == 0
    assert monster_count(monsters) == 0


def test_party_thresholds_sum_per_character():
    assert party_thresholds([3, 3, 3, 3]) == PartyThresholds(
        easy=300, medium=600, hard=900, deadly=1600
    )
    assert party_thresholds([1, 5]) == PartyThresholds(
        easy=275, medium=550, hard=825, deadly=1200
    )


def test_party_levels_are_clamped():
    thresholds = party_thresholds([0, 25, "x"])
    assert thresholds.easy == 25 + 2800 + 25
    assert thresholds.deadly == 100 + 12700 + 100


def test_party_thresholds_from_average_rounds_half_up():
    assert party_thresholds_from_average(4, 2.5).medium == 600
    assert party_thresholds_from_average(4, 2.4).medium == 400
    assert party_thresholds_from_average(0, 5) == PartyThresholds()


@pytest.mark.parametrize(
    "adjusted, rating",
    [
        (0, DifficultyRating.TRIVIAL),
        (299, DifficultyRating.TRIVIAL),
        (300, DifficultyRating.EASY),
        (600, DifficultyRating.MEDIUM),
        (899, DifficultyRating.MEDIUM),
        (900, DifficultyRating.HARD),
        (1600, DifficultyRating.DEADLY),
        (10000, DifficultyRating.DEADLY),
    ],
)
def test_difficulty_rating(adjusted, rating):
    thresholds = PartyThresholds(easy=300, medium=600, hard=900, deadly=1600)
    assert difficulty_rating(adjusted, thresholds) is rating


def test_xp_per_player():
    assert xp_per_player(400, 4) == 100
    assert xp_per_player(1000, 3) == 333
    assert xp_per_player(400, 0) == 0


def test_compute_difficulty_four_level_three_characters_against_two_cr_one():
    difficulty = compute_difficulty([("1", 2)], [3, 3, 3, 3])
    assert difficulty.total_xp == 400
    assert difficulty.monster_count == 2
    assert difficulty.multiplier == 1.5
    assert difficulty.adjusted_xp == 600
    assert difficulty.thresholds.deadly == 1600
    assert difficulty.rating is DifficultyRating.MEDIUM
    assert difficulty.xp_per_player == 100


def test_compute_difficulty_small_party_deadly():
    difficulty = compute_difficulty([{"cr": 2, "quantity": 3}], [2, 2])
    assert difficulty.total_xp == 1350
    assert difficulty.multiplier == 2.5
    assert difficulty.adjusted_xp == 3375
    assert difficulty.rating is DifficultyRating.DEADLY


def test_compute_difficulty_without_monsters():
    difficulty = compute_difficulty([], [5, 5, 5, 5])
    assert difficulty.total_xp == 0
    assert difficulty.multiplier == 1
    assert difficulty.rating is DifficultyRating.TRIVIAL


def test_format_xp():
    assert format_xp(1600) == "1,600"
    assert format_xp(155000) == "155,000"
    assert format_xp(50) == "50"


def test_rating_markup():
    assert DifficultyRating.DEADLY.colored_name == "[red]Deadly[/]"
    assert str(DifficultyRating.MEDIUM) == "MEDIUM"
    assert DifficultyRating.MEDIUM.display_name == "Medium"


MALFORMED = [None, "abc", -5, float("nan"), float("inf"), True, object(), [1, 2]]


@pytest.mark.parametrize("value", MALFORMED)
def test_difficulty_rating_tolerates_malformed_xp(value):
    thresholds = PartyThresholds(easy=300, medium=600, hard=900, deadly=1600)
    assert difficulty_rating(value, thresholds) is DifficultyRating.TRIVIAL


def test_difficulty_rating_tolerates_missing_thresholds():
    assert difficulty_rating(600, None) is DifficultyRating.DEADLY


@pytest.mark.parametrize("value", MALFORMED)
def test_scalar_functions_count_malformed_input_as_zero(value):
    assert xp_for_cr(value) == 0
    assert encounter_multiplier(value, value) == 1
    assert adjusted_xp(value, 2, 4) == 0
    assert xp_per_player(value, 4) == 0
    assert xp_per_player(400, value) == 0
    assert party_thresholds_from_average(value, value) == PartyThresholds()
    assert format_xp(value) == "0"


@pytest.mark.parametrize("roster", [None, 42, "goblin", {"cr": 1, "quantity": 2}, [None, 7, "x"]])
def test_roster_functions_tolerate_malformed_rosters(roster):
    assert total_xp(roster) == 0
    assert monster_count(roster) == 0


@pytest.mark.parametrize("levels", [None, 3, "3333", {"level": 3}])
def test_party_thresholds_tolerate_malformed_levels(levels):
    assert party_thresholds(levels) == PartyThresholds()


@pytest.mark.parametrize(
    "monsters, levels, expected",
    [
        (None, [3, 3, 3, 3], (0, 0, 0)),
        ([("1", 2)], None, (400, 800, 0)),
        (None, None, (0, 0, 0)),
        (7, "party", (0, 0, 0)),
    ],
)
def test_compute_difficulty_tolerates_malformed_input(monsters, levels, expected):
    difficulty = compute_difficulty(monsters, levels)
    assert (difficulty.total_xp, difficulty.adjusted_xp, difficulty.xp_per_player) == expected
