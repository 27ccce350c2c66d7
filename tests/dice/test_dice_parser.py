"""
Tests for the dice notation engine.
"""

import random

import pytest

from combat_tracker.core.error_handling import InvalidNotation
from combat_tracker.dice.dice_parser import (
    DiceTerm,
    ModifierTerm,
    evaluate_notation,
    is_valid_notation,
    max_roll,
    min_roll,
    parse_notation,
    roll_notation,
)


def test_parse_simple_notation():
    parsed = parse_notation("2d6+3")
    assert parsed.dice_terms == [DiceTerm(count=2, sides=6)]
    assert parsed.modifier == 3


def test_parse_implicit_single_die():
    parsed = parse_notation("d20")
    assert parsed.dice_terms[0].count == 1
    assert parsed.dice_terms[0].sides == 20


def test_parse_keep_highest_is_case_insensitive():
    term = parse_notation("2D20KH1").dice_terms[0]
    assert term.keep is not None
    assert term.keep.highest is True
    assert term.keep.count == 1
    assert str(term) == "2d20kh1"


def test_parse_keep_lowest_with_count():
    term = parse_notation("4d6kl3").dice_terms[0]
    assert term.keep.highest is False
    assert term.keep.count == 3


def test_parse_bare_keep_means_keep_highest():
    term = parse_notation("2d20k").dice_terms[0]
    assert term.keep.highest is True
    assert term.keep.count == 1


def test_parse_percentile_die():
    assert parse_notation("d%").dice_terms[0].sides == 100


def test_parse_ignores_whitespace():
    parsed = parse_notation(" 1d20 + 5 ")
    assert parsed.modifier == 5
    assert len(parsed.dice_terms) == 1


def test_parse_signs():
    parsed = parse_notation("-1+d4-1d6")
    assert parsed.terms[0] == ModifierTerm(sign=-1, value=1)
    assert parsed.dice_terms[0].sign == 1
    assert parsed.dice_terms[1].sign == -1
    assert parsed.modifier == -1


@pytest.mark.parametrize(
    "notation",
    ["", "   ", "abc", "0d6", "2d0", "101d6", "2d1001", "2d6+", "2d6++3", "3d6kh4", "1d20x2"],
)
def test_parse_rejects_malformed_notation(notation):
    with pytest.raises(InvalidNotation) as exc_info:
        parse_notation(notation)
    assert exc_info.value.notation == notation


def test_parse_rejects_non_string():
    with pytest.raises(InvalidNotation):
        parse_notation(None)


def test_evaluate_returns_error_value_instead_of_raising():
    result = evaluate_notation("roll some dice")
    assert isinstance(result, InvalidNotation)
    assert result.notation == "roll some dice"


def test_is_valid_notation():
    assert is_valid_notation("2d6+3")
    assert not is_valid_notation("2d")


def test_roll_sums_dice_and_modifier(scripted):
    result = roll_notation("2d6+3", scripted(4, 5))
    assert result.total == 12
    assert result.output == "2d6+3: [4, 5]+3 = 12"
    assert result.rolls == [4, 5]


def test_roll_keep_highest_drops_lowest_die(scripted):
    result = roll_notation("2d20kh1+5", scripted(18, 7))
    assert result.total == 23
    assert result.output == "2d20kh1+5: [18, 7d]+5 = 23"
    dice = result.groups[0].dice
    assert [die.used for die in dice] == [True, False]
    # The dropped die stays in the breakdown.
    assert result.rolls == [18, 7]


def test_roll_keep_lowest_drops_highest_die(scripted):
    result = roll_notation("2d20kl1", scripted(18, 7))
    assert result.total == 7
    assert result.output == "2d20kl1: [18d, 7] = 7"


def test_roll_keep_tie_keeps_earliest_die(scripted):
    result = roll_notation("2d20kh1", scripted(12, 12))
    assert [die.used for die in result.groups[0].dice] == [True, False]
    assert result.total == 12


def test_roll_subtracted_dice_group(scripted):
    result = roll_notation("1d8-1d4", scripted(5, 3))
    assert result.total == 2
    assert result.output == "1d8-1d4: [5]-[3] = 2"


def test_roll_flat_number():
    result = roll_notation("5")
    assert result.total == 5
    assert result.groups == []
    assert result.output == "5: 5 = 5"


def test_roll_uses_sides_as_upper_bound(scripted):
    rng = scripted(6, 6, 6)
    roll_notation("3d6", rng)
    assert rng.calls == [(1, 6)] * 3


@pytest.mark.parametrize("notation", ["1d20+5", "3d6-2", "4d6kh3", "2d20kl1+1", "d%+1d4"])
def test_total_matches_used_dice_for_random_rolls(notation):
    rng = random.Random(1234)
    modifier = parse_notation(notation).modifier
    for _ in range(50):
        result = roll_notation(notation, rng)
        for group in result.groups:
            for die in group.dice:
                assert 1 <= die.value <= group.term.sides
        assert result.total == sum(group.subtotal for group in result.groups) + modifier


def test_min_and_max_roll():
    assert min_roll("2d6+3") == 5
    assert max_roll("2d6+3") == 15
    assert min_roll("2d20kh1+5") == 6
    assert max_roll("2d20kh1+5") == 25


def test_min_and_max_roll_with_subtracted_dice():
    assert min_roll("1d20-1d4") == -3
    assert max_roll("1d20-1d4") == 19


def test_min_and_max_roll_of_malformed_notation_is_zero():
    assert min_roll("nonsense") == 0
    assert max_roll("nonsense") == 0
