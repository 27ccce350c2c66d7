"""
Tests for reading canonical values out of the different stat block shapes.
"""

import pytest

from combat_tracker.combat.snapshot import (
    extract_armor_class,
    extract_average_hp,
    extract_constitution,
    extract_dexterity,
    extract_hit_points_roll,
    extract_reference_hp,
    load_snapshot,
)


def test_load_snapshot_from_json():
    assert load_snapshot('{"name": "Goblin", "dexterity": 14}') == {
        "name": "Goblin",
        "dexterity": 14,
    }


@pytest.mark.parametrize("raw", [None, "not json", "[1, 2, 3]", "42"])
def test_load_snapshot_falls_back_to_empty(raw):
    assert load_snapshot(raw) == {}


def test_load_snapshot_copies_dicts():
    raw = {"dexterity": 12}
    loaded = load_snapshot(raw)
    loaded["dexterity"] = 20
    assert raw["dexterity"] == 12


@pytest.mark.parametrize(
    "stats, expected",
    [
        ({"attributes": {"dexterity": 16}}, 16),
        ({"abilities": {"DEX": 18}}, 18),
        ({"dexterity": 14}, 14),
        ({"attributes": {"dexterity": 16}, "dexterity": 8}, 16),
        ({"dexterity": 0}, 10),
        ({"dexterity": "14"}, 10),
        ({}, 10),
    ],
)
def test_extract_dexterity(stats, expected):
    assert extract_dexterity(stats) == expected


def test_extract_constitution():
    assert extract_constitution({"abilities": {"CON": 16}}) == 16
    assert extract_constitution({"constitution": 12}) == 12
    assert extract_constitution({}) == 10


@pytest.mark.parametrize(
    "stats, expected",
    [
        ({"armor_class": [{"type": "natural", "value": 15}]}, 15),
        ({"armor_class": []}, 10),
        ({"armor_class": 13}, 13),
        ({"ac": 17}, 17),
        ({}, 10),
    ],
)
def test_extract_armor_class(stats, expected):
    assert extract_armor_class(stats) == expected


def test_extract_hit_points_roll():
    assert extract_hit_points_roll({"hit_points_roll": "2d6"}) == "2d6"
    assert extract_hit_points_roll({"hit_points_roll": "  "}) is None
    assert extract_hit_points_roll({}) is None


def test_extract_average_hp():
    assert extract_average_hp({"hit_points": 7}) == 7
    assert extract_average_hp({"hp": 22}) == 22
    assert extract_average_hp({"hit_points": {"average": 45}}) == 45
    assert extract_average_hp({}) == 10


def test_extract_reference_hp_prefers_total_hp():
    assert extract_reference_hp({"total_hp": 38, "hit_points": 7}) == 38
    assert extract_reference_hp({"hit_points": 7}) == 7
