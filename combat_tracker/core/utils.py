"""
Utilities module for the combat tracker.

Provides small shared helpers: the ability-modifier formula and tolerant
number coercion for display-oriented inputs.
"""

from __future__ import annotations

import math
from typing import Any


def get_stat_modifier(score: int) -> int:
    """
    Calculates the D&D ability score modifier.

    Args:
        score (int): The ability score.

    Returns:
        int: The modifier for the given ability score.

    """
    return (score - 10) // 2


def coerce_number(value: Any, default: float = 0) -> float:
    """
    Converts a loosely typed value into a finite number.

    Booleans, None, NaN, infinities and unparsable strings all become the
    default, so that display-oriented calculations never raise.

    Args:
        value (Any): The value to convert.
        default (float): The value returned on failure. Defaults to 0.

    Returns:
        float: The converted number, or the default.

    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def coerce_non_negative_int(value: Any) -> int:
    """
    Converts a loosely typed value into a non-negative integer.

    Args:
        value (Any): The value to convert.

    Returns:
        int: The truncated value, or 0 for negative and malformed input.

    """
    return max(0, int(coerce_number(value)))

