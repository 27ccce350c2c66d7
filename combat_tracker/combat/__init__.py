"""
Combat package for the combat tracker.

Contains the combatant record, stat-snapshot normalization, combatant
creation, the derived turn order and the combat session that owns them.
"""

from .combat_session import CombatSession
from .combatant import Combatant, DamageReport, HealingReport, concentration_dc
from .combatant_factory import (
    next_identifiers,
    resolve_name,
    roll_hit_points,
    roll_initiative,
    spawn_combatants,
)
from .turn_order import (
    RoundState,
    active_combatant,
    advance,
    clamp_after_removal,
    resolve_turn_order,
    retreat,
)

__all__ = [
    "CombatSession",
    "Combatant",
    "DamageReport",
    "HealingReport",
    "RoundState",
    "active_combatant",
    "advance",
    "clamp_after_removal",
    "concentration_dc",
    "next_identifiers",
    "resolve_name",
    "resolve_turn_order",
    "retreat",
    "roll_hit_points",
    "roll_initiative",
    "spawn_combatants",
]
