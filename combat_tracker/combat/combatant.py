"""
Combatant module for the combat tracker.

A combatant is one creature instance inside a single encounter. Its stats
snapshot is captured once at creation, together with the canonical scores
derived from it; HP and condition edits made during play go through the
methods here so that current HP always stays within [0, max HP].
"""

from copy import deepcopy
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from combat_tracker.core.constants import DND5E_CONDITIONS, SourceType
from combat_tracker.core.logging import log_warning
from combat_tracker.combat.snapshot import extract_constitution, extract_dexterity


def concentration_dc(damage: int) -> int:
    """
    Computes the DC of the concentration save triggered by damage.

    Args:
        damage (int): Damage taken in one hit.

    Returns:
        int: Half the damage rounded down, never less than 10.

    """
    return max(10, damage // 2)


class DamageReport(BaseModel):
    """What a point of damage did to a combatant."""

    amount: int = Field(description="Damage dealt.")
    absorbed_by_temp: int = Field(description="Damage soaked by temporary HP.")
    hp_damage: int = Field(description="Current HP actually lost.")
    current_hp: int = Field(description="Current HP after the damage.")
    max_hp: int = Field(description="Maximum HP of the combatant.")
    temp_hp: int = Field(description="Temporary HP left after the damage.")

    def summary(self) -> str:
        """
        Describes the damage for the roll history.

        Returns:
            str: e.g. '3 absorbed by temp HP, 4 to HP → 11/15 HP (+2 temp)'.

        """
        output = f"{self.current_hp}/{self.max_hp} HP"
        if self.absorbed_by_temp > 0:
            output = (
                f"{self.absorbed_by_temp} absorbed by temp HP, "
                f"{self.hp_damage} to HP → {output}"
            )
        if self.temp_hp > 0:
            output += f" (+{self.temp_hp} temp)"
        return output


class HealingReport(BaseModel):
    """What a heal did to a combatant."""

    amount: int = Field(description="Healing offered.")
    healed: int = Field(description="Current HP actually regained.")
    current_hp: int = Field(description="Current HP after healing.")
    max_hp: int = Field(description="Maximum HP of the combatant.")
    temp_hp: int = Field(description="Temporary HP, unchanged by healing.")

    @property
    def overheal(self) -> int:
        return self.amount - self.healed

    def summary(self) -> str:
        """Describes the heal for the roll history."""
        output = f"{self.current_hp}/{self.max_hp} HP"
        if self.overheal > 0:
            output = f"{self.healed} healed ({self.overheal} overheal) → {output}"
        if self.temp_hp > 0:
            output += f" (+{self.temp_hp} temp)"
        return output


class Combatant(BaseModel):
    """One creature instance in an encounter's roster."""

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Opaque id, stable for the encounter's lifetime.",
    )
    name: str = Field(
        description="Display name of the creature.",
    )
    identifier: str | None = Field(
        default=None,
        description="Short tag telling duplicates apart, e.g. 'A'.",
    )
    initiative: int = Field(
        default=0,
        description="Initiative result, may be negative.",
    )
    current_hp: int = Field(
        description="Current hit points, kept within [0, max_hp].",
    )
    max_hp: int = Field(
        description="Maximum hit points, at least 1.",
    )
    temp_hp: int = Field(
        default=0,
        description="Temporary hit points, at least 0.",
    )
    armor_class: int = Field(
        default=10,
        description="Armor class.",
    )
    sort_order: int = Field(
        default=0,
        description="Insertion order in the encounter, the final turn-order tie-break.",
    )
    source_type: SourceType = Field(
        default=SourceType.CREATURE,
        description="Where the stat block came from.",
    )
    source_id: str | None = Field(
        default=None,
        description="Id of the source creature or character, if any.",
    )
    stats_snapshot: dict[str, Any] = Field(
        default_factory=dict,
        description="Stat block captured when the combatant was created.",
    )
    dexterity: int | None = Field(
        default=None,
        description="Canonical dexterity score derived from the snapshot.",
    )
    constitution: int | None = Field(
        default=None,
        description="Canonical constitution score derived from the snapshot.",
    )
    status_effects: list[str] = Field(
        default_factory=list,
        description="Active conditions, in the order they were applied.",
    )
    is_concentrating: bool = Field(
        default=False,
        description="Whether the creature is concentrating on a spell.",
    )
    concentration_note: str | None = Field(
        default=None,
        description="What the creature is concentrating on.",
    )

    def model_post_init(self, _: Any) -> None:
        """Normalizes the snapshot and clamps the hit point fields."""
        if not self.name or not self.name.strip():
            raise ValueError("Combatant name must be a non-empty string")
        # The snapshot belongs to the combatant from now on.
        self.stats_snapshot = deepcopy(self.stats_snapshot)
        if self.dexterity is None:
            self.dexterity = extract_dexterity(self.stats_snapshot)
        if self.constitution is None:
            self.constitution = extract_constitution(self.stats_snapshot)
        self.max_hp = max(1, self.max_hp)
        self.temp_hp = max(0, self.temp_hp)
        self.current_hp = min(max(0, self.current_hp), self.max_hp)
        self.armor_class = max(0, self.armor_class)

    # ============================================================================
    # DISPLAY
    # ============================================================================

    @property
    def display_name(self) -> str:
        """Name with the identifier appended, e.g. 'Goblin (A)'."""
        if self.identifier:
            return f"{self.name} ({self.identifier})"
        return self.name

    @property
    def is_bloodied(self) -> bool:
        """Alive and at half HP or less."""
        return 0 < self.current_hp <= self.max_hp / 2

    @property
    def is_down(self) -> bool:
        return self.current_hp <= 0

    @property
    def hp_percentage(self) -> float:
        return max(0.0, min(100.0, self.current_hp / self.max_hp * 100))

    # ============================================================================
    # HIT POINTS
    # ============================================================================

    def set_current_hp(self, value: int) -> None:
        """Sets current HP, clamped to [0, max_hp]."""
        self.current_hp = min(max(0, value), self.max_hp)

    def set_max_hp(self, value: int) -> None:
        """Sets max HP (at least 1) and re-clamps current HP."""
        self.max_hp = max(1, value)
        self.set_current_hp(self.current_hp)

    def apply_damage(self, amount: int) -> DamageReport:
        """
        Deals damage, temporary HP absorbing it first.

        Args:
            amount (int): Damage dealt. Non-positive amounts change nothing.

        Returns:
            DamageReport: How the damage was split and the resulting HP.

        """
        amount = max(0, amount)
        absorbed = min(self.temp_hp, amount)
        old_hp = self.current_hp
        self.temp_hp -= absorbed
        self.set_current_hp(self.current_hp - (amount - absorbed))
        return DamageReport(
            amount=amount,
            absorbed_by_temp=absorbed,
            hp_damage=old_hp - self.current_hp,
            current_hp=self.current_hp,
            max_hp=self.max_hp,
            temp_hp=self.temp_hp,
        )

    def heal(self, amount: int) -> HealingReport:
        """
        Restores current HP up to the maximum.

        Args:
            amount (int): Healing offered. Non-positive amounts change nothing.

        Returns:
            HealingReport: Actual healing and the resulting HP.

        """
        amount = max(0, amount)
        old_hp = self.current_hp
        self.set_current_hp(self.current_hp + amount)
        return HealingReport(
            amount=amount,
            healed=self.current_hp - old_hp,
            current_hp=self.current_hp,
            max_hp=self.max_hp,
            temp_hp=self.temp_hp,
        )

    def grant_temp_hp(self, amount: int) -> int:
        """
        Grants temporary HP. Temporary HP does not stack: the higher value wins.

        Args:
            amount (int): Temporary HP granted.

        Returns:
            int: Temporary HP after the grant.

        """
        self.temp_hp = max(self.temp_hp, amount, 0)
        return self.temp_hp

    # ============================================================================
    # CONDITIONS
    # ============================================================================

    def add_condition(self, condition: str) -> bool:
        """
        Applies a condition from the ruleset's condition list.

        Args:
            condition (str): Condition name, case-insensitive.

        Returns:
            bool: True if the condition was added, False if unknown or present.

        """
        canonical = _canonical_condition(condition)
        if canonical is None:
            log_warning(
                f"Unknown condition '{condition}'",
                {"combatant": self.display_name},
            )
            return False
        if canonical in self.status_effects:
            return False
        self.status_effects.append(canonical)
        return True

    def remove_condition(self, condition: str) -> bool:
        """
        Removes a condition.

        Args:
            condition (str): Condition name, case-insensitive.

        Returns:
            bool: True if the condition was present and removed.

        """
        canonical = _canonical_condition(condition)
        if canonical is None or canonical not in self.status_effects:
            return False
        self.status_effects.remove(canonical)
        return True

    def has_condition(self, condition: str) -> bool:
        return _canonical_condition(condition) in self.status_effects

    # ============================================================================
    # CONCENTRATION
    # ============================================================================

    def start_concentrating(self, note: str | None = None) -> None:
        self.is_concentrating = True
        self.concentration_note = note

    def stop_concentrating(self) -> None:
        self.is_concentrating = False
        self.concentration_note = None


def _canonical_condition(condition: str) -> str | None:
    wanted = condition.strip().lower()
    for known in DND5E_CONDITIONS:
        if known.lower() == wanted:
            return known
    return None
