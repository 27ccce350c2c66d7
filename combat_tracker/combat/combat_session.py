"""
Combat session module for the combat tracker.

A combat session owns everything that changes while one encounter is being
run: the roster, the round/turn state and the roll log. Sessions share no
state with each other.
"""

import random
from typing import Any

from combat_tracker.core.constants import (
    ROLL_LOG_CAPACITY,
    RollCategory,
    SourceType,
)
from combat_tracker.core.error_handling import InvalidNotation, UnknownCombatant
from combat_tracker.core.logging import log_debug, log_info
from combat_tracker.core.utils import get_stat_modifier
from combat_tracker.dice.dice_parser import RandomSource
from combat_tracker.dice.dice_roller import DiceRoller, RollOutcome, RollRequest
from combat_tracker.dice.roll_log import RollLog
from combat_tracker.combat.combatant import (
    Combatant,
    DamageReport,
    HealingReport,
    concentration_dc,
)
from combat_tracker.combat.combatant_factory import (
    next_identifiers,
    resolve_name,
    spawn_combatants,
)
from combat_tracker.combat.snapshot import load_snapshot
from combat_tracker.combat.turn_order import (
    RoundState,
    active_combatant,
    advance,
    clamp_after_removal,
    resolve_turn_order,
    retreat,
)


class CombatSession:
    """
    Runs one encounter for a single game master.

    Attributes:
        roster (list[Combatant]):
            Combatants in insertion order.
        state (RoundState):
            Current round and position in the turn order.
        roller (DiceRoller):
            Rolls dice and records them in the session's log.

    """

    def __init__(
        self,
        roster: list[Combatant] | None = None,
        state: RoundState | None = None,
        log_capacity: int = ROLL_LOG_CAPACITY,
        rng: RandomSource | None = None,
    ) -> None:
        """
        Initialize the session.

        Args:
            roster (list[Combatant] | None): Combatants already in the encounter.
            state (RoundState | None): Saved round state. Defaults to round 1, turn 0.
            log_capacity (int): Size of the roll log.
            rng (RandomSource | None): Random source. Defaults to the random module.

        """
        self.rng: RandomSource = rng or random
        self.roster: list[Combatant] = list(roster or [])
        self.state: RoundState = state or RoundState()
        self.roller: DiceRoller = DiceRoller(RollLog(log_capacity), self.rng)

    @property
    def log(self) -> RollLog:
        return self.roller.log

    @property
    def round(self) -> int:
        return self.state.round

    def __len__(self) -> int:
        return len(self.roster)

    # ============================================================================
    # ROSTER
    # ============================================================================

    def get(self, combatant_id: str) -> Combatant:
        """
        Finds a combatant by id.

        Raises:
            UnknownCombatant: If no combatant has that id.

        """
        for combatant in self.roster:
            if combatant.id == combatant_id:
                return combatant
        raise UnknownCombatant(combatant_id)

    def add_combatant(self, combatant: Combatant) -> Combatant:
        """
        Appends a combatant at the end of the insertion order.

        The turn index is left alone: the newcomer may sort anywhere in the
        order, and the index keeps pointing at the same position.

        Args:
            combatant (Combatant): The combatant to add.

        Returns:
            Combatant: The added combatant, with its sort order set.

        """
        combatant.sort_order = len(self.roster)
        self.roster.append(combatant)
        log_debug(f"Added {combatant.display_name} with initiative {combatant.initiative}")
        return combatant

    def add_combatants(
        self,
        name: str,
        stats: str | dict[str, Any] | None,
        quantity: int = 1,
        source_type: SourceType = SourceType.CREATURE,
        source_id: str | None = None,
    ) -> list[Combatant]:
        """
        Spawns instances of a source creature and adds them to the roster.

        Instances of a creature already in the roster keep their identifiers
        and the newcomers take the next free letters. A lone untagged
        instance is tagged first.

        Args:
            name (str): Display name.
            stats (str | dict[str, Any] | None): Stat block, as JSON or a dict.
            quantity (int): Number of instances.
            source_type (SourceType): Where the stat block came from.
            source_id (str | None): Id of the source record.

        Returns:
            list[Combatant]: The combatants that were added.

        """
        snapshot = load_snapshot(stats)
        name = resolve_name(name, snapshot)
        taken: set[str] | None = None
        duplicates = [other for other in self.roster if other.name == name]
        if duplicates:
            taken = {other.identifier for other in duplicates if other.identifier}
            for other in duplicates:
                if not other.identifier:
                    other.identifier = next_identifiers(1, taken)[0]
                    taken.add(other.identifier)
        spawned = spawn_combatants(
            name,
            snapshot,
            quantity=quantity,
            source_type=source_type,
            start_sort_order=len(self.roster),
            source_id=source_id,
            rng=self.rng,
            taken_identifiers=taken,
        )
        self.roster.extend(spawned)
        return spawned

    def remove_combatant(self, combatant_id: str) -> Combatant:
        """
        Removes a combatant and re-targets the turn index.

        Args:
            combatant_id (str): Id of the combatant to remove.

        Returns:
            Combatant: The removed combatant.

        Raises:
            UnknownCombatant: If no combatant has that id.

        """
        combatant = self.get(combatant_id)
        position = next(
            index
            for index, other in enumerate(self.turn_order())
            if other.id == combatant_id
        )
        self.roster = [other for other in self.roster if other.id != combatant_id]
        self.state = clamp_after_removal(self.state, position, len(self.roster))
        log_info(
            f"Removed {combatant.display_name}",
            {"round": self.state.round, "turn_index": self.state.turn_index},
        )
        return combatant

    # ============================================================================
    # TURNS
    # ============================================================================

    def turn_order(self) -> list[Combatant]:
        """Returns the combatants in acting order, resolved from the live roster."""
        return resolve_turn_order(self.roster)

    def active(self) -> Combatant | None:
        """Returns the combatant whose turn it is."""
        return active_combatant(self.roster, self.state)

    def next_turn(self) -> Combatant | None:
        """
        Advances to the next turn.

        Returns:
            Combatant | None: The combatant whose turn it now is.

        Raises:
            EmptyRoster: If the roster is empty.

        """
        previous_round = self.state.round
        self.state = advance(self.state, len(self.roster))
        if self.state.round != previous_round:
            log_info(f"Round {self.state.round} begins")
        return self.active()

    def previous_turn(self) -> Combatant | None:
        """
        Steps back one turn.

        Returns:
            Combatant | None: The combatant whose turn it now is.

        Raises:
            EmptyRoster: If the roster is empty.

        """
        self.state = retreat(self.state, len(self.roster))
        return self.active()

    # ============================================================================
    # HIT POINTS
    # ============================================================================

    def damage(self, combatant_id: str, amount: int) -> DamageReport:
        """
        Deals damage to a combatant and records it.

        A concentrating combatant immediately rolls its concentration save.

        Args:
            combatant_id (str): Id of the target.
            amount (int): Damage dealt.

        Returns:
            DamageReport: How the damage was applied.

        """
        combatant = self.get(combatant_id)
        report = combatant.apply_damage(amount)
        if report.amount <= 0:
            return report
        self.roller.record_hp_change(
            combatant.display_name,
            "Damage Taken",
            f"−{report.amount}",
            -report.amount,
            report.summary(),
        )
        if combatant.is_concentrating:
            self.concentration_check(combatant, report.amount)
        return report

    def heal(self, combatant_id: str, amount: int) -> HealingReport:
        """
        Heals a combatant and records it.

        Args:
            combatant_id (str): Id of the target.
            amount (int): Healing offered.

        Returns:
            HealingReport: Actual healing and resulting HP.

        """
        combatant = self.get(combatant_id)
        report = combatant.heal(amount)
        if report.amount <= 0:
            return report
        self.roller.record_hp_change(
            combatant.display_name,
            "Healing",
            f"+{report.amount}",
            report.healed,
            report.summary(),
        )
        return report

    def grant_temp_hp(self, combatant_id: str, amount: int) -> int:
        """Grants temporary HP to a combatant, returning its new temporary HP."""
        return self.get(combatant_id).grant_temp_hp(amount)

    def concentration_check(
        self,
        combatant: Combatant,
        damage: int,
    ) -> RollOutcome | InvalidNotation:
        """
        Rolls the constitution save to keep concentration after damage.

        Args:
            combatant (Combatant): The concentrating combatant.
            damage (int): Damage that triggered the save.

        Returns:
            RollOutcome | InvalidNotation: The save roll.

        """
        modifier = get_stat_modifier(combatant.constitution or 10)
        dc = concentration_dc(damage)
        return self.roller.roll(
            RollRequest(
                notation=f"1d20{modifier:+d}",
                category=RollCategory.SAVE,
                name=f"Concentration (DC {dc})",
                creature_name=combatant.display_name,
            )
        )

    # ============================================================================
    # DICE
    # ============================================================================

    def roll(self, request: RollRequest) -> RollOutcome | InvalidNotation:
        """Rolls a request through the session's roller and log."""
        return self.roller.roll(request)
