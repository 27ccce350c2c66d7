"""
Dice roller module for the combat tracker.

Ties the roll modifier, the dice parser and the roll log together: a roll
request is rewritten for its mode, evaluated, tagged with a natural 20 / 1
when it applies, and recorded in the session's log.
"""

import random

from catchery import log_warning
from pydantic import BaseModel, Field

from combat_tracker.core.constants import CriticalResult, RollCategory, RollMode
from combat_tracker.core.error_handling import InvalidNotation
from combat_tracker.dice.dice_parser import RandomSource, RollResult, evaluate_notation
from combat_tracker.dice.roll_log import RollEntry, RollLog
from combat_tracker.dice.roll_modifier import apply_roll_modifier, detect_critical


class RollRequest(BaseModel):
    """A roll asked for by the game master."""

    notation: str = Field(
        description="Base dice notation, e.g. '1d20+5'.",
    )
    category: RollCategory = Field(
        description="What the roll is for.",
    )
    name: str = Field(
        description="Display label of the roll.",
    )
    mode: RollMode = Field(
        default=RollMode.NORMAL,
        description="Advantage, disadvantage, critical or normal.",
    )
    creature_name: str = Field(
        default="",
        description="Display name of the creature rolling.",
    )


class RollOutcome(BaseModel):
    """A resolved roll request, ready to be shown and logged."""

    request: RollRequest = Field(
        description="The request that produced this outcome.",
    )
    roll_name: str = Field(
        description="Display label including any mode suffix.",
    )
    result: RollResult = Field(
        description="The evaluated roll.",
    )

    @property
    def total(self) -> int:
        return self.result.total

    @property
    def critical(self) -> CriticalResult | None:
        return self.result.critical

    @property
    def title(self) -> str:
        """Notification title, e.g. 'Goblin A: 23 (Critical!)'."""
        suffix = self.critical.title_suffix if self.critical else ""
        return f"{self.request.creature_name}: {self.total}{suffix}"

    @property
    def color(self) -> str:
        """Critical results override the category color."""
        if self.critical:
            return self.critical.color
        return self.request.category.color


class DiceRoller:
    """
    Rolls requests for one session and records them in its log.

    The random source is injected so that tests and replays are
    deterministic.
    """

    def __init__(self, log: RollLog | None = None, rng: RandomSource | None = None):
        """
        Initialize the roller.

        Args:
            log (RollLog | None): Log to record into. A new one is created if omitted.
            rng (RandomSource | None): Random source. Defaults to the random module.

        """
        self.log: RollLog = log if log is not None else RollLog()
        self.rng: RandomSource = rng or random

    def roll(self, request: RollRequest) -> RollOutcome | InvalidNotation:
        """
        Resolves a roll request and appends it to the log.

        Args:
            request (RollRequest): The roll to make.

        Returns:
            RollOutcome | InvalidNotation:
                The outcome, or the error when the notation cannot be parsed.
                Invalid rolls are not recorded.

        """
        modifier = apply_roll_modifier(request.notation, request.category, request.mode)
        result = evaluate_notation(modifier.notation, self.rng)
        if isinstance(result, InvalidNotation):
            log_warning(
                f"Roll '{request.name}' was not recorded",
                {"creature": request.creature_name, "notation": request.notation},
            )
            return result

        critical = detect_critical(result, request.category)
        result = result.model_copy(update={"critical": critical})
        outcome = RollOutcome(
            request=request,
            roll_name=f"{request.name}{modifier.label_suffix}",
            result=result,
        )
        self.log.append(
            RollEntry(
                creature_name=request.creature_name,
                category=request.category,
                roll_name=outcome.roll_name,
                notation=modifier.notation,
                result=result.total,
                output=result.output,
                critical=critical,
            )
        )
        return outcome

    def record_hp_change(
        self,
        creature_name: str,
        roll_name: str,
        notation: str,
        result: int,
        output: str,
    ) -> RollEntry:
        """
        Records a manual HP adjustment (damage taken or healing) in the log.

        Args:
            creature_name (str): Display name of the affected creature.
            roll_name (str): 'Damage Taken' or 'Healing'.
            notation (str): The adjustment, e.g. '-7' or '+5'.
            result (int): Signed HP change.
            output (str): HP summary after the change.

        Returns:
            RollEntry: The recorded entry.

        """
        return self.log.append(
            RollEntry(
                creature_name=creature_name,
                category=RollCategory.DAMAGE,
                roll_name=roll_name,
                notation=notation,
                result=result,
                output=output,
            )
        )
