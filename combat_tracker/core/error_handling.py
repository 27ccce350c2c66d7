"""
Error types raised and returned by the combat core.

Nothing here is fatal to the surrounding process: dice errors are handed back
to the caller as values, turn errors signal a violated caller precondition.
"""

from typing import Any


class TrackerError(Exception):
    """Base class for every error raised by the combat tracker."""


class InvalidNotation(TrackerError, ValueError):
    """A dice expression could not be parsed or exceeds the dice limits."""

    def __init__(self, notation: Any, reason: str = "malformed dice notation"):
        self.notation = notation
        self.reason = reason
        super().__init__(f"Invalid dice notation {notation!r}: {reason}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InvalidNotation):
            return NotImplemented
        return self.notation == other.notation and self.reason == other.reason

    def __hash__(self) -> int:
        return hash((str(self.notation), self.reason))


class EmptyRoster(TrackerError):
    """A turn transition was requested for a roster with no combatants."""

    def __init__(self, operation: str = "advance"):
        self.operation = operation
        super().__init__(f"Cannot {operation} the turn order of an empty roster")


class UnknownCombatant(TrackerError, KeyError):
    """No combatant with the requested id is part of the session."""

    def __init__(self, combatant_id: str):
        self.combatant_id = combatant_id
        super().__init__(combatant_id)

    def __str__(self) -> str:
        return f"No combatant with id {self.combatant_id!r}"
