"""
Constants and enumerations for the combat tracker.

Defines global limits, the condition list for the supported ruleset, and
the enumerations for roll categories, roll modes, critical results,
difficulty ratings and combatant sources used throughout the tracker.
"""

from enum import Enum

# Number of entries kept in a session's roll log before the oldest is evicted.
ROLL_LOG_CAPACITY = 50

# Hard limits on a single dice term.
MAX_DICE_COUNT = 100
MAX_DICE_SIDES = 1000

# Fallback values when a stats snapshot lacks a field.
DEFAULT_DEXTERITY = 10
DEFAULT_CONSTITUTION = 10
DEFAULT_ARMOR_CLASS = 10
DEFAULT_HIT_POINTS = 10

# Maximum number of instances spawned from one source creature at once.
MAX_SPAWN_QUANTITY = 20

# Character levels covered by the threshold table.
MIN_CHARACTER_LEVEL = 1
MAX_CHARACTER_LEVEL = 20

DND5E_CONDITIONS: tuple[str, ...] = (
    "Blinded",
    "Charmed",
    "Deafened",
    "Frightened",
    "Grappled",
    "Incapacitated",
    "Invisible",
    "Paralyzed",
    "Petrified",
    "Poisoned",
    "Prone",
    "Restrained",
    "Stunned",
    "Unconscious",
    "Exhaustion 1",
    "Exhaustion 2",
    "Exhaustion 3",
    "Exhaustion 4",
    "Exhaustion 5",
    "Exhaustion 6",
)


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().capitalize()


class RollCategory(NiceEnum):
    """Defines what kind of check a roll represents."""

    ABILITY = "ability"
    SAVE = "save"
    SKILL = "skill"
    ATTACK = "attack"
    DAMAGE = "damage"

    @property
    def color(self) -> str:
        """Returns the color string associated with this roll category."""
        return {
            RollCategory.ABILITY: "bold blue",
            RollCategory.SAVE: "bold magenta",
            RollCategory.SKILL: "bold cyan",
            RollCategory.ATTACK: "bold yellow",
            RollCategory.DAMAGE: "bold red",
        }.get(self, "dim white")

    @property
    def short_label(self) -> str:
        """Returns the compact label used in the roll history."""
        return {
            RollCategory.ABILITY: "Check",
            RollCategory.SAVE: "Save",
            RollCategory.SKILL: "Skill",
            RollCategory.ATTACK: "Atk",
            RollCategory.DAMAGE: "Dmg",
        }[self]

    @property
    def checks_for_critical(self) -> bool:
        """Whether natural 20 / natural 1 detection applies to this category."""
        return self is not RollCategory.DAMAGE


class RollMode(NiceEnum):
    """Defines how a base notation is rewritten before it is rolled."""

    NORMAL = "normal"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"
    CRIT = "crit"


class CriticalResult(NiceEnum):
    """Natural roll classification of a d20 roll."""

    NAT20 = "nat20"
    NAT1 = "nat1"

    @property
    def title_suffix(self) -> str:
        """Returns the suffix appended to the roll title."""
        return {
            CriticalResult.NAT20: " (Critical!)",
            CriticalResult.NAT1: " (Critical Fail!)",
        }[self]

    @property
    def color(self) -> str:
        """Returns the color string associated with this result."""
        return {
            CriticalResult.NAT20: "bold green",
            CriticalResult.NAT1: "bold red",
        }[self]


class DifficultyRating(NiceEnum):
    """Encounter difficulty bands, from weakest to strongest."""

    TRIVIAL = "Trivial"
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    DEADLY = "Deadly"

    @property
    def color(self) -> str:
        """Returns the color string associated with this rating."""
        return {
            DifficultyRating.TRIVIAL: "grey50",
            DifficultyRating.EASY: "green",
            DifficultyRating.MEDIUM: "yellow",
            DifficultyRating.HARD: "dark_orange",
            DifficultyRating.DEADLY: "red",
        }[self]

    @property
    def colored_name(self) -> str:
        return self.colorize(self.value)

    def colorize(self, message: str) -> str:
        """Applies rating color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class SourceType(NiceEnum):
    """Where a combatant's stat block came from."""

    CREATURE = "creature"
    CUSTOM = "custom"
    PC = "pc"
