"""
Roll log module for the combat tracker.

Keeps the most recent rolls of a single combat session in a bounded,
most-recent-first buffer. Each session owns its own log.
"""

from collections import deque
from collections.abc import Iterator
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field

from combat_tracker.core.constants import (
    ROLL_LOG_CAPACITY,
    CriticalResult,
    RollCategory,
)


class RollEntry(BaseModel):
    """One line of roll history."""

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique id of the entry.",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the roll was recorded.",
    )
    creature_name: str = Field(
        description="Display name of the creature that rolled.",
    )
    category: RollCategory = Field(
        description="What the roll was for.",
    )
    roll_name: str = Field(
        description="Display label of the roll, e.g. 'Longsword - Damage'.",
    )
    notation: str = Field(
        description="Notation that was rolled, or the HP adjustment applied.",
    )
    result: int = Field(
        description="Total of the roll.",
    )
    output: str = Field(
        description="Per-die breakdown or HP summary.",
    )
    critical: CriticalResult | None = Field(
        default=None,
        description="Natural 20 / natural 1 tag, if any.",
    )

    @property
    def label(self) -> str:
        """Short category label, with healing told apart from damage."""
        if self.category is RollCategory.DAMAGE and self.roll_name == "Healing":
            return "Heal"
        return self.category.short_label


class RollLog:
    """
    A bounded roll history, newest entry first.

    When the log is full, appending evicts the oldest entry.
    """

    def __init__(self, capacity: int = ROLL_LOG_CAPACITY) -> None:
        """
        Initialize an empty log.

        Args:
            capacity (int): Maximum number of entries kept. Must be positive.

        """
        if capacity < 1:
            raise ValueError(f"Roll log capacity must be positive, got {capacity}")
        self._entries: deque[RollEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def append(self, entry: RollEntry) -> RollEntry:
        """
        Records an entry at the front of the log.

        Args:
            entry (RollEntry): The entry to record.

        Returns:
            RollEntry: The recorded entry.

        """
        # appendleft on a full deque drops from the right, i.e. the oldest.
        self._entries.appendleft(entry)
        return entry

    def latest(self) -> RollEntry | None:
        """Returns the most recent entry, if any."""
        return self._entries[0] if self._entries else None

    def entries(self) -> list[RollEntry]:
        """Returns a snapshot of the entries, newest first."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RollEntry]:
        return iter(list(self._entries))
