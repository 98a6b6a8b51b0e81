"""
Domain models for credit tracking.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class LogKind(str, Enum):
    STUDY = "study"
    BREAK = "break"


@dataclass(frozen=True)
class LogEntry:
    """
    A single credit transaction.

    Attributes:
        kind: Study entries earn credits, break entries spend them.
        timestamp: Local wall-clock time of the entry (naive).
        amount: Positive number of credits.
    """

    kind: LogKind
    timestamp: datetime
    amount: int

    def matches(self, other: "LogEntry") -> bool:
        """Composite identity used by undo: (timestamp, amount, kind)."""
        return (
            self.timestamp == other.timestamp
            and self.amount == other.amount
            and self.kind == other.kind
        )


@dataclass
class DayBucket:
    """All entries logged on one calendar date, sorted by timestamp."""

    date: date
    entries: list[LogEntry] = field(default_factory=list)


@dataclass(frozen=True)
class UndoRecord:
    """The entry that was added and the date of the bucket it went into."""

    entry: LogEntry
    day: date

