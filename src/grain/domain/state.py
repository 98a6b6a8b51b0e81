"""Aggregate root holding everything grain tracks."""

from dataclasses import dataclass, field
from typing import Protocol

from .day_log import DayLogStore
from .models import UndoRecord


class TrackerConfig(Protocol):
    """The settings the accounting engine reads."""

    weekly_goal: int
    break_start: int


@dataclass
class AppState:
    """
    Loaded once per invocation, mutated in memory, saved once after a
    mutating command.

    `config` is attached at load time and is never written with the rest
    of the state.
    """

    config: TrackerConfig
    store: DayLogStore = field(default_factory=DayLogStore)
    weekly_surplus: dict[str, int] = field(default_factory=dict)  # "YYYY-WW" -> surplus
    streak: int = 0
    best_surplus: int = 0
    undo_stack: list[UndoRecord] = field(default_factory=list)
