# Domain Package
from .day_log import DayLogStore
from .models import DayBucket, LogEntry, LogKind, UndoRecord
from .ports import StateRepository
from .state import AppState, TrackerConfig

__all__ = [
    "AppState",
    "DayBucket",
    "DayLogStore",
    "LogEntry",
    "LogKind",
    "StateRepository",
    "TrackerConfig",
    "UndoRecord",
]
