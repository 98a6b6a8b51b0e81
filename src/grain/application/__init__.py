# Application Package
from .accounting import (
    TotalStats,
    WeekStats,
    calculate_total_stats,
    current_week_stats,
    recalculate_overall_stats,
    recalculate_weekly_stats,
)
from .mutations import add_log, reset_week_data, undo_last_action
from .tracker_service import TrackerService

__all__ = [
    "TotalStats",
    "TrackerService",
    "WeekStats",
    "add_log",
    "calculate_total_stats",
    "current_week_stats",
    "recalculate_overall_stats",
    "recalculate_weekly_stats",
    "reset_week_data",
    "undo_last_action",
]
