"""
State transitions: log, undo and reset-week.

Each operation validates first, mutates the AppState in place, then
refreshes the affected derived stats. Break-credit availability is NOT
checked here; callers that spend breaks must consult current_week_stats
before calling add_log.
"""

import logging
from datetime import datetime

from grain.domain.calendar import is_sunday, week_bounds, week_id
from grain.domain.errors import InternalConsistencyError, NothingToUndoError, ValidationError
from grain.domain.models import LogEntry, LogKind, UndoRecord
from grain.domain.state import AppState

from .accounting import recalculate_overall_stats, recalculate_weekly_stats

logger = logging.getLogger(__name__)


def add_log(state: AppState, kind: LogKind, amount: int, timestamp: datetime) -> LogEntry:
    """
    Record a study or break entry at `timestamp`.

    Raises:
        ValidationError: on Sundays or for a non-positive amount.
    """
    if is_sunday(timestamp):
        raise ValidationError("logging is disabled on Sundays 🧘")
    if amount <= 0:
        raise ValidationError("log amount must be positive")

    entry = LogEntry(kind=LogKind(kind), timestamp=timestamp, amount=amount)

    bucket = state.store.find_or_create_day(timestamp.date())
    bucket.entries.append(entry)
    # sorted() is stable: equal timestamps keep insertion order
    bucket.entries = sorted(bucket.entries, key=lambda e: e.timestamp)

    state.undo_stack.append(UndoRecord(entry=entry, day=bucket.date))
    logger.debug(f"Logged {entry.kind.value} +{entry.amount} on {bucket.date}")

    # Streak is intentionally left alone; display, undo and reset refresh it.
    recalculate_weekly_stats(state, week_id(timestamp))
    return entry


def undo_last_action(state: AppState, now: datetime | None = None) -> LogEntry:
    """
    Remove the most recently logged entry and return it.

    Raises:
        NothingToUndoError: if the undo stack is empty.
        InternalConsistencyError: if the recorded day or entry is missing.
    """
    if not state.undo_stack:
        raise NothingToUndoError()

    record = state.undo_stack.pop()
    day_str = record.day.isoformat()

    bucket = state.store.find_day(record.day)
    if bucket is None:
        raise InternalConsistencyError(f"cannot find day log '{day_str}' for undo")

    index = next(
        (i for i, entry in enumerate(bucket.entries) if entry.matches(record.entry)),
        None,
    )
    if index is None:
        raise InternalConsistencyError(
            f"cannot find log entry to undo in day '{day_str}'"
        )

    removed = bucket.entries.pop(index)
    if not bucket.entries:
        state.store.remove_day(record.day)

    logger.debug(f"Undid {removed.kind.value} {removed.amount} on {day_str}")

    recalculate_weekly_stats(state, week_id(record.day))
    recalculate_overall_stats(state, now)
    return removed


def reset_week_data(state: AppState, now: datetime | None = None) -> None:
    """
    Wipe the current week: its day buckets, its surplus and the whole undo stack.

    Irreversible; earlier undo records may point into the removed days.
    """
    now = now or datetime.now()
    start, end = week_bounds(now)

    removed = state.store.remove_range(start, end)
    state.weekly_surplus.pop(week_id(now), None)
    state.undo_stack.clear()
    logger.info(f"Reset week of {start}: removed {removed} day(s)")

    recalculate_overall_stats(state, now)
