"""
Tracker Service — Application layer orchestrator.

Maps each user command onto one engine call, enforces the caller-side
break-credit check, and saves the state exactly once after every
successful mutation.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path

from grain.domain.calendar import week_bounds
from grain.domain.constants import DATE_FORMAT
from grain.domain.errors import InsufficientBreakCreditsError, ValidationError
from grain.domain.models import LogEntry, LogKind
from grain.domain.ports import StateRepository
from grain.domain.state import AppState

from .accounting import (
    calculate_total_stats,
    compute_surplus,
    current_week_stats,
    recalculate_overall_stats,
)
from .mutations import add_log, reset_week_data, undo_last_action

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeekOverview:
    week_start: date
    study_credits: int
    weekly_goal: int
    breaks_available: int
    break_start: int
    surplus: int
    streak: int


@dataclass(frozen=True)
class LifetimeStats:
    streak: int
    best_surplus: int
    total_study: int
    total_breaks: int
    total_entries: int


@dataclass(frozen=True)
class LogView:
    """Entries matched by a --since filter plus their totals."""

    header: str
    entries: list[LogEntry]
    total_study: int
    total_breaks: int


def _short(d: date) -> str:
    return f"{d:%b} {d.day}"


class TrackerService:
    """
    Application service for the grain command surface.

    Follows Dependency Inversion: depends on the StateRepository port,
    not on the JSON adapter.
    """

    def __init__(self, state: AppState, repo: StateRepository):
        self.state = state
        self._repo = repo

    @property
    def remaining_undo(self) -> int:
        return len(self.state.undo_stack)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def log_study(self, amount: int = 1, now: datetime | None = None) -> LogEntry:
        entry = add_log(self.state, LogKind.STUDY, amount, now or datetime.now())
        self._repo.save(self.state)
        return entry

    def log_break(self, amount: int = 1, now: datetime | None = None) -> LogEntry:
        """
        Spend break credits.

        Raises:
            InsufficientBreakCreditsError: if `amount` exceeds what is available
                this week. add_log itself does not enforce the cap.
        """
        now = now or datetime.now()
        if amount > 0:
            available = current_week_stats(self.state, now).breaks_available
            if amount > available:
                raise InsufficientBreakCreditsError(requested=amount, available=available)

        entry = add_log(self.state, LogKind.BREAK, amount, now)
        self._repo.save(self.state)
        return entry

    def undo(self, now: datetime | None = None) -> LogEntry:
        entry = undo_last_action(self.state, now)
        self._repo.save(self.state)
        return entry

    def reset_week(self, now: datetime | None = None) -> None:
        reset_week_data(self.state, now)
        self._repo.save(self.state)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def week_overview(self, now: datetime | None = None) -> WeekOverview:
        now = now or datetime.now()
        stats = current_week_stats(self.state, now)
        recalculate_overall_stats(self.state, now)
        config = self.state.config

        return WeekOverview(
            week_start=week_bounds(now)[0],
            study_credits=stats.study_credits,
            weekly_goal=config.weekly_goal,
            breaks_available=stats.breaks_available,
            break_start=config.break_start,
            surplus=compute_surplus(stats.study_credits, config.weekly_goal),
            streak=self.state.streak,
        )

    def lifetime_stats(self, now: datetime | None = None) -> LifetimeStats:
        recalculate_overall_stats(self.state, now)
        totals = calculate_total_stats(self.state)
        return LifetimeStats(
            streak=self.state.streak,
            best_surplus=self.state.best_surplus,
            total_study=totals.total_study,
            total_breaks=totals.total_breaks,
            total_entries=totals.total_entries,
        )

    def entries_since(self, since: str | None = None, now: datetime | None = None) -> LogView:
        """
        Entries for the log viewer.

        `since` accepts 'today' (default), 'yesterday', 'monday' or a
        YYYY-MM-DD date. The last two run up to `now`.
        """
        now = now or datetime.now()
        today = now.date()
        key = (since or "today").strip().lower()
        until: datetime | None = None

        if key == "today":
            start = end = today
            header = _short(today)
        elif key == "yesterday":
            start = end = today - timedelta(days=1)
            header = _short(start)
        elif key == "monday":
            start, end, until = week_bounds(now)[0], today, now
            header = f"Week of {_short(start)}"
        else:
            try:
                start = datetime.strptime(key, DATE_FORMAT).date()
            except ValueError:
                raise ValidationError(
                    f"invalid --since value: '{since}'. "
                    "Use 'today', 'yesterday', 'monday', or 'YYYY-MM-DD'"
                ) from None
            end, until = today, now
            header = f"Since {_short(start)}"

        entries = list(
            self.state.store.range_filter(
                start, end, since=datetime.combine(start, time.min), until=until
            )
        )
        study = sum(e.amount for e in entries if e.kind == LogKind.STUDY)
        breaks = sum(e.amount for e in entries if e.kind == LogKind.BREAK)
        return LogView(header=header, entries=entries, total_study=study, total_breaks=breaks)

    # ------------------------------------------------------------------
    # Backup / restore
    # ------------------------------------------------------------------

    def backup(self, now: datetime | None = None) -> Path:
        return self._repo.backup(now or datetime.now())

    def list_backups(self) -> list[Path]:
        return self._repo.list_backups()

    def restore(self, backup_name: str, backup_dir: Path, now: datetime | None = None) -> None:
        """
        Replace the stored state with a backup, then reload and re-derive the streak.
        """
        if not backup_name or Path(backup_name).name != backup_name:
            raise ValidationError(
                f"invalid backup file name: '{backup_name}'. "
                "Please provide only the filename, not a path."
            )

        self._repo.restore(backup_dir / backup_name)
        self.state = self._repo.load(self.state.config)
        recalculate_overall_stats(self.state, now)
        self._repo.save(self.state)
        logger.info(f"Restored state from {backup_name}")
