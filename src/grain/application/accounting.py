"""
Weekly accounting engine.

Aggregates the day-log store into week totals, surplus bonuses, available
break credits, the goal streak and lifetime totals. Pure in-memory
computation over an already-loaded AppState; no I/O.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from grain.domain.calendar import SUNDAY, week_bounds, week_id, week_id_to_date
from grain.domain.constants import STREAK_LOOKBACK_YEARS, SURPLUS_MULTIPLIER
from grain.domain.models import LogKind
from grain.domain.state import AppState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeekTotals:
    """Non-Sunday totals for one Monday-Sunday week."""

    study: int
    breaks: int
    days_logged: int  # buckets with at least one entry


@dataclass(frozen=True)
class WeekStats:
    study_credits: int
    breaks_used: int
    breaks_available: int


@dataclass(frozen=True)
class TotalStats:
    total_study: int
    total_breaks: int
    total_entries: int


def compute_surplus(study_credits: int, weekly_goal: int) -> int:
    """
    Bonus break credits for exceeding the goal, at 2 per extra study credit.

    Meeting the goal exactly earns nothing, so ">" and ">=" agree here.
    """
    if study_credits > weekly_goal:
        return (study_credits - weekly_goal) * SURPLUS_MULTIPLIER
    return 0


def week_totals(state: AppState, start: date, end: date) -> WeekTotals:
    """Sum study and break amounts for [start, end], skipping Sunday buckets."""
    study = breaks = days = 0
    for bucket in state.store.buckets_in_range(start, end, exclude_weekday=SUNDAY):
        if bucket.entries:
            days += 1
        for entry in bucket.entries:
            if entry.kind == LogKind.STUDY:
                study += entry.amount
            elif entry.kind == LogKind.BREAK:
                breaks += entry.amount
    return WeekTotals(study=study, breaks=breaks, days_logged=days)


def _record_surplus(state: AppState, identifier: str, surplus: int) -> None:
    state.weekly_surplus[identifier] = surplus
    if surplus > state.best_surplus:
        logger.info(f"New best surplus: {surplus} (week {identifier})")
        state.best_surplus = surplus


def current_week_stats(state: AppState, now: datetime | None = None) -> WeekStats:
    """
    Study credits, breaks used and breaks available for the current week.

    Not side-effect free: when the live surplus differs from the stored one,
    the ledger entry for this week is overwritten and best_surplus may rise.
    Available breaks are computed from the stored surplus as read before
    that update.
    """
    now = now or datetime.now()
    start, end = week_bounds(now)
    identifier = week_id(now)
    config = state.config

    totals = week_totals(state, start, end)
    surplus = compute_surplus(totals.study, config.weekly_goal)

    stored = max(0, state.weekly_surplus.get(identifier, 0))
    available = max(0, config.break_start + stored - totals.breaks)

    if surplus != stored:
        logger.debug(f"Week {identifier}: stored surplus {stored} -> {surplus}")
        _record_surplus(state, identifier, surplus)

    return WeekStats(
        study_credits=totals.study,
        breaks_used=totals.breaks,
        breaks_available=available,
    )


def recalculate_weekly_stats(state: AppState, identifier: str) -> None:
    """
    Recompute the surplus ledger entry for one week.

    A week left without any entries is dropped from the ledger, so adding
    and then undoing a log restores the ledger exactly.
    """
    start, end = week_bounds(week_id_to_date(identifier))
    totals = week_totals(state, start, end)

    if not totals.days_logged:
        if state.weekly_surplus.pop(identifier, None) is not None:
            logger.debug(f"Week {identifier}: no entries left, dropped from ledger")
        return

    surplus = compute_surplus(totals.study, state.config.weekly_goal)
    logger.debug(f"Week {identifier}: study={totals.study} surplus={surplus}")
    _record_surplus(state, identifier, surplus)


def _years_before(t: datetime, years: int) -> datetime:
    # Feb 29 rolls forward to Mar 1
    return datetime(t.year - years, t.month, 1, t.hour, t.minute, t.second) + timedelta(
        days=t.day - 1
    )


def recalculate_overall_stats(state: AppState, now: datetime | None = None) -> None:
    """
    Recompute the streak of consecutive goal-meeting weeks.

    Walks backward from the week before the current one and stops at the
    first week with no entries or with study credits below the goal. Never
    looks further back than STREAK_LOOKBACK_YEARS.
    """
    now = now or datetime.now()
    current_id = week_id(now)
    cutoff = _years_before(now, STREAK_LOOKBACK_YEARS)
    goal = state.config.weekly_goal

    streak = 0
    check = now - timedelta(days=7)

    while state.store and week_id(check) != current_id:
        start, end = week_bounds(check)
        totals = week_totals(state, start, end)

        if not totals.days_logged or totals.study < goal:
            break

        streak += 1
        check -= timedelta(days=7)

        if check < cutoff:
            logger.debug(f"Streak walk reached {STREAK_LOOKBACK_YEARS}-year limit")
            break

    if streak != state.streak:
        logger.debug(f"Streak {state.streak} -> {streak}")
    state.streak = streak


def calculate_total_stats(state: AppState) -> TotalStats:
    """Lifetime sums over every entry, with no date filtering."""
    study = breaks = entries = 0
    for entry in state.store.all_entries():
        entries += 1
        if entry.kind == LogKind.STUDY:
            study += entry.amount
        elif entry.kind == LogKind.BREAK:
            breaks += entry.amount
    return TotalStats(total_study=study, total_breaks=breaks, total_entries=entries)
