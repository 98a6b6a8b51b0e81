"""
ISO week arithmetic.

Weeks always run Monday through Sunday and are identified by their
ISO-8601 (year, week) pair, formatted "YYYY-WW".
"""

from datetime import date, datetime, timedelta

SUNDAY = 6


def _as_date(t: date | datetime) -> date:
    return t.date() if isinstance(t, datetime) else t


def week_bounds(t: date | datetime) -> tuple[date, date]:
    """
    Return the Monday and Sunday (both inclusive) of the week containing `t`.
    """
    day = _as_date(t)
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def week_id(t: date | datetime) -> str:
    """
    Return the ISO week identifier for `t`, e.g. "2024-01".

    Weeks belong to the year containing their Thursday, so 2024-12-30 is "2025-01".
    """
    year, week, _ = _as_date(t).isocalendar()
    return f"{year}-{week:02d}"


def parse_week_id(identifier: str) -> tuple[int, int]:
    """Split "YYYY-WW" into (year, week). Raises ValueError if malformed."""
    year_str, sep, week_str = identifier.partition("-")
    if not sep or not year_str.isdigit() or not week_str.isdigit():
        raise ValueError(f"invalid week id: {identifier!r}")
    return int(year_str), int(week_str)


def week_id_to_date(identifier: str) -> date:
    """
    Resolve a week identifier back to the Monday of that ISO week.

    Exact at year boundaries: week_id(week_id_to_date(week_id(d))) == week_id(d)
    for every date d.
    """
    year, week = parse_week_id(identifier)
    return date.fromisocalendar(year, week, 1)


def is_sunday(t: date | datetime) -> bool:
    return _as_date(t).weekday() == SUNDAY
