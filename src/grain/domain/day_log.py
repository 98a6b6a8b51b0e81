"""
Day-partitioned log store.

Entries are grouped into one DayBucket per calendar date and the buckets
are kept sorted ascending by date. Aggregations always filter by explicit
date range, so the order only matters for display.
"""

import bisect
from collections.abc import Iterable, Iterator
from datetime import date, datetime

from .models import DayBucket, LogEntry


class DayLogStore:
    def __init__(self, buckets: Iterable[DayBucket] = ()):
        self._buckets: list[DayBucket] = []
        for bucket in buckets:
            existing = self.find_day(bucket.date)
            if existing is None:
                self._insert(bucket)
            else:
                # stable sort keeps file order for equal timestamps
                existing.entries = sorted(
                    existing.entries + bucket.entries, key=lambda e: e.timestamp
                )

    def __iter__(self) -> Iterator[DayBucket]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def __bool__(self) -> bool:
        return bool(self._buckets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DayLogStore):
            return NotImplemented
        return self._buckets == other._buckets

    def __repr__(self) -> str:
        return f"DayLogStore({self._buckets!r})"

    @property
    def dates(self) -> list[date]:
        return [b.date for b in self._buckets]

    def find_day(self, day: date) -> DayBucket | None:
        """Exact-match lookup by calendar date."""
        i = bisect.bisect_left(self.dates, day)
        if i < len(self._buckets) and self._buckets[i].date == day:
            return self._buckets[i]
        return None

    def find_or_create_day(self, day: date) -> DayBucket:
        """
        Return the bucket for `day`, inserting an empty one in date order if needed.

        An empty bucket is transient: callers add an entry to it right away,
        and the repository drops empty buckets on save.
        """
        bucket = self.find_day(day)
        if bucket is None:
            bucket = DayBucket(date=day)
            self._insert(bucket)
        return bucket

    def remove_day(self, day: date) -> None:
        """Delete the bucket for `day`; no-op if there is none."""
        self._buckets = [b for b in self._buckets if b.date != day]

    def remove_range(self, start: date, end: date) -> int:
        """Delete every bucket dated within [start, end]. Returns how many went."""
        kept = [b for b in self._buckets if not (start <= b.date <= end)]
        removed = len(self._buckets) - len(kept)
        self._buckets = kept
        return removed

    def range_filter(
        self,
        start: date,
        end: date,
        exclude_weekday: int | None = None,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> Iterator[LogEntry]:
        """
        Lazily yield entries whose bucket date lies in [start, end].

        Buckets falling on `exclude_weekday` (Monday=0 .. Sunday=6) are skipped.
        When `since`/`until` are given the entry timestamp must also lie
        within them (inclusive), for ranges that end partway through a day.
        """
        for bucket in self.buckets_in_range(start, end, exclude_weekday):
            for entry in bucket.entries:
                if since is not None and entry.timestamp < since:
                    continue
                if until is not None and entry.timestamp > until:
                    continue
                yield entry

    def buckets_in_range(
        self, start: date, end: date, exclude_weekday: int | None = None
    ) -> Iterator[DayBucket]:
        for bucket in self._buckets:
            if not (start <= bucket.date <= end):
                continue
            if exclude_weekday is not None and bucket.date.weekday() == exclude_weekday:
                continue
            yield bucket

    def all_entries(self) -> Iterator[LogEntry]:
        for bucket in self._buckets:
            yield from bucket.entries

    def _insert(self, bucket: DayBucket) -> None:
        i = bisect.bisect_right(self.dates, bucket.date)
        self._buckets.insert(i, bucket)
