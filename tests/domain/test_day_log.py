from datetime import date, datetime

from grain.domain.calendar import SUNDAY
from grain.domain.day_log import DayLogStore
from grain.domain.models import DayBucket, LogEntry, LogKind


def entry(ts: datetime, amount: int = 1, kind: LogKind = LogKind.STUDY) -> LogEntry:
    return LogEntry(kind=kind, timestamp=ts, amount=amount)


def test_find_or_create_keeps_dates_sorted():
    store = DayLogStore()
    for d in [date(2024, 5, 15), date(2024, 5, 13), date(2024, 5, 17), date(2024, 5, 14)]:
        store.find_or_create_day(d)

    assert store.dates == [
        date(2024, 5, 13),
        date(2024, 5, 14),
        date(2024, 5, 15),
        date(2024, 5, 17),
    ]


def test_find_or_create_returns_existing_bucket():
    store = DayLogStore()
    first = store.find_or_create_day(date(2024, 5, 13))
    first.entries.append(entry(datetime(2024, 5, 13, 9)))

    again = store.find_or_create_day(date(2024, 5, 13))

    assert again is first
    assert len(store) == 1


def test_find_day_missing():
    store = DayLogStore([DayBucket(date(2024, 5, 13))])
    assert store.find_day(date(2024, 5, 14)) is None
    assert store.find_day(date(2024, 5, 13)) is not None


def test_remove_day_is_noop_when_absent():
    store = DayLogStore([DayBucket(date(2024, 5, 13))])
    store.remove_day(date(2024, 1, 1))
    assert store.dates == [date(2024, 5, 13)]

    store.remove_day(date(2024, 5, 13))
    assert not store


def test_constructor_merges_duplicate_dates_and_sorts():
    store = DayLogStore(
        [
            DayBucket(date(2024, 5, 14), [entry(datetime(2024, 5, 14, 10), 2)]),
            DayBucket(date(2024, 5, 13), [entry(datetime(2024, 5, 13, 9))]),
            DayBucket(date(2024, 5, 14), [entry(datetime(2024, 5, 14, 9), 1)]),
        ]
    )

    assert store.dates == [date(2024, 5, 13), date(2024, 5, 14)]
    assert [e.amount for e in store.find_day(date(2024, 5, 14)).entries] == [1, 2]


def test_remove_range_is_inclusive():
    store = DayLogStore(DayBucket(date(2024, 5, d)) for d in range(11, 21))
    removed = store.remove_range(date(2024, 5, 13), date(2024, 5, 19))

    assert removed == 7
    assert store.dates == [date(2024, 5, 11), date(2024, 5, 12), date(2024, 5, 20)]


class TestRangeFilter:
    def make_store(self):
        return DayLogStore(
            [
                DayBucket(date(2024, 5, 12), [entry(datetime(2024, 5, 12, 9), 100)]),  # Sunday
                DayBucket(date(2024, 5, 13), [entry(datetime(2024, 5, 13, 9), 1)]),
                DayBucket(
                    date(2024, 5, 16),
                    [entry(datetime(2024, 5, 16, 8), 2), entry(datetime(2024, 5, 16, 18), 3)],
                ),
                DayBucket(date(2024, 5, 19), [entry(datetime(2024, 5, 19, 9), 50)]),  # Sunday
            ]
        )

    def test_closed_range(self):
        amounts = [e.amount for e in self.make_store().range_filter(date(2024, 5, 13), date(2024, 5, 19))]
        assert amounts == [1, 2, 3, 50]

    def test_excludes_weekday(self):
        store = self.make_store()
        amounts = [
            e.amount
            for e in store.range_filter(date(2024, 5, 12), date(2024, 5, 19), exclude_weekday=SUNDAY)
        ]
        assert amounts == [1, 2, 3]

    def test_timestamp_bounds(self):
        store = self.make_store()
        amounts = [
            e.amount
            for e in store.range_filter(
                date(2024, 5, 13),
                date(2024, 5, 16),
                since=datetime(2024, 5, 13, 0, 0),
                until=datetime(2024, 5, 16, 12, 0),
            )
        ]
        assert amounts == [1, 2]

    def test_is_lazy(self):
        result = self.make_store().range_filter(date(2024, 5, 13), date(2024, 5, 19))
        assert next(result).amount == 1
