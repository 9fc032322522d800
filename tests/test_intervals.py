"""Tests for the half-open interval helpers."""

from datetime import date, datetime, timedelta, timezone as dt_timezone

from apps.bookings.intervals import (
    TimeInterval,
    add_minutes,
    clip_interval,
    date_range,
    end_of_day,
    intervals_overlap,
    start_of_day,
)
from tests.conftest import DAY, at


class TestIntervalsOverlap:
    def test_partial_overlap(self):
        assert intervals_overlap(TimeInterval(at(9), at(10)), TimeInterval(at(9, 30), at(11)))

    def test_containment(self):
        assert intervals_overlap(TimeInterval(at(8), at(12)), TimeInterval(at(9), at(9, 30)))

    def test_touching_intervals_do_not_overlap(self):
        a = TimeInterval(at(9), at(9, 30))
        b = TimeInterval(at(9, 30), at(10))
        assert not intervals_overlap(a, b)
        assert not intervals_overlap(b, a)

    def test_disjoint(self):
        assert not intervals_overlap(TimeInterval(at(8), at(9)), TimeInterval(at(10), at(11)))

    def test_symmetric(self):
        a = TimeInterval(at(9), at(10))
        b = TimeInterval(at(9, 45), at(10, 15))
        assert intervals_overlap(a, b) == intervals_overlap(b, a)


class TestDayBounds:
    def test_start_of_day(self):
        assert start_of_day(DAY) == at(0)

    def test_end_of_day_is_last_instant(self):
        end = end_of_day(DAY)
        assert end.date() == DAY
        assert end + timedelta(microseconds=1) == start_of_day(DAY + timedelta(days=1))

    def test_respects_zone(self):
        tz = dt_timezone(timedelta(hours=2))
        assert start_of_day(DAY, tz) == at(0) - timedelta(hours=2)


class TestHelpers:
    def test_add_minutes(self):
        assert add_minutes(at(11, 45), 30) == at(12, 15)

    def test_clip_interval_inside_bounds(self):
        clipped = clip_interval(TimeInterval(at(6), at(20)), at(8), at(12))
        assert clipped == TimeInterval(at(8), at(12))

    def test_clip_interval_returns_none_when_empty(self):
        assert clip_interval(TimeInterval(at(6), at(7)), at(8), at(12)) is None

    def test_clip_interval_inverted(self):
        assert clip_interval(TimeInterval(at(12), at(8)), at(0), at(23)) is None

    def test_date_range_inclusive(self):
        days = date_range(date(2030, 2, 27), date(2030, 3, 2))
        assert days == [date(2030, 2, 27), date(2030, 2, 28), date(2030, 3, 1), date(2030, 3, 2)]

    def test_date_range_single_day(self):
        assert date_range(DAY, DAY) == [DAY]

    def test_date_range_empty_when_reversed(self):
        assert date_range(DAY, DAY - timedelta(days=1)) == []

    def test_overnight_shift_clipped_to_day(self):
        shift = TimeInterval(datetime(2030, 3, 3, 22, tzinfo=dt_timezone.utc), at(2))
        assert clip_interval(shift, start_of_day(DAY), end_of_day(DAY)) == TimeInterval(at(0), at(2))
