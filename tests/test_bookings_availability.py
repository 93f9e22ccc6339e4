"""Tests for overlap counting and recurring booking expansion"""
from datetime import date, datetime, timezone

import pytest

from clubflow.core.timeutils import add_months, parse_timestamp
from clubflow.modules.bookings.availability import evaluate_availability, expand_occurrences, overlaps


def ts(day, hour, month=5, year=2026):
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def booking(id, start, end, status="confirmed"):
    return {"id": id, "start_time": start.isoformat(), "end_time": end.isoformat(), "status": status}


class TestOverlaps:
    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(ts(1, 10), ts(1, 11), ts(1, 11), ts(1, 12))

    def test_contained_interval_overlaps(self):
        assert overlaps(ts(1, 10), ts(1, 14), ts(1, 11), ts(1, 12))


class TestEvaluateAvailability:
    def test_single_slot_facility_is_blocked(self):
        result = evaluate_availability([booking(1, ts(1, 10), ts(1, 12))], ts(1, 11), ts(1, 13), 1)
        assert result["available"] is False
        assert result["current_bookings"] == 1
        assert result["conflicting_bookings"][0]["id"] == 1

    def test_capacity_allows_parallel_bookings(self):
        rows = [booking(1, ts(1, 10), ts(1, 12))]
        assert evaluate_availability(rows, ts(1, 11), ts(1, 13), 2)["available"] is True

    def test_cancelled_bookings_are_ignored(self):
        rows = [booking(1, ts(1, 10), ts(1, 12), status="cancelled")]
        assert evaluate_availability(rows, ts(1, 10), ts(1, 12), 1)["available"] is True

    def test_excluded_booking_is_ignored(self):
        rows = [booking(7, ts(1, 10), ts(1, 12))]
        result = evaluate_availability(rows, ts(1, 10), ts(1, 12), 1, exclude_booking_id=7)
        assert result["available"] is True
        assert result["current_bookings"] == 0

    def test_unset_capacity_means_one(self):
        result = evaluate_availability([], ts(1, 10), ts(1, 12), None)
        assert result["max_concurrent"] == 1


class TestExpandOccurrences:
    def test_weekly_until_is_inclusive(self):
        occurrences = expand_occurrences(ts(1, 18), ts(1, 20), "weekly", date(2026, 5, 22))
        assert [o[0].day for o in occurrences] == [1, 8, 15, 22]
        assert all(end - start == ts(1, 20) - ts(1, 18) for start, end in occurrences)

    def test_daily(self):
        occurrences = expand_occurrences(ts(30, 9), ts(30, 10), "daily", date(2026, 6, 2))
        assert [o[0].date() for o in occurrences] == [
            date(2026, 5, 30), date(2026, 5, 31), date(2026, 6, 1), date(2026, 6, 2),
        ]

    def test_monthly_clamps_and_returns_to_anchor_day(self):
        occurrences = expand_occurrences(ts(31, 9, month=1), ts(31, 10, month=1), "monthly", date(2026, 4, 30))
        assert [o[0].date() for o in occurrences] == [
            date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 31), date(2026, 4, 30),
        ]

    def test_occurrences_are_capped(self):
        occurrences = expand_occurrences(ts(1, 9), ts(1, 10), "daily", date(2030, 1, 1), max_occurrences=10)
        assert len(occurrences) == 10

    def test_until_before_start_gives_nothing(self):
        assert expand_occurrences(ts(10, 9), ts(10, 10), "weekly", date(2026, 5, 1)) == []

    def test_unknown_pattern(self):
        with pytest.raises(ValueError):
            expand_occurrences(ts(1, 9), ts(1, 10), "yearly", date(2027, 1, 1))


class TestTimeutils:
    def test_add_months_across_year(self):
        assert add_months(ts(15, 8, month=11), 3) == ts(15, 8, month=2, year=2027)

    def test_add_months_leap_year(self):
        assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)

    def test_parse_naive_timestamp_is_utc(self):
        assert parse_timestamp("2026-05-01T10:00:00") == ts(1, 10)
        assert parse_timestamp("2026-05-01T10:00:00Z") == ts(1, 10)
        assert parse_timestamp(None) is None
