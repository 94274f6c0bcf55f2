"""Unit tests for the streak engine (calendar-day arithmetic, no I/O)."""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from lajan.errors import InvalidArgument
from lajan.streak import calendar_day, compute_streak, days_between, same_day

TODAY = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.mark.unit
class TestComputeStreak:
    def test_next_day_extends(self):
        assert compute_streak(5, TODAY - timedelta(days=1), TODAY) == 6

    def test_gap_resets(self):
        assert compute_streak(5, TODAY - timedelta(days=2), TODAY) == 1

    def test_same_day_unchanged(self):
        assert compute_streak(5, TODAY, TODAY) == 5

    def test_first_completion(self):
        assert compute_streak(0, None, TODAY) == 1

    def test_long_gap_resets_regardless_of_previous(self):
        assert compute_streak(42, TODAY - timedelta(days=5), TODAY) == 1

    def test_same_day_with_zero_streak_is_one(self):
        assert compute_streak(0, TODAY, TODAY) == 1

    def test_out_of_order_event_keeps_streak(self):
        # last completion is "in the future" relative to now
        assert compute_streak(3, TODAY + timedelta(days=1), TODAY) == 3

    def test_calendar_days_not_24h_windows(self):
        late = datetime(2024, 1, 14, 23, 59, tzinfo=timezone.utc)
        early = datetime(2024, 1, 15, 0, 1, tzinfo=timezone.utc)
        assert compute_streak(2, late, early) == 3

    def test_same_calendar_day_many_hours_apart(self):
        morning = datetime(2024, 1, 15, 0, 5, tzinfo=timezone.utc)
        night = datetime(2024, 1, 15, 23, 55, tzinfo=timezone.utc)
        assert compute_streak(4, morning, night) == 4

    def test_timezone_changes_day_boundary(self):
        tz = ZoneInfo("America/New_York")
        # 2024-01-15 03:00 UTC is still Jan 14 in New York.
        last = datetime(2024, 1, 14, 12, 0, tzinfo=timezone.utc)
        now = datetime(2024, 1, 15, 3, 0, tzinfo=timezone.utc)
        assert compute_streak(2, last, now) == 3
        assert compute_streak(2, last, now, tz) == 2

    def test_naive_datetimes_are_utc(self):
        assert compute_streak(1, datetime(2024, 1, 14, 10), datetime(2024, 1, 15, 10)) == 2

    @pytest.mark.parametrize("bad", [-1, 1.5, "3", None, True])
    def test_rejects_bad_previous_streak(self, bad):
        with pytest.raises(InvalidArgument):
            compute_streak(bad, None, TODAY)

    def test_rejects_non_datetime_now(self):
        with pytest.raises(InvalidArgument):
            compute_streak(1, None, "2024-01-15")

    def test_rejects_non_datetime_last_completed(self):
        with pytest.raises(InvalidArgument):
            compute_streak(1, "2024-01-14", TODAY)


@pytest.mark.unit
class TestCalendarHelpers:
    def test_calendar_day_in_zone(self):
        ts = datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc)
        assert calendar_day(ts).isoformat() == "2024-03-01"
        assert calendar_day(ts, ZoneInfo("America/Los_Angeles")).isoformat() == "2024-02-29"

    def test_days_between(self):
        assert days_between(TODAY - timedelta(days=3), TODAY) == 3
        assert days_between(TODAY, TODAY - timedelta(days=1)) == -1

    def test_same_day(self):
        assert same_day(TODAY, TODAY.replace(hour=23))
        assert not same_day(TODAY, TODAY + timedelta(days=1))
