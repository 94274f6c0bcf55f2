"""
Streak engine: consecutive calendar days with at least one completion.
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Optional

from lajan.errors import InvalidArgument


def calendar_day(ts: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of ts as seen in tz (UTC when tz is None). Naive ts is UTC."""
    if not isinstance(ts, datetime):
        raise InvalidArgument(f"Expected a datetime, got {type(ts).__name__}")
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz or timezone.utc).date()


def days_between(earlier: datetime, later: datetime, tz: Optional[tzinfo] = None) -> int:
    return (calendar_day(later, tz) - calendar_day(earlier, tz)).days


def same_day(a: datetime, b: datetime, tz: Optional[tzinfo] = None) -> bool:
    return calendar_day(a, tz) == calendar_day(b, tz)


def compute_streak(
    previous_streak: int,
    last_completed_date: Optional[datetime],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Streak after a completion at `now`.

    - first completion ever: 1
    - same day (or an out-of-order event dated after now): unchanged, at least 1
    - next day: previous + 1
    - any larger gap: restart at 1
    """
    if isinstance(previous_streak, bool) or not isinstance(previous_streak, int) or previous_streak < 0:
        raise InvalidArgument(f"previous_streak must be a non-negative int, got {previous_streak!r}")
    if not isinstance(now, datetime):
        raise InvalidArgument(f"now must be a datetime, got {type(now).__name__}")
    if last_completed_date is None:
        return 1

    diff_days = days_between(last_completed_date, now, tz)
    if diff_days <= 0:
        return max(1, previous_streak)
    if diff_days == 1:
        return previous_streak + 1
    return 1
