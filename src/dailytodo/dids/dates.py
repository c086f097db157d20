"""Relative date buckets for the DIDs feed."""

import calendar
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional


class DateCategory(str, Enum):
    """Relative-date buckets, declared in display order."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this-week"
    LAST_WEEK = "last-week"
    OLDER = "older"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    DateCategory.TODAY: "Today",
    DateCategory.YESTERDAY: "Yesterday",
    DateCategory.THIS_WEEK: "This Week",
    DateCategory.LAST_WEEK: "Last Week",
    DateCategory.OLDER: "Older",
}

CATEGORY_ORDER = tuple(DateCategory)

DEFAULT_WEEK_START = calendar.SUNDAY


def to_local(value: datetime) -> datetime:
    """Convert to an aware datetime in the local timezone.

    Naive values are taken to be local time already.
    """
    return value.astimezone()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware local datetime.

    Raises:
        ValueError: If the string is not ISO-8601
    """
    return to_local(datetime.fromisoformat(value))


def week_start_date(day: date, week_start: int = DEFAULT_WEEK_START) -> date:
    """First day of the week containing ``day``.

    Args:
        day: Any date
        week_start: Weekday number of the first day (Monday is 0, Sunday is 6)
    """
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def get_date_category(
    when: datetime,
    now: Optional[datetime] = None,
    week_start: int = DEFAULT_WEEK_START,
) -> DateCategory:
    """Place a timestamp in exactly one bucket relative to ``now``.

    Checks run in order: today, yesterday, this week, last week; anything
    else is older. Weeks are seven calendar days starting on ``week_start``
    (Sunday by default). The result depends on ``now``, so a timestamp moves
    between buckets as days pass.

    Args:
        when: Timestamp to classify
        now: Reference time (defaults to the current time)
        week_start: Weekday number of the first day of the week

    Returns:
        The DateCategory for ``when``
    """
    day = to_local(when).date()
    today = to_local(now).date() if now is not None else date.today()

    if day == today:
        return DateCategory.TODAY
    if day == today - timedelta(days=1):
        return DateCategory.YESTERDAY

    this_week = week_start_date(today, week_start)
    if this_week <= day <= this_week + timedelta(days=6):
        return DateCategory.THIS_WEEK

    last_week = this_week - timedelta(days=7)
    if last_week <= day <= last_week + timedelta(days=6):
        return DateCategory.LAST_WEEK

    return DateCategory.OLDER
