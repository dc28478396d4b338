"""Month-granular reporting windows.

Turns optional ``YYYY-MM`` boundaries into a concrete UTC date range.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from seller_analytics.services.errors import InvalidDateFormat

DEFAULT_LOOKBACK_MONTHS = 6

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Naive timestamps are stored as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class DateRange:
    """Inclusive ``[start, end]`` window, ``start <= end``."""
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= as_utc(moment) <= self.end

    def shifted(self, months: int) -> "DateRange":
        """Same window moved by whole calendar months on both ends."""
        return DateRange(shift_months(self.start, months), shift_months(self.end, months))

    @property
    def months(self) -> int:
        return months_between(self.start, self.end)


def shift_months(dt: datetime, months: int) -> datetime:
    """Move ``dt`` by calendar months, clamping the day to the target month."""
    index = dt.year * 12 + (dt.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def months_between(start: datetime, end: datetime) -> int:
    """Calendar-month difference, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def start_of_month(dt: datetime) -> datetime:
    return as_utc(dt).replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def end_of_month(dt: datetime) -> datetime:
    first = start_of_month(dt)
    return shift_months(first, 1) - timedelta(microseconds=1)


def month_key(dt: datetime) -> str:
    """ISO-8601 key of the month bucket, e.g. ``2024-03-01T00:00:00.000Z``."""
    return start_of_month(dt).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def parse_month(value: str) -> datetime:
    """Parse ``YYYY-MM`` into the first instant of that month (UTC)."""
    if not isinstance(value, str):
        raise InvalidDateFormat(value)
    match = _MONTH_RE.match(value.strip())
    if not match:
        raise InvalidDateFormat(value)
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidDateFormat(value, "month out of range")
    # Leaves room for the end-of-month and previous-window shifts
    if not 1 < year < 9999:
        raise InvalidDateFormat(value, "year out of range")
    return datetime(year, month, 1, tzinfo=timezone.utc)


def resolve_date_range(
    start_month_year: Optional[str] = None,
    end_month_year: Optional[str] = None,
    now: Optional[datetime] = None,
    lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
) -> DateRange:
    """Resolve the reporting window.

    Missing start defaults to ``lookback_months`` before ``now``; missing end
    defaults to ``now``. A given end month extends to its last instant.
    """
    now = as_utc(now) if now is not None else utcnow()

    start = parse_month(start_month_year) if start_month_year else shift_months(now, -lookback_months)
    end = end_of_month(parse_month(end_month_year)) if end_month_year else now

    if start > end:
        raise InvalidDateFormat(
            f"{start_month_year or start.date()}..{end_month_year or end.date()}",
            "start month is after end month",
        )
    return DateRange(start=start, end=end)
