"""Calendar-month arithmetic on the host's local clock."""

from __future__ import annotations

import calendar
from datetime import date, datetime, time
from typing import Optional, Tuple


def local_now() -> datetime:
    """Current local wall-clock time, without tzinfo."""
    return datetime.now()


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Return the (year, month) that lies ``offset`` months from the given one."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """Inclusive [first day 00:00, last day end-of-day] of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime.combine(date(year, month, last_day), time.max)
    return start, end


def current_month_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    now = now or local_now()
    return month_bounds(now.year, now.month)


def month_label(month: int) -> str:
    """Short English month name, e.g. ``"Jan"``."""
    return calendar.month_abbr[month]


def days_remaining_in_month(today: date) -> int:
    """Days left in ``today``'s month, counting today itself."""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return last_day - today.day + 1
