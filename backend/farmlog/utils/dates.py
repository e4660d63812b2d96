"""Calendar-day helpers shared by the store, statistics and calendar code.

Every comparison in the app is done at calendar-day granularity: time of
day is dropped before two values are compared.  ISO strings are accepted
anywhere a date is expected, so values coming from import documents
("2024-03-01" or "2024-03-01T00:00:00.000Z") behave the same as ``date``
objects.
"""

import calendar
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from farmlog.config import settings

DateLike = date | datetime | str


def to_date(value: DateLike) -> date:
    """Reduce a date, datetime or ISO string to a calendar date.

    Strings are read from their ``YYYY-MM-DD`` prefix, so the time part and
    any UTC offset are ignored.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"Cannot interpret {value!r} as a date")


def day_key(value: DateLike) -> str:
    """Return the ``YYYY-MM-DD`` key used for same-day matching."""
    return to_date(value).isoformat()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today(tz: str | None = None) -> date:
    """Current calendar date in the configured timezone."""
    return datetime.now(ZoneInfo(tz or settings.timezone)).date()


def days_between(later: DateLike, earlier: DateLike) -> int:
    """Whole calendar days from *earlier* to *later* (negative if reversed)."""
    return (to_date(later) - to_date(earlier)).days


def days_until(value: DateLike, reference: date | None = None) -> int:
    return days_between(value, reference or today())


def is_past(value: DateLike, reference: date | None = None) -> bool:
    """Strictly before the reference day; a value due today is not past."""
    return days_until(value, reference) < 0


def is_today(value: DateLike, reference: date | None = None) -> bool:
    return days_until(value, reference) == 0


def is_future(value: DateLike, reference: date | None = None) -> bool:
    return days_until(value, reference) > 0


def format_date(value: DateLike, fmt: str | None = None) -> str:
    return to_date(value).strftime(fmt or settings.export_date_format)


def month_days(year: int, month: int) -> list[date]:
    """Every day of the given month, in order."""
    last = calendar.monthrange(year, month)[1]
    return [date(year, month, day) for day in range(1, last + 1)]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move ``(year, month)`` by *delta* months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
