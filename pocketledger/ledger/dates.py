"""
Budget-period date windows.

A "month" here is a custom cycle anchored on a user-chosen start day
(1-28), and a "week" starts on a user-chosen weekday. Every aggregation in
the ledger resolves its window through these helpers.

Unrecognized weekday names fall back to Sunday without raising, so a bad
stored preference never breaks a read.
"""

from datetime import date, datetime, time, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from pocketledger.models.ledger import DateRange


WEEKDAY_INDEX = {
    "Sunday": 0,
    "Monday": 1,
    "Tuesday": 2,
    "Wednesday": 3,
    "Thursday": 4,
    "Friday": 5,
    "Saturday": 6,
}

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# Last representable instant of a day, so microsecond timestamps stay in range
END_OF_DAY = time.max

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def _window(first: date, last: date) -> DateRange:
    return DateRange(
        start=datetime.combine(first, time.min),
        end=datetime.combine(last, END_OF_DAY),
    )


def get_month_range(reference: DateLike, start_day: int) -> DateRange:
    """
    Resolve the budget month containing `reference`.
    
    With `start_day == 1` this is the calendar month. Otherwise the cycle
    runs from `start_day` to `start_day - 1` of the following month, e.g.
    Jan 10 with start day 15 resolves to Dec 15 - Jan 14.
    """
    if not 1 <= start_day <= 28:
        raise ValueError(f"Month start day must be between 1 and 28, got {start_day}")
    
    day = _as_date(reference)
    month_start = day.replace(day=1)
    
    if start_day == 1:
        return _window(month_start, month_start + relativedelta(months=1) - timedelta(days=1))
    
    if day.day >= start_day:
        first = month_start.replace(day=start_day)
    else:
        first = (month_start - relativedelta(months=1)).replace(day=start_day)
    last = first + relativedelta(months=1) - timedelta(days=1)
    return _window(first, last)


def get_week_start_option(day_name: str) -> int:
    """Weekday index (Sunday=0 .. Saturday=6); unknown names map to Sunday."""
    return WEEKDAY_INDEX.get(day_name, 0)


def rotate_week_days(start_day: str) -> list[str]:
    """Weekday labels in display order, beginning on the configured day."""
    start = get_week_start_option(start_day)
    return WEEKDAY_LABELS[start:] + WEEKDAY_LABELS[:start]


def get_week_range(reference: DateLike, start_day: str) -> DateRange:
    """The 7-day window containing `reference` that begins on `start_day`."""
    day = _as_date(reference)
    # date.weekday() is Monday=0; shift to Sunday=0
    sunday_based = (day.weekday() + 1) % 7
    back = (sunday_based - get_week_start_option(start_day)) % 7
    first = day - timedelta(days=back)
    return _window(first, first + timedelta(days=6))


def get_year_range(reference: DateLike) -> DateRange:
    """Calendar year containing `reference`."""
    year = _as_date(reference).year
    return _window(date(year, 1, 1), date(year, 12, 31))


def shift_months(reference: datetime, offset: int) -> datetime:
    """
    Move `reference` back by `abs(offset)` months.
    
    Offsets are always treated as "months ago": 0 is now, -1 and 1 both
    mean last month.
    """
    return reference - relativedelta(months=abs(offset))


def days_in_range(period: DateRange) -> list[date]:
    """Every calendar day in the window, in order."""
    first, last = period.start.date(), period.end.date()
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


def period_label(period: DateRange, start_day: int) -> str:
    """'October 2026' for calendar months, 'Sep 15 - Oct 14' for custom cycles."""
    if start_day == 1:
        return period.start.strftime("%B %Y")
    return f"{period.start.strftime('%b')} {period.start.day} - {period.end.strftime('%b')} {period.end.day}"
