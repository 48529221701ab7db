"""
Day-granular date helpers shared by the calendar core.
"""

from datetime import date, datetime, timedelta

from core.config import DAYS_PER_WEEK, MONTH_GRID_WEEKS


def to_day(value: date | datetime | str | None) -> date | None:
    """
    Truncate a date-like value to its calendar day.

    Accepts dates, datetimes and ISO 8601 strings (with or without a time
    part, 'Z' suffix allowed). Empty values return None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(f"Invalid date value '{value}'")


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end is earlier)."""
    return (end - start).days


def week_start(d: date) -> date:
    """Sunday on or before the given day."""
    # date.weekday(): Monday=0 ... Sunday=6
    return d - timedelta(days=(d.weekday() + 1) % DAYS_PER_WEEK)


def week_end(d: date) -> date:
    """Saturday on or after the given day."""
    return add_days(week_start(d), DAYS_PER_WEEK - 1)


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    if d.month == 12:
        return date(d.year, 12, 31)
    return date(d.year, d.month + 1, 1) - timedelta(days=1)


def add_months(d: date, months: int) -> date:
    """First day of the month `months` away from d's month."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_grid_window(year: int, month: int) -> tuple[date, date]:
    """
    Visible window of the fixed month grid.

    Always 6 weeks (42 days) starting on the Sunday on or before the 1st,
    so every month renders with the same number of rows.
    """
    start = week_start(date(year, month, 1))
    end = add_days(start, MONTH_GRID_WEEKS * DAYS_PER_WEEK - 1)
    return start, end


def is_within(start: date, end: date, bound_start: date, bound_end: date) -> bool:
    """Check that [start, end] lies inside [bound_start, bound_end]."""
    return bound_start <= start and end <= bound_end


def clamp_day(d: date, lower: date, upper: date) -> date:
    if d < lower:
        return lower
    if d > upper:
        return upper
    return d
