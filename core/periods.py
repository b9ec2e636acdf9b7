"""
Calendar helpers that turn dates into period keys.

Week keys look like "2024-W05" and month keys like "2024-03". With the ISO
week-year (the default) plain string ordering of keys equals chronological
ordering, which the aggregators rely on for filtering and cumulative sums.

The "calendar" week-year reproduces the legacy labelling, which pairs the
ISO week number with the calendar year. At year boundaries that yields keys
such as "2024-W01" for 2024-12-30 and "2021-W53" for 2021-01-01, which sort
out of chronological order.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, List, Literal

from dateutil.relativedelta import relativedelta

from .config import WeekYear

Granularity = Literal["week", "month"]


def iso_week(d: date) -> int:
    """ISO 8601 week number: the week (Monday start) holding d's Thursday."""
    return d.isocalendar()[1]


def iso_week_year(d: date) -> int:
    return d.isocalendar()[0]


def week_key(d: date, week_year: WeekYear = "iso") -> str:
    if week_year == "iso":
        year = iso_week_year(d)
    elif week_year == "calendar":
        year = d.year
    else:
        raise ValueError(f"Unknown week_year: {week_year!r}")
    return f"{year}-W{iso_week(d):02d}"


def month_key(d: date) -> str:
    return f"{d.year}-{d.month:02d}"


def add_weeks(d: date, n: int) -> date:
    return d + timedelta(days=7 * n)


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, 1) + relativedelta(months=1, days=-1)


def last_week_of_month(year: int, month: int, week_year: WeekYear = "iso") -> str:
    """Week key of the final calendar day of the month."""
    return week_key(last_day_of_month(year, month), week_year)


def weeks_in_month(year: int, month: int, week_year: WeekYear = "iso") -> List[str]:
    """Every distinct week key touched by a day of the month, ascending."""
    first = date(year, month, 1)
    last = last_day_of_month(year, month)
    keys = {week_key(first + timedelta(days=i), week_year) for i in range((last - first).days + 1)}
    return sorted(keys)


def period_key_func(granularity: Granularity, week_year: WeekYear = "iso") -> Callable[[date], str]:
    """Return the date -> period key function for a forecast granularity."""
    if granularity == "week":
        return lambda d: week_key(d, week_year)
    if granularity == "month":
        return month_key
    raise ValueError(f"Unknown granularity: {granularity!r}")
