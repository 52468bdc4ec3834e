import calendar
import datetime as dt
from typing import Literal

WeekRangeMode = Literal["approx", "iso"]


def iso_week_of(d: dt.date) -> tuple[int, int]:
    # ISO-8601: week 1 holds the year's first Thursday, so late December can
    # belong to week 1 of the next year and early January to week 52/53.
    iso = d.isocalendar()
    return iso[0], iso[1]


def quarter_of(month: int) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    return (month - 1) // 3 + 1


def week_bounds(year: int, week: int, mode: WeekRangeMode = "approx") -> tuple[dt.date, dt.date]:
    if mode == "iso":
        start = dt.date.fromisocalendar(year, week, 1)
    else:
        start = dt.date(year, 1, 1) + dt.timedelta(days=(week - 1) * 7)
    return start, start + dt.timedelta(days=6)


def month_days(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> tuple[dt.date, dt.date]:
    return dt.date(year, month, 1), dt.date(year, month, month_days(year, month))


def quarter_bounds(year: int, quarter: int) -> tuple[dt.date, dt.date]:
    first_month = (quarter - 1) * 3 + 1
    start, _ = month_bounds(year, first_month)
    _, end = month_bounds(year, first_month + 2)
    return start, end
