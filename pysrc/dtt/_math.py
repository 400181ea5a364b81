"""Calendar arithmetic helpers."""

from datetime import date as _date

MIN_YEAR = 1
MAX_YEAR = 9999


def is_leap(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


# 1-indexed days per month
_MONTHDAYS = [0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


def days_in_month(year: int, month: int) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    return _MONTHDAYS[month] + (month == 2 and is_leap(year))


def add_months(d: _date, months: int) -> _date:
    year_delta, month0_new = divmod(d.month - 1 + months, 12)
    year_new = d.year + year_delta
    month_new = month0_new + 1
    if not MIN_YEAR <= year_new <= MAX_YEAR:
        raise ValueError("year out of range")
    # clamp to the last day when moving to a month with fewer days
    return d.replace(
        year=year_new,
        month=month_new,
        day=min(d.day, days_in_month(year_new, month_new)),
    )


def replace_year_saturating(d: _date, year: int, /) -> _date:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError("year out of range")
    try:
        return d.replace(year=year)
    except ValueError:
        # only happens when we move Feb 29 to a non-leap year
        return d.replace(year=year, day=28)
