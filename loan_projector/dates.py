"""
Calendar helpers shared by accrual, projection and simulation
"""

from datetime import date
import calendar


def days_in_year(year: int) -> int:
    """366 for leap years, 365 otherwise"""
    return 366 if calendar.isleap(year) else 365


def day_of_year(value: date) -> int:
    """1-based ordinal of the day within its year"""
    return value.timetuple().tm_yday


def year_end(year: int) -> date:
    return date(year, 12, 31)


def year_start(year: int) -> date:
    return date(year, 1, 1)


def add_months(value: date, months: int) -> date:
    """
    Advance a date by whole calendar months.

    The day is clamped to the last day of the target month, so
    Jan 31 + 1 month is Feb 28 (or 29).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))
