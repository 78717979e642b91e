"""Periodic rate conversion and calendar arithmetic shared by every engine.

Rates enter as annual percentages (5.0 means 5%) and leave as per-period
fractions. Month-based date arithmetic clamps to the last valid day of the
target month (Jan 31 + 1 month → Feb 28/29) and is always computed from the
original anchor date, so the clamp never accumulates across periods.
"""
from __future__ import annotations

import math
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from .config import MONTHS_PER_PERIOD, PERIODS_PER_YEAR


def periods_per_year(frequency: str) -> int:
    try:
        return PERIODS_PER_YEAR[frequency]
    except KeyError:
        raise ValueError(
            f"Unknown frequency '{frequency}'. "
            f"Valid values: {', '.join(PERIODS_PER_YEAR)}"
        ) from None


def rate_per_period(annual_rate_percent: float, frequency: str) -> float:
    """annual% / 100 / periods-per-year."""
    return annual_rate_percent / 100 / periods_per_year(frequency)


def monthly_rate(annual_rate_percent: float) -> float:
    return annual_rate_percent / 100 / 12


def effective_annual_rate(nominal_rate_percent: float, frequency: str) -> float:
    """Effective annual rate (percent) of a nominal rate compounded at *frequency*.

    Returns ``math.inf`` when the compounded growth does not fit in a float.
    """
    n = periods_per_year(frequency)
    try:
        return ((1 + nominal_rate_percent / 100 / n) ** n - 1) * 100
    except OverflowError:
        return math.inf


def nominal_rate(effective_rate_percent: float, frequency: str) -> float:
    """Inverse of :func:`effective_annual_rate`."""
    n = periods_per_year(frequency)
    return ((1 + effective_rate_percent / 100) ** (1 / n) - 1) * n * 100


def advance(start: date, periods_elapsed: int, frequency: str) -> date:
    """Return *start* moved forward by *periods_elapsed* periods of *frequency*."""
    if frequency == "daily":
        return start + timedelta(days=periods_elapsed)
    periods_per_year(frequency)  # validates the name
    return start + relativedelta(months=periods_elapsed * MONTHS_PER_PERIOD[frequency])


def add_months(start: date, months: int) -> date:
    return start + relativedelta(months=months)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from *start* to *end* (ignores the day of month)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def periods_until(start: date, end: date, frequency: str) -> int:
    """Smallest n with advance(start, n) >= end, i.e. a calendar-aligned ceiling.

    Returns 0 when *end* is not after *start*.
    """
    if end <= start:
        return 0
    if frequency == "daily":
        return (end - start).days
    step = MONTHS_PER_PERIOD[frequency]
    n = max(1, math.ceil(months_between(start, end) / step))
    while advance(start, n, frequency) < end:
        n += 1
    while n > 1 and advance(start, n - 1, frequency) >= end:
        n -= 1
    return n
