"""
daycount.py
Day counts between two date serials under the spreadsheet "basis" argument.

Supported bases:
- 0  US (NASD) 30/360
- 1  Actual/actual
- 2  Actual/360
- 3  Actual/365
- 4  European 30/360

days_between_by_basis(start, end, basis) -> DayCount(days, year_days)
year_fraction_by_basis(start, end, basis) -> float
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Dict, Literal

import math

from date_utils import serial_to_date

Basis = Literal[0, 1, 2, 3, 4]

BASIS_NAMES: Dict[int, str] = {
    0: "US (NASD) 30/360",
    1: "Actual/actual",
    2: "Actual/360",
    3: "Actual/365",
    4: "European 30/360",
}


@dataclass(frozen=True)
class DayCount:
    days: int
    year_days: float


# ------------------------------
# Helpers
# ------------------------------
def _is_leap(y: int) -> bool:
    return (y % 4 == 0 and y % 100 != 0) or (y % 400 == 0)


def _days_in_year(y: int) -> int:
    return 366 if _is_leap(y) else 365


def _is_last_day_of_feb(d: date) -> bool:
    return d.month == 2 and d.day == (29 if _is_leap(d.year) else 28)


def _thirty_360(start: date, end: date, d1: int, d2: int) -> int:
    return (end.year - start.year) * 360 + (end.month - start.month) * 30 + (d2 - d1)


# ------------------------------
# Day counts
# ------------------------------
def _thirty_360_us(start: date, end: date) -> int:
    d1 = start.day
    d2 = end.day
    if _is_last_day_of_feb(start) and _is_last_day_of_feb(end):
        d2 = 30
    if _is_last_day_of_feb(start):
        d1 = 30
    if d2 == 31 and d1 >= 30:
        d2 = 30
    if d1 == 31:
        d1 = 30
    return _thirty_360(start, end, d1, d2)


def _thirty_360_eu(start: date, end: date) -> int:
    d1 = 30 if start.day == 31 else start.day
    d2 = 30 if end.day == 31 else end.day
    return _thirty_360(start, end, d1, d2)


def _feb_29_between(start: date, end: date) -> bool:
    for y in range(start.year, end.year + 1):
        if _is_leap(y) and start <= date(y, 2, 29) <= end:
            return True
    return False


def _actual_year_days(start: date, end: date) -> float:
    """Year length for Actual/actual: exact within one year, averaged over longer spans."""
    if start.year == end.year:
        return _days_in_year(start.year)
    within_one_year = end.year == start.year + 1 and (end.month, end.day) <= (start.month, start.day)
    if within_one_year:
        return 366 if _feb_29_between(start, end) else 365
    years = range(start.year, end.year + 1)
    return sum(_days_in_year(y) for y in years) / len(years)


def days_between_by_basis(start_serial: float, end_serial: float, basis: Basis) -> DayCount:
    """Whole days from start to end (serials, fraction ignored) under the given basis."""
    start = serial_to_date(start_serial)
    end = serial_to_date(end_serial)
    actual = math.floor(end_serial) - math.floor(start_serial)

    if basis == 0:
        return DayCount(_thirty_360_us(start, end), 360)
    if basis == 1:
        return DayCount(actual, _actual_year_days(start, end))
    if basis == 2:
        return DayCount(actual, 360)
    if basis == 3:
        return DayCount(actual, 365)
    if basis == 4:
        return DayCount(_thirty_360_eu(start, end), 360)
    raise ValueError(f"Unsupported basis: {basis}")


def year_fraction_by_basis(start_serial: float, end_serial: float, basis: Basis) -> float:
    """Compute the year fraction between two serials using the given basis."""
    dc = days_between_by_basis(start_serial, end_serial, basis)
    return dc.days / dc.year_days
