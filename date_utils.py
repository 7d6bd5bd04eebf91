"""
date_utils.py
Date helpers for spreadsheet-style date serials (1900 date system).

- serial_to_date(serial)          -> date   (fraction of day discarded)
- date_to_serial(d)               -> int
- add_months(d, n)                -> date   (month roll, day overflow carried forward)
- replace_year(d, year)           -> date   (same overflow rule, e.g. Feb 29 -> Mar 1)
- parse_date("YYYY-MM-DD")        -> date
- date_serial_from_value(value)   -> float serial or ErrorValue

Serial 1 is 1900-01-01. Serial 60 is the fictitious 1900-02-29 kept for
compatibility with Lotus 1-2-3, so every serial after it is shifted by one day.
Serial 0 is 1899-12-31 and negative serials keep counting backwards.
"""

from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import Any, Tuple, Union

import logging
import math

import numpy as np
import pandas as pd

from formula_values import ErrorType, ErrorValue, is_error, to_number

logger = logging.getLogger(__name__)

EPOCH = date(1899, 12, 31)
_LOTUS_LEAP_DAY_SERIAL = 60
_LAST_REAL_FEB_1900 = date(1900, 2, 28)

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y")


# ------------------------------
# Serial <-> calendar date
# ------------------------------
def serial_to_date(serial: float) -> date:
    n = math.floor(serial)
    if n >= _LOTUS_LEAP_DAY_SERIAL:
        n -= 1
    return EPOCH + timedelta(days=n)


def date_to_serial(d: date) -> int:
    if isinstance(d, datetime):
        d = d.date()
    n = (d - EPOCH).days
    if d > _LAST_REAL_FEB_1900:
        n += 1
    return n


# ------------------------------
# Calendar stepping
# ------------------------------
def normalize_ymd(year: int, month: int, day: int) -> date:
    """
    Build a date from possibly out-of-range parts.

    Months outside 1..12 roll the year; days past the end of the month spill
    into the following month (Feb 31 -> Mar 3, or Mar 2 in a leap year) and
    day 0 is the last day of the previous month.
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1) + timedelta(days=day - 1)


def add_months_ymd(year: int, month: int, day: int, n: int) -> Tuple[int, int, int]:
    d = normalize_ymd(year, month + n, day)
    return d.year, d.month, d.day


def add_months(d: date, n: int) -> date:
    return date(*add_months_ymd(d.year, d.month, d.day, n))


def replace_year(d: date, year: int) -> date:
    return normalize_ymd(year, d.month, d.day)


# ------------------------------
# Parsing / coercion
# ------------------------------
def parse_date(s: str) -> date:
    text = s.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unsupported date string format: {s!r}")


def date_serial_from_value(value: Any) -> Union[float, ErrorValue]:
    """
    Read a formula argument as a date serial.

    Numbers pass through, dates and timestamps are converted (a datetime keeps
    its time of day as the fractional part), text is read as a number first and
    then as a date. Anything else is #VALUE!; error values are returned as is.
    Serials below 0 (before 1899-12-31) and infinite ones are #NUM!.
    """
    if is_error(value):
        return value
    if value is None:
        return 0.0
    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
    if value is pd.NaT:
        return ErrorValue.create(ErrorType.VALUE)
    if isinstance(value, datetime):
        seconds = value.hour * 3600 + value.minute * 60 + value.second + value.microsecond / 1e6
        number = date_to_serial(value.date()) + seconds / 86400.0
    elif isinstance(value, date):
        number = float(date_to_serial(value))
    elif isinstance(value, str):
        if not value.strip():
            return ErrorValue.create(ErrorType.VALUE)
        number = to_number(value)
        if math.isnan(number):
            try:
                number = float(date_to_serial(parse_date(value)))
            except ValueError:
                logger.debug("Could not read %r as a date", value)
                return ErrorValue.create(ErrorType.VALUE)
    else:
        number = to_number(value)
        if math.isnan(number):
            return ErrorValue.create(ErrorType.VALUE)

    if math.isinf(number) or number < 0:
        return ErrorValue.create(ErrorType.NUM)
    return number
