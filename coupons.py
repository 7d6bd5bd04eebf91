"""
coupons.py
-----------
COUPDAYBS: days from the start of the coupon period to the settlement date.

The previous coupon date is derived from maturity alone. Maturity's month/day
is moved into the settlement year (one year later if that lands before
settlement), then stepped back by 12 / frequency months until it is on or
before settlement. Day overflow during stepping follows the calendar roll in
date_utils (Aug 31 - 6 months -> Mar 3), matching spreadsheet results.

Also provides:
- previous_coupon_date(settlement, maturity, frequency)
- coupon_serial(coupon_date)  serial of a coupon date, floored at 0
- coupdaybs_frame(df, ...)   row-wise evaluation over a pandas DataFrame
- settlement_sweep(...)      day count for every settlement date in a range
"""

from __future__ import annotations
from datetime import date
from typing import Any, Optional, Tuple, Union

import logging
import math

import pandas as pd

from formula_values import ErrorType, ErrorValue, check_array_or_boolean, is_error, to_number
from date_utils import (
    add_months,
    date_serial_from_value,
    date_to_serial,
    replace_year,
    serial_to_date,
)
from daycount import days_between_by_basis

logger = logging.getLogger(__name__)

DEFAULT_BASIS = 0
VALID_FREQUENCIES = (1, 2, 4)
MAX_BASIS = 4

Result = Union[int, ErrorValue]


def _floor(x: float) -> float:
    # NaN and inf have no floor as an int; keep them so validation can see them
    return float(math.floor(x)) if math.isfinite(x) else x


# ---------------------------
# Coupon date resolution
# ---------------------------
def previous_coupon_date(settlement_serial: float, maturity_serial: float, freq: int) -> date:
    """
    Coupon date on or before settlement for a bond maturing on maturity_serial.

    freq must divide 12 (callers pass 1, 2 or 4).
    """
    settlement_date = serial_to_date(settlement_serial)
    coup_date = replace_year(serial_to_date(maturity_serial), settlement_date.year)

    if coup_date < settlement_date:
        coup_date = replace_year(coup_date, coup_date.year + 1)

    step = 12 // freq
    while coup_date > settlement_date:
        coup_date = add_months(coup_date, -step)
    return coup_date


def coupon_serial(coup_date: date) -> int:
    serial = date_to_serial(coup_date)
    # schedules before the 1900 epoch count from serial 0, as spreadsheets do
    return max(serial, 0)


# ---------------------------
# Validation
# ---------------------------
def _validate(
    settlement: Any, maturity: Any, frequency: Any, basis: Any
) -> Union[Tuple[float, float, int, int], ErrorValue]:
    basis = DEFAULT_BASIS if basis is None else basis

    check = check_array_or_boolean(settlement, maturity, frequency, basis)
    if check.is_error:
        return check.error
    settlement, maturity, frequency, basis = check.variants

    settlement_serial = date_serial_from_value(settlement)
    if is_error(settlement_serial):
        return settlement_serial
    maturity_serial = date_serial_from_value(maturity)
    if is_error(maturity_serial):
        return maturity_serial

    freq = _floor(to_number(frequency))
    basis_value = _floor(to_number(basis))
    if math.isnan(freq) or math.isnan(basis_value):
        return ErrorValue.create(ErrorType.VALUE)

    if (
        freq not in VALID_FREQUENCIES
        or basis_value < 0
        or basis_value > MAX_BASIS
        or math.floor(settlement_serial) >= math.floor(maturity_serial)
    ):
        logger.debug(
            "COUPDAYBS rejected: settlement=%s maturity=%s frequency=%s basis=%s",
            settlement_serial, maturity_serial, freq, basis_value,
        )
        return ErrorValue.create(ErrorType.NUM)

    return settlement_serial, maturity_serial, int(freq), int(basis_value)


# ---------------------------
# COUPDAYBS
# ---------------------------
def _resolve(
    settlement: Any, maturity: Any, frequency: Any, basis: Any
) -> Union[Tuple[date, int], ErrorValue]:
    checked = _validate(settlement, maturity, frequency, basis)
    if is_error(checked):
        return checked
    settlement_serial, maturity_serial, freq, basis_value = checked

    try:
        coup_date = previous_coupon_date(settlement_serial, maturity_serial, freq)
    except (OverflowError, ValueError) as e:
        # serials outside the calendar (beyond year 9999)
        logger.debug("COUPDAYBS date out of range: %s", e)
        return ErrorValue.create(ErrorType.NUM)

    coupon_serial_number = coupon_serial(coup_date)
    logger.debug("Previous coupon %s (serial %s), settlement serial %s", coup_date, coupon_serial_number, settlement_serial)

    days = days_between_by_basis(coupon_serial_number, settlement_serial, basis_value).days
    return coup_date, days


def coupdaybs(settlement: Any, maturity: Any, frequency: Any, basis: Optional[Any] = None) -> Result:
    """
    Days from the beginning of the coupon period to the settlement date.

    Arguments are read like formula arguments: numbers are date serials, text
    may be a number or a date, single-cell ranges are unwrapped. Returns an int
    or an ErrorValue (#VALUE! for unreadable arguments, #NUM! for out-of-range
    ones); nothing is raised.
    """
    res = _resolve(settlement, maturity, frequency, basis)
    if is_error(res):
        return res
    return res[1]


# ---------------------------
# Batch helpers
# ---------------------------
def coupdaybs_frame(
    df: pd.DataFrame,
    settlement: str = "settlement",
    maturity: str = "maturity",
    frequency: str = "frequency",
    basis: str = "basis",
) -> pd.DataFrame:
    """
    Evaluate COUPDAYBS row by row.

    Adds 'coupon_date' (NaT on error) and 'days' (int, or the error text).
    A missing basis column means the default basis.
    """
    for col in (settlement, maturity, frequency):
        if col not in df.columns:
            raise KeyError(f"Missing column: {col}")

    out = df.copy()
    coupon_dates, days = [], []
    for _, row in out.iterrows():
        b = row[basis] if basis in out.columns else None
        if b is not None and pd.isna(b):
            b = None
        res = _resolve(row[settlement], row[maturity], row[frequency], b)
        if is_error(res):
            coupon_dates.append(pd.NaT)
            days.append(str(res))
            continue
        coupon_dates.append(pd.Timestamp(res[0]))
        days.append(res[1])

    out["coupon_date"] = coupon_dates
    out["days"] = days
    return out


def settlement_sweep(
    maturity: Any, frequency: int, basis: int, start: Any, end: Any
) -> pd.DataFrame:
    """Day count for each settlement serial from start to end (inclusive)."""
    start_serial = date_serial_from_value(start)
    end_serial = date_serial_from_value(end)
    if is_error(start_serial) or is_error(end_serial):
        raise ValueError("start and end must be readable as dates")

    rows = []
    for serial in range(math.floor(start_serial), math.floor(end_serial) + 1):
        res = coupdaybs(serial, maturity, frequency, basis)
        rows.append(
            {
                "settlement": pd.Timestamp(serial_to_date(serial)),
                "days": math.nan if is_error(res) else res,
            }
        )
    return pd.DataFrame(rows, columns=["settlement", "days"])
