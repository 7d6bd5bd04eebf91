"""
formula_values.py
Spreadsheet value helpers shared by the formula functions.

- ErrorType / ErrorValue       -> spreadsheet error values (#VALUE!, #NUM!, ...)
- check_array_or_boolean(*vals) -> pre-flight gate rejecting ranges and booleans
- to_number(value)             -> spreadsheet numeric coercion (NaN when not coercible)

Errors are returned as ordinary values, never raised.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

import math

import numpy as np


class ErrorType(str, Enum):
    VALUE = "#VALUE!"
    NUM = "#NUM!"
    NA = "#N/A"
    NAME = "#NAME?"
    DIV0 = "#DIV/0!"


@dataclass(frozen=True)
class ErrorValue:
    error_type: ErrorType

    @classmethod
    def create(cls, error_type: ErrorType) -> ErrorValue:
        return cls(ErrorType(error_type))

    def __str__(self) -> str:
        return self.error_type.value


def is_error(value: Any) -> bool:
    return isinstance(value, ErrorValue)


# ------------------------------
# Arrays
# ------------------------------
def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple, np.ndarray))


def array_shape(value: Any) -> Tuple[int, int]:
    """(rows, columns) of a range value. A flat list is treated as a single row."""
    if isinstance(value, np.ndarray):
        if value.ndim == 0:
            return 1, 1
        if value.ndim == 1:
            return 1, value.shape[0]
        return value.shape[0], value.shape[1]
    if len(value) == 0:
        return 0, 0
    if is_array(value[0]):
        return len(value), len(value[0])
    return 1, len(value)


def _first_cell(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.reshape(-1)[0].item()
    cell = value[0]
    return cell[0] if is_array(cell) else cell


@dataclass
class VariantCheck:
    is_error: bool
    error: Optional[ErrorValue] = None
    variants: Optional[Tuple[Any, ...]] = None


def check_array_or_boolean(*values: Any) -> VariantCheck:
    """
    Gate run before any argument is interpreted.

    A single-cell range is unwrapped to its value; a larger range, or a boolean,
    yields #VALUE!. Error values already present in the arguments are passed
    through. The first offending argument decides the result.
    """
    variants = []
    for value in values:
        if is_array(value):
            rows, cols = array_shape(value)
            if rows != 1 or cols != 1:
                return VariantCheck(True, ErrorValue.create(ErrorType.VALUE))
            value = _first_cell(value)
        if is_error(value):
            return VariantCheck(True, value)
        if isinstance(value, (bool, np.bool_)):
            return VariantCheck(True, ErrorValue.create(ErrorType.VALUE))
        variants.append(value)
    return VariantCheck(False, variants=tuple(variants))


# ------------------------------
# Numeric coercion
# ------------------------------
def to_number(value: Any) -> float:
    """Coerce a cell value to float the way a formula argument is read. NaN if impossible."""
    if value is None:
        return 0.0
    if isinstance(value, (bool, np.bool_)):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            # empty text reads as 0, like a blank cell
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return math.nan
        # "nan" and "inf" are not numeric text in a sheet
        return number if math.isfinite(number) else math.nan
    return math.nan
