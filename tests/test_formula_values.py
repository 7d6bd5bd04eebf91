# tests/test_formula_values.py
import math

import numpy as np

from formula_values import (
    ErrorType,
    ErrorValue,
    array_shape,
    check_array_or_boolean,
    is_error,
    to_number,
)


def test_error_value_text_and_equality():
    err = ErrorValue.create(ErrorType.NUM)
    assert str(err) == "#NUM!"
    assert err == ErrorValue(ErrorType.NUM)
    assert err != ErrorValue.create(ErrorType.VALUE)
    assert is_error(err)
    assert not is_error("#NUM!")


def test_array_shape():
    assert array_shape([[1, 2, 3], [4, 5, 6]]) == (2, 3)
    assert array_shape([1, 2]) == (1, 2)
    assert array_shape([]) == (0, 0)
    assert array_shape(np.zeros((3, 1))) == (3, 1)
    assert array_shape(np.array([7])) == (1, 1)


def test_check_passes_plain_values_through():
    res = check_array_or_boolean(1, "2020-01-25", 2.5, None)
    assert not res.is_error
    assert res.variants == (1, "2020-01-25", 2.5, None)


def test_check_unwraps_single_cells():
    res = check_array_or_boolean([[43855]], np.array([[2]]), (0,))
    assert not res.is_error
    assert res.variants == (43855, 2, 0)


def test_check_rejects_ranges_and_booleans():
    value = ErrorValue.create(ErrorType.VALUE)
    assert check_array_or_boolean(1, [[1, 2]]).error == value
    assert check_array_or_boolean(1, []).error == value
    assert check_array_or_boolean(True).error == value
    assert check_array_or_boolean(np.bool_(False)).error == value
    assert check_array_or_boolean([[True]]).error == value


def test_check_first_failure_wins():
    na = ErrorValue.create(ErrorType.NA)
    res = check_array_or_boolean(1, na, True)
    assert res.is_error
    assert res.error is na
    assert res.variants is None


def test_to_number():
    assert to_number(None) == 0.0
    assert to_number(True) == 1.0
    assert to_number(np.int64(4)) == 4.0
    assert to_number(" 2.5 ") == 2.5
    assert math.isnan(to_number("abc"))
    assert to_number("") == 0.0
    assert to_number("   ") == 0.0
    assert math.isnan(to_number("nan"))
    assert math.isnan(to_number("inf"))
    assert math.isnan(to_number(object()))
