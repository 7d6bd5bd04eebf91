"""
formula_functions.py
Name -> implementation registry for formula evaluation.

evaluate("COUPDAYBS", settlement, maturity, frequency[, basis])

A call with too few or too many arguments gives #N/A and an unknown
function name gives #NAME?, as in a spreadsheet cell.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict

import logging

from formula_values import ErrorType, ErrorValue
from coupons import coupdaybs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormulaFunction:
    name: str
    func: Callable[..., Any]
    min_params: int
    max_params: int

    def __call__(self, *args: Any) -> Any:
        if not self.min_params <= len(args) <= self.max_params:
            logger.debug("%s called with %d arguments", self.name, len(args))
            return ErrorValue.create(ErrorType.NA)
        return self.func(*args)


_REGISTRY: Dict[str, FormulaFunction] = {
    "COUPDAYBS": FormulaFunction("COUPDAYBS", coupdaybs, 3, 4),
}


def get_function(name: str) -> FormulaFunction:
    key = name.upper()
    try:
        return _REGISTRY[key]
    except KeyError as exc:
        raise ValueError(f"Unknown function: {name}") from exc


def register_function(name: str, func: Callable[..., Any], min_params: int, max_params: int) -> None:
    """Register a formula function under a (case-insensitive) name."""
    key = name.upper()
    if key in _REGISTRY:
        raise ValueError(f"Function '{name}' already registered")
    _REGISTRY[key] = FormulaFunction(key, func, min_params, max_params)


def evaluate(name: str, *args: Any) -> Any:
    fn = _REGISTRY.get(name.upper())
    if fn is None:
        return ErrorValue.create(ErrorType.NAME)
    return fn(*args)
