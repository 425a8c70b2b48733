"""Argument checks shared by the public scheduling operations."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Optional

from .errors import InvalidArgument


def type_name(value: Any) -> str:
    if value is None:
        return "nil"
    return type(value).__name__


def _invalid(position: int, operation: str, expected: str, value: Any) -> InvalidArgument:
    return InvalidArgument(
        f"Invalid argument #{position} to '{operation}' "
        f"({expected} expected, got {type_name(value)})"
    )


def is_number(value: Any) -> bool:
    """Return True for real numbers, excluding booleans and NaN."""

    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return not math.isnan(value)
    except OverflowError:
        # integers beyond float range
        return True


def _as_float(value: Real) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def expect_number(
    value: Any,
    *,
    position: int,
    operation: str,
    optional: bool = False,
    minimum: Optional[float] = None,
) -> Optional[float]:
    """Validate a (possibly optional) number, returning it as a float."""

    if value is None and optional:
        return None
    expected = "number?" if optional else "number"
    if not is_number(value):
        raise _invalid(position, operation, expected, value)
    if minimum is not None and value < minimum:
        raise InvalidArgument(
            f"Invalid argument #{position} to '{operation}' "
            f"(number >= {minimum:g} expected, got {value!r})"
        )
    return _as_float(value)


def expect_callable(value: Any, *, position: int, operation: str) -> None:
    if not callable(value):
        raise _invalid(position, operation, "function", value)


__all__ = ["expect_callable", "expect_number", "is_number", "type_name"]
