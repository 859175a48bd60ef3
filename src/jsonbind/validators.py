"""Validator primitives: comparisons, custom predicates, union and integer checks.

Comparison factories close over their bound when the contract is declared.
The binder runs them, in declaration order, after any custom transform.
"""

from __future__ import annotations

import math
import operator as _operator
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeAlias

from jsonbind.errors import (
    BindingError,
    ComparisonFailed,
    CustomValidationFailed,
    NotInteger,
    NotInUnion,
    NotNumeric,
)
from jsonbind.kinds import is_numeric, json_kind_of

Predicate: TypeAlias = Callable[[Any, str, Any], object]


@dataclass(frozen=True, slots=True)
class Comparison:
    """Bound comparison such as ``value > 5``."""

    symbol: str
    bound: object
    numeric: bool
    compare: Callable[[Any, Any], bool]

    def run(self, instance: object, type_name: str, field_name: str, value: object) -> None:
        if self.numeric:
            require_numeric(type_name, field_name, value, check=self.symbol)
        if not self.compare(value, self.bound):
            raise ComparisonFailed(
                type_name, field_name, operator=self.symbol, bound=self.bound, value=value
            )


@dataclass(frozen=True, slots=True)
class CustomCheck:
    """User predicate called with ``(instance, field_name, value)``.

    The predicate rejects a value by raising or by returning ``False``;
    any other return value accepts it.
    """

    predicate: Predicate

    def run(self, instance: object, type_name: str, field_name: str, value: object) -> None:
        try:
            verdict = self.predicate(instance, field_name, value)
        except BindingError:
            raise
        except Exception as exc:
            detail = str(exc) or type(exc).__name__
            raise CustomValidationFailed(type_name, field_name, detail) from exc
        if verdict is False:
            raise CustomValidationFailed(type_name, field_name, f"{value!r} rejected")


Check: TypeAlias = Comparison | CustomCheck


def loose_equals(left: object, right: object) -> bool:
    """Equality that lets numeric strings and booleans compare with numbers."""

    if left == right:
        return True
    if isinstance(left, str) and isinstance(right, str):
        return False
    left_number = _as_loose_number(left)
    right_number = _as_loose_number(right)
    if left_number is None or right_number is None:
        return False
    return left_number == right_number


def _as_loose_number(value: object) -> float | None:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _numeric_bound(bound: object, symbol: str) -> object:
    if not is_numeric(bound):
        raise TypeError(f"{symbol} requires a numeric bound, got {json_kind_of(bound)}")
    return bound


def greater_than(bound: object) -> Comparison:
    return Comparison(
        symbol=">",
        bound=_numeric_bound(bound, ">"),
        numeric=True,
        compare=_operator.gt,
    )


def greater_or_equal(bound: object) -> Comparison:
    return Comparison(
        symbol=">=",
        bound=_numeric_bound(bound, ">="),
        numeric=True,
        compare=_operator.ge,
    )


def less_than(bound: object) -> Comparison:
    return Comparison(
        symbol="<",
        bound=_numeric_bound(bound, "<"),
        numeric=True,
        compare=_operator.lt,
    )


def less_or_equal(bound: object) -> Comparison:
    return Comparison(
        symbol="<=",
        bound=_numeric_bound(bound, "<="),
        numeric=True,
        compare=_operator.le,
    )


def equal(bound: object) -> Comparison:
    return Comparison(symbol="==", bound=bound, numeric=False, compare=loose_equals)


def not_equal(bound: object) -> Comparison:
    return Comparison(
        symbol="!=",
        bound=bound,
        numeric=False,
        compare=lambda value, other: not loose_equals(value, other),
    )


def require_numeric(type_name: str, field_name: str, value: object, *, check: str) -> None:
    if not is_numeric(value):
        raise NotNumeric(type_name, field_name, check=check, actual=json_kind_of(value))


def check_union(
    type_name: str,
    field_name: str,
    value: object,
    allowed: tuple[object, ...],
) -> None:
    """Reject ``value`` unless it loosely equals one of ``allowed``."""

    for candidate in allowed:
        if loose_equals(candidate, value):
            return
    raise NotInUnion(type_name, field_name, allowed=allowed, value=value)


def check_integer(type_name: str, field_name: str, value: object) -> None:
    require_numeric(type_name, field_name, value, check="integer")
    if isinstance(value, float) and (not math.isfinite(value) or math.floor(value) != value):
        raise NotInteger(type_name, field_name, value)


def freeze_union(values: Iterable[object]) -> tuple[object, ...]:
    if isinstance(values, (str, bytes)):
        raise TypeError("union() expects a collection of values, not a string")
    frozen = tuple(values)
    if not frozen:
        raise ValueError("union() requires at least one admissible value")
    return frozen


__all__ = [
    "Check",
    "Comparison",
    "CustomCheck",
    "Predicate",
    "check_integer",
    "check_union",
    "equal",
    "freeze_union",
    "greater_or_equal",
    "greater_than",
    "less_or_equal",
    "less_than",
    "loose_equals",
    "not_equal",
    "require_numeric",
]
