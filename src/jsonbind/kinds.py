"""Value kinds: the tagged variant a field's declared type resolves to.

A field's declared Python type is resolved once, when the owning schema's
plan is compiled, into one of the variants below. The binder dispatches on
the variant instead of inspecting the declared type for every value.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any, Final, TypeAlias, get_args, get_origin

from jsonbind.constants import (
    KIND_ARRAY,
    KIND_BOOLEAN,
    KIND_NULL,
    KIND_NUMBER,
    KIND_OBJECT,
    KIND_STRING,
    KIND_UNKNOWN,
)

# Declared type accepting any JSON number (int or float) unchanged.
Number = numbers.Real

SchemaPredicate: TypeAlias = Callable[[type], bool]


@dataclass(frozen=True, slots=True)
class PrimitiveKind:
    """Scalar coerced by ``coerce`` and checked against ``json_kind``."""

    name: str
    json_kind: str
    coerce: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class DateKind:
    """Date or datetime parsed from epoch milliseconds or ISO-8601 text."""

    date_type: type


@dataclass(frozen=True, slots=True)
class SchemaKind:
    """Nested schema type bound recursively from a mapping."""

    schema: type


@dataclass(frozen=True, slots=True)
class MappingKind:
    """Plain mapping copied into a ``dict`` without per-key contracts."""


@dataclass(frozen=True, slots=True)
class AnyKind:
    """Value accepted unchanged."""


@dataclass(frozen=True, slots=True)
class ArrayKind:
    """List whose elements resolve to ``element`` (``None``: elements unchecked)."""

    element: ValueKind | None


ValueKind: TypeAlias = PrimitiveKind | DateKind | SchemaKind | MappingKind | AnyKind | ArrayKind


def _to_int(value: Any) -> int:
    converted = int(value)
    if converted != value:
        raise ValueError(f"{value!r} is not integral")
    return converted


def _to_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{value!r} is not a number")
    return value


PRIMITIVE_KINDS: Final[dict[type, PrimitiveKind]] = {
    str: PrimitiveKind(name="str", json_kind=KIND_STRING, coerce=str),
    int: PrimitiveKind(name="int", json_kind=KIND_NUMBER, coerce=_to_int),
    float: PrimitiveKind(name="float", json_kind=KIND_NUMBER, coerce=float),
    bool: PrimitiveKind(name="bool", json_kind=KIND_BOOLEAN, coerce=bool),
    Number: PrimitiveKind(name="number", json_kind=KIND_NUMBER, coerce=_to_number),
}

_ANY_TYPES: Final[tuple[object, ...]] = (object, Any, None)
_LIST_TYPES: Final[tuple[type, ...]] = (list, tuple)


def json_kind_of(value: object) -> str:
    """Return the JSON kind name of an in-memory value."""

    if value is None:
        return KIND_NULL
    if isinstance(value, bool):
        return KIND_BOOLEAN
    if isinstance(value, (int, float)):
        return KIND_NUMBER
    if isinstance(value, str):
        return KIND_STRING
    if isinstance(value, Mapping):
        return KIND_OBJECT
    if isinstance(value, (list, tuple)):
        return KIND_ARRAY
    return KIND_UNKNOWN


def is_numeric(value: object) -> bool:
    return json_kind_of(value) == KIND_NUMBER


def resolve_kind(
    value_type: object,
    *,
    is_schema: SchemaPredicate,
    element_type: object | None = None,
    has_element_type: bool = False,
) -> ValueKind:
    """Resolve a declared type (plus optional array element type) to a kind.

    ``has_element_type`` marks fields declared with ``array(...)``; those
    always resolve to :class:`ArrayKind`, whatever ``value_type`` says.
    Raises ``ValueError`` for array elements that are themselves arrays and
    ``TypeError`` for types with no known coercion.
    """

    if has_element_type:
        return _resolve_array(element_type, is_schema=is_schema)
    if get_origin(value_type) in _LIST_TYPES:
        return _resolve_array(_element_of(value_type), is_schema=is_schema)
    if value_type in _LIST_TYPES:
        return ArrayKind(element=None)
    return _resolve_scalar(value_type, is_schema=is_schema)


def _is_list_type(value_type: object) -> bool:
    return value_type in _LIST_TYPES or get_origin(value_type) in _LIST_TYPES


def _element_of(value_type: object) -> object:
    args = get_args(value_type)
    if get_origin(value_type) is tuple and not (len(args) == 2 and args[1] is Ellipsis):
        raise TypeError(
            f"unsupported declared type {value_type!r}; use tuple[T, ...] or array(T)"
        )
    return args[0] if args else object


def _resolve_array(element_type: object, *, is_schema: SchemaPredicate) -> ArrayKind:
    if _is_list_type(element_type):
        raise ValueError("array elements may not be arrays")
    return ArrayKind(element=_resolve_scalar(element_type, is_schema=is_schema))


def _resolve_scalar(value_type: object, *, is_schema: SchemaPredicate) -> ValueKind:
    if value_type in _ANY_TYPES:
        return AnyKind()
    if get_origin(value_type) in (dict, Mapping):
        return MappingKind()
    if not isinstance(value_type, type):
        raise TypeError(f"unsupported declared type {value_type!r}")
    primitive = PRIMITIVE_KINDS.get(value_type)
    if primitive is not None:
        return primitive
    # datetime subclasses date, so test it first.
    if issubclass(value_type, datetime):
        return DateKind(date_type=datetime)
    if issubclass(value_type, date):
        return DateKind(date_type=date)
    if value_type is dict or value_type is Mapping:
        return MappingKind()
    if is_schema(value_type):
        return SchemaKind(schema=value_type)
    raise TypeError(f"unsupported declared type {value_type.__name__}")


def parse_date(value: object, date_type: type) -> date | None:
    """Parse ``value`` into ``date_type``; ``None`` when it is not a valid date.

    Numbers are epoch milliseconds in UTC. Strings are ISO-8601; a trailing
    ``Z`` is accepted. Naive datetimes are taken as UTC.
    """

    parsed: datetime | date | None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, bool):
        return None
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            parsed = datetime.fromtimestamp(value / 1000.0, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        parsed = _parse_iso(value.strip(), date_type)
    else:
        return None

    if parsed is None:
        return None
    if date_type is datetime:
        if not isinstance(parsed, datetime):
            parsed = datetime(parsed.year, parsed.month, parsed.day, tzinfo=UTC)
        if parsed.tzinfo is None or parsed.utcoffset() is None:
            return parsed.replace(tzinfo=UTC)
        return parsed
    if isinstance(parsed, datetime):
        return parsed.date()
    return parsed


def _parse_iso(text: str, date_type: type) -> datetime | date | None:
    if not text:
        return None
    normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    if date_type is date:
        try:
            return date.fromisoformat(normalized)
        except ValueError:
            pass
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def describe_kind(kind: ValueKind) -> str:
    """Human-readable name used in error messages and logs."""

    if isinstance(kind, PrimitiveKind):
        return kind.name
    if isinstance(kind, DateKind):
        return kind.date_type.__name__
    if isinstance(kind, SchemaKind):
        return kind.schema.__name__
    if isinstance(kind, MappingKind):
        return KIND_OBJECT
    if isinstance(kind, ArrayKind):
        if kind.element is None:
            return KIND_ARRAY
        return f"{KIND_ARRAY}[{describe_kind(kind.element)}]"
    return "any"


__all__ = [
    "AnyKind",
    "ArrayKind",
    "DateKind",
    "MappingKind",
    "Number",
    "PRIMITIVE_KINDS",
    "PrimitiveKind",
    "SchemaKind",
    "ValueKind",
    "describe_kind",
    "is_numeric",
    "json_kind_of",
    "parse_date",
    "resolve_kind",
]
