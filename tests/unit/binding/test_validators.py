"""
jsonbind — unit tests for validator primitives and value kinds

File: tests/unit/binding/test_validators.py

Purpose
- Validate comparison factories, loose equality, union and integer checks,
  kind resolution and date parsing in isolation from the binder.

What this test file should cover
- Bounds are captured when a contract is declared.
- Union membership compares the value with each member (regression guard).
- Kind resolution picks one tagged variant per declared type.
"""

from __future__ import annotations

import math
from datetime import UTC, date, datetime, timedelta
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from jsonbind import validators
from jsonbind.contracts import MISSING, FieldPlan, custom, map_from, optional, union
from jsonbind.errors import ComparisonFailed, NotInteger, NotInUnion, NotNumeric
from jsonbind.kinds import (
    AnyKind,
    ArrayKind,
    DateKind,
    MappingKind,
    Number,
    PrimitiveKind,
    SchemaKind,
    describe_kind,
    json_kind_of,
    parse_date,
    resolve_kind,
)


def _never_schema(candidate: type) -> bool:
    return False


@pytest.mark.unit
def test_comparison_captures_bound_at_declaration() -> None:
    check = validators.greater_than(5)

    check.run(None, "T", "f", 6)
    with pytest.raises(ComparisonFailed) as excinfo:
        check.run(None, "T", "f", 5)

    assert excinfo.value.operator == ">"
    assert excinfo.value.bound == 5


@pytest.mark.unit
@pytest.mark.parametrize(
    ("factory", "accepted", "rejected"),
    [
        (validators.greater_or_equal, 5, 4),
        (validators.less_than, 4, 5),
        (validators.less_or_equal, 5, 6),
    ],
)
def test_inclusive_and_exclusive_bounds(factory: Any, accepted: int, rejected: int) -> None:
    check = factory(5)

    check.run(None, "T", "f", accepted)
    with pytest.raises(ComparisonFailed):
        check.run(None, "T", "f", rejected)


@pytest.mark.unit
@pytest.mark.parametrize("bound", ["5", None, True, [1]])
def test_numeric_factories_reject_non_numeric_bounds(bound: object) -> None:
    with pytest.raises(TypeError):
        validators.greater_than(bound)


@pytest.mark.unit
def test_numeric_check_rejects_boolean_value() -> None:
    with pytest.raises(NotNumeric) as excinfo:
        validators.less_than(3).run(None, "T", "f", True)

    assert excinfo.value.actual == "boolean"


@pytest.mark.unit
def test_equal_and_not_equal_use_loose_equality() -> None:
    validators.equal(5).run(None, "T", "f", "5")
    validators.equal("x").run(None, "T", "f", "x")
    with pytest.raises(ComparisonFailed):
        validators.not_equal(1).run(None, "T", "f", True)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [
        (1, 1, True),
        ("5", 5, True),
        (5.0, 5, True),
        (True, 1, True),
        (False, 0, True),
        ("a", "A", False),
        ("1.0", "1", False),
        ("abc", 0, False),
        (None, 0, False),
        ([1], [1], True),
    ],
)
def test_loose_equals(left: object, right: object, expected: bool) -> None:
    assert validators.loose_equals(left, right) is expected


@given(value=st.integers(min_value=-1000, max_value=1000))
@settings(max_examples=50, derandomize=True, deadline=None)
def test_property_loose_equals_is_symmetric_for_numeric_text(value: int) -> None:
    assert validators.loose_equals(str(value), value)
    assert validators.loose_equals(value, str(value))


@pytest.mark.unit
def test_union_check_compares_value_with_each_member() -> None:
    allowed = (1, 2, 3)

    validators.check_union("T", "f", 2, allowed)
    with pytest.raises(NotInUnion) as excinfo:
        validators.check_union("T", "f", 6, allowed)

    assert excinfo.value.value == 6
    assert excinfo.value.allowed == allowed


@given(
    members=st.lists(st.integers(min_value=0, max_value=50), min_size=1, max_size=6),
    value=st.integers(min_value=51, max_value=100),
)
@settings(max_examples=40, derandomize=True, deadline=None)
def test_property_union_never_admits_values_outside_the_set(
    members: list[int], value: int
) -> None:
    with pytest.raises(NotInUnion):
        validators.check_union("T", "f", value, tuple(members))


@pytest.mark.unit
def test_union_factory_rejects_strings_and_empty_sets() -> None:
    with pytest.raises(TypeError):
        union("abc")
    with pytest.raises(ValueError):
        union([])


@pytest.mark.unit
def test_integer_check() -> None:
    validators.check_integer("T", "f", 13)
    validators.check_integer("T", "f", 13.0)
    for rejected in (13.4, math.inf, math.nan):
        with pytest.raises(NotInteger):
            validators.check_integer("T", "f", rejected)
    with pytest.raises(NotNumeric):
        validators.check_integer("T", "f", "13")


@pytest.mark.unit
def test_custom_check_accepts_any_non_false_verdict() -> None:
    validators.CustomCheck(predicate=lambda _i, _f, _v: None).run(None, "T", "f", 1)
    validators.CustomCheck(predicate=lambda _i, _f, _v: 0).run(None, "T", "f", 1)


@pytest.mark.unit
def test_fragment_factories_validate_arguments() -> None:
    with pytest.raises(TypeError):
        map_from("")
    with pytest.raises(TypeError):
        custom("not callable")  # type: ignore[arg-type]


@pytest.mark.unit
def test_default_value_is_deep_copied() -> None:
    fragment = optional({"nested": [1]})
    plan = FieldPlan(
        name="f",
        source_key="f",
        required=False,
        default=fragment.default,
        passthrough=False,
        kind=None,
        union=None,
        transforms=(),
        checks=(),
        integer=False,
    )

    copied = plan.default_value()
    copied["nested"].append(2)

    assert plan.default_value() == {"nested": [1]}
    assert optional().default is MISSING
    assert not MISSING


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "null"),
        (True, "boolean"),
        (3, "number"),
        (2.5, "number"),
        ("x", "string"),
        ({}, "object"),
        ([], "array"),
        (object(), "unknown"),
    ],
)
def test_json_kind_of(value: object, expected: str) -> None:
    assert json_kind_of(value) == expected


@pytest.mark.unit
def test_resolve_kind_variants() -> None:
    class Schema:
        pass

    def is_schema(candidate: type) -> bool:
        return candidate is Schema

    assert isinstance(resolve_kind(str, is_schema=is_schema), PrimitiveKind)
    assert resolve_kind(Number, is_schema=is_schema).name == "number"
    assert resolve_kind(datetime, is_schema=is_schema) == DateKind(date_type=datetime)
    assert resolve_kind(date, is_schema=is_schema) == DateKind(date_type=date)
    assert resolve_kind(dict, is_schema=is_schema) == MappingKind()
    assert resolve_kind(object, is_schema=is_schema) == AnyKind()
    assert resolve_kind(None, is_schema=is_schema) == AnyKind()
    assert resolve_kind(list, is_schema=is_schema) == ArrayKind(element=None)
    assert resolve_kind(Schema, is_schema=is_schema) == SchemaKind(schema=Schema)

    element = resolve_kind(list, is_schema=is_schema, element_type=Schema, has_element_type=True)
    assert element == ArrayKind(element=SchemaKind(schema=Schema))
    assert describe_kind(element) == "array[Schema]"


@pytest.mark.unit
def test_resolve_kind_rejects_nested_arrays_and_unknown_types() -> None:
    with pytest.raises(ValueError):
        resolve_kind(list, is_schema=_never_schema, element_type=list, has_element_type=True)
    with pytest.raises(TypeError):
        resolve_kind(set, is_schema=_never_schema)
    with pytest.raises(TypeError):
        resolve_kind("str", is_schema=_never_schema)


@pytest.mark.unit
def test_parse_date_forms() -> None:
    assert parse_date(0, datetime) == datetime(1970, 1, 1, tzinfo=UTC)
    assert parse_date("2024-03-01T12:30:00Z", datetime) == datetime(
        2024, 3, 1, 12, 30, tzinfo=UTC
    )
    assert parse_date("2024-03-01T12:30:00", datetime) == datetime(
        2024, 3, 1, 12, 30, tzinfo=UTC
    )
    offset = parse_date("2024-03-01T12:30:00+02:00", datetime)
    assert offset is not None
    assert offset.utcoffset() == timedelta(hours=2)
    assert parse_date("2024-03-01", date) == date(2024, 3, 1)
    assert parse_date("2024-03-01T23:00:00Z", date) == date(2024, 3, 1)
    assert parse_date("2024-03-01", datetime) == datetime(2024, 3, 1, tzinfo=UTC)
    assert parse_date(datetime(2024, 1, 1, tzinfo=UTC), date) == date(2024, 1, 1)


@pytest.mark.unit
@pytest.mark.parametrize("value", ["", "yesterday", "2024-13-01", True, None, [], math.inf])
def test_parse_date_rejects_invalid_values(value: object) -> None:
    assert parse_date(value, datetime) is None
