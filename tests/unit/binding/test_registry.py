"""
jsonbind — unit tests for the contract registry

File: tests/unit/binding/test_registry.py

Purpose
- Validate declaration merging, field ordering, inheritance, plan caching and
  strict requiredness.
"""

from __future__ import annotations

import threading

import pytest

from jsonbind import (
    Binder,
    ConfigurationConflict,
    ContractRegistry,
    JSONObject,
    Requiredness,
    SchemaConfigurationError,
    field,
    fields_of,
    gt,
    lt,
    map_from,
    optional,
    required,
)


@pytest.mark.unit
def test_first_declaration_fixes_position_and_redeclaration_merges() -> None:
    registry = ContractRegistry()

    class Target:
        pass

    registry.declare(Target, "a", required(), value_type=int)
    registry.declare(Target, "b", value_type=str)
    registry.declare(Target, "a", gt(1), lt(9))

    contracts = registry.fields(Target)
    assert [contract.name for contract in contracts] == ["a", "b"]
    merged = contracts[0]
    assert merged.required
    assert merged.value_type is int
    assert [check.symbol for check in merged.checks] == [">", "<"]


@pytest.mark.unit
def test_unspecified_requiredness_is_optional() -> None:
    registry = ContractRegistry()

    class Target:
        pass

    contract = registry.declare(Target, "a", value_type=int)

    assert contract.requiredness is None
    assert not contract.required


@pytest.mark.unit
def test_lenient_registry_lets_last_requiredness_win() -> None:
    registry = ContractRegistry()

    class Target:
        pass

    registry.declare(Target, "a", required())
    contract = registry.declare(Target, "a", optional(3))

    assert contract.requiredness is Requiredness.DEFAULTED
    assert contract.default == 3


@pytest.mark.unit
def test_strict_registry_rejects_second_requiredness() -> None:
    registry = ContractRegistry(strict=True)

    class Target:
        pass

    registry.declare(Target, "a", required())
    with pytest.raises(ConfigurationConflict) as excinfo:
        registry.declare(Target, "a", optional())

    assert excinfo.value.existing == "required"
    assert registry.fields(Target)[0].required


@pytest.mark.unit
def test_strict_conflict_within_one_class_body() -> None:
    binder = Binder(ContractRegistry(strict=True))

    with pytest.raises(ConfigurationConflict):

        class Conflicting(JSONObject, binder=binder):
            value = field(int, required(), optional())


@pytest.mark.unit
def test_strict_flag_is_typed() -> None:
    registry = ContractRegistry()
    registry.strict = True
    assert registry.strict is True

    with pytest.raises(TypeError):
        registry.strict = "yes"  # type: ignore[assignment]


@pytest.mark.unit
def test_declare_returns_copy() -> None:
    registry = ContractRegistry()

    class Target:
        pass

    returned = registry.declare(Target, "a", gt(1))
    returned.checks.clear()

    assert len(registry.fields(Target)[0].checks) == 1


@pytest.mark.unit
@pytest.mark.parametrize("name", ["", "1abc", "with space", "class", "__dunder"])
def test_invalid_field_names_are_rejected(name: str) -> None:
    registry = ContractRegistry()

    class Target:
        pass

    with pytest.raises(SchemaConfigurationError):
        registry.declare(Target, name)


@pytest.mark.unit
def test_non_fragment_arguments_are_rejected() -> None:
    registry = ContractRegistry()

    class Target:
        pass

    with pytest.raises(SchemaConfigurationError):
        registry.declare(Target, "a", "required")  # type: ignore[arg-type]
    with pytest.raises(SchemaConfigurationError):
        registry.declare("Target", "a")  # type: ignore[arg-type]


@pytest.mark.unit
def test_plan_is_cached_until_next_declaration() -> None:
    registry = ContractRegistry()

    class Target:
        pass

    registry.declare(Target, "a", value_type=int)
    first = registry.plan(Target)

    assert registry.plan(Target) is first

    registry.declare(Target, "b", map_from("bee"), value_type=str)
    second = registry.plan(Target)

    assert second is not first
    assert [plan.source_key for plan in second] == ["a", "bee"]


@pytest.mark.unit
def test_plan_for_unknown_type_is_a_configuration_error() -> None:
    registry = ContractRegistry()

    class Unknown:
        pass

    assert not registry.is_schema(Unknown)
    with pytest.raises(SchemaConfigurationError):
        registry.plan(Unknown)


@pytest.mark.unit
def test_nested_types_include_schemas_owned_by_other_registries() -> None:
    registry = ContractRegistry()

    class Foreign(JSONObject, binder=Binder(ContractRegistry())):
        code = field(str, required())

    class Plain:
        pass

    assert not registry.is_schema(Foreign)
    assert registry.accepts_nested(Foreign)
    assert not registry.accepts_nested(Plain)


@pytest.mark.unit
def test_unsupported_declared_type_fails_at_compile() -> None:
    registry = ContractRegistry()

    class Target:
        pass

    registry.declare(Target, "a", value_type=complex)

    with pytest.raises(SchemaConfigurationError):
        registry.plan(Target)


@pytest.mark.unit
def test_plain_class_binds_through_explicit_registry() -> None:
    registry = ContractRegistry()
    binder = Binder(registry)

    class Plain:
        pass

    registry.declare(Plain, "x", required(), value_type=int)

    assert binder.bind(Plain, {"x": 4}).x == 4


@pytest.mark.unit
def test_subclass_inherits_base_fields_first() -> None:
    class Base(JSONObject):
        id = field(int, required())
        name = field(str)

    class Derived(Base):
        extra = field(bool)
        name = field(str, required())

    names = [contract.name for contract in fields_of(Derived)]
    assert names == ["id", "name", "extra"]
    assert fields_of(Derived)[1].required
    assert not fields_of(Base)[1].required

    derived = Derived({"id": 1, "name": "n", "extra": True})
    assert (derived.id, derived.name, derived.extra) == (1, "n", True)


@pytest.mark.unit
def test_clear_forgets_contracts() -> None:
    registry = ContractRegistry()

    class Target:
        pass

    registry.declare(Target, "a")
    registry.clear(Target)

    assert registry.fields(Target) == ()
    assert not registry.is_schema(Target)


@pytest.mark.unit
def test_concurrent_declarations_keep_every_field_once() -> None:
    registry = ContractRegistry()

    class Target:
        pass

    def declare_range(offset: int) -> None:
        for index in range(50):
            registry.declare(Target, f"f{(offset * 10 + index) % 60}", gt(0))

    threads = [threading.Thread(target=declare_range, args=(offset,)) for offset in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    names = registry.field_names(Target)
    assert len(names) == len(set(names))
    assert len(names) == 60
