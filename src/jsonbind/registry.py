"""Per-type field contract registry.

The registry owns every contract declared for every schema type. Contracts
are declared once, at class creation or program initialization, and compiled
into immutable :class:`~jsonbind.contracts.FieldPlan` tuples on first use.
Binding only reads compiled plans.
"""

from __future__ import annotations

import keyword
import threading
from typing import Any, Final

import structlog

from jsonbind.contracts import ContractFragment, FieldContract, FieldPlan
from jsonbind.errors import SchemaConfigurationError, UnsupportedNesting
from jsonbind.kinds import describe_kind, resolve_kind

_UNSET: Final[Any] = object()


class ContractRegistry:
    """Thread-safe store of field contracts keyed by schema type and field name."""

    __slots__ = ("_contracts", "_lock", "_logger", "_plans", "_strict")

    def __init__(self, *, strict: bool = False, logger: Any | None = None) -> None:
        self._lock = threading.RLock()
        self._strict = bool(strict)
        self._contracts: dict[type, dict[str, FieldContract]] = {}
        self._plans: dict[type, tuple[FieldPlan, ...]] = {}
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def strict(self) -> bool:
        """Reject a second requiredness declaration for the same field."""

        return self._strict

    @strict.setter
    def strict(self, value: bool) -> None:
        if not isinstance(value, bool):
            raise TypeError(f"strict must be a bool, got {type(value).__name__}")
        with self._lock:
            self._strict = value

    def register(self, target: type) -> None:
        """Mark ``target`` as a schema type, even before any field is declared."""

        _require_type(target)
        with self._lock:
            self._contracts.setdefault(target, {})
            self._plans.clear()

    def declare(
        self,
        target: type,
        field_name: str,
        *fragments: ContractFragment,
        value_type: object = _UNSET,
    ) -> FieldContract:
        """Merge ``fragments`` into the contract for ``target.field_name``.

        The field joins the type's ordered field list on first declaration
        only. Later declarations merge into the existing contract. Returns a
        copy of the merged contract.
        """

        _require_type(target)
        _require_field_name(target, field_name)
        for fragment in fragments:
            if not isinstance(fragment, ContractFragment):
                raise SchemaConfigurationError(
                    f"{target.__name__}.{field_name}: expected contract fragment, "
                    f"got {type(fragment).__name__}"
                )

        with self._lock:
            own = self._contracts.setdefault(target, {})
            existing = own.get(field_name)
            working = existing.copy() if existing is not None else FieldContract(name=field_name)
            for fragment in fragments:
                fragment.apply(working, owner=target.__name__, strict=self._strict)
            if value_type is not _UNSET:
                working.value_type = value_type
            own[field_name] = working
            self._plans.clear()

        self._logger.debug(
            "jsonbind_field_declared",
            schema=target.__name__,
            field=field_name,
            fragments=[type(fragment).__name__ for fragment in fragments],
            first_declaration=existing is None,
        )
        return working.copy()

    def is_schema(self, candidate: type) -> bool:
        if not isinstance(candidate, type):
            return False
        with self._lock:
            return any(klass in self._contracts for klass in candidate.__mro__)

    def accepts_nested(self, candidate: type) -> bool:
        """Whether ``candidate`` may be used as a nested field type.

        Besides types known to this registry, this admits schema classes that
        carry their own binder (``JSONObject`` subclasses), whose contracts may
        live in another registry.
        """

        if self.is_schema(candidate):
            return True
        return isinstance(candidate, type) and callable(getattr(candidate, "_binder", None))

    def fields(self, target: type) -> tuple[FieldContract, ...]:
        """Ordered contracts for ``target``; inherited fields come first.

        A subclass re-declaring an inherited field keeps the base position and
        replaces the base contract.
        """

        _require_type(target)
        with self._lock:
            merged: dict[str, FieldContract] = {}
            for klass in reversed(target.__mro__):
                for name, contract in self._contracts.get(klass, {}).items():
                    merged[name] = contract
            return tuple(contract.copy() for contract in merged.values())

    def field_names(self, target: type) -> tuple[str, ...]:
        return tuple(contract.name for contract in self.fields(target))

    def plan(self, target: type) -> tuple[FieldPlan, ...]:
        """Compiled binding plan for ``target`` (cached until the next declaration)."""

        with self._lock:
            cached = self._plans.get(target)
            if cached is not None:
                return cached
            if not self.is_schema(target):
                raise SchemaConfigurationError(
                    f"{target.__name__} has no declared contracts; "
                    "subclass JSONObject or declare fields first"
                )
            compiled = tuple(
                self._compile(target, contract) for contract in self.fields(target)
            )
            self._plans[target] = compiled

        self._logger.debug(
            "jsonbind_plan_compiled",
            schema=target.__name__,
            fields=[
                {
                    "name": item.name,
                    "kind": "passthrough" if item.kind is None else describe_kind(item.kind),
                }
                for item in compiled
            ],
        )
        return compiled

    def clear(self, target: type | None = None) -> None:
        """Forget contracts for ``target`` (or for every type)."""

        with self._lock:
            if target is None:
                self._contracts.clear()
            else:
                self._contracts.pop(target, None)
            self._plans.clear()

    def _compile(self, target: type, contract: FieldContract) -> FieldPlan:
        kind = None
        if not contract.passthrough:
            try:
                kind = resolve_kind(
                    contract.value_type,
                    is_schema=self.accepts_nested,
                    element_type=contract.element_type,
                    has_element_type=contract.has_element_type,
                )
            except ValueError as exc:
                raise UnsupportedNesting(target.__name__, contract.name) from exc
            except TypeError as exc:
                raise SchemaConfigurationError(
                    f"{target.__name__}.{contract.name}: {exc}"
                ) from exc

        return FieldPlan(
            name=contract.name,
            source_key=contract.source_key or contract.name,
            required=contract.required,
            default=contract.default,
            passthrough=contract.passthrough,
            kind=kind,
            union=contract.union,
            transforms=tuple(contract.transforms),
            checks=tuple(contract.checks),
            integer=contract.integer,
        )


def _require_type(target: object) -> None:
    if not isinstance(target, type):
        raise SchemaConfigurationError(
            f"schema target must be a class, got {type(target).__name__}"
        )


def _require_field_name(target: type, field_name: object) -> None:
    if not isinstance(field_name, str) or not field_name.isidentifier():
        raise SchemaConfigurationError(
            f"{target.__name__}: field name must be a Python identifier, got {field_name!r}"
        )
    if keyword.iskeyword(field_name) or field_name.startswith("__"):
        raise SchemaConfigurationError(
            f"{target.__name__}: {field_name!r} cannot be used as a field name"
        )


default_registry: Final[ContractRegistry] = ContractRegistry()


__all__ = ["ContractRegistry", "default_registry"]
