"""Binder: applies a schema's compiled field plans to an untyped input mapping.

For every field, in declaration order, the binder resolves the source key,
substitutes defaults or enforces requiredness, coerces the raw value through
the field's value kind, then runs the union check, custom transforms,
ordered checks and the integer check before committing the value onto the
instance. The first failure aborts the whole bind.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

import structlog

from jsonbind.constants import DEFAULT_MAX_DEPTH, KIND_ARRAY, KIND_OBJECT, ROOT_FIELD
from jsonbind.contracts import FieldPlan
from jsonbind.errors import (
    BindingError,
    CustomValidationFailed,
    InvalidDate,
    MissingRequiredField,
    NestingTooDeep,
    NotInteger,
    TypeMismatch,
)
from jsonbind.kinds import (
    AnyKind,
    ArrayKind,
    DateKind,
    MappingKind,
    PrimitiveKind,
    SchemaKind,
    ValueKind,
    is_numeric,
    json_kind_of,
    parse_date,
)
from jsonbind.registry import ContractRegistry, default_registry
from jsonbind.validators import check_integer, check_union

T = TypeVar("T")


class Binder:
    """Builds schema instances from raw mappings using a :class:`ContractRegistry`."""

    __slots__ = ("_logger", "_max_depth", "_registry")

    def __init__(
        self,
        registry: ContractRegistry | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        logger: Any | None = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry
        self._max_depth = _validate_max_depth(max_depth)
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def registry(self) -> ContractRegistry:
        return self._registry

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @max_depth.setter
    def max_depth(self, value: int) -> None:
        self._max_depth = _validate_max_depth(value)

    def bind(self, target: type[T], data: Mapping[str, object] | None) -> T:
        """Return a new, fully populated ``target`` instance built from ``data``."""

        instance = target.__new__(target)
        self._bind_root(instance, data)
        return instance

    def populate(self, instance: object, data: Mapping[str, object] | None) -> None:
        """Bind ``data`` onto an already allocated ``instance``.

        ``None`` binds as an empty mapping. Raises a :class:`BindingError`
        subclass on the first failure, in which case ``instance`` is left
        untouched: fields are bound onto a scratch instance of the same type
        and copied over only once every field has passed.
        """

        scratch = type(instance).__new__(type(instance))
        self._bind_root(scratch, data)
        for name, value in vars(scratch).items():
            setattr(instance, name, value)

    def _bind_root(self, instance: object, data: Mapping[str, object] | None) -> None:
        try:
            self._populate(instance, {} if data is None else data, depth=0)
        except BindingError as exc:
            self._logger.info(
                "jsonbind_bind_failed",
                schema=type(instance).__name__,
                error=type(exc).__name__,
                failed_schema=exc.type_name,
                field=exc.field_name,
                reason=exc.reason,
            )
            raise

    def _populate(self, instance: object, data: object, *, depth: int) -> None:
        target = type(instance)
        type_name = target.__name__
        if depth > self._max_depth:
            raise NestingTooDeep(type_name, ROOT_FIELD, self._max_depth)
        if not isinstance(data, Mapping):
            raise TypeMismatch(
                type_name, ROOT_FIELD, expected=KIND_OBJECT, actual=json_kind_of(data)
            )

        for plan in self._registry.plan(target):
            raw = data.get(plan.source_key)
            if raw is None and plan.has_default:
                raw = plan.default_value()
            if raw is None:
                if plan.required:
                    raise MissingRequiredField(type_name, plan.name)
                continue
            value = self._resolve_value(instance, plan, raw, type_name, depth)
            setattr(instance, plan.name, value)

    def _resolve_value(
        self,
        instance: object,
        plan: FieldPlan,
        raw: object,
        type_name: str,
        depth: int,
    ) -> object:
        if plan.kind is None:
            # Passthrough: raw value kept, only transforms run.
            return self._transform(instance, plan, raw, type_name)

        try:
            value = self._coerce(plan.kind, raw, type_name, plan.name, depth)
        except TypeMismatch as exc:
            # A non-integral number on an integer-flagged field is a NotInteger failure.
            if (
                plan.integer
                and isinstance(plan.kind, PrimitiveKind)
                and exc.index is None
                and is_numeric(raw)
            ):
                raise NotInteger(type_name, plan.name, raw) from exc
            raise
        if plan.union is not None:
            check_union(type_name, plan.name, value, plan.union)
        value = self._transform(instance, plan, value, type_name)
        for check in plan.checks:
            check.run(instance, type_name, plan.name, value)
        if plan.integer:
            check_integer(type_name, plan.name, value)
        return value

    def _transform(
        self,
        instance: object,
        plan: FieldPlan,
        value: object,
        type_name: str,
    ) -> object:
        for transform in plan.transforms:
            try:
                replacement = transform(instance, plan.name, value)
            except BindingError:
                raise
            except Exception as exc:
                detail = str(exc) or type(exc).__name__
                raise CustomValidationFailed(type_name, plan.name, detail) from exc
            if replacement is not None:
                value = replacement
        return value

    def _coerce(
        self,
        kind: ValueKind,
        raw: object,
        type_name: str,
        field_name: str,
        depth: int,
        index: int | None = None,
    ) -> object:
        if isinstance(kind, PrimitiveKind):
            return _coerce_primitive(kind, raw, type_name, field_name, index)
        if isinstance(kind, SchemaKind):
            if not isinstance(raw, Mapping):
                raise TypeMismatch(
                    type_name,
                    field_name,
                    expected=KIND_OBJECT,
                    actual=json_kind_of(raw),
                    index=index,
                )
            nested = kind.schema.__new__(kind.schema)
            self._binder_for(kind.schema)._populate(nested, raw, depth=depth + 1)
            return nested
        if isinstance(kind, ArrayKind):
            if not isinstance(raw, (list, tuple)):
                raise TypeMismatch(
                    type_name,
                    field_name,
                    expected=KIND_ARRAY,
                    actual=json_kind_of(raw),
                    index=index,
                )
            if kind.element is None:
                return list(raw)
            return [
                self._coerce(kind.element, item, type_name, field_name, depth, position)
                for position, item in enumerate(raw)
            ]
        if isinstance(kind, DateKind):
            parsed = parse_date(raw, kind.date_type)
            if parsed is None:
                raise InvalidDate(type_name, field_name, raw)
            return parsed
        if isinstance(kind, MappingKind):
            if not isinstance(raw, Mapping):
                raise TypeMismatch(
                    type_name,
                    field_name,
                    expected=KIND_OBJECT,
                    actual=json_kind_of(raw),
                    index=index,
                )
            return dict(raw)
        if isinstance(kind, AnyKind):
            return raw
        raise TypeError(f"unknown value kind {kind!r}")

    def _binder_for(self, schema: type) -> Binder:
        # Schema classes carrying their own binder bind with it; others use this one.
        owner = getattr(schema, "_binder", None)
        if callable(owner):
            resolved = owner()
            if isinstance(resolved, Binder):
                return resolved
        return self


def _coerce_primitive(
    kind: PrimitiveKind,
    raw: object,
    type_name: str,
    field_name: str,
    index: int | None,
) -> object:
    actual = json_kind_of(raw)
    try:
        coerced = kind.coerce(raw)
    except (TypeError, ValueError, OverflowError) as exc:
        raise TypeMismatch(
            type_name, field_name, expected=kind.name, actual=actual, index=index
        ) from exc
    if json_kind_of(coerced) != actual:
        raise TypeMismatch(
            type_name, field_name, expected=kind.json_kind, actual=actual, index=index
        )
    return coerced


def _validate_max_depth(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"max_depth must be an integer, got {type(value).__name__}")
    if value < 1:
        raise ValueError("max_depth must be >= 1")
    return value


default_binder = Binder()


def bind(target: type[T], data: Mapping[str, object] | None) -> T:
    """Bind ``data`` onto a new ``target`` using the default binder."""

    return default_binder.bind(target, data)


__all__ = ["Binder", "bind", "default_binder"]
