"""Field contracts and the fragment factories used to declare them.

A contract is accumulated from fragments: each fragment (``required()``,
``map_from("title")``, ``gt(5)`` ...) merges one rule into the field's
:class:`FieldContract`. Fragments are plain frozen values, so the same
fragment object may be reused across fields and types.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Final, TypeAlias

from jsonbind import validators
from jsonbind.errors import ConfigurationConflict
from jsonbind.kinds import ValueKind
from jsonbind.validators import Check, Comparison, CustomCheck, Predicate

TransformFn: TypeAlias = Callable[[Any, str, Any], Any]


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final[Any] = _Missing()


class Requiredness(StrEnum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    DEFAULTED = "optional-with-default"


@dataclass(slots=True)
class FieldContract:
    """Mutable accumulation of every rule declared for one field."""

    name: str
    value_type: object = None
    requiredness: Requiredness | None = None
    default: object = MISSING
    source_key: str | None = None
    passthrough: bool = False
    element_type: object = None
    has_element_type: bool = False
    union: tuple[object, ...] | None = None
    transforms: list[TransformFn] = field(default_factory=list)
    checks: list[Check] = field(default_factory=list)
    integer: bool = False

    @property
    def required(self) -> bool:
        # Unspecified requiredness means optional.
        return self.requiredness is Requiredness.REQUIRED

    def copy(self) -> FieldContract:
        return FieldContract(
            name=self.name,
            value_type=self.value_type,
            requiredness=self.requiredness,
            default=self.default,
            source_key=self.source_key,
            passthrough=self.passthrough,
            element_type=self.element_type,
            has_element_type=self.has_element_type,
            union=self.union,
            transforms=list(self.transforms),
            checks=list(self.checks),
            integer=self.integer,
        )


@dataclass(frozen=True, slots=True)
class FieldPlan:
    """Immutable, compiled form of a :class:`FieldContract` used by the binder."""

    name: str
    source_key: str
    required: bool
    default: object
    passthrough: bool
    kind: ValueKind | None
    union: tuple[object, ...] | None
    transforms: tuple[TransformFn, ...]
    checks: tuple[Check, ...]
    integer: bool

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    def default_value(self) -> object:
        """Fresh copy of the default, so mutable defaults are never shared."""

        return copy.deepcopy(self.default)


class ContractFragment(ABC):
    """Base class for one declarable rule."""

    __slots__ = ()

    @abstractmethod
    def apply(self, contract: FieldContract, *, owner: str, strict: bool) -> None:
        """Merge this rule into ``contract``."""


@dataclass(frozen=True, slots=True)
class Requirement(ContractFragment):
    required: bool
    default: object = MISSING

    def apply(self, contract: FieldContract, *, owner: str, strict: bool) -> None:
        if strict and contract.requiredness is not None:
            raise ConfigurationConflict(owner, contract.name, contract.requiredness.value)
        if self.required:
            contract.requiredness = Requiredness.REQUIRED
            contract.default = MISSING
        elif self.default is MISSING:
            contract.requiredness = Requiredness.OPTIONAL
            contract.default = MISSING
        else:
            contract.requiredness = Requiredness.DEFAULTED
            contract.default = self.default


@dataclass(frozen=True, slots=True)
class SourceKey(ContractFragment):
    key: str

    def apply(self, contract: FieldContract, *, owner: str, strict: bool) -> None:
        contract.source_key = self.key


@dataclass(frozen=True, slots=True)
class Passthrough(ContractFragment):
    def apply(self, contract: FieldContract, *, owner: str, strict: bool) -> None:
        contract.passthrough = True


@dataclass(frozen=True, slots=True)
class ArrayOf(ContractFragment):
    element_type: object

    def apply(self, contract: FieldContract, *, owner: str, strict: bool) -> None:
        contract.element_type = self.element_type
        contract.has_element_type = True


@dataclass(frozen=True, slots=True)
class UnionOf(ContractFragment):
    values: tuple[object, ...]

    def apply(self, contract: FieldContract, *, owner: str, strict: bool) -> None:
        contract.union = self.values


@dataclass(frozen=True, slots=True)
class IntegerOnly(ContractFragment):
    def apply(self, contract: FieldContract, *, owner: str, strict: bool) -> None:
        contract.integer = True


@dataclass(frozen=True, slots=True)
class Transform(ContractFragment):
    function: TransformFn

    def apply(self, contract: FieldContract, *, owner: str, strict: bool) -> None:
        contract.transforms.append(self.function)


@dataclass(frozen=True, slots=True)
class AddCheck(ContractFragment):
    check: Check

    def apply(self, contract: FieldContract, *, owner: str, strict: bool) -> None:
        contract.checks.append(self.check)


def required() -> Requirement:
    """Field must be present in the input (or fail with ``MissingRequiredField``)."""

    return Requirement(required=True)


def optional(default: object = MISSING) -> Requirement:
    """Field may be absent; ``default`` is substituted when given."""

    return Requirement(required=False, default=default)


def map_from(key: str) -> SourceKey:
    """Read the field from ``key`` in the input instead of its own name."""

    if not isinstance(key, str) or not key:
        raise TypeError("map_from() expects a non-empty string key")
    return SourceKey(key=key)


def passthrough() -> Passthrough:
    """Assign the raw input value verbatim, skipping coercion and validation."""

    return Passthrough()


def array(element_type: object) -> ArrayOf:
    """Field is a list whose elements are coerced to ``element_type``."""

    return ArrayOf(element_type=element_type)


def union(values: Iterable[object]) -> UnionOf:
    """Restrict the coerced value to ``values``."""

    return UnionOf(values=validators.freeze_union(values))


def integer() -> IntegerOnly:
    return IntegerOnly()


def custom(transform: TransformFn) -> Transform:
    """Replace the value with ``transform(instance, field_name, value)``.

    A ``None`` return keeps the value. The transform may assign other
    attributes on the instance under construction, but only fields declared
    before this one have been bound when it runs.
    """

    if not callable(transform):
        raise TypeError("custom() expects a callable")
    return Transform(function=transform)


def validate(predicate: Predicate) -> AddCheck:
    """Reject the value when ``predicate(instance, field_name, value)`` fails.

    Failing means raising or returning ``False``.
    """

    if not callable(predicate):
        raise TypeError("validate() expects a callable")
    return AddCheck(check=CustomCheck(predicate=predicate))


def _comparison(check: Comparison) -> AddCheck:
    return AddCheck(check=check)


def gt(bound: object) -> AddCheck:
    return _comparison(validators.greater_than(bound))


def gte(bound: object) -> AddCheck:
    return _comparison(validators.greater_or_equal(bound))


def lt(bound: object) -> AddCheck:
    return _comparison(validators.less_than(bound))


def lte(bound: object) -> AddCheck:
    return _comparison(validators.less_or_equal(bound))


def eq(bound: object) -> AddCheck:
    return _comparison(validators.equal(bound))


def ne(bound: object) -> AddCheck:
    return _comparison(validators.not_equal(bound))


__all__ = [
    "AddCheck",
    "ArrayOf",
    "ContractFragment",
    "FieldContract",
    "FieldPlan",
    "IntegerOnly",
    "MISSING",
    "Passthrough",
    "Requiredness",
    "Requirement",
    "SourceKey",
    "Transform",
    "TransformFn",
    "UnionOf",
    "array",
    "custom",
    "eq",
    "gt",
    "gte",
    "integer",
    "lt",
    "lte",
    "map_from",
    "ne",
    "optional",
    "passthrough",
    "required",
    "union",
    "validate",
]
