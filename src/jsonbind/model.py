"""``JSONObject`` base class and class-body field declarations.

Schema types subclass :class:`JSONObject` and declare fields as class
attributes::

    class Book(JSONObject):
        name = field(str, required(), map_from("title"))
        pages = field(int, optional(0), gte(0))

Fields are registered with the binder's registry when the class is created,
in class-body order. Constructing an instance binds a raw mapping onto it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

from jsonbind import binder as _binder
from jsonbind.contracts import ContractFragment, FieldContract

TObject = TypeVar("TObject", bound="JSONObject")


@dataclass(frozen=True, slots=True)
class FieldDeclaration:
    """Placeholder left in a class body by :func:`field`; consumed at class creation."""

    value_type: object
    fragments: tuple[ContractFragment, ...]


def field(value_type: object = object, *fragments: ContractFragment) -> Any:
    """Declare a schema field of ``value_type`` with contract ``fragments``.

    Use ``object`` (the default) for values accepted as-is, ``list[T]`` (or
    ``list`` together with ``array(T)``) for typed lists, or another
    ``JSONObject`` subclass for nested objects.
    """

    for fragment in fragments:
        if not isinstance(fragment, ContractFragment):
            raise TypeError(
                f"field() expects contract fragments, got {type(fragment).__name__}"
            )
    return FieldDeclaration(value_type=value_type, fragments=tuple(fragments))


class JSONObject:
    """Base class for schema types bound from JSON-like mappings."""

    __jsonbind_binder__: ClassVar[_binder.Binder | None] = None

    def __init_subclass__(cls, *, binder: _binder.Binder | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if binder is not None:
            cls.__jsonbind_binder__ = binder
        registry = cls._binder().registry
        registry.register(cls)

        declarations = [
            (name, value)
            for name, value in vars(cls).items()
            if isinstance(value, FieldDeclaration)
        ]
        for name, declaration in declarations:
            registry.declare(
                cls, name, *declaration.fragments, value_type=declaration.value_type
            )
            # Unbound optional fields read as None.
            setattr(cls, name, None)

    def __init__(self, data: Mapping[str, object] | None = None) -> None:
        self._binder().populate(self, data)

    @classmethod
    def _binder(cls) -> _binder.Binder:
        configured = cls.__jsonbind_binder__
        return configured if configured is not None else _binder.default_binder

    @classmethod
    def from_dict(cls: type[TObject], data: Mapping[str, object] | None) -> TObject:
        """Bind ``data`` onto a new instance (same as calling the class)."""

        return cls._binder().bind(cls, data)

    @classmethod
    def declare(cls, field_name: str, *fragments: ContractFragment, **kwargs: Any) -> None:
        """Add contracts to ``field_name`` after the class body has run."""

        cls._binder().registry.declare(cls, field_name, *fragments, **kwargs)
        if not hasattr(cls, field_name):
            setattr(cls, field_name, None)

    @classmethod
    def contracts(cls) -> tuple[FieldContract, ...]:
        """Ordered field contracts, inherited fields first."""

        return cls._binder().registry.fields(cls)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        rendered = ", ".join(f"{key}={value!r}" for key, value in vars(self).items())
        return f"{type(self).__name__}({rendered})"


def fields_of(target: type) -> tuple[FieldContract, ...]:
    """Ordered contracts declared for ``target`` in its binder's registry."""

    if isinstance(target, type) and issubclass(target, JSONObject):
        return target.contracts()
    return _binder.default_binder.registry.fields(target)


__all__ = ["FieldDeclaration", "JSONObject", "field", "fields_of"]
