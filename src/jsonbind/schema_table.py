"""
jsonbind — declarative schema tables.

File: src/jsonbind/schema_table.py

Purpose
- Build ``JSONObject`` schema types from plain data (a mapping, or a YAML
  document) instead of Python class bodies.

Table layout
- Top-level keys are schema names, in document order.
- Each schema maps field names to either a type name (``title: str``) or a
  field table with the keys below.

  ``type``        str, int, float, number, bool, date, datetime, array/list,
                  object/dict, any, or the name of a schema in the same table
  ``required``    true (required) or false (optional)
  ``default``     value substituted when the key is absent
  ``map``         input key to read instead of the field name
  ``items``       element type name of an array field
  ``union``       list of admissible values
  ``gt`` ``gte`` ``lt`` ``lte``  numeric bounds
  ``eq`` ``ne``   loose equality bounds
  ``integer``     true to require integral numbers
  ``passthrough`` true to keep the raw value verbatim

Functional requirements
- Validate the whole table first and report every issue with its path.
- Allow schemas to reference each other, and themselves, in any order.
"""

from __future__ import annotations

import keyword
import numbers
import types
from collections.abc import Callable, Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any, Final

import structlog
import yaml

from jsonbind import contracts
from jsonbind.binder import Binder
from jsonbind.constants import ROOT_FIELD
from jsonbind.contracts import ContractFragment
from jsonbind.errors import SchemaTableError, ValidationIssue
from jsonbind.kinds import Number
from jsonbind.model import JSONObject

_logger = structlog.get_logger(__name__)

_BUILTIN_TYPES: Final[dict[str, object]] = {
    "str": str,
    "string": str,
    "int": int,
    "float": float,
    "number": Number,
    "bool": bool,
    "boolean": bool,
    "date": date,
    "datetime": datetime,
    "array": list,
    "list": list,
    "object": dict,
    "dict": dict,
    "any": object,
}
_ARRAY_TYPE_NAMES: Final[frozenset[str]] = frozenset({"array", "list"})

_COMPARISONS: Final[dict[str, Callable[[object], ContractFragment]]] = {
    "gt": contracts.gt,
    "gte": contracts.gte,
    "lt": contracts.lt,
    "lte": contracts.lte,
    "eq": contracts.eq,
    "ne": contracts.ne,
}
_NUMERIC_BOUNDS: Final[frozenset[str]] = frozenset({"gt", "gte", "lt", "lte"})
_FIELD_KEYS: Final[frozenset[str]] = frozenset(
    {"type", "required", "default", "map", "items", "union", "integer", "passthrough"}
    | set(_COMPARISONS)
)


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ValidationIssue(path=path, message=message))

    def items(self) -> tuple[ValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


_FieldSpec = tuple[str, object, tuple[ContractFragment, ...]]


def build_schemas(
    table: Mapping[str, object] | object,
    *,
    binder: Binder | None = None,
    module: str | None = None,
) -> dict[str, type[JSONObject]]:
    """Create one ``JSONObject`` subclass per schema in ``table``.

    Returns the new types keyed by name, in table order. Raises
    :class:`SchemaTableError` listing every problem when the table is invalid;
    no type is created in that case.
    """

    issues = _IssueCollector()
    if not isinstance(table, Mapping):
        issues.add(ROOT_FIELD, f"expected object, got {type(table).__name__}")
        raise SchemaTableError(issues.items())

    names: list[str] = []
    for name in table:
        if _as_identifier(name, str(name), issues) is not None:
            names.append(name)

    # Placeholders stand in for schema references until the classes exist.
    references = {name: _SchemaRef(name) for name in names}
    specs: dict[str, list[_FieldSpec]] = {}
    for name in names:
        specs[name] = _validate_schema(table[name], name, references, issues)

    if issues.has_issues:
        raise SchemaTableError(issues.items())

    created: dict[str, type[JSONObject]] = {}
    for name in names:
        created[name] = _new_schema_type(name, binder=binder, module=module)
    for name in names:
        schema = created[name]
        for field_name, value_type, fragments in specs[name]:
            schema.declare(
                field_name,
                *_resolve_fragments(fragments, created),
                value_type=_resolve_type(value_type, created),
            )

    _logger.debug("jsonbind_schema_table_built", schemas=list(created))
    return created


def parse_schema_table(
    text: str,
    *,
    binder: Binder | None = None,
    source: str = "<string>",
) -> dict[str, type[JSONObject]]:
    """Build schemas from a YAML document held in ``text``."""

    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SchemaTableError(
            [ValidationIssue(path=source, message=f"invalid YAML: {exc}")]
        ) from exc
    if payload is None:
        payload = {}
    return build_schemas(payload, binder=binder)


def load_schema_table(
    path: str | Path,
    *,
    binder: Binder | None = None,
) -> dict[str, type[JSONObject]]:
    """Build schemas from a YAML file."""

    resolved = Path(path).expanduser()
    try:
        text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaTableError(
            [ValidationIssue(path=str(resolved), message=f"unable to read schema table: {exc}")]
        ) from exc
    return parse_schema_table(text, binder=binder, source=str(resolved))


class _SchemaRef:
    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"_SchemaRef({self.name!r})"


def _new_schema_type(
    name: str,
    *,
    binder: Binder | None,
    module: str | None,
) -> type[JSONObject]:
    kwds: dict[str, Any] = {} if binder is None else {"binder": binder}

    def body(namespace: dict[str, Any]) -> None:
        namespace["__module__"] = module if module is not None else __name__
        namespace["__qualname__"] = name

    return types.new_class(name, (JSONObject,), kwds, body)


def _resolve_type(value_type: object, created: Mapping[str, type[JSONObject]]) -> object:
    if isinstance(value_type, _SchemaRef):
        return created[value_type.name]
    return value_type


def _resolve_fragments(
    fragments: tuple[ContractFragment, ...],
    created: Mapping[str, type[JSONObject]],
) -> tuple[ContractFragment, ...]:
    resolved: list[ContractFragment] = []
    for fragment in fragments:
        if isinstance(fragment, contracts.ArrayOf) and isinstance(
            fragment.element_type, _SchemaRef
        ):
            fragment = contracts.array(created[fragment.element_type.name])
        resolved.append(fragment)
    return tuple(resolved)


def _validate_schema(
    value: object,
    path: str,
    references: Mapping[str, _SchemaRef],
    issues: _IssueCollector,
) -> list[_FieldSpec]:
    if value is None:
        return []
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return []

    specs: list[_FieldSpec] = []
    for field_name, field_value in value.items():
        field_path = _join(path, str(field_name))
        if _as_identifier(field_name, field_path, issues) is None:
            continue
        parsed = _validate_field(field_value, field_path, references, issues)
        if parsed is not None:
            specs.append((field_name, *parsed))
    return specs


def _validate_field(
    value: object,
    path: str,
    references: Mapping[str, _SchemaRef],
    issues: _IssueCollector,
) -> tuple[object, tuple[ContractFragment, ...]] | None:
    if isinstance(value, str):
        value = {"type": value}
    if not isinstance(value, Mapping):
        issues.add(path, f"expected type name or object, got {type(value).__name__}")
        return None

    for key in sorted(str(item) for item in value):
        if key not in _FIELD_KEYS:
            issues.add(_join(path, key), "unknown field")

    fragments: list[ContractFragment] = []
    type_name = value.get("type", "any")
    value_type = _as_type(type_name, _join(path, "type"), references, issues)

    has_default = "default" in value
    if "required" in value:
        required = _as_bool(value["required"], _join(path, "required"), issues)
        if required:
            if has_default:
                issues.add(_join(path, "default"), "cannot be combined with required: true")
            fragments.append(contracts.required())
        elif required is False and not has_default:
            fragments.append(contracts.optional())
    if has_default:
        fragments.append(contracts.optional(value["default"]))

    if "map" in value:
        key = value["map"]
        if isinstance(key, str) and key:
            fragments.append(contracts.map_from(key))
        else:
            issues.add(_join(path, "map"), "expected non-empty string")

    if "items" in value:
        items_path = _join(path, "items")
        if not isinstance(type_name, str) or type_name not in _ARRAY_TYPE_NAMES:
            issues.add(items_path, "only array fields may declare items")
        elif (
            value.get("passthrough") is not True
            and isinstance(value["items"], str)
            and value["items"] in _ARRAY_TYPE_NAMES
        ):
            issues.add(items_path, "array elements may not be arrays")
        else:
            element_type = _as_type(value["items"], items_path, references, issues)
            if element_type is not None:
                fragments.append(contracts.array(element_type))

    if "union" in value:
        members = value["union"]
        if isinstance(members, list) and members:
            fragments.append(contracts.union(members))
        else:
            issues.add(_join(path, "union"), "expected non-empty list")

    for key, factory in _COMPARISONS.items():
        if key not in value:
            continue
        bound = value[key]
        if key in _NUMERIC_BOUNDS and (
            isinstance(bound, bool) or not isinstance(bound, numbers.Real)
        ):
            issues.add(_join(path, key), f"expected number, got {type(bound).__name__}")
            continue
        fragments.append(factory(bound))

    for key, factory in (("integer", contracts.integer), ("passthrough", contracts.passthrough)):
        if key in value and _as_bool(value[key], _join(path, key), issues):
            fragments.append(factory())

    if value_type is None:
        return None
    return value_type, tuple(fragments)


def _as_type(
    value: object,
    path: str,
    references: Mapping[str, _SchemaRef],
    issues: _IssueCollector,
) -> object | None:
    if not isinstance(value, str):
        issues.add(path, f"expected type name, got {type(value).__name__}")
        return None
    if value in references:
        return references[value]
    builtin = _BUILTIN_TYPES.get(value)
    if builtin is None:
        issues.add(path, f"unknown type {value!r}")
    return builtin


def _as_identifier(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str) or not value.isidentifier():
        issues.add(path, f"expected identifier, got {value!r}")
        return None
    if keyword.iskeyword(value) or value.startswith("__"):
        issues.add(path, f"{value!r} is reserved")
        return None
    return value


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


__all__ = ["build_schemas", "load_schema_table", "parse_schema_table"]
