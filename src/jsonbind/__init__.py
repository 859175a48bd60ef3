"""jsonbind: declarative binding and validation of JSON-like data onto typed objects."""

from __future__ import annotations

from typing import Any

from jsonbind.binder import Binder, bind, default_binder
from jsonbind.config import BinderSettings, load_settings
from jsonbind.contracts import (
    MISSING,
    ContractFragment,
    FieldContract,
    FieldPlan,
    Requiredness,
    array,
    custom,
    eq,
    gt,
    gte,
    integer,
    lt,
    lte,
    map_from,
    ne,
    optional,
    passthrough,
    required,
    union,
    validate,
)
from jsonbind.errors import (
    BindingError,
    ComparisonFailed,
    ConfigurationConflict,
    CustomValidationFailed,
    InvalidDate,
    JSONBindError,
    MissingRequiredField,
    NestingTooDeep,
    NotInteger,
    NotInUnion,
    NotNumeric,
    SchemaConfigurationError,
    SchemaTableError,
    SettingsError,
    TypeMismatch,
    UnsupportedNesting,
    ValidationIssue,
)
from jsonbind.kinds import Number
from jsonbind.model import JSONObject, field, fields_of
from jsonbind.observability.logging import configure_from_settings
from jsonbind.registry import ContractRegistry, default_registry
from jsonbind.schema_table import build_schemas, load_schema_table, parse_schema_table

__version__ = "0.1.0"


def declare(
    target: type,
    field_name: str,
    *fragments: ContractFragment,
    **kwargs: Any,
) -> FieldContract:
    """Declare contracts for ``target.field_name`` in the default registry."""

    return default_registry.declare(target, field_name, *fragments, **kwargs)


def configure(settings: BinderSettings | None = None) -> BinderSettings:
    """Apply ``settings`` (loaded from the environment when omitted) to the defaults.

    Sets the default registry's strictness, the default binder's depth limit
    and the structlog configuration. Returns the applied settings.
    """

    effective = settings if settings is not None else load_settings()
    default_registry.strict = effective.strict_requiredness
    default_binder.max_depth = effective.max_depth
    configure_from_settings(effective)
    return effective


__all__ = [
    "MISSING",
    "Binder",
    "BinderSettings",
    "BindingError",
    "ComparisonFailed",
    "ConfigurationConflict",
    "ContractFragment",
    "ContractRegistry",
    "CustomValidationFailed",
    "FieldContract",
    "FieldPlan",
    "InvalidDate",
    "JSONBindError",
    "JSONObject",
    "MissingRequiredField",
    "NestingTooDeep",
    "NotInUnion",
    "NotInteger",
    "NotNumeric",
    "Number",
    "Requiredness",
    "SchemaConfigurationError",
    "SchemaTableError",
    "SettingsError",
    "TypeMismatch",
    "UnsupportedNesting",
    "ValidationIssue",
    "__version__",
    "array",
    "bind",
    "build_schemas",
    "configure",
    "custom",
    "declare",
    "default_binder",
    "default_registry",
    "eq",
    "field",
    "fields_of",
    "gt",
    "gte",
    "integer",
    "load_schema_table",
    "load_settings",
    "lt",
    "lte",
    "map_from",
    "ne",
    "optional",
    "parse_schema_table",
    "passthrough",
    "required",
    "union",
    "validate",
]
