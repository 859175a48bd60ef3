"""Typed error taxonomy for contract declaration and binding failures."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """Single structured validation failure (dotted path + message)."""

    path: str
    message: str


def _render_issues(issues: Sequence[ValidationIssue]) -> str:
    if not issues:
        return "unknown validation failure"
    return "\n".join(f"- {item.path}: {item.message}" for item in issues)


class JSONBindError(Exception):
    """Root of every error raised by jsonbind."""


class BindingError(JSONBindError, ValueError):
    """Raised when a payload cannot be bound onto a schema type.

    Every binding error names the schema type and the field that failed so a
    failure raised several levels deep in a nested bind still points at its
    origin.
    """

    def __init__(self, type_name: str, field_name: str, reason: str) -> None:
        self.type_name = type_name
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"{type_name}.{field_name}: {reason}")


class MissingRequiredField(BindingError):
    def __init__(self, type_name: str, field_name: str) -> None:
        super().__init__(type_name, field_name, "is required")


class TypeMismatch(BindingError):
    def __init__(
        self,
        type_name: str,
        field_name: str,
        *,
        expected: str,
        actual: str,
        index: int | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        self.index = index
        where = "" if index is None else f" at index {index}"
        super().__init__(type_name, field_name, f"expected {expected}, got {actual}{where}")


class InvalidDate(BindingError):
    def __init__(self, type_name: str, field_name: str, value: object) -> None:
        self.value = value
        super().__init__(type_name, field_name, f"{value!r} is not a valid date")


class NotInUnion(BindingError):
    def __init__(
        self,
        type_name: str,
        field_name: str,
        *,
        allowed: tuple[object, ...],
        value: object,
    ) -> None:
        self.allowed = allowed
        self.value = value
        rendered = ", ".join(repr(item) for item in allowed)
        super().__init__(
            type_name, field_name, f"{value!r} is not one of the allowed values: [{rendered}]"
        )


class ComparisonFailed(BindingError):
    def __init__(
        self,
        type_name: str,
        field_name: str,
        *,
        operator: str,
        bound: object,
        value: object,
    ) -> None:
        self.operator = operator
        self.bound = bound
        self.value = value
        super().__init__(
            type_name,
            field_name,
            f"requirement failed: value {operator} {bound!r} (got {value!r})",
        )


class NotNumeric(BindingError):
    def __init__(self, type_name: str, field_name: str, *, check: str, actual: str) -> None:
        self.check = check
        self.actual = actual
        super().__init__(type_name, field_name, f"{check} requires a numeric type, got {actual}")


class NotInteger(BindingError):
    def __init__(self, type_name: str, field_name: str, value: object) -> None:
        self.value = value
        super().__init__(type_name, field_name, f"must be an integer (got {value!r})")


class CustomValidationFailed(BindingError):
    def __init__(self, type_name: str, field_name: str, detail: str) -> None:
        self.detail = detail
        super().__init__(type_name, field_name, f"custom validation failed: {detail}")


class NestingTooDeep(BindingError):
    def __init__(self, type_name: str, field_name: str, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(type_name, field_name, f"nesting exceeds max_depth={max_depth}")


class SchemaConfigurationError(JSONBindError, TypeError):
    """Raised when contracts are declared inconsistently."""


class ConfigurationConflict(SchemaConfigurationError):
    def __init__(self, type_name: str, field_name: str, existing: str) -> None:
        self.type_name = type_name
        self.field_name = field_name
        self.existing = existing
        super().__init__(
            f"{type_name}.{field_name}: cannot declare requiredness, already set as {existing}"
        )


class UnsupportedNesting(SchemaConfigurationError):
    def __init__(self, type_name: str, field_name: str) -> None:
        self.type_name = type_name
        self.field_name = field_name
        super().__init__(
            f"{type_name}.{field_name}: array elements may not be arrays unless the field "
            "is declared passthrough"
        )


class SchemaTableError(SchemaConfigurationError):
    """Raised when a declarative schema table is invalid."""

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = tuple(issues)
        super().__init__(f"invalid schema table:\n{_render_issues(self.issues)}")


class SettingsError(JSONBindError, ValueError):
    """Raised when binder settings cannot be loaded or validated."""

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = tuple(issues)
        super().__init__(f"invalid settings:\n{_render_issues(self.issues)}")


__all__ = [
    "BindingError",
    "ComparisonFailed",
    "ConfigurationConflict",
    "CustomValidationFailed",
    "InvalidDate",
    "JSONBindError",
    "MissingRequiredField",
    "NestingTooDeep",
    "NotInUnion",
    "NotInteger",
    "NotNumeric",
    "SchemaConfigurationError",
    "SchemaTableError",
    "SettingsError",
    "TypeMismatch",
    "UnsupportedNesting",
    "ValidationIssue",
]
