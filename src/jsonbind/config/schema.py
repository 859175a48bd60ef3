"""
jsonbind — binder settings schema and validation.

File: src/jsonbind/config/schema.py

Purpose
- Define the settings that tune the default registry, the default binder and
  logging, together with their defaults and strict validation rules.

Functional requirements
- Validate settings payloads and return structured errors (field path + message).
- Reject unknown keys so misspelled settings never pass silently.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Final

from jsonbind.constants import DEFAULT_MAX_DEPTH, ROOT_FIELD, SETTINGS_SCHEMA_VERSION
from jsonbind.errors import SettingsError, ValidationIssue

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")


@dataclass(frozen=True, slots=True)
class BinderSettings:
    """Effective settings applied by :func:`jsonbind.configure`."""

    strict_requiredness: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    log_level: str = "WARNING"
    log_format: str = "text"
    redact_logs: bool = True

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_SETTINGS: Final[BinderSettings] = BinderSettings()

_SETTINGS_KEYS: Final[frozenset[str]] = frozenset(
    {"schema_version", *DEFAULT_SETTINGS.as_dict()}
)


@dataclass(frozen=True, slots=True)
class SettingsValidationResult:
    """Validation result carrying parsed settings when no issues were found."""

    settings: BinderSettings | None
    issues: tuple[ValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.settings is not None and not self.issues


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


def validate_settings(
    payload: Mapping[str, object] | object,
    *,
    base: BinderSettings = DEFAULT_SETTINGS,
) -> SettingsValidationResult:
    """Validate ``payload`` over ``base`` and return structured issues.

    Keys absent from ``payload`` keep their value from ``base``.
    """

    issues = _IssueCollector()
    if not isinstance(payload, Mapping):
        issues.add(ROOT_FIELD, f"expected object, got {type(payload).__name__}")
        return SettingsValidationResult(settings=None, issues=issues.items())

    for key in sorted(str(item) for item in payload):
        if key not in _SETTINGS_KEYS:
            issues.add(key, "unknown field")

    if "schema_version" in payload:
        version = _as_int(payload["schema_version"], "schema_version", issues, minimum=1)
        if version is not None and version != SETTINGS_SCHEMA_VERSION:
            issues.add(
                "schema_version",
                f"unsupported schema version {version}; expected {SETTINGS_SCHEMA_VERSION}",
            )

    values = base.as_dict()
    if "strict_requiredness" in payload:
        values["strict_requiredness"] = _as_bool(
            payload["strict_requiredness"], "strict_requiredness", issues
        )
    if "max_depth" in payload:
        values["max_depth"] = _as_int(payload["max_depth"], "max_depth", issues, minimum=1)
    if "log_level" in payload:
        level = payload["log_level"]
        values["log_level"] = _as_enum(
            level.upper() if isinstance(level, str) else level,
            "log_level",
            issues,
            allowed_values=LOG_LEVELS,
        )
    if "log_format" in payload:
        values["log_format"] = _as_enum(
            payload["log_format"], "log_format", issues, allowed_values=LOG_FORMATS
        )
    if "redact_logs" in payload:
        values["redact_logs"] = _as_bool(payload["redact_logs"], "redact_logs", issues)

    if issues.has_issues:
        return SettingsValidationResult(settings=None, issues=issues.items())
    return SettingsValidationResult(settings=BinderSettings(**values), issues=())


def assert_valid_settings(
    payload: Mapping[str, object] | object,
    *,
    base: BinderSettings = DEFAULT_SETTINGS,
) -> BinderSettings:
    """Validate settings and raise :class:`SettingsError` on failure."""

    result = validate_settings(payload, base=base)
    if result.settings is None:
        raise SettingsError(result.issues)
    return result.settings


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if parsed not in allowed_values:
        expected = ", ".join(allowed_values)
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


__all__ = [
    "DEFAULT_SETTINGS",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "BinderSettings",
    "SettingsValidationResult",
    "assert_valid_settings",
    "validate_settings",
]
