"""Stable constants shared across the registry, binder, and settings layers."""

from __future__ import annotations

from typing import Final

# Settings schema version.
SETTINGS_SCHEMA_VERSION: Final[int] = 1

# Settings sources.
DEFAULT_SETTINGS_FILE: Final[str] = "jsonbind.toml"
PYPROJECT_FILE: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_SECTION: Final[tuple[str, ...]] = ("tool", "jsonbind")
ENV_PREFIX: Final[str] = "JSONBIND_"

# Binding limits.
DEFAULT_MAX_DEPTH: Final[int] = 64

# Placeholder used in error messages for the top-level payload.
ROOT_FIELD: Final[str] = "<root>"

# JSON value kinds reported in type mismatch errors.
KIND_STRING: Final[str] = "string"
KIND_NUMBER: Final[str] = "number"
KIND_BOOLEAN: Final[str] = "boolean"
KIND_OBJECT: Final[str] = "object"
KIND_ARRAY: Final[str] = "array"
KIND_NULL: Final[str] = "null"
KIND_UNKNOWN: Final[str] = "unknown"

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_SETTINGS_FILE",
    "ENV_PREFIX",
    "KIND_ARRAY",
    "KIND_BOOLEAN",
    "KIND_NULL",
    "KIND_NUMBER",
    "KIND_OBJECT",
    "KIND_STRING",
    "KIND_UNKNOWN",
    "PYPROJECT_FILE",
    "PYPROJECT_TOOL_SECTION",
    "ROOT_FIELD",
    "SETTINGS_SCHEMA_VERSION",
]
