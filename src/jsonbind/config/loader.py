"""
jsonbind — settings loader.

File: src/jsonbind/config/loader.py

Purpose
- Load effective binder settings from defaults, a TOML file, environment
  variables and explicit overrides.

What should be included in this file
- Precedence logic: overrides > env (JSONBIND_) > file > defaults.
- TOML loading via ``tomllib``, from ``jsonbind.toml`` or the
  ``[tool.jsonbind]`` table of ``pyproject.toml``.
- Deterministic environment variable mapping and coercion.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Literal

from jsonbind.config.schema import DEFAULT_SETTINGS, BinderSettings, assert_valid_settings
from jsonbind.constants import (
    DEFAULT_SETTINGS_FILE,
    ENV_PREFIX,
    PYPROJECT_FILE,
    PYPROJECT_TOOL_SECTION,
)
from jsonbind.errors import SettingsError, ValidationIssue

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_ValueType = Literal["str", "int", "bool"]


def load_settings(
    settings_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
    search_dir: str | Path | None = None,
) -> BinderSettings:
    """Load effective settings with precedence: overrides > env > file > defaults.

    Without ``settings_path`` the loader looks for ``jsonbind.toml`` and then
    for a ``[tool.jsonbind]`` table in ``pyproject.toml`` inside
    ``search_dir`` (the current directory by default). An explicit path must
    exist.
    """

    env_map = dict(os.environ if environ is None else environ)

    file_payload = _load_file_payload(settings_path, search_dir)
    settings = assert_valid_settings(file_payload, base=DEFAULT_SETTINGS)
    settings = assert_valid_settings(_collect_env_overrides(env_map), base=settings)
    if overrides:
        settings = assert_valid_settings(dict(overrides), base=settings)
    return settings


def load_settings_file(path: str | Path) -> BinderSettings:
    """Load settings from one TOML file, ignoring the environment."""

    return load_settings(path, environ={})


def env_name_for(setting: str) -> str:
    return ENV_PREFIX + setting.upper()


def _load_file_payload(
    settings_path: str | Path | None,
    search_dir: str | Path | None,
) -> dict[str, Any]:
    if settings_path is not None:
        path = Path(settings_path).expanduser().resolve()
        if not path.exists():
            raise _load_error(str(path), "settings file not found")
        return _payload_for(path)

    base_dir = Path.cwd() if search_dir is None else Path(search_dir)
    for candidate in (base_dir / DEFAULT_SETTINGS_FILE, base_dir / PYPROJECT_FILE):
        if candidate.is_file():
            return _payload_for(candidate.resolve())
    return {}


def _payload_for(path: Path) -> dict[str, Any]:
    parsed = _load_toml_file(path)
    if path.name != PYPROJECT_FILE:
        return parsed

    cursor: object = parsed
    for part in PYPROJECT_TOOL_SECTION:
        if not isinstance(cursor, Mapping) or part not in cursor:
            return {}
        cursor = cursor[part]
    if not isinstance(cursor, Mapping):
        raise _load_error(".".join(PYPROJECT_TOOL_SECTION), "must be a table")
    return dict(cursor)


def _load_toml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise _load_error(str(path), f"invalid TOML: {exc}") from exc
    except OSError as exc:
        raise _load_error(str(path), f"unable to read settings file: {exc}") from exc


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for setting, default in sorted(DEFAULT_SETTINGS.as_dict().items()):
        env_name = env_name_for(setting)
        raw = environ.get(env_name)
        if raw is None:
            continue
        overrides[setting] = _coerce_env(raw, _kind_for_value(default), env_name)
    return overrides


def _kind_for_value(value: object) -> _ValueType:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    return "str"


def _coerce_env(raw: str, value_type: _ValueType, env_name: str) -> object:
    value = raw.strip()
    if value_type == "str":
        return value
    if value_type == "int":
        try:
            return int(value)
        except ValueError as exc:
            raise _load_error(env_name, "must be an integer") from exc

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise _load_error(env_name, "must be a boolean (true/false/1/0/yes/no/on/off)")


def _load_error(path: str, message: str) -> SettingsError:
    return SettingsError([ValidationIssue(path=path, message=message)])


__all__ = ["env_name_for", "load_settings", "load_settings_file"]
