"""
jsonbind — unit tests for settings validation and loading

File: tests/unit/config/test_settings.py

Purpose
- Validate settings defaults, structured validation issues and the loader's
  precedence: overrides > env > file > defaults.

What this test file should cover
- Unknown keys and out-of-range values produce path-addressed issues.
- ``jsonbind.toml`` and ``[tool.jsonbind]`` in ``pyproject.toml`` are both read.
- Environment variable coercion and its error reporting.
- ``jsonbind.configure`` applies settings to the default registry and binder.

Functional requirements
- Offline; never reads the real working directory or environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

import jsonbind
from jsonbind.config import (
    DEFAULT_SETTINGS,
    BinderSettings,
    assert_valid_settings,
    env_name_for,
    load_settings,
    load_settings_file,
    validate_settings,
)
from jsonbind.errors import SettingsError
from jsonbind.observability.logging import reset_logging

if TYPE_CHECKING:
    from collections.abc import Iterator


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def restore_defaults() -> Iterator[None]:
    yield
    jsonbind.configure(DEFAULT_SETTINGS)
    reset_logging()


@pytest.mark.unit
def test_defaults() -> None:
    result = validate_settings({})

    assert result.is_valid
    assert result.settings == BinderSettings()
    assert result.settings.max_depth == 64
    assert result.settings.strict_requiredness is False
    assert result.settings.log_level == "WARNING"
    assert result.settings.log_format == "text"


@pytest.mark.unit
def test_validation_collects_every_issue_with_paths() -> None:
    result = validate_settings(
        {
            "max_depth": 0,
            "strict_requiredness": "yes",
            "log_format": "xml",
            "colour": True,
            "schema_version": 2,
        }
    )

    assert not result.is_valid
    paths = sorted(issue.path for issue in result.issues)
    assert paths == [
        "colour",
        "log_format",
        "max_depth",
        "schema_version",
        "strict_requiredness",
    ]


@pytest.mark.unit
def test_log_level_is_case_insensitive() -> None:
    assert assert_valid_settings({"log_level": "debug"}).log_level == "DEBUG"


@pytest.mark.unit
def test_assert_valid_settings_raises_settings_error() -> None:
    with pytest.raises(SettingsError) as excinfo:
        assert_valid_settings({"max_depth": "deep"})

    assert excinfo.value.issues[0].path == "max_depth"
    assert "expected integer" in str(excinfo.value)


@pytest.mark.unit
def test_non_mapping_payload_is_rejected() -> None:
    result = validate_settings(["max_depth"])

    assert result.settings is None
    assert result.issues[0].path == "<root>"


@pytest.mark.unit
def test_loader_precedence_default_file_env_overrides(tmp_path: Path) -> None:
    _write(tmp_path / "jsonbind.toml", "max_depth = 10\nlog_format = \"json\"\n")
    environ = {env_name_for("max_depth"): "20"}

    defaults = load_settings(environ={}, search_dir=tmp_path / "empty")
    from_file = load_settings(environ={}, search_dir=tmp_path)
    from_env = load_settings(environ=environ, search_dir=tmp_path)
    from_overrides = load_settings(
        environ=environ, search_dir=tmp_path, overrides={"max_depth": 30}
    )

    assert defaults == DEFAULT_SETTINGS
    assert from_file.max_depth == 10
    assert from_file.log_format == "json"
    assert from_env.max_depth == 20
    assert from_env.log_format == "json"
    assert from_overrides.max_depth == 30


@pytest.mark.unit
def test_loader_reads_pyproject_tool_table(tmp_path: Path) -> None:
    _write(
        tmp_path / "pyproject.toml",
        "[project]\nname = \"demo\"\n\n[tool.jsonbind]\nstrict_requiredness = true\n",
    )

    assert load_settings(environ={}, search_dir=tmp_path).strict_requiredness is True


@pytest.mark.unit
def test_loader_ignores_pyproject_without_tool_table(tmp_path: Path) -> None:
    _write(tmp_path / "pyproject.toml", "[project]\nname = \"demo\"\n")

    assert load_settings(environ={}, search_dir=tmp_path) == DEFAULT_SETTINGS


@pytest.mark.unit
def test_settings_file_takes_priority_over_pyproject(tmp_path: Path) -> None:
    _write(tmp_path / "jsonbind.toml", "max_depth = 5\n")
    _write(tmp_path / "pyproject.toml", "[tool.jsonbind]\nmax_depth = 7\n")

    assert load_settings(environ={}, search_dir=tmp_path).max_depth == 5


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("yes", True), ("ON", True), ("0", False), ("off", False)],
)
def test_env_boolean_coercion(tmp_path: Path, raw: str, expected: bool) -> None:
    settings = load_settings(
        environ={"JSONBIND_STRICT_REQUIREDNESS": raw}, search_dir=tmp_path
    )

    assert settings.strict_requiredness is expected


@pytest.mark.unit
def test_env_coercion_errors_name_the_variable(tmp_path: Path) -> None:
    with pytest.raises(SettingsError) as excinfo:
        load_settings(environ={"JSONBIND_MAX_DEPTH": "deep"}, search_dir=tmp_path)

    assert excinfo.value.issues[0].path == "JSONBIND_MAX_DEPTH"

    with pytest.raises(SettingsError):
        load_settings(environ={"JSONBIND_REDACT_LOGS": "maybe"}, search_dir=tmp_path)


@pytest.mark.unit
def test_env_values_are_validated(tmp_path: Path) -> None:
    with pytest.raises(SettingsError) as excinfo:
        load_settings(environ={"JSONBIND_LOG_LEVEL": "chatty"}, search_dir=tmp_path)

    assert excinfo.value.issues[0].path == "log_level"


@pytest.mark.unit
def test_explicit_missing_file_fails(tmp_path: Path) -> None:
    with pytest.raises(SettingsError):
        load_settings_file(tmp_path / "missing.toml")


@pytest.mark.unit
def test_invalid_toml_fails(tmp_path: Path) -> None:
    path = _write(tmp_path / "jsonbind.toml", "max_depth = = 3\n")

    with pytest.raises(SettingsError) as excinfo:
        load_settings_file(path)

    assert "invalid TOML" in excinfo.value.issues[0].message


@pytest.mark.unit
def test_unknown_file_keys_fail(tmp_path: Path) -> None:
    path = _write(tmp_path / "jsonbind.toml", "max_dept = 3\n")

    with pytest.raises(SettingsError) as excinfo:
        load_settings_file(path)

    assert excinfo.value.issues[0].path == "max_dept"


@pytest.mark.unit
def test_configure_applies_settings_to_defaults(restore_defaults: None) -> None:
    applied = jsonbind.configure(BinderSettings(strict_requiredness=True, max_depth=5))

    assert applied.max_depth == 5
    assert jsonbind.default_registry.strict is True
    assert jsonbind.default_binder.max_depth == 5
