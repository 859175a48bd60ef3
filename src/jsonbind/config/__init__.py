"""Binder settings: schema, validation and loading."""

from jsonbind.config.loader import env_name_for, load_settings, load_settings_file
from jsonbind.config.schema import (
    DEFAULT_SETTINGS,
    BinderSettings,
    SettingsValidationResult,
    assert_valid_settings,
    validate_settings,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "BinderSettings",
    "SettingsValidationResult",
    "assert_valid_settings",
    "env_name_for",
    "load_settings",
    "load_settings_file",
    "validate_settings",
]
