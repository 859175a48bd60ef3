"""Logging helpers for jsonbind."""

from jsonbind.observability.logging import (
    binding_scope,
    configure_from_settings,
    configure_logging,
    redact_event,
    reset_logging,
)

__all__ = [
    "binding_scope",
    "configure_from_settings",
    "configure_logging",
    "redact_event",
    "reset_logging",
]
