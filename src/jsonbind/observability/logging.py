"""Structured logging setup for jsonbind loggers with redaction support."""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from typing import IO, Any, Final

import structlog

_REDACTED_VALUE: Final[str] = "***REDACTED***"
_DEFAULT_LEVEL: Final[str] = "WARNING"
_LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")

_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "passphrase",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "cookie",
    "private_key",
    "client_secret",
)

# Event keys whose value describes the field named by ``field``; masked when
# that field is itself sensitive.
_FIELD_SCOPED_KEYS: Final[tuple[str, ...]] = ("reason", "value")

_SENSITIVE_ASSIGNMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(api[_-]?key|token|password|secret|client_secret|authorization)\b"
    r"\s*([:=])\s*([^\s,;]+)"
)
_BEARER_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/-]+=*")


def configure_logging(
    *,
    level: int | str = _DEFAULT_LEVEL,
    log_format: str = "text",
    stream: IO[str] | None = None,
    redact: bool = True,
) -> None:
    """Configure structlog process-wide for ``jsonbind`` output.

    This calls :func:`structlog.configure`, so it replaces any structlog
    configuration the host application installed and applies to every
    structlog logger in the process. Applications that own their structlog
    setup should skip this and pass a logger to :class:`~jsonbind.Binder`
    and :class:`~jsonbind.ContractRegistry` through their ``logger=``
    argument instead.

    Parameters
    ----------
    level:
        Minimum level name or number; lower events are dropped.
    log_format:
        ``"json"`` for one JSON object per line, ``"text"`` for console output.
    stream:
        Output stream; defaults to ``sys.stderr``.
    redact:
        Mask values of sensitive keys and secret-looking strings.
    """

    level_no = _parse_log_level(level)
    if log_format not in _LOG_FORMATS:
        raise ValueError(
            f"unsupported log format {log_format!r}; expected one of {list(_LOG_FORMATS)}"
        )

    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if redact:
        processors.append(redact_event)
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        logger_factory=structlog.PrintLoggerFactory(
            file=stream if stream is not None else sys.stderr
        ),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(settings: Any, *, stream: IO[str] | None = None) -> None:
    """Configure logging from a :class:`~jsonbind.config.BinderSettings`."""

    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        stream=stream,
        redact=settings.redact_logs,
    )


def reset_logging() -> None:
    """Restore structlog defaults."""

    structlog.reset_defaults()


@contextmanager
def binding_scope(**fields: str | None) -> Iterator[None]:
    """Temporarily bind context fields (request id, source name ...) to log events."""

    bound = {key: value for key, value in fields.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


def redact_event(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """structlog processor masking secrets before rendering."""

    field_name = event_dict.get("field")
    field_is_sensitive = isinstance(field_name, str) and _requires_redaction_for_key(field_name)

    for key in list(event_dict):
        value = event_dict[key]
        if key == "event":
            if isinstance(value, str):
                event_dict[key] = _redact_string(value)
            continue
        if field_is_sensitive and key in _FIELD_SCOPED_KEYS:
            event_dict[key] = _REDACTED_VALUE
            continue
        event_dict[key] = _redact_value(value, key_context=key)
    return event_dict


def _redact_value(value: object, *, key_context: str | None) -> object:
    if key_context is not None and _requires_redaction_for_key(key_context):
        return _REDACTED_VALUE
    if isinstance(value, str):
        return _redact_string(value)
    if isinstance(value, list):
        return [_redact_value(item, key_context=None) for item in value]
    if isinstance(value, Mapping):
        return {
            key: _redact_value(item, key_context=key if isinstance(key, str) else None)
            for key, item in value.items()
        }
    return value


def _requires_redaction_for_key(key: str) -> bool:
    key_lower = key.lower()
    return any(term in key_lower for term in _SENSITIVE_KEY_TERMS)


def _redact_string(text: str) -> str:
    redacted = _SENSITIVE_ASSIGNMENT_PATTERN.sub(
        lambda match: f"{match.group(1)}{match.group(2)}{_REDACTED_VALUE}", text
    )
    return _BEARER_TOKEN_PATTERN.sub(f"Bearer {_REDACTED_VALUE}", redacted)


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, bool):
        raise ValueError("level must be int or str, got bool")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed
    raise ValueError(f"unsupported logging level {value!r}")


__all__ = [
    "binding_scope",
    "configure_from_settings",
    "configure_logging",
    "redact_event",
    "reset_logging",
]
