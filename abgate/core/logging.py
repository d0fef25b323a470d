"""Logging utilities with JSON formatting, redaction, and request correlation.

This module centralizes logging configuration, including:
- Context-aware request_id propagation via contextvars
- Redaction of contact details and network identity on log records
- Pseudonymisation of session/user identifiers so events stay joinable
- JSON formatter for machine-friendly logs
- Configurable stdout/file handlers with rotation support
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from abgate.core.config import LogSettings, settings
from abgate.utils.hashing import hash_identifier

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

REDACTED = "[REDACTED]"

# Keys whose values never reach a log sink
SENSITIVE_KEYS_DEFAULT: set[str] = {
    "authorization",
    "token",
    "secret",
    "password",
    "cookie",
    "set-cookie",
    "x-forwarded-for",
    "x-real-ip",
    "ip",
    "client_ip",
    "email",
    "phone",
    "name",
    "first_name",
    "last_name",
    "firstname",
    "lastname",
}

# Keys replaced by a short digest instead of a blank marker
HASHED_KEYS_DEFAULT: set[str] = {
    "session_id",
    "sessionid",
    "x-session-id",
    "user_id",
    "userid",
    "client_key",
}

_MASKED_FLAG = "_abgate_masked"

# Logging fields we intentionally exclude from extra payload capture
_EXCLUDED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "stack",
}


def set_request_id(request_id: str | None) -> None:
    """Store the current request id in a context variable.

    Args:
        request_id: Correlation identifier to associate with subsequent logs.
    """

    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    """Fetch the current request id from context."""

    return _request_id_var.get()


def clear_request_id() -> None:
    """Clear any stored request id from context."""

    _request_id_var.set(None)


def _mask(
    key: Any,
    value: Any,
    sensitive_keys: set[str],
    hashed_keys: set[str],
) -> Any:
    """Mask a single field based on its key.

    Args:
        key: Field name (record attribute or nested mapping key).
        value: The field value.
        sensitive_keys: Keys whose values are replaced by ``REDACTED``.
        hashed_keys: Keys whose string values are replaced by a digest.

    Returns:
        The masked value, or the recursively redacted value for other keys.
    """

    lowered = key.lower() if isinstance(key, str) else key
    if lowered in sensitive_keys:
        return REDACTED
    if lowered in hashed_keys and isinstance(value, str) and value:
        return f"sha256:{hash_identifier(value)}"
    return _redact_value(value, sensitive_keys, hashed_keys)


def _redact_value(value: Any, sensitive_keys: set[str], hashed_keys: set[str]) -> Any:
    """Recursively redact sensitive values within mappings and sequences."""

    if isinstance(value, Mapping):
        return {k: _mask(k, v, sensitive_keys, hashed_keys) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_redact_value(v, sensitive_keys, hashed_keys) for v in value)
    return value


def _sanitize_record(
    record: LogRecord, sensitive_keys: set[str], hashed_keys: set[str]
) -> dict[str, Any]:
    """Convert a LogRecord's extras to a dict with sensitive fields masked."""

    data: dict[str, Any] = {}

    for key, value in record.__dict__.items():
        if key in _EXCLUDED_ATTRS or key.startswith("_"):
            continue
        data[key] = _mask(key, value, sensitive_keys, hashed_keys)

    return data


def _default_timestamp() -> str:
    """Generate an ISO-8601 UTC timestamp string."""

    return datetime.now(timezone.utc).isoformat()


class RequestIdFilter(logging.Filter):
    """Attach request_id from context when absent on the record."""

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if getattr(record, "request_id", None) is None:
            request_id = get_request_id()
            if request_id:
                record.request_id = request_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Mask sensitive fields on the record before formatting.

    A record is masked at most once, so digests stay stable when several
    handlers carry this filter.
    """

    def __init__(
        self,
        sensitive_keys: Iterable[str] | None = None,
        hashed_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__()
        self.sensitive_keys = set(sensitive_keys or SENSITIVE_KEYS_DEFAULT)
        self.hashed_keys = set(hashed_keys or HASHED_KEYS_DEFAULT)

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if getattr(record, _MASKED_FLAG, False):
            return True
        sanitized = _sanitize_record(record, self.sensitive_keys, self.hashed_keys)
        for key, value in sanitized.items():
            setattr(record, key, value)
        setattr(record, _MASKED_FLAG, True)
        return True


class JsonFormatter(logging.Formatter):
    """Format LogRecord as JSON, masking extras not already filtered."""

    def __init__(
        self,
        *,
        sensitive_keys: Iterable[str] | None = None,
        hashed_keys: Iterable[str] | None = None,
        ensure_ascii: bool = True,
    ) -> None:
        super().__init__()
        self.sensitive_keys = set(sensitive_keys or SENSITIVE_KEYS_DEFAULT)
        self.hashed_keys = set(hashed_keys or HASHED_KEYS_DEFAULT)
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        record_data = {
            "timestamp": _default_timestamp(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            record_data["request_id"] = request_id

        # Digests from SensitiveDataFilter must not be hashed again
        hashed_keys = set() if getattr(record, _MASKED_FLAG, False) else self.hashed_keys
        record_data.update(_sanitize_record(record, self.sensitive_keys, hashed_keys))

        if record.exc_info:
            record_data["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(record_data, default=str, ensure_ascii=self.ensure_ascii)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    """Construct the logging handler based on configuration.

    Args:
        log_settings: Resolved logging settings from environment.

    Returns:
        Configured logging handler (stdout or rotating file).
    """

    if log_settings.output.lower() == "file":
        file_path = Path(log_settings.file_path or "logs/abgate.log")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if log_settings.max_bytes:
            handler = RotatingFileHandler(
                file_path,
                maxBytes=log_settings.max_bytes,
                backupCount=log_settings.backup_count,
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(file_path, encoding="utf-8")
        return handler

    return logging.StreamHandler(sys.stdout)


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Configure root logger with JSON formatter and redaction.

    Args:
        log_settings: Optional log settings; defaults to global settings if omitted.
    """

    cfg = log_settings or settings.log

    level = getattr(logging, cfg.level.upper(), logging.INFO)
    handler = _build_handler(cfg)

    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())

    if cfg.format.lower() == "plain":
        formatter: logging.Formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
    else:
        formatter = JsonFormatter()

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Avoid double logging from uvicorn if it gets re-configured
    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.access").propagate = False
