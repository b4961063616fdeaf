"""Logging setup with structured extra fields."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

_RESERVED_RECORD_FIELDS = set(logging.makeLogRecord({}).__dict__.keys()) | {
    "message",
    "asctime",
}


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    extras: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _RESERVED_RECORD_FIELDS or key.startswith("_"):
            continue
        extras[key] = value
    return extras


class JsonFormatter(logging.Formatter):
    """One JSON object per record; extra fields go under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = _extract_extra_fields(record)
        if extras:
            payload["context"] = extras

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class TextFormatter(logging.Formatter):
    """Single-line text records with ``key='value'`` extras appended."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S%z")
        message = f"{timestamp} {record.levelname} {record.name} {record.getMessage()}"

        extras = _extract_extra_fields(record)
        if extras:
            extra_bits = " ".join(f"{key}={value!r}" for key, value in sorted(extras.items()))
            message = f"{message} {extra_bits}"

        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Install a stdout handler on the root logger.

    Args:
        level: Level name; falls back to LOG_LEVEL, then INFO.
        json_output: Emit JSON records; falls back to LOG_JSON.
    """
    env_level = level or os.getenv("LOG_LEVEL", "INFO")
    resolved_level = getattr(logging, env_level.upper(), logging.INFO)
    if json_output is None:
        json_output = os.getenv("LOG_JSON", "").strip().lower() in {"1", "true", "yes", "on"}

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else TextFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(resolved_level)
    logging.captureWarnings(True)


def with_context(logger: logging.Logger, **context: Any) -> logging.LoggerAdapter:
    return logging.LoggerAdapter(logger, extra=context)
