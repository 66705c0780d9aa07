# src/logging/logger.py - v3
"""Logger factory with JSON and text formatters.

Every module logs through ``logging.getLogger(__name__)``, so the ``scgen``
logger configured here covers the whole package.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from scgen.logging.context import get_context

# Provider SDKs and transports that log every request at INFO/DEBUG.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "google", "ollama", "redis")

_FINGERPRINT_TAG_LEN = 12


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """Structured JSON log formatter, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.levelno >= logging.WARNING:
            entry["source"] = f"{record.module}:{record.lineno}"

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable single-line formatter for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            _timestamp(record).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if ctx.request_id:
            parts.append(f"<{ctx.request_id}>")
        if ctx.fingerprint:
            parts.append(f"#{ctx.fingerprint[:_FINGERPRINT_TAG_LEN]}")
        if ctx.persona:
            parts.append(f"[{ctx.persona}]")
        if ctx.provider:
            parts.append(f"({ctx.provider})")
        parts.append(f"- {record.getMessage()}")
        text = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            text += "\n" + self.formatException(record.exc_info)
        return text


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
    stream: Any = None,
) -> None:
    """Configure the ``scgen`` logger.

    Re-running replaces the handlers installed by a previous call.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        log_format: "json" or "text".
        log_file: Optional path for a size-rotated file handler.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
        stream: Console stream, stderr when omitted.
    """
    root_logger = logging.getLogger("scgen")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        from scgen.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(log_file, rotation=rotation, retention=retention)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
