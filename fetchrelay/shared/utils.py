"""Shared utilities: ID generation, structured logging, timing, text helpers."""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from collections.abc import Mapping
from datetime import UTC, datetime


def generate_id(prefix: str = "id") -> str:
    """Generate a unique ID with a descriptive prefix."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def truncate(text: str, max_len: int = 200) -> str:
    """Truncate text with ellipsis indicator."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def elapsed_ms(started_at: float) -> int:
    """Whole milliseconds since a ``time.monotonic()`` reading."""
    return max(0, int((time.monotonic() - started_at) * 1000))


class StructuredFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra_data"):
            log_entry.update(record.extra_data)
        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now(UTC).strftime("%H:%M:%S")
        msg = record.getMessage()
        extra = getattr(record, "extra_data", None)
        if extra:
            msg += " " + " ".join(f"{k}={v}" for k, v in extra.items())
        return f"{ts} [{record.levelname:<5}] {record.name}: {msg}"


def setup_logging(name: str, level: str | None = None) -> logging.Logger:
    """Configure logging for a named logger.

    Format controlled by FETCHRELAY_LOG_FORMAT env var:
      - "json" (default): structured JSON lines
      - "text": human-readable single-line format

    Level comes from ``level`` or FETCHRELAY_LOG_LEVEL (default INFO).
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        if logger.level == logging.NOTSET:
            level = level or os.environ.get("FETCHRELAY_LOG_LEVEL", "INFO")
            logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        handler = logging.StreamHandler()
        log_format = os.environ.get("FETCHRELAY_LOG_FORMAT", "json").lower()
        if log_format == "text":
            handler.setFormatter(TextFormatter())
        else:
            handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
    return logger


def normalize_headers(value: object) -> dict[str, str]:
    """Coerce an arbitrary value into a str -> str header mapping.

    Non-mapping input yields an empty dict. Entries whose value is None are
    dropped; everything else is stringified.
    """
    if not isinstance(value, Mapping):
        return {}
    return {str(k): str(v) for k, v in value.items() if v is not None}
