"""
Structured JSON logging configuration.

Every log line is a single JSON object on stdout with a channel
(http, db, auth, scoring, ranking, reference), the current request ID
and free-form business context.
"""

import logging
import json
import os
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

# ──────────────────────────────────────────────────────────────
# Request ID of the HTTP request being served. Set by the
# middleware in main.py and attached to every log entry.
# ──────────────────────────────────────────────────────────────
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CHANNELS = ["http", "db", "auth", "scoring", "ranking", "reference"]


class StructuredJsonFormatter(logging.Formatter):
    """
    Formatter producing one JSON object per record.

    Keys:
    - timestamp: ISO 8601 in UTC with millisecond precision
    - level: severity name
    - message: rendered message
    - channel: log source category
    - context: business identifiers (request_id, account_id, student_id...)
    - extra: metrics and other metadata (duration_ms, counts...)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", record.name.split(".")[-1] if "." in record.name else "app"),
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {})
            },
            "extra": getattr(record, "extra_data", {}) or {}
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging():
    """
    Configure the root logger with the JSON formatter and register
    the channel loggers.
    """
    formatter = StructuredJsonFormatter()

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        logger = logging.getLogger(f"gradebook.{channel}")
        logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Return the logger for a channel (http, db, auth, scoring, ranking, reference)."""
    return logging.getLogger(f"gradebook.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None):
    """
    Emit a structured log entry.

    Args:
        logger: The channel logger to use
        level: Log level string (INFO, WARNING, ERROR, DEBUG)
        message: Human-readable log message
        context: Business identifiers (account_id, student_id, class_name...)
        extra_data: Metadata such as duration_ms or row counts
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.log(
        log_level,
        message,
        extra={"context": context or {}, "extra_data": extra_data or {}, "channel": logger.name.split(".")[-1]}
    )


def generate_request_id() -> str:
    """Generate a new UUID for request tracking."""
    return str(uuid.uuid4())
