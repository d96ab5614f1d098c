"""Structured JSON logging configuration."""

import logging
import sys
from contextvars import ContextVar
from typing import Any

from pythonjsonlogger import jsonlogger

from app.core.config import settings

# Set by RequestIDMiddleware for the duration of a request
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class LearnSmartJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per line; the log message becomes the "event" field."""

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["event"] = record.getMessage()
        log_record["service"] = settings.PROJECT_NAME
        log_record["env"] = settings.ENV

        request_id = request_id_var.get()
        if request_id and "request_id" not in log_record:
            log_record["request_id"] = request_id

        log_record.pop("message", None)
        log_record.pop("asctime", None)


def setup_logging() -> None:
    """Route every logger through a single JSON handler on stdout."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        LearnSmartJsonFormatter("%(timestamp)s %(level)s %(logger)s", datefmt="%Y-%m-%dT%H:%M:%S")
    )
    root_logger.addHandler(handler)

    # Noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("hypothesis").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
