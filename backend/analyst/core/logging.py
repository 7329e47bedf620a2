"""
Structured logging configuration.

JSON logs for production (LOG_FORMAT=json), readable text otherwise. Every
record carries the correlation id of the request being served, or
"system" outside a request.
"""
import os
import sys
import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.config import dictConfig
from typing import Any, Dict, Optional, TextIO

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="system")

_STANDARD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'thread', 'threadName',
    'exc_info', 'exc_text', 'message', 'correlation_id', 'taskName',
}


def get_correlation_id() -> str:
    return correlation_id_var.get()


class CorrelationIdFilter(logging.Filter):
    """Stamp the current correlation id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = correlation_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line with timestamp, level, message, location and extras."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "correlation_id": getattr(record, "correlation_id", "system"),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Readable text formatter for development."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, 'correlation_id'):
            record.correlation_id = 'system'
        return super().format(record)


def build_logging_config(log_level: str = "INFO", log_format: str = "text",
                         stream: Optional[TextIO] = None) -> Dict[str, Any]:
    """dictConfig for the root logger with the correlation id filter attached."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "correlation_id": {"()": CorrelationIdFilter},
        },
        "formatters": {
            "text": {"()": TextFormatter},
            "json": {"()": JSONFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if log_format == "json" else "text",
                "filters": ["correlation_id"],
                "stream": stream or sys.stdout,
            },
        },
        "root": {
            "level": log_level.upper(),
            "handlers": ["console"],
        },
        "loggers": {
            # Reduce noise from third-party libraries
            "uvicorn.access": {"level": "WARNING"},
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }


def configure_logging(log_level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """
    Configure application logging.

    Uses LOG_FORMAT ('json' or 'text', default text) and LOG_LEVEL unless a
    level is passed explicitly.
    """
    log_format = os.getenv('LOG_FORMAT', 'text').lower()
    level = (log_level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    dictConfig(build_logging_config(level, log_format, stream))

    if log_format == 'json':
        logging.getLogger(__name__).info("Structured JSON logging enabled")
