import logging
import sys
import os
from typing import Dict, Any, Optional
import json
from datetime import datetime, timezone
import contextlib
import contextvars
from pathlib import Path

from habitflow.core.config import settings

# Per-request log context (request id, user id, action, ...)
request_context = contextvars.ContextVar("request_context", default={})

# Noisy third-party loggers kept at WARNING
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


class JsonFormatter(logging.Formatter):
    """
    Render log records as single-line JSON documents.

    Fields set through ``log_context`` and ``extra={"extras": {...}}`` are
    merged into the document without overwriting the standard keys.
    """

    def __init__(self, service: str = "habitflow"):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self._prepare_log_dict(record), default=str)

    def _prepare_log_dict(self, record: logging.LogRecord) -> Dict[str, Any]:
        record_dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            record_dict["exception"] = self.formatException(record.exc_info)

        extras = getattr(record, "extras", None)
        if isinstance(extras, dict):
            for key, value in extras.items():
                record_dict.setdefault(key, value)

        for key, value in request_context.get().items():
            record_dict.setdefault(key, value)

        return record_dict


class ContextFilter(logging.Filter):
    """Copy the current request context onto every record."""

    def filter(self, record):
        for key, value in request_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger for the application.

    Args:
        level: Optional log level override (defaults to settings.LOG_LEVEL)
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for log_filter in root_logger.filters[:]:
        root_logger.removeFilter(log_filter)

    root_logger.addFilter(ContextFilter())

    if settings.ENVIRONMENT == "production":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s (%(filename)s:%(lineno)d) - %(message)s"
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        try:
            log_path = Path(settings.LOG_FILE)
            os.makedirs(log_path.parent, exist_ok=True)

            file_handler = logging.FileHandler(settings.LOG_FILE)
            file_handler.setFormatter(formatter)
            file_handler.setLevel(log_level)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.error(f"Error setting up file logging: {e}")

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger("habitflow")


@contextlib.contextmanager
def log_context(**context_data):
    """
    Add key/value pairs to every log record emitted inside the block.

    Usage:
        with log_context(user_id=123, action="toggle_entry"):
            logger.info("Entry toggled")
    """
    current_context = request_context.get().copy()
    current_context.update(
        {key: value for key, value in context_data.items() if value is not None}
    )
    token = request_context.set(current_context)

    try:
        yield
    finally:
        request_context.reset(token)
