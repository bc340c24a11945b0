"""
Logging - JSON records carrying the request's correlation id

Every record emitted while a request is being served is stamped with that
request's correlation id. Ticket, user, gate and notifier context passed
through `extra=` is lifted into the record as top-level keys.
"""
import json
import logging
import os
import sys
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from ..config.settings import settings
from .time import utc_now


correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

CONTEXT_FIELDS = (
    "ticket_id", "user_id", "role", "path", "decision", "outcome", "event_kind",
)

NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "pymongo": logging.WARNING,
    "openai": logging.WARNING,
}


class JsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": utc_now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = correlation_id_var.get()
        if correlation_id:
            payload["correlation_id"] = correlation_id
        payload.update({
            name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)
        })
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _rotating(path: str, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> None:
    """
    Configure the root logger

    Console output always; rotating app.log and error.log files under
    `settings.logs_path` when `settings.log_to_file` is on.
    """
    formatter = JsonFormatter()
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.log_to_file:
        os.makedirs(settings.logs_path, exist_ok=True)
        root.addHandler(_rotating(os.path.join(settings.logs_path, "app.log"), logging.NOTSET, formatter))
        root.addHandler(_rotating(os.path.join(settings.logs_path, "error.log"), logging.ERROR, formatter))

    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()
