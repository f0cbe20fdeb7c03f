import json
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Optional

from libs.common.config import get_settings

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_request_path: ContextVar[Optional[str]] = ContextVar("request_path", default=None)
_request_method: ContextVar[Optional[str]] = ContextVar("request_method", default=None)
_request_user: ContextVar[Optional[str]] = ContextVar("request_user", default=None)


def set_request_context(
    request_id: Optional[str] = None,
    path: Optional[str] = None,
    method: Optional[str] = None,
) -> str:
    """
    Bind request metadata to the current context and return the request ID.
    A new ID is generated when the caller did not supply one.
    """
    request_id = request_id or uuid.uuid4().hex
    _request_id.set(request_id)
    _request_path.set(path)
    _request_method.set(method)
    return request_id


def get_request_id() -> Optional[str]:
    return _request_id.get()


def bind_user(user_id: Optional[str]) -> None:
    """Record the signed-in user for the rest of the request."""
    _request_user.set(user_id)


def clear_request_context() -> None:
    _request_id.set(None)
    _request_path.set(None)
    _request_method.set(None)
    _request_user.set(None)


class RequestContextFilter(logging.Filter):
    """Attach the current request context to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "-"
        record.request_path = _request_path.get()
        record.request_method = _request_method.get()
        record.user_id = _request_user.get()
        return True


class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging in deployed environments.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "timestamp": self.formatTime(record, self.datefmt),
            "request_id": getattr(record, "request_id", None),
        }

        path = getattr(record, "request_path", None)
        if path:
            log_record["path"] = path
            log_record["method"] = getattr(record, "request_method", None)

        user_id = getattr(record, "user_id", None)
        if user_id:
            log_record["user_id"] = user_id

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_record.update(extra_fields)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


class TextFormatter(logging.Formatter):
    """Readable formatter for local development that still shows extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            message = f"{message} {extra_fields}"
        return message


# Client libraries that log every HTTP round trip to Supabase
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "hpack")

TEXT_FORMAT = (
    "%(asctime)s %(levelname)-7s %(name)s [%(request_id)s] %(message)s"
)


def configure_logging() -> None:
    """Install a single stdout handler on the root logger.

    Local and test runs get readable lines, deployed environments one JSON
    object per record. Safe to call more than once.
    """
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    if settings.ENVIRONMENT in ("local", "test"):
        handler.setFormatter(TextFormatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
