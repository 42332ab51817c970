"""Logging for the query engine.

Engine modules log under the ``mirrorql`` namespace and only at DEBUG level:
rejected operators and values, rejected requests and timestamp filters, and
cursors that leave no next page. Those records go through :func:`log_event`,
which attaches an event name plus the query key, operator and value involved
as ``extra_fields``. Both formatters render them, and the id of the request
being served is added when the HTTP layer sets one.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from enum import Enum
from typing import TYPE_CHECKING, Any

from mirrorql._serialization import encode_json

if TYPE_CHECKING:
    from collections.abc import Iterable
    from logging import LogRecord
    from typing import TextIO

__all__ = (
    "FilterEvent",
    "KeyValueFormatter",
    "RequestIdFilter",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "log_event",
    "request_id_var",
    "set_request_id",
)

ROOT_LOGGER_NAME = "mirrorql"
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class FilterEvent(str, Enum):
    """Name of an engine event, stored as the ``event`` field of a record."""

    OPERATOR_REJECTED = "operator_rejected"
    VALUE_DROPPED = "value_dropped"
    REQUEST_REJECTED = "request_rejected"
    TIMESTAMP_REJECTED = "timestamp_rejected"
    CURSOR_EXHAUSTED = "cursor_exhausted"
    CURSOR_UNCOMPARABLE = "cursor_uncomparable"

    def __str__(self) -> str:
        return self.value


def set_request_id(request_id: str | None) -> None:
    """Set the id of the request served by the current context.

    Args:
        request_id: The request id, or None to clear it
    """
    request_id_var.set(request_id)


def get_request_id() -> str | None:
    return request_id_var.get()


def _event_fields(record: LogRecord) -> dict[str, Any]:
    return getattr(record, "extra_fields", None) or {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with the event fields at the top level."""

    def format(self, record: LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        if request_id := get_request_id():
            log_entry["request_id"] = request_id
        log_entry.update(_event_fields(record))
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return encode_json(log_entry)


class KeyValueFormatter(logging.Formatter):
    """Text lines with the event fields appended as ``name=value`` pairs."""

    def __init__(self, fmt: str = SIMPLE_FORMAT, datefmt: str | None = None) -> None:
        super().__init__(fmt, datefmt)

    def format(self, record: LogRecord) -> str:
        line = super().format(record)
        fields = _event_fields(record)
        if request_id := get_request_id():
            fields = {"request_id": request_id, **fields}
        if not fields:
            return line
        pairs = " ".join(f"{name}={value}" for name, value in fields.items())
        return f"{line} [{pairs}]"


class RequestIdFilter(logging.Filter):
    """Copy the current request id onto each record as ``request_id``."""

    def filter(self, record: LogRecord) -> bool:
        if request_id := get_request_id():
            record.request_id = request_id  # type: ignore[attr-defined]
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger under the ``mirrorql`` namespace.

    Args:
        name: Logger name, e.g. ``core.cursor``. Defaults to the root logger.

    Returns:
        The logger, with a :class:`RequestIdFilter` installed once.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger


def log_event(logger: logging.Logger, event: FilterEvent, message: str, *args: Any, **fields: Any) -> None:
    """Log an engine event at DEBUG level with its query context.

    Args:
        logger: Logger of the calling module
        event: What happened
        message: %-style message, formatted with ``args``
        *args: Message arguments
        **fields: Query context such as ``key``, ``operator``, ``value`` or ``bound``
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(message, *args, extra={"extra_fields": {"event": event.value, **fields}}, stacklevel=2)


def configure_logging(
    level: str = "INFO",
    format_style: str = "structured",
    stream: TextIO | None = None,
    extra_handlers: Iterable[logging.Handler] | None = None,
) -> None:
    """Replace the handlers of the ``mirrorql`` logger.

    Args:
        level: Logging level name, case-insensitive
        format_style: ``"structured"`` for JSON lines, anything else for text
        stream: Stream for the console handler; stdout when omitted
        extra_handlers: Additional handlers, added as given
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream or sys.stdout)
    formatter: logging.Formatter = StructuredFormatter() if format_style == "structured" else KeyValueFormatter()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for handler in extra_handlers or ():
        root_logger.addHandler(handler)
    root_logger.propagate = False
