from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, Union


# Request correlation id (set by the API middleware) and the engine operation in progress
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
operation_var: ContextVar[Optional[str]] = ContextVar("operation", default=None)


class LoggingContextFilter(logging.Filter):
    """
    Stamp every record with the correlation id and the current operation.

    Records logged outside a request or an operation get '-' placeholders, so
    the format string never fails on a missing attribute.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.correlation_id = correlation_id_var.get() or "-"
        record.operation = operation_var.get() or "-"
        return True


@contextmanager
def operation_context(name: str) -> Iterator[None]:
    """Tag log lines emitted inside the block with an engine operation name."""
    token = operation_var.set(name)
    try:
        yield
    finally:
        operation_var.reset(token)


# PUBLIC_INTERFACE
def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Send all logging to stdout in a pipe-separated format carrying the
    correlation id and operation. Accepts a level number or name; unknown
    names fall back to INFO.
    """
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | op=%(operation)s | %(message)s"
        )
    )
    handler.addFilter(LoggingContextFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
