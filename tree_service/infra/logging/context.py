"""Context management for structured logging.

Fields stored here (request id, method, path) are copied onto every log
record by ``ContextInjectingFilter``. The storage is a ContextVar, so each
request task sees only its own fields.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        ```python
        set_log_context(request_id="abc-123", path="/api/tree")
        logger.info("Processing request")  # record carries request_id and path
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Clear all logging context for the current task."""
    _log_context.set({})


def remove_from_log_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that copies the current context onto each record.

    ``configure_logging`` attaches it to the root QueueHandler, which runs
    in the logging task. Attributes already present on the record (for example from
    ``extra=``) are never overwritten.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
