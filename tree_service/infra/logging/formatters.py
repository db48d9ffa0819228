"""JSON Lines formatter with OpenTelemetry trace correlation."""
from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from opentelemetry import trace

# Attributes every LogRecord has; anything else arrived through extra= or a filter
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

DEFAULT_FMT_KEYS = {"level": "levelname", "logger": "name", "message": "message"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, UTC millisecond timestamps.

    Each line carries the mapped ``fmt_keys``, the active span's trace and
    span ids, the ``static`` fields and every extra attribute on the record,
    such as the ``request_id`` added by ``ContextInjectingFilter``.

    Example output:
        ```json
        {"level": "INFO", "logger": "tree_service.features.trees.service", "message": "Node created", "timestamp": "2026-01-01T00:00:00.123Z", "service": "tree-service", "node_id": 3, "tree_id": 1}
        ```
    """

    def __init__(
        self,
        fmt_keys: dict[str, str] | None = None,
        static: dict[str, Any] | None = None,
        include_process_info: bool = False,
        include_thread_info: bool = False,
    ) -> None:
        super().__init__()
        self.fmt_keys = fmt_keys or dict(DEFAULT_FMT_KEYS)
        self.static = static or {}
        self.include_process_info = include_process_info
        self.include_thread_info = include_thread_info

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        data: dict[str, Any] = {key: getattr(record, attr, None) for key, attr in self.fmt_keys.items()}
        data["timestamp"] = (
            datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )

        if self.include_process_info:
            data.update(process_id=record.process, process_name=record.processName)
        if self.include_thread_info:
            data.update(thread_id=record.thread, thread_name=record.threadName)

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            data["trace_id"] = format(span_context.trace_id, "032x")
            data["span_id"] = format(span_context.span_id, "016x")

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            data["stack_trace"] = record.stack_info

        data.update(self.static)
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and key not in data:
                data[key] = value

        return json.dumps(data, ensure_ascii=False, default=str)
