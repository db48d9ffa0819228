"""Logging infrastructure.

Structured logging with:
- JSONL format for Loki/Elasticsearch ingestion
- Automatic context injection (request_id, method, path)
- QueueHandler + QueueListener for non-blocking I/O
- Lazy evaluation for expensive debug messages
- OpenTelemetry trace correlation

Basic usage:
    import logging

    from tree_service.infra.logging import get_lazy_logger, set_log_context

    logger = logging.getLogger(__name__)
    lazy_logger = get_lazy_logger(__name__)

    set_log_context(request_id="abc-123")
    logger.info("Processing request")  # includes request_id
    lazy_logger.debug(lambda: f"Subtree: {describe(nodes)}")
"""

from tree_service.infra.logging.config import (
    complete,
    configure_logging,
    setup_logging,
    shutdown,
)
from tree_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)
from tree_service.infra.logging.formatters import JSONFormatter
from tree_service.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "LazyLoggerAdapter",
    "clear_log_context",
    "complete",
    "configure_logging",
    "get_lazy_logger",
    "get_log_context",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
