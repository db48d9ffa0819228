"""Logging setup: dictConfig for logger levels, a queue for output.

Records from every logger reach one QueueHandler on the root logger; a
QueueListener thread hands them to the console and rotating file handlers,
so request handlers never block on log I/O. Output is JSON Lines by default.
"""

from __future__ import annotations

import atexit
import logging
import logging.config
import time
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from tree_service.infra.logging.context import ContextInjectingFilter
from tree_service.infra.logging.formatters import DEFAULT_FMT_KEYS, JSONFormatter

if TYPE_CHECKING:
    from tree_service.core.settings.logs import LoggingSettings

# Global queue and listener for async logging
_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def complete(max_wait: float = 5.0) -> None:
    """Wait for queued log records to be written.

    Polls until the queue drains or ``max_wait`` seconds pass. Called by
    ``shutdown()``; useful on its own before a CLI command exits.
    """
    if _log_queue is None or _listener is None:
        return

    start = time.monotonic()
    while not _log_queue.empty() and (time.monotonic() - start) < max_wait:
        time.sleep(0.01)

    # Last record may still be inside a handler
    time.sleep(0.05)


def shutdown() -> None:
    """Flush pending records and stop the QueueListener.

    Registered with atexit by ``configure_logging``.
    """
    global _log_queue, _listener

    if _listener is not None:
        complete()
        _listener.stop()
        _listener = None

    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from tree_service.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    console_level: str | None = None,
    file_level: str | None = None,
    file_path: str | Path | None = None,
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    include_function_name: bool = False,
    include_process_info: bool = False,
    include_thread_info: bool = False,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    service_name: str = "tree-service",
    include_uvicorn: bool = True,
    sql_level: str = "WARNING",
    **kwargs: Any,
) -> None:
    """Configure logger levels with dictConfig and route records through a queue.

    Args:
        log_level: Root logger level.
        console_level: Console handler level. If None, uses log_level.
        file_level: File handler level. If None, uses log_level.
        file_path: Rotating JSONL/text file. None disables file logging.
        json_logs: One JSON object per line instead of the text format.
        console_enabled: Write to stderr.
        include_context: Copy the request context (request id, path) onto records.
        capture_warnings: Forward Python warnings to logging.
        include_function_name: Add the function name to every record.
        include_process_info: Add process id and name.
        include_thread_info: Add thread id and name.
        file_max_bytes: Size at which the file is rotated.
        file_backup_count: Rotated files to keep.
        service_name: Static ``service`` field on every JSON record.
        include_uvicorn: Keep uvicorn.access records; when False they are
            raised to WARNING.
        sql_level: Level of the ``sqlalchemy.engine`` logger.
        **kwargs: Ignored, logged at debug level.

    Example:
        from tree_service.core.settings import get_logging_settings

        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    if capture_warnings:
        logging.captureWarnings(True)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {"level": log_level.upper()},
            "loggers": {
                "uvicorn.access": {"level": "INFO" if include_uvicorn else "WARNING"},
                "sqlalchemy.engine": {"level": sql_level.upper()},
            },
        }
    )

    handlers: list[logging.Handler] = []
    if console_enabled:
        console = logging.StreamHandler()
        console.setLevel((console_level or log_level).upper())
        handlers.append(console)

    if file_path:
        resolved = Path(file_path)
        resolved.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            resolved,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        rotating.setLevel((file_level or log_level).upper())
        handlers.append(rotating)

    formatter = _make_formatter(
        json_logs=json_logs,
        service_name=service_name,
        include_function_name=include_function_name,
        include_process_info=include_process_info,
        include_thread_info=include_thread_info,
    )
    for handler in handlers:
        handler.setFormatter(formatter)

    _install_queue(handlers, include_context=include_context)

    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs)))


def _make_formatter(
    *,
    json_logs: bool,
    service_name: str,
    include_function_name: bool,
    include_process_info: bool,
    include_thread_info: bool,
) -> logging.Formatter:
    if json_logs:
        fmt_keys = dict(DEFAULT_FMT_KEYS)
        if include_function_name:
            fmt_keys["function"] = "funcName"
        return JSONFormatter(
            fmt_keys=fmt_keys,
            static={"service": service_name},
            include_process_info=include_process_info,
            include_thread_info=include_thread_info,
        )

    parts = ["%(asctime)s", "%(levelname)s", "%(name)s"]
    if include_function_name:
        parts.append("%(funcName)s")
    if include_process_info:
        parts.append("[%(processName)s:%(process)d]")
    if include_thread_info:
        parts.append("[%(threadName)s:%(thread)d]")
    parts.append("%(message)s")
    return logging.Formatter(fmt=" - ".join(parts), datefmt=TEXT_DATEFMT)


def _install_queue(handlers: list[logging.Handler], *, include_context: bool) -> None:
    """Give the root logger a single QueueHandler feeding ``handlers``.

    The context filter sits on the QueueHandler because it must run in the
    task that logged the record; the listener thread has no request context.
    A previous listener is stopped first so reconfiguring never duplicates
    output.
    """
    global _log_queue, _listener

    if _listener is not None:
        shutdown()

    _log_queue = Queue()
    if handlers:
        _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
        _listener.start()
        atexit.register(shutdown)

    queue_handler = QueueHandler(_log_queue)
    if include_context:
        queue_handler.addFilter(ContextInjectingFilter())

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, QueueHandler)]:
        root.removeHandler(existing)
    root.addHandler(queue_handler)
