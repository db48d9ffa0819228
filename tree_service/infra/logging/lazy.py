"""Lazy evaluation support for logging.

Debug messages that describe a whole subtree or a path rewrite are costly
to build. Passing a callable instead of a string defers that work until
the level is known to be enabled.
"""

from __future__ import annotations

import logging
from typing import Any


class LazyLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that evaluates callables in messages and arguments.

    Example:
        ```python
        logger = LazyLoggerAdapter(logging.getLogger(__name__))
        logger.debug(lambda: f"Subtree: {[n.id for n in nodes]}")
        logger.debug("Path %s", lambda: node_path.format())
        ```
    """

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log message, calling ``msg`` and callable ``args`` only if enabled."""
        if not self.isEnabledFor(level):
            return

        if callable(msg):
            msg = msg()
        if args:
            args = tuple(arg() if callable(arg) else arg for arg in args)

        super().log(level, msg, *args, **kwargs)

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, **kwargs)


def get_lazy_logger(name: str, **context: Any) -> LazyLoggerAdapter:
    """Get logger with lazy evaluation support.

    Args:
        name: Logger name (usually __name__).
        **context: Optional context bound to every record.

    Returns:
        Logger adapter with lazy evaluation support.
    """
    return LazyLoggerAdapter(logging.getLogger(name), context or {})
