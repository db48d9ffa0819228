from __future__ import annotations

import asyncio
import logging
import time
from functools import wraps
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from .exceptions import RetryError, RetryStatistics
from .strategies import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    jitter_range: tuple[float, float] = (0.5, 1.5),
    exceptions: tuple[type[Exception], ...] = (Exception,),
    retry_if: Callable[[Exception], bool] | None = None,
    stop_after_delay: float | None = None,
    on_retry: Callable[[Exception, int], None] | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Retry an async callable with exponential backoff.

    Non-retryable exceptions propagate unchanged. Once attempts or
    ``stop_after_delay`` run out, the last exception is wrapped in
    ``RetryError``.

    Example:
        @retry(max_attempts=5, initial_delay=0.5, exceptions=(ConnectionError,))
        async def connect() -> None:
            ...
    """
    strategy = RetryStrategy(
        max_attempts=max_attempts,
        initial_delay=initial_delay,
        max_delay=max_delay,
        exponential_base=exponential_base,
        jitter=jitter,
        jitter_range=jitter_range,
        exceptions=exceptions,
        retry_if=retry_if,
        stop_after_delay=stop_after_delay,
    )

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        name = func.__name__

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            stats = RetryStatistics(start_time=time.monotonic())
            attempt = 0

            while True:
                attempt += 1
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    if not strategy.should_retry(e):
                        logger.warning("%s raised non-retryable %s", name, type(e).__name__)
                        raise
                    if strategy.exhausted(attempt, time.monotonic() - stats.start_time):
                        stats.end_time = time.monotonic()
                        logger.error(
                            "%s failed after %d attempts",
                            name,
                            attempt,
                            extra={
                                "function": name,
                                "last_exception": str(e),
                                "total_delay": stats.total_delay,
                                "duration": stats.duration,
                            },
                        )
                        raise RetryError(e, attempt, stats) from e

                    delay = strategy.calculate_delay(attempt - 1)
                    stats.attempts += 1
                    stats.total_delay += delay
                    stats.exceptions.append(type(e).__name__)
                    logger.warning(
                        "Retrying %s in %.2fs (attempt %d/%d): %s",
                        name,
                        delay,
                        attempt,
                        max_attempts,
                        e,
                    )
                    if on_retry:
                        on_retry(e, attempt)
                    await asyncio.sleep(delay)
                else:
                    if attempt > 1:
                        logger.info("%s succeeded on attempt %d", name, attempt)
                    return result

        return async_wrapper

    return decorator
