from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class RetryStrategy:
    """Which exceptions are retried, when to give up and how long to wait."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_range: tuple[float, float] = (0.5, 1.5)
    exceptions: tuple[type[Exception], ...] = (Exception,)
    retry_if: Callable[[Exception], bool] | None = None
    stop_after_delay: float | None = None

    def should_retry(self, exception: Exception) -> bool:
        if self.retry_if is not None:
            return self.retry_if(exception)
        return isinstance(exception, self.exceptions)

    def exhausted(self, attempts_made: int, elapsed: float) -> bool:
        if attempts_made >= self.max_attempts:
            return True
        return self.stop_after_delay is not None and elapsed >= self.stop_after_delay

    def calculate_delay(self, attempt: int) -> float:
        """Backoff before the next attempt; ``attempt`` is zero-based."""
        delay = min(self.initial_delay * self.exponential_base**attempt, self.max_delay)
        if self.jitter:
            delay *= random.uniform(*self.jitter_range)
        return delay
