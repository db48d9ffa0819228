"""Unit tests for the async retry decorator."""

from __future__ import annotations

import pytest

from tree_service.utils.retry import RetryError, RetryStrategy, retry


async def test_returns_after_transient_failures():
    calls = []

    @retry(max_attempts=3, initial_delay=0, jitter=False)
    async def flaky() -> str:
        calls.append(1)
        if len(calls) < 3:
            raise ConnectionError("not yet")
        return "ok"

    assert await flaky() == "ok"
    assert len(calls) == 3


async def test_wraps_last_error_when_attempts_run_out():
    @retry(max_attempts=2, initial_delay=0, jitter=False)
    async def always_fails() -> None:
        raise ConnectionError("down")

    with pytest.raises(RetryError) as exc_info:
        await always_fails()

    assert exc_info.value.attempts == 2
    assert isinstance(exc_info.value.last_exception, ConnectionError)
    assert exc_info.value.statistics.exceptions == ["ConnectionError"]


async def test_non_retryable_exception_propagates_unchanged():
    calls = []

    @retry(max_attempts=5, initial_delay=0, exceptions=(ConnectionError,))
    async def bad_input() -> None:
        calls.append(1)
        raise ValueError("bad")

    with pytest.raises(ValueError, match="bad"):
        await bad_input()
    assert len(calls) == 1


async def test_on_retry_callback_sees_attempt_numbers():
    seen: list[int] = []

    @retry(max_attempts=3, initial_delay=0, jitter=False, on_retry=lambda e, n: seen.append(n))
    async def always_fails() -> None:
        raise ConnectionError("down")

    with pytest.raises(RetryError):
        await always_fails()
    assert seen == [1, 2]


def test_strategy_delay_grows_and_is_capped():
    strategy = RetryStrategy(
        max_attempts=10, initial_delay=1.0, max_delay=5.0, exponential_base=2.0, jitter=False
    )

    assert [strategy.calculate_delay(n) for n in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_strategy_gives_up_on_elapsed_time_before_attempts_run_out():
    strategy = RetryStrategy(max_attempts=10, stop_after_delay=5.0)

    assert not strategy.exhausted(1, elapsed=1.0)
    assert strategy.exhausted(1, elapsed=5.0)
    assert strategy.exhausted(10, elapsed=0.0)
