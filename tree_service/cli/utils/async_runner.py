"""Utilities for running async operations in CLI commands."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any


def coro[T](f: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """
    Decorator that makes an async function synchronous for Click.

    Each invocation runs in a fresh event loop via ``asyncio.run``.

    Usage:
        @trees.command()
        @coro
        async def list_trees():
            async with get_async_session() as session:
                summaries = await TreeService(session).list_trees()
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        return asyncio.run(f(*args, **kwargs))

    return wrapper
