"""Health check providers.

A provider checks one dependency and reports a ``HealthCheckResult``. The
service has a single dependency worth checking, the database.

Example:
    >>> from tree_service.infra.database.session import engine
    >>> provider = DatabaseHealthProvider(engine, timeout=2.0)
    >>> result = await provider.check_health()
    >>> result.status
    <HealthStatus.HEALTHY: 'healthy'>
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import text

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    status: HealthStatus
    message: str = ""
    latency_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_healthy(self) -> bool:
        return self.status is HealthStatus.HEALTHY


@runtime_checkable
class HealthProvider(Protocol):
    @property
    def name(self) -> str: ...

    async def check_health(self) -> HealthCheckResult: ...


class DatabaseHealthProvider:
    """``SELECT 1`` on a fresh connection, bounded by ``timeout`` seconds.

    Never raises: a timeout or connection error becomes an UNHEALTHY result.
    """

    name = "database"

    def __init__(self, engine: AsyncEngine, timeout: float = 2.0) -> None:
        self._engine = engine
        self._timeout = timeout

    async def check_health(self) -> HealthCheckResult:
        started = time.perf_counter()
        try:
            async with asyncio.timeout(self._timeout), self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except TimeoutError:
            logger.warning("Database health check timed out", extra={"timeout": self._timeout})
            return self._result(
                started, HealthStatus.UNHEALTHY, f"Timeout after {self._timeout}s", "timeout"
            )
        except Exception as e:
            logger.warning("Database health check failed", extra={"error": str(e)})
            return self._result(started, HealthStatus.UNHEALTHY, f"Connection failed: {e}", str(e))
        return self._result(started, HealthStatus.HEALTHY, "Database operational")

    @staticmethod
    def _result(
        started: float, status: HealthStatus, message: str, error: str | None = None
    ) -> HealthCheckResult:
        return HealthCheckResult(
            status=status,
            message=message,
            latency_ms=(time.perf_counter() - started) * 1000,
            metadata={"error": error} if error else {},
        )


__all__ = [
    "DatabaseHealthProvider",
    "HealthCheckResult",
    "HealthProvider",
    "HealthStatus",
]
