"""Health check service and dependency injection helpers.

Example:
    >>> from tree_service.features.health.service import HealthServiceDep
    >>>
    >>> @router.get("/health")
    >>> async def health(service: HealthServiceDep):
    ...     return await service.check_health()
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Annotated, Any

from fastapi import Depends, Request

from tree_service.core.settings import get_app_settings
from tree_service.features.health.providers import DatabaseHealthProvider
from tree_service.infra.database.session import engine as default_engine

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from tree_service.features.health.providers import HealthProvider


class HealthService:
    """Runs the database check and shapes the health payload."""

    def __init__(self, database: HealthProvider) -> None:
        self._database = database

    async def check_health(self) -> dict[str, Any]:
        """Overall status is "ok" whenever the process can answer.

        Database reachability is reported separately as "ok" or
        "unavailable".
        """
        settings = get_app_settings()
        result = await self._database.check_health()
        return {
            "status": "ok",
            "database": "ok" if result.is_healthy else "unavailable",
            "service": settings.service_name,
            "version": settings.version,
            "timestamp": datetime.now(UTC),
        }


# =============================================================================
# Dependency Factories
# =============================================================================


def get_health_service(request: Request) -> HealthService:
    """Build a HealthService for the engine the application is bound to.

    The application may carry its own engine on ``app.state.engine``;
    otherwise the module-level engine is used.
    """
    bound: AsyncEngine = getattr(request.app.state, "engine", None) or default_engine
    return HealthService(DatabaseHealthProvider(bound))


HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]


__all__ = ["HealthService", "HealthServiceDep", "get_health_service"]
