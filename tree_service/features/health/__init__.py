"""Health check feature module.

    >>> from tree_service.features.health import router
    >>> app.include_router(router, prefix="/api")
"""

from __future__ import annotations

from tree_service.features.health.providers import (
    DatabaseHealthProvider,
    HealthCheckResult,
    HealthProvider,
    HealthStatus,
)
from tree_service.features.health.router import router
from tree_service.features.health.schemas import HealthResponse
from tree_service.features.health.service import (
    HealthService,
    HealthServiceDep,
    get_health_service,
)

__all__ = [
    "DatabaseHealthProvider",
    "HealthCheckResult",
    "HealthProvider",
    "HealthResponse",
    "HealthService",
    "HealthServiceDep",
    "HealthStatus",
    "get_health_service",
    "router",
]
