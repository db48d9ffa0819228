"""Health check API endpoint.

GET /health always answers 200. The body reports whether the database is
reachable.
"""

from __future__ import annotations

from fastapi import APIRouter

from tree_service.features.health.schemas import HealthResponse

# Import dependencies at runtime so FastAPI treats them as Depends()
from tree_service.features.health.service import HealthServiceDep  # noqa: TC001

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness plus database reachability",
)
async def health_check(service: HealthServiceDep) -> HealthResponse:
    result = await service.check_health()
    return HealthResponse(**result)
