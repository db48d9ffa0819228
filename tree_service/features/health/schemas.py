"""Health check response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Health check response.

    Example:
        ```json
        {
            "status": "ok",
            "database": "ok",
            "service": "tree-service",
            "version": "1.0.0",
            "timestamp": "2025-01-01T00:00:00Z"
        }
        ```
    """

    status: Literal["ok"] = Field(description="Always 'ok' when the process responds")
    database: Literal["ok", "unavailable"] = Field(description="Database reachability")
    service: str = Field(min_length=1, max_length=100, description="Service name")
    version: str = Field(min_length=1, max_length=50, description="Service version")
    timestamp: datetime = Field(description="Check timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "ok",
                "database": "ok",
                "service": "tree-service",
                "version": "1.0.0",
                "timestamp": "2025-01-01T00:00:00Z",
            }
        },
    )


__all__ = ["HealthResponse"]
