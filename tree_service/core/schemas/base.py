"""Base schema classes for API responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CustomBase(BaseModel):
    """Base model with common configuration for all schemas.

    Example:
        class TreeNodeResponse(CustomBase):
            id: int
            name: str
            created_at: datetime
    """

    model_config = ConfigDict(
        # Allow creation from ORM models (SQLAlchemy)
        from_attributes=True,
        # Populate models by field name (not alias)
        populate_by_name=True,
        # Ignore extra fields for security (silently drop unexpected data)
        extra="ignore",
        # Strip leading/trailing whitespace from strings
        str_strip_whitespace=True,
    )
