"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    Extension members (``event_id``, ``request_id`` and the exception's
    ``extra`` context) are allowed alongside the standard fields.

    See: https://datatracker.ietf.org/doc/html/rfc7807

    Example:
        return JSONResponse(
            status_code=404,
            content=ProblemDetails(
                type="tree-not-found",
                title="Not Found",
                status=404,
                detail="Tree with ID 7 was not found.",
                instance="/api/tree/7",
            ).model_dump(exclude_none=True),
        )
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="URI reference identifying the problem type",
    )
    title: str = Field(
        min_length=1, max_length=200, description="Short, human-readable summary of the problem"
    )
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        max_length=2000,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=500,
        description="URI reference identifying the specific occurrence",
    )
    event_id: int | None = Field(
        default=None,
        description="Exception journal entry recorded for this failure",
    )
    request_id: str | None = Field(default=None, description="Correlation ID of the request")

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "type": "node-has-children",
                "title": "Conflict",
                "status": 409,
                "detail": (
                    "Cannot delete node 2 because it has children. "
                    "You have to delete all children nodes first"
                ),
                "instance": "/api/tree/1/node/2",
                "event_id": 17,
            }
        },
    )


class ValidationErrorItem(BaseModel):
    """One failed field in a validation problem."""

    field: str = Field(description="Dotted location of the invalid value, e.g. body.node_name")
    message: str = Field(description="Validation message")
    type: str = Field(description="Pydantic error type")
    value: Any | None = Field(default=None, description="Rejected input")


class ValidationProblemDetails(ProblemDetails):
    """Problem details with per-field validation errors."""

    errors: list[ValidationErrorItem] = Field(default_factory=list)
