"""Global exception handlers for FastAPI application.

Every failure except request validation is recorded in the exception
journal first; the journal id is returned to the client as ``event_id``
next to the RFC 7807 fields.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from tree_service.core.database import NotFoundError
from tree_service.core.exceptions import AppException, default_title
from tree_service.core.schemas.problem_details import (
    ProblemDetails,
    ValidationErrorItem,
    ValidationProblemDetails,
)
from tree_service.features.journal.service import journal_exception

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _respond(request: Request, problem: ProblemDetails, **extra: Any) -> JSONResponse:
    content = problem.model_dump(mode="json", exclude_none=True)
    content.update({key: value for key, value in extra.items() if value is not None})
    request_id = _get_request_id(request)
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=problem.status, content=content)


def _journaled_problem(
    request: Request,
    event_id: int,
    *,
    status_code: int,
    detail: str | None,
    type_: str,
    title: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    """Problem response for a failure already written to the journal."""
    problem = ProblemDetails(
        type=type_,
        title=title or default_title(status_code),
        status=status_code,
        detail=detail,
        instance=instance or request.url.path,
    )
    return _respond(request, problem, **(extra or {}), event_id=event_id)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Tree domain errors and every other ``AppException`` subclass."""
    event_id = await journal_exception(request, exc)
    response = _journaled_problem(
        request,
        event_id,
        status_code=exc.status_code,
        detail=exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance,
        extra=exc.extra,
    )
    logger.warning(
        "Application exception occurred",
        extra={
            "request_id": _get_request_id(request),
            "event_id": event_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )
    return response


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Repository lookups that found nothing, e.g. a missing journal entry."""
    event_id = await journal_exception(request, exc)
    response = _journaled_problem(
        request,
        event_id,
        status_code=status.HTTP_404_NOT_FOUND,
        detail=str(exc),
        type_="not-found",
        extra=exc.identifier,
    )
    logger.warning(
        "Entity not found",
        extra={
            "request_id": _get_request_id(request),
            "event_id": event_id,
            "path": request.url.path,
            "model": exc.model_name,
        },
    )
    return response


def _validation_response(
    request: Request, errors: list[dict[str, Any]], subject: str
) -> JSONResponse:
    items = [
        ValidationErrorItem(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
            value=error.get("input"),
        )
        for error in errors
    ]
    logger.warning(
        "%s validation failed",
        subject,
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "error_count": len(items),
        },
    )
    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"{subject} validation failed for {len(items)} field(s)",
        instance=request.url.path,
        errors=items,
    )
    return _respond(request, problem)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed requests: 422 with field-level errors, not journaled."""
    return _validation_response(request, list(exc.errors()), "Request")


async def pydantic_validation_exception_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """Model validation failing inside a handler rather than at the edge."""
    return _validation_response(request, list(exc.errors()), "Data")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: journal, log the traceback, answer with the event id only.

    Nothing from ``exc`` reaches the client.
    """
    event_id = await journal_exception(request, exc)
    response = _journaled_problem(
        request,
        event_id,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal server error ID = {event_id}",
        type_="internal-error",
        title="Internal Server Error",
    )
    logger.error(
        "Unexpected exception occurred",
        extra={
            "request_id": _get_request_id(request),
            "event_id": event_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=exc,
    )
    return response


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the handlers above, most specific first."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, pydantic_validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers configured")


__all__ = ["configure_exception_handlers"]
