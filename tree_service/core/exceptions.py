"""Application exception hierarchy.

Every exception in this module is safe to show to API clients: its
``detail`` is rendered verbatim into an RFC 7807 problem response.
Anything that does not derive from ``AppException`` is treated as an
internal failure and masked by the exception handlers.
"""

from __future__ import annotations

from typing import Any, ClassVar

_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def default_title(status_code: int) -> str:
    """Human-readable title for an HTTP status code."""
    return _TITLES.get(status_code, "Error")


class AppException(Exception):
    """Base application exception rendered as an RFC 7807 problem.

    Attributes:
        status_code: HTTP status of the response.
        detail: Message shown to the client.
        type: Problem type slug, e.g. ``tree-not-found``.
        title: Short summary; derived from the status when omitted.
        instance: Path of the failing request; the handler fills it in.
        extra: Members added to the problem body, e.g. ``{"tree_id": 7}``.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)


class _StatusException(AppException):
    """An ``AppException`` whose status and default type are fixed per subclass."""

    status: ClassVar[int]
    default_type: ClassVar[str]

    def __init__(
        self,
        detail: str,
        type: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=self.status,
            detail=detail,
            type=type or self.default_type,
            instance=instance,
            extra=extra,
        )


class NotFoundException(_StatusException):
    """The addressed tree, node or journal entry does not exist."""

    status = 404
    default_type = "not-found"


class ConflictException(_StatusException):
    """The request clashes with the current state, e.g. deleting a node with children."""

    status = 409
    default_type = "conflict"


class BadRequestException(_StatusException):
    """Well-formed but semantically invalid, e.g. a parent from another tree."""

    status = 400
    default_type = "bad-request"


__all__ = [
    "AppException",
    "BadRequestException",
    "ConflictException",
    "NotFoundException",
    "default_title",
]
