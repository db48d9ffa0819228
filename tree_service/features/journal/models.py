"""Exception journal database model.

Provides the ExceptionJournal model for storing one row per failed request:
- Exception identification (qualified type, message, stack trace)
- Request metadata (method, path, query, body)
- Client metadata (IP, user agent)
"""

from __future__ import annotations

import traceback
from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tree_service.core.database.base import Base, BigIntegerPKMixin, utcnow

EXCEPTION_TYPE_MAX_LENGTH = 500
HTTP_METHOD_MAX_LENGTH = 10
REQUEST_PATH_MAX_LENGTH = 2000
USER_AGENT_MAX_LENGTH = 500
CLIENT_IP_MAX_LENGTH = 45


def _truncate(value: str | None, limit: int) -> str | None:
    if value is None:
        return None
    return value[:limit]


def qualified_name(exc: BaseException) -> str:
    """Module-qualified class name, e.g. ``tree_service.features.trees.exceptions.TreeNotFoundError``."""
    cls = type(exc)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


class ExceptionJournal(Base, BigIntegerPKMixin):
    """Journal entry for a request that failed with an exception.

    The generated ``id`` is returned to the client as ``event_id`` so a
    reported error can be matched to its entry.

    Attributes:
        id: Identity, doubles as the event id
        timestamp: When the failure was recorded (indexed)
        query_parameters: JSON object of multi-valued query parameters
        body_parameters: Captured JSON request body
        stack_trace: Formatted traceback
        exception_type: Qualified class name of the exception
        exception_message: ``str(exc)``
        http_method: Request method
        request_path: Request path
        user_agent: ``User-Agent`` header
        client_ip_address: Resolved client address (IPv6 fits in 45)

    Example:
        entry = ExceptionJournal.from_exception(
            exc,
            http_method="DELETE",
            request_path="/api/tree/1/node/2",
        )
    """

    __tablename__ = "exception_journal"

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
        comment="When the exception was recorded",
    )
    query_parameters: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Query parameters as JSON (name -> list of values)",
    )
    body_parameters: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Request body as received (JSON requests only)",
    )
    stack_trace: Mapped[str] = mapped_column(Text, nullable=False, default="")
    exception_type: Mapped[str] = mapped_column(
        String(EXCEPTION_TYPE_MAX_LENGTH),
        nullable=False,
        index=True,
    )
    exception_message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    http_method: Mapped[str | None] = mapped_column(String(HTTP_METHOD_MAX_LENGTH), nullable=True)
    request_path: Mapped[str | None] = mapped_column(
        String(REQUEST_PATH_MAX_LENGTH), nullable=True
    )
    user_agent: Mapped[str | None] = mapped_column(String(USER_AGENT_MAX_LENGTH), nullable=True)
    client_ip_address: Mapped[str | None] = mapped_column(
        String(CLIENT_IP_MAX_LENGTH),
        nullable=True,
        comment="Client IP address",
    )

    @property
    def event_id(self) -> int:
        return self.id

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        *,
        query_parameters: str | None = None,
        body_parameters: str | None = None,
        http_method: str | None = None,
        request_path: str | None = None,
        user_agent: str | None = None,
        client_ip_address: str | None = None,
    ) -> ExceptionJournal:
        """Build an entry from an exception and request metadata.

        Length-limited columns are truncated to fit.
        """
        return cls(
            timestamp=utcnow(),
            query_parameters=query_parameters,
            body_parameters=body_parameters,
            stack_trace="".join(traceback.format_exception(exc)),
            exception_type=qualified_name(exc)[:EXCEPTION_TYPE_MAX_LENGTH],
            exception_message=str(exc),
            http_method=_truncate(http_method, HTTP_METHOD_MAX_LENGTH),
            request_path=_truncate(request_path, REQUEST_PATH_MAX_LENGTH),
            user_agent=_truncate(user_agent, USER_AGENT_MAX_LENGTH),
            client_ip_address=_truncate(client_ip_address, CLIENT_IP_MAX_LENGTH),
        )

    def __repr__(self) -> str:
        return f"<ExceptionJournal(id={self.id}, type={self.exception_type!r})>"


__all__ = ["ExceptionJournal", "qualified_name"]
