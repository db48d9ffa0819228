"""Service layer for the exception journal.

``journal_exception`` is called by the exception handlers for every failed
request. It writes through its own session so the entry survives the
rollback of the request's session, and it never raises: if the entry cannot
be written, the failure is logged and a time-based fallback id is returned.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from tree_service.core.settings import get_app_settings
from tree_service.features.journal.models import ExceptionJournal
from tree_service.features.journal.repository import (
    ExceptionJournalRepository,
    get_exception_journal_repository,
)
from tree_service.infra.database.session import AsyncSessionLocal
from tree_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
    from starlette.requests import Request


# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)


def fallback_event_id() -> int:
    """Current Unix time in milliseconds."""
    return time.time_ns() // 1_000_000


def resolve_client_ip(request: Request) -> str | None:
    """Client address: first ``X-Forwarded-For`` hop, then ``X-Real-IP``, then the peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else None


def serialize_query_parameters(request: Request) -> str | None:
    """Query parameters as a JSON object of value lists, or None when there are none."""
    params = request.query_params
    if not params:
        return None
    return json.dumps({key: params.getlist(key) for key in params})


def captured_body(request: Request) -> str | None:
    """The JSON body kept by the body capture middleware, if any."""
    raw: bytes | None = getattr(request.state, "request_body", None)
    if not raw:
        return None
    text = raw.decode("utf-8", errors="replace")
    return text if text.strip() else None


def _session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    return getattr(request.app.state, "session_factory", None) or AsyncSessionLocal


async def journal_exception(request: Request, exc: BaseException) -> int:
    """Record a failed request and return its event id.

    Args:
        request: The request that failed
        exc: The exception it failed with

    Returns:
        The journal entry id, or ``fallback_event_id()`` when journaling is
        disabled or the write failed
    """
    if not get_app_settings().exception_journal_enabled:
        return fallback_event_id()

    entry = ExceptionJournal.from_exception(
        exc,
        query_parameters=serialize_query_parameters(request),
        body_parameters=captured_body(request),
        http_method=request.method,
        request_path=request.url.path,
        user_agent=request.headers.get("user-agent"),
        client_ip_address=resolve_client_ip(request),
    )

    try:
        async with _session_factory(request)() as session:
            await get_exception_journal_repository().create(session, entry)
            await session.commit()
            event_id = entry.id
    except Exception:
        logger.exception(
            "Failed to record exception in journal",
            extra={"exception_type": entry.exception_type, "path": entry.request_path},
        )
        return fallback_event_id()

    lazy_logger.debug(lambda: f"journal.record({entry.exception_type}) -> {event_id}")
    return event_id


class ExceptionJournalService:
    """Read access to journal entries."""

    def __init__(
        self,
        session: AsyncSession,
        repo: ExceptionJournalRepository | None = None,
    ) -> None:
        self._session = session
        self._repo = repo or get_exception_journal_repository()

    async def get_entry(self, entry_id: int) -> ExceptionJournal:
        """Get an entry by id.

        Raises:
            NotFoundError: If no entry has that id
        """
        return await self._repo.get_or_raise(self._session, entry_id)

    async def recent(self, count: int = 100) -> Sequence[ExceptionJournal]:
        return await self._repo.list_recent(self._session, count)

    async def by_type(self, exception_type: str, count: int = 50) -> Sequence[ExceptionJournal]:
        return await self._repo.list_by_type(self._session, exception_type, count)


__all__ = [
    "ExceptionJournalService",
    "captured_body",
    "fallback_event_id",
    "journal_exception",
    "resolve_client_ip",
    "serialize_query_parameters",
]
