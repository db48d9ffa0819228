"""Tests for the exception journal repository and read service."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from tree_service.core.database import NotFoundError
from tree_service.features.journal.models import ExceptionJournal
from tree_service.features.journal.repository import ExceptionJournalRepository
from tree_service.features.journal.service import ExceptionJournalService

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

T0 = datetime(2026, 3, 1, tzinfo=UTC)


async def _persist(
    db_session: AsyncSession, exception_type: str, minutes: int
) -> ExceptionJournal:
    entry = ExceptionJournal(
        timestamp=T0 + timedelta(minutes=minutes),
        exception_type=exception_type,
        exception_message="failed",
        stack_trace="Traceback ...",
    )
    db_session.add(entry)
    await db_session.flush()
    return entry


@pytest.mark.asyncio
async def test_list_recent_newest_first(db_session: AsyncSession) -> None:
    repo = ExceptionJournalRepository()
    old = await _persist(db_session, "ValueError", 0)
    new = await _persist(db_session, "RuntimeError", 5)
    middle = await _persist(db_session, "KeyError", 2)

    entries = await repo.list_recent(db_session, 10)

    assert [e.id for e in entries] == [new.id, middle.id, old.id]
    assert [e.id for e in await repo.list_recent(db_session, 1)] == [new.id]


@pytest.mark.asyncio
async def test_list_by_type_matches_substring(db_session: AsyncSession) -> None:
    repo = ExceptionJournalRepository()
    await _persist(db_session, "tree_service.features.trees.exceptions.TreeNotFoundError", 0)
    await _persist(db_session, "tree_service.features.trees.exceptions.NodeNotFoundError", 1)
    await _persist(db_session, "RuntimeError", 2)

    entries = await repo.list_by_type(db_session, "NotFound")

    assert [e.exception_type.rsplit(".", 1)[-1] for e in entries] == [
        "NodeNotFoundError",
        "TreeNotFoundError",
    ]


@pytest.mark.asyncio
async def test_list_by_type_escapes_wildcards(db_session: AsyncSession) -> None:
    await _persist(db_session, "RuntimeError", 0)

    assert await ExceptionJournalRepository().list_by_type(db_session, "%") == []


@pytest.mark.asyncio
async def test_service_get_entry(db_session: AsyncSession) -> None:
    entry = await _persist(db_session, "RuntimeError", 0)
    service = ExceptionJournalService(db_session)

    assert (await service.get_entry(entry.id)).event_id == entry.id

    with pytest.raises(NotFoundError) as exc_info:
        await service.get_entry(entry.id + 100)
    assert exc_info.value.identifier == {"id": entry.id + 100}
