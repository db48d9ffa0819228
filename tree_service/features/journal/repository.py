"""Exception journal repository for database operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import desc, select

from tree_service.core.database.repository import BaseRepository

from .models import ExceptionJournal

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class ExceptionJournalRepository(BaseRepository[ExceptionJournal]):
    """Repository for ExceptionJournal database operations.

    Provides methods for:
    - Listing the most recent entries
    - Filtering entries by exception type

    Example:
        repo = get_exception_journal_repository()
        entry = await repo.get(session, event_id)
        recent = await repo.list_recent(session, count=20)
    """

    def __init__(self) -> None:
        """Initialize exception journal repository."""
        super().__init__(ExceptionJournal)

    async def list_recent(self, session: AsyncSession, count: int = 100) -> Sequence[ExceptionJournal]:
        """Newest entries first.

        Args:
            session: Database session.
            count: Maximum entries to return.
        """
        stmt = (
            select(ExceptionJournal)
            .order_by(desc(ExceptionJournal.timestamp), desc(ExceptionJournal.id))
            .limit(count)
        )
        result = await session.execute(stmt)
        entries = result.scalars().all()

        self._lazy.debug(lambda: f"db.list_recent(count={count}) -> {len(entries)}")
        return entries

    async def list_by_type(
        self,
        session: AsyncSession,
        exception_type: str,
        count: int = 50,
    ) -> Sequence[ExceptionJournal]:
        """Entries whose exception type contains ``exception_type``, newest first.

        Args:
            session: Database session.
            exception_type: Substring of the qualified type name
                (e.g. "TreeNotFoundError" or "trees.exceptions").
            count: Maximum entries to return.
        """
        stmt = (
            select(ExceptionJournal)
            .where(ExceptionJournal.exception_type.contains(exception_type, autoescape=True))
            .order_by(desc(ExceptionJournal.timestamp), desc(ExceptionJournal.id))
            .limit(count)
        )
        result = await session.execute(stmt)
        entries = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.list_by_type({exception_type!r}, count={count}) -> {len(entries)}"
        )
        return entries


_exception_journal_repository: ExceptionJournalRepository | None = None


def get_exception_journal_repository() -> ExceptionJournalRepository:
    """Get ExceptionJournalRepository instance."""
    global _exception_journal_repository
    if _exception_journal_repository is None:
        _exception_journal_repository = ExceptionJournalRepository()
    return _exception_journal_repository


__all__ = ["ExceptionJournalRepository", "get_exception_journal_repository"]
