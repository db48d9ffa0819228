"""Generic repository for SQLAlchemy models.

Feature repositories subclass ``BaseRepository`` and add their own queries:

    class ExceptionJournalRepository(BaseRepository[ExceptionJournal]):
        async def list_recent(self, session: AsyncSession, count: int):
            stmt = select(ExceptionJournal).order_by(ExceptionJournal.timestamp.desc())
            result = await session.execute(stmt.limit(count))
            return result.scalars().all()

Repositories hold no session and never commit. Every write is flushed so
generated ids are visible, and the caller owns the transaction.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tree_service.core.database.exceptions import NotFoundError
from tree_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository[T]:
    """Primary-key lookups and flushed writes for one model class."""

    __slots__ = ("model", "_logger", "_lazy")

    def __init__(self, model: type[T]) -> None:
        self.model = model
        self._logger = logging.getLogger(f"repository.{model.__name__}")
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    @property
    def _name(self) -> str:
        return self.model.__name__

    async def get(self, session: AsyncSession, id: Any) -> T | None:  # noqa: A002
        """Entity with primary key ``id``, served from the identity map when loaded."""
        instance = await session.get(self.model, id)
        self._lazy.debug(lambda: f"db.get: {self._name}({id}) -> {instance is not None}")
        return instance

    async def get_or_raise(self, session: AsyncSession, id: Any) -> T:  # noqa: A002
        """Like ``get`` but raises ``NotFoundError`` for a missing row."""
        instance = await self.get(session, id)
        if instance is None:
            raise NotFoundError(self._name, {"id": id})
        return instance

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Insert ``instance`` and reload it so server defaults are populated."""
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        self._lazy.debug(lambda: f"db.create: {self._name}(id={getattr(instance, 'id', None)})")
        return instance

    async def update(self, session: AsyncSession, instance: T) -> T:
        session.add(instance)
        await session.flush()
        self._lazy.debug(lambda: f"db.update: {self._name}(id={getattr(instance, 'id', None)})")
        return instance

    async def delete(self, session: AsyncSession, instance: T) -> None:
        entity_id = getattr(instance, "id", None)
        await session.delete(instance)
        await session.flush()
        self._logger.info(
            "Entity deleted",
            extra={"entity": self._name, "id": str(entity_id), "operation": "db.delete"},
        )


__all__ = ["BaseRepository"]
