"""Declarative base and column mixins shared by all models.

Models compose the base with the mixins they need:

    class TreeNode(Base, BigIntegerPKMixin, CreatedAtMixin):
        __tablename__ = "tree_nodes"
        name: Mapped[str] = mapped_column(String(255))

Identifiers are 64-bit on PostgreSQL. SQLite only auto-increments an
``INTEGER PRIMARY KEY`` column, so the identifier type degrades to ``Integer``
there.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, Integer, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

# Consistent naming convention for database constraints
# Ensures predictable names for migrations and schema management
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# 64-bit identifiers that still auto-increment on SQLite
BigIntegerID = BigInteger().with_variant(Integer(), "sqlite")


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base with constraint naming and automatic table names.

    The automatic table name is the lowercased class name; every model in
    this service sets ``__tablename__`` explicitly.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        """Auto-derive table name from class name (lowercase)."""
        return cls.__name__.lower()


class BigIntegerPKMixin:
    """Auto-incrementing 64-bit integer primary key.

    Identifiers are unique across the whole table, so they can be embedded
    in materialized paths without any tree qualifier.
    """

    __allow_unmapped__ = True

    id: Mapped[int] = mapped_column(
        BigIntegerID,
        primary_key=True,
        autoincrement=True,
        comment="Auto-incrementing integer primary key",
    )


class CreatedAtMixin:
    """Immutable creation timestamp.

    Set once on insert from the application clock, with a database-side
    default for rows written outside the ORM.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        comment="Record creation timestamp (UTC)",
    )


__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BigIntegerID",
    "BigIntegerPKMixin",
    "CreatedAtMixin",
    "utcnow",
]
