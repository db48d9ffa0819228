"""Core database package: declarative base, mixins and repository.

Base Classes and Mixins:
    - Base: Declarative base with constraint naming convention
    - BigIntegerPKMixin: 64-bit auto-increment primary key
    - CreatedAtMixin: Immutable created_at column

Repository:
    - BaseRepository[T]: Generic CRUD with explicit session passing

Hierarchy:
    - MaterializedPath: Parsed materialized path value object

Exceptions:
    - RepositoryError, NotFoundError
"""

from tree_service.core.database.base import (
    NAMING_CONVENTION,
    Base,
    BigIntegerID,
    BigIntegerPKMixin,
    CreatedAtMixin,
    utcnow,
)
from tree_service.core.database.exceptions import NotFoundError, RepositoryError
from tree_service.core.database.hierarchy import MaterializedPath, level_of
from tree_service.core.database.repository import BaseRepository

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "BigIntegerID",
    "BigIntegerPKMixin",
    "CreatedAtMixin",
    "MaterializedPath",
    "NotFoundError",
    "RepositoryError",
    "level_of",
    "utcnow",
]
