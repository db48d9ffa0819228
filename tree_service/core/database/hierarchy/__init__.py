"""Hierarchical data support using materialized paths.

Trees are stored as adjacency rows (``parent_id``) plus a denormalized
``path`` column listing every ancestor identifier. The path makes subtree
reads a single prefix scan:

    SELECT * FROM tree_nodes WHERE tree_id = 1 AND path LIKE '1.2.%' ORDER BY path

Components:
    - MaterializedPath: parsed, immutable view of a stored path
    - level_of: depth of a stored path without parsing it
"""

from tree_service.core.database.hierarchy.path import (
    SEPARATOR,
    MaterializedPath,
    level_of,
)

__all__ = [
    "SEPARATOR",
    "MaterializedPath",
    "level_of",
]
