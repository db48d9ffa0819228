"""Node persistence for the trees feature.

``NodeStore`` is the persistence contract the tree engine depends on.
Every read is scoped by tree id except the identifier-only lookup.

Two layers implement it for SQL databases:

- ``TreeNodeRepository``: stateless queries taking an explicit session,
  in the shape of every other repository in the service.
- ``SqlNodeStore``: binds one ``AsyncSession`` to the repository and
  enforces the store-side delete precondition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import exists, func, select

from tree_service.core.database.repository import BaseRepository
from tree_service.features.trees.exceptions import NodeHasChildrenError
from tree_service.features.trees.models import TreeNode

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TreeStatistics:
    """Aggregate figures for one tree.

    ``root_name`` and ``root_created_at`` are None only when the tree's
    root row is missing, which the one-root index makes a data error.
    """

    tree_id: int
    node_count: int
    max_level: int
    root_name: str | None = None
    root_created_at: datetime | None = None


class NodeStore(Protocol):
    """Persistence contract for tree nodes.

    Any storage honoring these semantics can back the tree engine:
    relational, key-value with a ``(tree_id, path)`` prefix index, or an
    in-memory dict in tests.
    """

    async def get_node(
        self, tree_id: int, node_id: int, *, for_update: bool = False
    ) -> TreeNode | None: ...

    async def get_node_by_id(self, node_id: int) -> TreeNode | None: ...

    async def get_children(self, tree_id: int, parent_id: int) -> Sequence[TreeNode]: ...

    async def get_subtree(self, tree_id: int, root_path: str) -> Sequence[TreeNode]: ...

    async def get_tree_nodes(self, tree_id: int) -> Sequence[TreeNode]: ...

    async def get_roots(self, tree_id: int) -> Sequence[TreeNode]: ...

    async def list_tree_ids(self) -> Sequence[int]: ...

    async def next_tree_id(self) -> int: ...

    async def tree_statistics(self) -> Sequence[TreeStatistics]: ...

    async def insert(self, node: TreeNode) -> TreeNode: ...

    async def update(self, node: TreeNode) -> TreeNode: ...

    async def delete(self, node: TreeNode) -> None: ...

    async def has_children(self, tree_id: int, node_id: int) -> bool: ...

    async def tree_exists(self, tree_id: int) -> bool: ...


# Depth in SQL: separators in the path minus one
_LEVEL_EXPR = (
    func.length(TreeNode.path) - func.length(func.replace(TreeNode.path, ".", "")) - 1
)


class TreeNodeRepository(BaseRepository[TreeNode]):
    """Repository for TreeNode model.

    Inherits from BaseRepository:
        - get(session, id) -> TreeNode | None  (identifier-only lookup)
        - get_or_raise(session, id) -> TreeNode
        - create(session, instance) -> TreeNode
        - update(session, instance) -> TreeNode
        - delete(session, instance) -> None

    Tree-scoped queries below. Ordering is part of each method's contract.
    """

    def __init__(self) -> None:
        """Initialize with TreeNode model."""
        super().__init__(TreeNode)

    async def get_in_tree(
        self,
        session: AsyncSession,
        tree_id: int,
        node_id: int,
        *,
        for_update: bool = False,
    ) -> TreeNode | None:
        """Get a node only if it belongs to the tree.

        Args:
            session: Database session
            tree_id: Tree the node must belong to
            node_id: Node identifier
            for_update: Lock the row until the transaction ends
                (``SELECT ... FOR UPDATE``; a no-op on SQLite)

        Returns:
            The node, or None if absent or in another tree
        """
        stmt = select(TreeNode).where(TreeNode.tree_id == tree_id, TreeNode.id == node_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        node = result.scalar_one_or_none()

        self._lazy.debug(
            lambda: f"db.get_in_tree(tree={tree_id}, node={node_id}, lock={for_update}) "
            f"-> {'found' if node else 'not found'}"
        )
        return node

    async def list_children(
        self, session: AsyncSession, tree_id: int, parent_id: int
    ) -> Sequence[TreeNode]:
        """Direct children of a node, ordered by id."""
        stmt = (
            select(TreeNode)
            .where(TreeNode.tree_id == tree_id, TreeNode.parent_id == parent_id)
            .order_by(TreeNode.id)
        )
        result = await session.execute(stmt)
        children = result.scalars().all()

        self._lazy.debug(lambda: f"db.list_children({tree_id}, {parent_id}) -> {len(children)}")
        return children

    async def list_subtree(
        self, session: AsyncSession, tree_id: int, root_path: str
    ) -> Sequence[TreeNode]:
        """Nodes whose path starts with ``root_path``, ordered by path.

        The subtree root itself is included. Because every path segment is
        dot-terminated, "1.2." never matches "1.22.".
        """
        if not root_path:
            return []

        stmt = (
            select(TreeNode)
            .where(
                TreeNode.tree_id == tree_id,
                TreeNode.path.startswith(root_path, autoescape=True),
            )
            .order_by(TreeNode.path)
        )
        result = await session.execute(stmt)
        nodes = result.scalars().all()

        self._lazy.debug(lambda: f"db.list_subtree({tree_id}, {root_path!r}) -> {len(nodes)}")
        return nodes

    async def list_tree(self, session: AsyncSession, tree_id: int) -> Sequence[TreeNode]:
        """Every node of a tree, ordered by path."""
        stmt = select(TreeNode).where(TreeNode.tree_id == tree_id).order_by(TreeNode.path)
        result = await session.execute(stmt)
        nodes = result.scalars().all()

        self._lazy.debug(lambda: f"db.list_tree({tree_id}) -> {len(nodes)}")
        return nodes

    async def list_roots(self, session: AsyncSession, tree_id: int) -> Sequence[TreeNode]:
        """Root nodes of a tree (normally exactly one), ordered by id."""
        stmt = (
            select(TreeNode)
            .where(TreeNode.tree_id == tree_id, TreeNode.parent_id.is_(None))
            .order_by(TreeNode.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_tree_ids(self, session: AsyncSession) -> Sequence[int]:
        """Distinct tree ids in ascending order."""
        stmt = select(TreeNode.tree_id).distinct().order_by(TreeNode.tree_id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def next_tree_id(self, session: AsyncSession) -> int:
        """One more than the highest tree id, or 1 when there are no trees."""
        result = await session.execute(select(func.coalesce(func.max(TreeNode.tree_id), 0)))
        return int(result.scalar_one()) + 1

    async def tree_statistics(self, session: AsyncSession) -> list[TreeStatistics]:
        """Node count, deepest level and root details per tree, ordered by tree id.

        A single query: per-tree aggregates joined to each tree's root row.
        """
        stats = (
            select(
                TreeNode.tree_id.label("tree_id"),
                func.count(TreeNode.id).label("node_count"),
                func.max(_LEVEL_EXPR).label("max_level"),
            )
            .group_by(TreeNode.tree_id)
            .subquery()
        )
        root = select(TreeNode).where(TreeNode.parent_id.is_(None)).subquery()

        stmt = (
            select(
                stats.c.tree_id,
                stats.c.node_count,
                stats.c.max_level,
                root.c.name,
                root.c.created_at,
            )
            .outerjoin(root, root.c.tree_id == stats.c.tree_id)
            .order_by(stats.c.tree_id)
        )
        result = await session.execute(stmt)
        rows = [
            TreeStatistics(
                tree_id=row.tree_id,
                node_count=int(row.node_count),
                max_level=int(row.max_level or 0),
                root_name=row.name,
                root_created_at=row.created_at,
            )
            for row in result
        ]

        self._lazy.debug(lambda: f"db.tree_statistics() -> {len(rows)} trees")
        return rows

    async def has_children(self, session: AsyncSession, tree_id: int, node_id: int) -> bool:
        stmt = select(
            exists().where(TreeNode.tree_id == tree_id, TreeNode.parent_id == node_id)
        )
        result = await session.execute(stmt)
        return bool(result.scalar())

    async def tree_exists(self, session: AsyncSession, tree_id: int) -> bool:
        stmt = select(exists().where(TreeNode.tree_id == tree_id))
        result = await session.execute(stmt)
        return bool(result.scalar())


_tree_node_repository: TreeNodeRepository | None = None


def get_tree_node_repository() -> TreeNodeRepository:
    """Get TreeNodeRepository instance.

    The repository holds no session, so one instance serves every request.
    """
    global _tree_node_repository
    if _tree_node_repository is None:
        _tree_node_repository = TreeNodeRepository()
    return _tree_node_repository


class SqlNodeStore:
    """``NodeStore`` backed by a SQLAlchemy session.

    Writes flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession, repo: TreeNodeRepository | None = None) -> None:
        self._session = session
        self._repo = repo or get_tree_node_repository()

    async def get_node(
        self, tree_id: int, node_id: int, *, for_update: bool = False
    ) -> TreeNode | None:
        return await self._repo.get_in_tree(self._session, tree_id, node_id, for_update=for_update)

    async def get_node_by_id(self, node_id: int) -> TreeNode | None:
        return await self._repo.get(self._session, node_id)

    async def get_children(self, tree_id: int, parent_id: int) -> Sequence[TreeNode]:
        return await self._repo.list_children(self._session, tree_id, parent_id)

    async def get_subtree(self, tree_id: int, root_path: str) -> Sequence[TreeNode]:
        return await self._repo.list_subtree(self._session, tree_id, root_path)

    async def get_tree_nodes(self, tree_id: int) -> Sequence[TreeNode]:
        return await self._repo.list_tree(self._session, tree_id)

    async def get_roots(self, tree_id: int) -> Sequence[TreeNode]:
        return await self._repo.list_roots(self._session, tree_id)

    async def list_tree_ids(self) -> Sequence[int]:
        return await self._repo.list_tree_ids(self._session)

    async def next_tree_id(self) -> int:
        return await self._repo.next_tree_id(self._session)

    async def tree_statistics(self) -> Sequence[TreeStatistics]:
        return await self._repo.tree_statistics(self._session)

    async def insert(self, node: TreeNode) -> TreeNode:
        return await self._repo.create(self._session, node)

    async def update(self, node: TreeNode) -> TreeNode:
        return await self._repo.update(self._session, node)

    async def delete(self, node: TreeNode) -> None:
        """Delete a childless node.

        Raises:
            NodeHasChildrenError: If any node still references it as parent
        """
        if await self._repo.has_children(self._session, node.tree_id, node.id):
            logger.warning(
                "Refused to delete node with children",
                extra={"tree_id": node.tree_id, "node_id": node.id},
            )
            raise NodeHasChildrenError(node.id, node.tree_id)
        await self._repo.delete(self._session, node)

    async def has_children(self, tree_id: int, node_id: int) -> bool:
        return await self._repo.has_children(self._session, tree_id, node_id)

    async def tree_exists(self, tree_id: int) -> bool:
        return await self._repo.tree_exists(self._session, tree_id)


__all__ = [
    "NodeStore",
    "SqlNodeStore",
    "TreeNodeRepository",
    "TreeStatistics",
    "get_tree_node_repository",
]
