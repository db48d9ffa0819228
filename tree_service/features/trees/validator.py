"""Parent-child relationship checks.

All checks are read-only and run before any store mutation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tree_service.core.database import MaterializedPath
from tree_service.features.trees.exceptions import (
    CircularReferenceError,
    InvalidParentTreeError,
    ParentNotFoundError,
)
from tree_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from tree_service.features.trees.models import TreeNode
    from tree_service.features.trees.store import NodeStore

lazy_logger = get_lazy_logger(__name__)


class RelationshipValidator:
    """Validates parents and cycle freedom against a ``NodeStore``."""

    def __init__(self, store: NodeStore) -> None:
        self._store = store

    async def validate_parent(self, tree_id: int, parent_id: int) -> bool:
        """Whether ``parent_id`` is an existing node of ``tree_id``."""
        parent = await self._store.get_node_by_id(parent_id)
        return parent is not None and parent.tree_id == tree_id

    async def require_parent(
        self, tree_id: int, parent_id: int, *, for_update: bool = False
    ) -> TreeNode:
        """Resolve a parent node or raise.

        Args:
            tree_id: Tree the parent must belong to
            parent_id: Candidate parent id
            for_update: Lock the parent row so it cannot be deleted before
                the new child is committed

        Raises:
            ParentNotFoundError: If no node has that id
            InvalidParentTreeError: If the node belongs to another tree
        """
        parent = await self._store.get_node_by_id(parent_id)
        if parent is None:
            raise ParentNotFoundError(parent_id, tree_id)
        if parent.tree_id != tree_id:
            raise InvalidParentTreeError(tree_id, parent.tree_id, parent_id)

        if for_update:
            locked = await self._store.get_node(tree_id, parent_id, for_update=True)
            if locked is None:
                raise ParentNotFoundError(parent_id, tree_id)
            parent = locked

        lazy_logger.debug(lambda: f"validator.require_parent({tree_id}, {parent_id}) -> ok")
        return parent

    async def would_create_cycle(
        self, tree_id: int, node_id: int, candidate_parent_id: int
    ) -> bool:
        """Whether attaching ``node_id`` under the candidate makes a cycle.

        True when the candidate is the node itself or one of its
        descendants, i.e. the node's id appears on the candidate's path.
        A candidate missing from the tree cannot form a cycle.
        """
        if node_id == candidate_parent_id:
            return True
        candidate = await self._store.get_node(tree_id, candidate_parent_id)
        if candidate is None or not candidate.path:
            return False
        return MaterializedPath.parse(candidate.path).contains(node_id)

    async def ensure_no_cycle(self, tree_id: int, node_id: int, candidate_parent_id: int) -> None:
        """Raise ``CircularReferenceError`` if ``would_create_cycle`` holds."""
        if await self.would_create_cycle(tree_id, node_id, candidate_parent_id):
            raise CircularReferenceError(node_id, candidate_parent_id)


__all__ = ["RelationshipValidator"]
