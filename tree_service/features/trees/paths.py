"""Materialized path computation and repair.

A node's path is its parent's path followed by its own id:

    root  7   -> "7."
    child 12  -> "7.12."
    child 40  -> "7.12.40."

Paths embed store-generated identifiers, so they are computed after the
node's first flush and written in a second one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tree_service.core.database import MaterializedPath
from tree_service.features.trees.exceptions import (
    CircularReferenceError,
    InvalidParentTreeError,
    NodeNotFoundError,
)
from tree_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from tree_service.features.trees.models import TreeNode
    from tree_service.features.trees.store import NodeStore

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class PathEngine:
    """Computes, assigns and repairs materialized paths."""

    def __init__(self, store: NodeStore) -> None:
        self._store = store

    @staticmethod
    def compute_path(node: TreeNode, parent: TreeNode | None) -> str:
        """Path for ``node`` placed under ``parent`` (None for a root).

        Raises:
            ValueError: If the node has no id yet, the parent has no path,
                or the node already appears on the parent's path
        """
        if node.id is None:
            msg = "Cannot compute a path for a node without an id; flush it first"
            raise ValueError(msg)
        if parent is None:
            return MaterializedPath.root(node.id).format()
        if not parent.path:
            msg = f"Parent node {parent.id} has no path assigned"
            raise ValueError(msg)
        return (MaterializedPath.parse(parent.path) / node.id).format()

    async def assign_path(self, node: TreeNode, parent: TreeNode | None) -> str:
        """Compute the node's path, store it on the node and persist it."""
        node.path = self.compute_path(node, parent)
        await self._store.update(node)

        lazy_logger.debug(lambda: f"path.assign(node={node.id}) -> {node.path!r}")
        return node.path

    async def repair_descendant_paths(self, node: TreeNode, old_path: str) -> int:
        """Recompute paths below ``node`` after its own path changed.

        Every node whose stored path starts with ``old_path`` gets a fresh
        path built by walking its parent chain through identifier lookups,
        so stale or partially corrupted paths are not trusted.

        Args:
            node: Node whose ``path`` already holds its new value
            old_path: The node's path before the change

        Returns:
            Number of descendants whose path was rewritten

        Raises:
            CircularReferenceError: If a parent chain revisits a node
            NodeNotFoundError: If a parent chain references a missing node
            InvalidParentTreeError: If a parent chain leaves the tree
        """
        if not old_path:
            return 0

        stale = [
            n for n in await self._store.get_subtree(node.tree_id, old_path) if n.id != node.id
        ]
        cache: dict[int, TreeNode] = {node.id: node}
        cache.update((n.id, n) for n in stale)

        repaired = 0
        for descendant in stale:
            chain = await self._walk_to_root(descendant, cache)
            new_path = MaterializedPath(reversed(chain)).format()
            if descendant.path != new_path:
                descendant.path = new_path
                await self._store.update(descendant)
                repaired += 1

        if repaired:
            logger.info(
                "Descendant paths repaired",
                extra={
                    "tree_id": node.tree_id,
                    "node_id": node.id,
                    "old_path": old_path,
                    "new_path": node.path,
                    "repaired": repaired,
                },
            )
        return repaired

    async def _walk_to_root(self, start: TreeNode, cache: dict[int, TreeNode]) -> list[int]:
        """Identifiers from ``start`` up to its root, leaf first."""
        chain: list[int] = []
        seen: set[int] = set()
        current = start

        while True:
            if current.id in seen:
                raise CircularReferenceError(start.id, current.id)
            seen.add(current.id)
            chain.append(current.id)

            parent_id = current.parent_id
            if parent_id is None:
                return chain

            parent = cache.get(parent_id)
            if parent is None:
                parent = await self._store.get_node_by_id(parent_id)
                if parent is None:
                    raise NodeNotFoundError(parent_id, start.tree_id)
                cache[parent_id] = parent
            if parent.tree_id != start.tree_id:
                raise InvalidParentTreeError(start.tree_id, parent.tree_id, parent_id)
            current = parent


__all__ = ["PathEngine"]
