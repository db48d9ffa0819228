"""Service layer for the trees feature.

``TreeService`` orchestrates the node store, path engine and relationship
validator. Each public method is one unit of work on the caller's session:
mutations flush, the router commits.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tree_service.features.trees.exceptions import (
    NodeHasChildrenError,
    NodeNotFoundError,
    TreeNotFoundError,
)
from tree_service.features.trees.models import TreeNode
from tree_service.features.trees.paths import PathEngine
from tree_service.features.trees.projection import (
    NodeView,
    TreeSummary,
    TreeView,
    project_tree,
)
from tree_service.features.trees.schemas import NAME_MAX_LENGTH
from tree_service.features.trees.store import SqlNodeStore
from tree_service.features.trees.validator import RelationshipValidator
from tree_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from tree_service.features.trees.store import NodeStore


# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)


def _check_name(name: str) -> None:
    if not name.strip() or len(name) > NAME_MAX_LENGTH:
        msg = f"Node name must be non-blank and at most {NAME_MAX_LENGTH} characters"
        raise ValueError(msg)


class TreeService:
    """Service for tree and node operations.

    Handles business logic for:
    - Tree creation and listing
    - Node creation, rename and deletion
    - Nested tree and subtree projections
    """

    def __init__(self, session: AsyncSession | None, store: NodeStore | None = None) -> None:
        """Initialize the tree service.

        Args:
            session: Database session for operations
            store: Node store (optional, binds ``session`` to the SQL store
                if not provided)
        """
        if store is None:
            if session is None:
                msg = "TreeService needs a session or an explicit store"
                raise ValueError(msg)
            store = SqlNodeStore(session)
        self._store = store
        self._paths = PathEngine(store)
        self._validator = RelationshipValidator(store)

    @property
    def paths(self) -> PathEngine:
        return self._paths

    @property
    def validator(self) -> RelationshipValidator:
        return self._validator

    # ──────────────────────────────────────────────────────────────
    # Mutations
    # ──────────────────────────────────────────────────────────────

    async def create_tree(self, name: str) -> TreeView:
        """Create a new tree consisting of a single root node.

        Args:
            name: Root node name

        Returns:
            Projection of the new tree

        Raises:
            ValueError: If the name is blank or longer than 255 characters
        """
        _check_name(name)
        tree_id = await self._store.next_tree_id()
        root = await self._store.insert(TreeNode(tree_id=tree_id, name=name, parent_id=None))
        await self._paths.assign_path(root, None)

        logger.info(
            "Tree created",
            extra={"tree_id": tree_id, "node_id": root.id, "path": root.path},
        )
        return project_tree(tree_id, [root], created_at=root.created_at)

    async def create_node(self, tree_id: int, parent_id: int, name: str) -> NodeView:
        """Add a node under an existing parent.

        The parent row is locked until the transaction ends so a concurrent
        delete of the parent cannot slip in between.

        Raises:
            TreeNotFoundError: If the tree has no nodes
            ParentNotFoundError: If the parent does not exist
            InvalidParentTreeError: If the parent belongs to another tree
            ValueError: If the name is blank or longer than 255 characters
        """
        _check_name(name)
        if not await self._store.tree_exists(tree_id):
            raise TreeNotFoundError(tree_id)

        parent = await self._validator.require_parent(tree_id, parent_id, for_update=True)

        node = await self._store.insert(TreeNode(tree_id=tree_id, name=name, parent_id=parent.id))
        await self._paths.assign_path(node, parent)

        logger.info(
            "Node created",
            extra={
                "tree_id": tree_id,
                "node_id": node.id,
                "parent_id": parent.id,
                "path": node.path,
            },
        )
        return NodeView.from_node(node)

    async def rename_node(self, tree_id: int, node_id: int, new_name: str) -> NodeView:
        """Change a node's name. Nothing else about the node changes.

        Raises:
            ValueError: If the new name is blank or longer than 255 characters
            NodeNotFoundError: If the node is not in the tree
        """
        _check_name(new_name)
        node = await self._require_node(tree_id, node_id)
        old_name = node.name
        node.name = new_name
        await self._store.update(node)

        logger.info(
            "Node renamed",
            extra={
                "tree_id": tree_id,
                "node_id": node_id,
                "old_name": old_name,
                "new_name": new_name,
            },
        )
        return NodeView.from_node(node)

    async def delete_node(self, tree_id: int, node_id: int) -> None:
        """Delete a childless node.

        Raises:
            NodeNotFoundError: If the node is not in the tree
            NodeHasChildrenError: If the node still has children
        """
        node = await self._require_node(tree_id, node_id, for_update=True)
        if await self._store.has_children(tree_id, node_id):
            raise NodeHasChildrenError(node_id, tree_id)

        path = node.path
        await self._store.delete(node)

        logger.info(
            "Node deleted",
            extra={"tree_id": tree_id, "node_id": node_id, "path": path},
        )

    # ──────────────────────────────────────────────────────────────
    # Queries
    # ──────────────────────────────────────────────────────────────

    async def get_node(self, tree_id: int, node_id: int) -> NodeView:
        node = await self._require_node(tree_id, node_id)
        return NodeView.from_node(node)

    async def get_children(self, tree_id: int, node_id: int) -> list[NodeView]:
        """Direct children of a node, ordered by id.

        Raises:
            NodeNotFoundError: If the node is not in the tree
        """
        await self._require_node(tree_id, node_id)
        children = await self._store.get_children(tree_id, node_id)

        lazy_logger.debug(
            lambda: f"service.get_children({tree_id}, {node_id}) -> {len(children)}"
        )
        return [NodeView.from_node(child) for child in children]

    async def get_tree(self, tree_id: int) -> TreeView:
        """Nested projection of a whole tree.

        Raises:
            TreeNotFoundError: If the tree has no nodes
        """
        nodes = await self._store.get_tree_nodes(tree_id)
        if not nodes:
            raise TreeNotFoundError(tree_id)

        lazy_logger.debug(lambda: f"service.get_tree({tree_id}) -> {len(nodes)} nodes")
        return project_tree(tree_id, nodes)

    async def get_subtree(self, tree_id: int, node_id: int) -> TreeView:
        """Nested projection rooted at ``node_id``.

        Raises:
            NodeNotFoundError: If the node is not in the tree
        """
        root = await self._require_node(tree_id, node_id)
        nodes = await self._store.get_subtree(tree_id, root.path)

        lazy_logger.debug(
            lambda: f"service.get_subtree({tree_id}, {node_id}) -> {len(nodes)} nodes"
        )
        return project_tree(tree_id, nodes, created_at=root.created_at)

    async def list_trees(self) -> list[TreeSummary]:
        """Summaries of every tree, ordered by tree id."""
        summaries: list[TreeSummary] = []
        for stats in await self._store.tree_statistics():
            if stats.root_name is None or stats.root_created_at is None:
                logger.warning("Tree has no root node", extra={"tree_id": stats.tree_id})
                continue
            summaries.append(
                TreeSummary(
                    tree_id=stats.tree_id,
                    root_name=stats.root_name,
                    node_count=stats.node_count,
                    max_depth=stats.max_level,
                    created_at=stats.root_created_at,
                )
            )

        lazy_logger.debug(lambda: f"service.list_trees() -> {len(summaries)} trees")
        return summaries

    async def _require_node(
        self, tree_id: int, node_id: int, *, for_update: bool = False
    ) -> TreeNode:
        node = await self._store.get_node(tree_id, node_id, for_update=for_update)
        if node is None:
            raise NodeNotFoundError(node_id, tree_id)
        return node


__all__ = ["TreeService"]
