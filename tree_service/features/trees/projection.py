"""Read-side views of trees and nodes.

Views are plain dataclasses built from already-loaded rows; building them
never touches the database. ``build_forest`` nests a flat node set that was
scoped to one tree or one subtree prefix.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tree_service.core.database import level_of

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from tree_service.features.trees.models import TreeNode


@dataclass(slots=True)
class NodeView:
    """A node as returned to callers.

    ``children`` is None for a node returned on its own and a (possibly
    empty) list when the node is part of a nested projection.
    """

    id: int
    name: str
    tree_id: int
    parent_id: int | None
    path: str
    level: int
    is_root: bool
    created_at: datetime
    children: list[NodeView] | None = None

    @classmethod
    def from_node(cls, node: TreeNode) -> NodeView:
        return cls(
            id=node.id,
            name=node.name,
            tree_id=node.tree_id,
            parent_id=node.parent_id,
            path=node.path,
            level=level_of(node.path),
            is_root=node.parent_id is None,
            created_at=node.created_at,
        )


@dataclass(slots=True)
class TreeView:
    """A whole tree or a subtree, nested from its top node(s)."""

    tree_id: int
    nodes: list[NodeView]
    total_nodes: int
    created_at: datetime | None


@dataclass(slots=True)
class TreeSummary:
    """One line of the tree listing."""

    tree_id: int
    root_name: str
    node_count: int
    max_depth: int
    created_at: datetime


def build_forest(nodes: Iterable[TreeNode]) -> list[NodeView]:
    """Nest a flat node set by parent id.

    Top-level entries are the nodes whose parent is not part of the set:
    the root for a whole tree, the subtree root for a subtree. Siblings
    are ordered by id at every level.
    """
    views = {node.id: NodeView.from_node(node) for node in nodes}
    children_of: dict[int, list[NodeView]] = defaultdict(list)
    top: list[NodeView] = []

    for view in views.values():
        if view.parent_id is not None and view.parent_id in views:
            children_of[view.parent_id].append(view)
        else:
            top.append(view)

    for view in views.values():
        view.children = sorted(children_of.get(view.id, []), key=lambda v: v.id)

    return sorted(top, key=lambda v: v.id)


def project_tree(
    tree_id: int,
    nodes: Iterable[TreeNode],
    *,
    created_at: datetime | None = None,
) -> TreeView:
    """Build a ``TreeView`` from a scoped node set.

    Args:
        tree_id: Tree the nodes belong to
        nodes: Flat node set (whole tree or one subtree)
        created_at: Explicit creation time; defaults to the earliest
            ``created_at`` among the nodes
    """
    node_list = list(nodes)
    if created_at is None and node_list:
        created_at = min(node.created_at for node in node_list)
    return TreeView(
        tree_id=tree_id,
        nodes=build_forest(node_list),
        total_nodes=len(node_list),
        created_at=created_at,
    )


__all__ = [
    "NodeView",
    "TreeSummary",
    "TreeView",
    "build_forest",
    "project_tree",
]
