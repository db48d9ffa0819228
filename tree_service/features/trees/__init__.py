"""Trees feature: independent trees of named nodes addressed by materialized paths."""

from __future__ import annotations

from .models import TreeNode
from .paths import PathEngine
from .projection import NodeView, TreeSummary, TreeView, build_forest
from .service import TreeService
from .store import NodeStore, SqlNodeStore, TreeNodeRepository, get_tree_node_repository
from .validator import RelationshipValidator

__all__ = [
    "NodeStore",
    "NodeView",
    "PathEngine",
    "RelationshipValidator",
    "SqlNodeStore",
    "TreeNode",
    "TreeNodeRepository",
    "TreeService",
    "TreeSummary",
    "TreeView",
    "build_forest",
    "get_tree_node_repository",
]
