"""Unit tests for PathEngine, RelationshipValidator and TreeService on an in-memory store.

``InMemoryNodeStore`` honors the ``NodeStore`` contract with a dict, which
keeps these tests free of any database.
"""

from __future__ import annotations

import itertools
from datetime import UTC, datetime

import pytest

from tree_service.features.trees.exceptions import (
    CircularReferenceError,
    InvalidParentTreeError,
    NodeHasChildrenError,
    NodeNotFoundError,
    ParentNotFoundError,
    TreeNotFoundError,
)
from tree_service.features.trees.models import TreeNode
from tree_service.features.trees.paths import PathEngine
from tree_service.features.trees.service import TreeService
from tree_service.features.trees.store import TreeStatistics
from tree_service.features.trees.validator import RelationshipValidator


class InMemoryNodeStore:
    """Dict-backed NodeStore."""

    def __init__(self) -> None:
        self.nodes: dict[int, TreeNode] = {}
        self.updates = 0
        self._ids = itertools.count(1)

    async def get_node(self, tree_id, node_id, *, for_update=False):
        node = self.nodes.get(node_id)
        return node if node is not None and node.tree_id == tree_id else None

    async def get_node_by_id(self, node_id):
        return self.nodes.get(node_id)

    async def get_children(self, tree_id, parent_id):
        return sorted(
            (n for n in self.nodes.values() if n.tree_id == tree_id and n.parent_id == parent_id),
            key=lambda n: n.id,
        )

    async def get_subtree(self, tree_id, root_path):
        if not root_path:
            return []
        return sorted(
            (
                n
                for n in self.nodes.values()
                if n.tree_id == tree_id and n.path.startswith(root_path)
            ),
            key=lambda n: n.path,
        )

    async def get_tree_nodes(self, tree_id):
        return sorted(
            (n for n in self.nodes.values() if n.tree_id == tree_id), key=lambda n: n.path
        )

    async def get_roots(self, tree_id):
        return [n for n in await self.get_tree_nodes(tree_id) if n.parent_id is None]

    async def list_tree_ids(self):
        return sorted({n.tree_id for n in self.nodes.values()})

    async def next_tree_id(self):
        return max((n.tree_id for n in self.nodes.values()), default=0) + 1

    async def tree_statistics(self):
        stats = []
        for tree_id in await self.list_tree_ids():
            nodes = await self.get_tree_nodes(tree_id)
            root = next((n for n in nodes if n.parent_id is None), None)
            stats.append(
                TreeStatistics(
                    tree_id=tree_id,
                    node_count=len(nodes),
                    max_level=max(n.level for n in nodes),
                    root_name=root.name if root else None,
                    root_created_at=root.created_at if root else None,
                )
            )
        return stats

    async def insert(self, node):
        node.id = next(self._ids)
        node.path = node.path or ""
        node.created_at = node.created_at or datetime.now(UTC)
        self.nodes[node.id] = node
        return node

    async def update(self, node):
        self.updates += 1
        self.nodes[node.id] = node
        return node

    async def delete(self, node):
        if await self.has_children(node.tree_id, node.id):
            raise NodeHasChildrenError(node.id, node.tree_id)
        del self.nodes[node.id]

    async def has_children(self, tree_id, node_id):
        return any(
            n.tree_id == tree_id and n.parent_id == node_id for n in self.nodes.values()
        )

    async def tree_exists(self, tree_id):
        return any(n.tree_id == tree_id for n in self.nodes.values())


@pytest.fixture
def store() -> InMemoryNodeStore:
    return InMemoryNodeStore()


@pytest.fixture
def service(store: InMemoryNodeStore) -> TreeService:
    return TreeService(None, store=store)


def _raw(store: InMemoryNodeStore, node_id: int, tree_id: int, parent_id, path: str) -> TreeNode:
    node = TreeNode(
        id=node_id,
        tree_id=tree_id,
        name=f"n{node_id}",
        parent_id=parent_id,
        path=path,
        created_at=datetime.now(UTC),
    )
    store.nodes[node_id] = node
    return node


class TestPathEngine:
    def test_compute_root_path(self, store):
        root = _raw(store, 1, 1, None, "")

        assert PathEngine.compute_path(root, None) == "1."

    def test_compute_child_path(self, store):
        root = _raw(store, 1, 1, None, "1.")
        child = _raw(store, 2, 1, 1, "")

        assert PathEngine.compute_path(child, root) == "1.2."

    def test_compute_requires_id(self):
        with pytest.raises(ValueError, match="without an id"):
            PathEngine.compute_path(TreeNode(tree_id=1, name="x"), None)

    def test_compute_requires_parent_path(self, store):
        parent = _raw(store, 1, 1, None, "")
        child = _raw(store, 2, 1, 1, "")

        with pytest.raises(ValueError, match="has no path"):
            PathEngine.compute_path(child, parent)

    async def test_assign_path_persists(self, store):
        root = _raw(store, 1, 1, None, "")

        path = await PathEngine(store).assign_path(root, None)

        assert path == "1."
        assert store.nodes[1].path == "1."
        assert store.updates == 1

    async def test_repair_descendant_paths(self, store):
        # Node 2 moved from under 1 to under 5; its subtree still carries old paths
        _raw(store, 1, 1, None, "1.")
        _raw(store, 5, 1, 1, "1.5.")
        moved = _raw(store, 2, 1, 5, "1.5.2.")
        _raw(store, 3, 1, 2, "1.2.3.")
        _raw(store, 4, 1, 3, "1.2.3.4.")

        repaired = await PathEngine(store).repair_descendant_paths(moved, "1.2.")

        assert repaired == 2
        assert store.nodes[3].path == "1.5.2.3."
        assert store.nodes[4].path == "1.5.2.3.4."

    async def test_repair_without_old_path_is_noop(self, store):
        node = _raw(store, 1, 1, None, "1.")

        assert await PathEngine(store).repair_descendant_paths(node, "") == 0

    async def test_repair_detects_cycle(self, store):
        anchor = _raw(store, 1, 1, None, "1.")
        _raw(store, 2, 1, 3, "1.2.")
        _raw(store, 3, 1, 2, "1.2.3.")

        with pytest.raises(CircularReferenceError):
            await PathEngine(store).repair_descendant_paths(anchor, "1.")

    async def test_repair_detects_missing_parent(self, store):
        anchor = _raw(store, 1, 1, None, "1.")
        _raw(store, 2, 1, 42, "1.2.")

        with pytest.raises(NodeNotFoundError):
            await PathEngine(store).repair_descendant_paths(anchor, "1.")

    async def test_repair_detects_parent_in_other_tree(self, store):
        anchor = _raw(store, 1, 1, None, "1.")
        _raw(store, 9, 2, None, "9.")
        _raw(store, 2, 1, 9, "1.2.")

        with pytest.raises(InvalidParentTreeError):
            await PathEngine(store).repair_descendant_paths(anchor, "1.")


class TestRelationshipValidator:
    async def test_validate_parent(self, store):
        _raw(store, 1, 1, None, "1.")
        validator = RelationshipValidator(store)

        assert await validator.validate_parent(1, 1) is True
        assert await validator.validate_parent(2, 1) is False
        assert await validator.validate_parent(1, 99) is False

    async def test_require_parent_missing(self, store):
        with pytest.raises(ParentNotFoundError) as exc_info:
            await RelationshipValidator(store).require_parent(1, 99)

        assert exc_info.value.parent_id == 99

    async def test_require_parent_in_other_tree(self, store):
        _raw(store, 1, 1, None, "1.")

        with pytest.raises(InvalidParentTreeError) as exc_info:
            await RelationshipValidator(store).require_parent(2, 1, for_update=True)

        assert exc_info.value.parent_tree_id == 1

    async def test_require_parent_returns_node(self, store):
        root = _raw(store, 1, 1, None, "1.")

        assert await RelationshipValidator(store).require_parent(1, 1, for_update=True) is root

    async def test_would_create_cycle(self, store):
        _raw(store, 1, 1, None, "1.")
        _raw(store, 2, 1, 1, "1.2.")
        _raw(store, 3, 1, 2, "1.2.3.")
        _raw(store, 22, 1, 1, "1.22.")
        validator = RelationshipValidator(store)

        assert await validator.would_create_cycle(1, 2, 2) is True
        assert await validator.would_create_cycle(1, 2, 3) is True
        assert await validator.would_create_cycle(1, 2, 22) is False
        assert await validator.would_create_cycle(1, 3, 22) is False
        assert await validator.would_create_cycle(1, 2, 404) is False

    async def test_ensure_no_cycle_raises(self, store):
        _raw(store, 1, 1, None, "1.")
        _raw(store, 2, 1, 1, "1.2.")

        with pytest.raises(CircularReferenceError):
            await RelationshipValidator(store).ensure_no_cycle(1, 1, 2)


class TestTreeServiceOnMemoryStore:
    def test_requires_session_or_store(self):
        with pytest.raises(ValueError, match="session or an explicit store"):
            TreeService(None)

    async def test_build_and_read_tree(self, service):
        tree = await service.create_tree("Root")
        root = tree.nodes[0]
        child = await service.create_node(tree.tree_id, root.id, "Child")
        grandchild = await service.create_node(tree.tree_id, child.id, "Grandchild")

        assert (root.path, child.path, grandchild.path) == ("1.", "1.2.", "1.2.3.")
        assert grandchild.level == 2

        full = await service.get_tree(tree.tree_id)
        assert full.total_nodes == 3
        assert full.nodes[0].children[0].children[0].name == "Grandchild"

    async def test_second_tree_gets_next_id(self, service):
        first = await service.create_tree("A")
        second = await service.create_tree("B")

        assert (first.tree_id, second.tree_id) == (1, 2)

    async def test_create_node_in_missing_tree(self, service):
        with pytest.raises(TreeNotFoundError):
            await service.create_node(5, 1, "x")

    async def test_delete_refuses_node_with_children(self, service):
        tree = await service.create_tree("Root")
        await service.create_node(tree.tree_id, tree.nodes[0].id, "Child")

        with pytest.raises(NodeHasChildrenError):
            await service.delete_node(tree.tree_id, tree.nodes[0].id)

    async def test_list_trees_skips_rootless_tree(self, service, store):
        await service.create_tree("Root")
        _raw(store, 50, 9, 49, "49.50.")

        summaries = await service.list_trees()

        assert [s.tree_id for s in summaries] == [1]

    @pytest.mark.parametrize("name", ["", "   ", "x" * 256])
    async def test_rejects_blank_or_overlong_name(self, service, store, name):
        with pytest.raises(ValueError, match="non-blank and at most 255 characters"):
            await service.create_tree(name)
        assert store.nodes == {}

        tree = await service.create_tree("Root")
        root = tree.nodes[0]
        with pytest.raises(ValueError, match="non-blank and at most 255 characters"):
            await service.create_node(tree.tree_id, root.id, name)
        with pytest.raises(ValueError, match="non-blank and at most 255 characters"):
            await service.rename_node(tree.tree_id, root.id, name)

        assert [n.name for n in store.nodes.values()] == ["Root"]

    async def test_accepts_name_at_length_limit(self, service):
        tree = await service.create_tree("x" * 255)

        renamed = await service.rename_node(tree.tree_id, tree.nodes[0].id, "y")

        assert renamed.name == "y"
