"""Integration-style tests for the tree node repository queries."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from tree_service.features.trees.models import TreeNode
from tree_service.features.trees.store import (
    SqlNodeStore,
    TreeNodeRepository,
    get_tree_node_repository,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def _persist(
    db_session: AsyncSession, tree_id: int, name: str, parent: TreeNode | None = None
) -> TreeNode:
    node = TreeNode(tree_id=tree_id, name=name, parent_id=parent.id if parent else None)
    db_session.add(node)
    await db_session.flush()
    node.path = f"{parent.path if parent else ''}{node.id}."
    await db_session.flush()
    return node


@pytest.mark.asyncio
async def test_next_tree_id_starts_at_one(db_session: AsyncSession) -> None:
    repo = TreeNodeRepository()

    assert await repo.next_tree_id(db_session) == 1

    await _persist(db_session, 4, "root")
    assert await repo.next_tree_id(db_session) == 5


@pytest.mark.asyncio
async def test_get_in_tree_is_scoped_by_tree(db_session: AsyncSession) -> None:
    repo = TreeNodeRepository()
    root = await _persist(db_session, 1, "root")

    assert await repo.get_in_tree(db_session, 1, root.id) is root
    assert await repo.get_in_tree(db_session, 2, root.id) is None
    assert await repo.get(db_session, root.id) is root


@pytest.mark.asyncio
async def test_list_subtree_does_not_match_sibling_with_shared_prefix(
    db_session: AsyncSession,
) -> None:
    repo = TreeNodeRepository()
    root = await _persist(db_session, 1, "root")
    # Pin ids so the subtree root is 2 and the look-alike sibling is 22
    two = TreeNode(id=2, tree_id=1, name="two", parent_id=root.id, path=f"{root.path}2.")
    twenty_two = TreeNode(
        id=22, tree_id=1, name="twenty-two", parent_id=root.id, path=f"{root.path}22."
    )
    db_session.add_all([two, twenty_two])
    await db_session.flush()
    below_two = await _persist(db_session, 1, "below two", two)

    subtree = await repo.list_subtree(db_session, 1, two.path)

    assert [n.id for n in subtree] == [2, below_two.id]


@pytest.mark.asyncio
async def test_list_subtree_with_empty_path_is_empty(db_session: AsyncSession) -> None:
    assert await TreeNodeRepository().list_subtree(db_session, 1, "") == []


@pytest.mark.asyncio
async def test_list_children_ordered_by_id(db_session: AsyncSession) -> None:
    repo = TreeNodeRepository()
    root = await _persist(db_session, 1, "root")
    first = await _persist(db_session, 1, "b", root)
    second = await _persist(db_session, 1, "a", root)
    await _persist(db_session, 1, "grandchild", first)

    children = await repo.list_children(db_session, 1, root.id)

    assert [c.id for c in children] == [first.id, second.id]


@pytest.mark.asyncio
async def test_tree_statistics(db_session: AsyncSession) -> None:
    repo = TreeNodeRepository()
    root = await _persist(db_session, 1, "Company")
    child = await _persist(db_session, 1, "Engineering", root)
    await _persist(db_session, 1, "Backend", child)
    await _persist(db_session, 2, "Lonely")

    stats = await repo.tree_statistics(db_session)

    assert [(s.tree_id, s.node_count, s.max_level, s.root_name) for s in stats] == [
        (1, 3, 2, "Company"),
        (2, 1, 0, "Lonely"),
    ]
    assert all(s.root_created_at is not None for s in stats)


@pytest.mark.asyncio
async def test_has_children_and_tree_exists(db_session: AsyncSession) -> None:
    repo = TreeNodeRepository()
    root = await _persist(db_session, 1, "root")
    leaf = await _persist(db_session, 1, "leaf", root)

    assert await repo.has_children(db_session, 1, root.id) is True
    assert await repo.has_children(db_session, 1, leaf.id) is False
    assert await repo.tree_exists(db_session, 1) is True
    assert await repo.tree_exists(db_session, 2) is False
    assert list(await repo.list_tree_ids(db_session)) == [1]


@pytest.mark.asyncio
async def test_store_delete_refuses_parent(db_session: AsyncSession) -> None:
    from tree_service.features.trees.exceptions import NodeHasChildrenError

    store = SqlNodeStore(db_session)
    root = await _persist(db_session, 1, "root")
    leaf = await _persist(db_session, 1, "leaf", root)

    with pytest.raises(NodeHasChildrenError):
        await store.delete(root)

    await store.delete(leaf)
    assert await store.get_node(1, leaf.id) is None
    assert [n.id for n in await store.get_roots(1)] == [root.id]


@pytest.mark.asyncio
async def test_sqlite_connections_enforce_foreign_keys(db_session: AsyncSession) -> None:
    result = await db_session.execute(text("PRAGMA foreign_keys"))

    assert result.scalar() == 1


@pytest.mark.asyncio
async def test_foreign_key_blocks_deleting_parent_past_the_store(
    db_session: AsyncSession,
) -> None:
    root = await _persist(db_session, 1, "root")
    await _persist(db_session, 1, "child", root)
    await db_session.commit()
    root_id = root.id

    # Same state as a child committed between has_children and the delete
    with pytest.raises(IntegrityError):
        await get_tree_node_repository().delete(db_session, root)
    await db_session.rollback()

    assert await TreeNodeRepository().tree_exists(db_session, 1) is True
    assert await TreeNodeRepository().has_children(db_session, 1, root_id) is True
