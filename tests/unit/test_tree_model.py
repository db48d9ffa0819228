"""Unit tests for the tree_nodes table definition."""

from __future__ import annotations

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex

from tree_service.features.trees.models import TreeNode


def _indexes() -> dict:
    return {index.name: index for index in TreeNode.__table__.indexes}


def test_path_is_indexed_together_with_tree_id():
    index = _indexes()["ix_tree_nodes_tree_id_path"]

    assert [column.name for column in index.columns] == ["tree_id", "path"]
    assert not any(
        [column.name for column in i.columns] == ["path"] for i in _indexes().values()
    )


def test_path_index_uses_pattern_ops_on_postgresql():
    ddl = str(
        CreateIndex(_indexes()["ix_tree_nodes_tree_id_path"]).compile(
            dialect=postgresql.dialect()
        )
    )

    assert "(tree_id, path text_pattern_ops)" in ddl


def test_path_defaults_to_empty_string_until_assigned():
    path = TreeNode.__table__.c.path

    assert path.nullable is False
    assert path.default.arg == ""
