"""SQLAlchemy models for the trees feature."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from tree_service.core.database import (
    Base,
    BigIntegerID,
    BigIntegerPKMixin,
    CreatedAtMixin,
    MaterializedPath,
    level_of,
)


class TreeNode(Base, BigIntegerPKMixin, CreatedAtMixin):
    """A named node in one of many independent trees.

    A tree has no row of its own: it is the set of nodes sharing a
    ``tree_id``, anchored by the single node whose ``parent_id`` is NULL.

    ``path`` lists the node's ancestors root first, dot-terminated
    ("1.3.7."). It is written in a second flush after insert because it
    embeds the generated ``id``; until then it is the empty string.

    Parent links are plain identifier columns with no ``relationship()``;
    loading a node never loads its subtree.
    """

    __tablename__ = "tree_nodes"
    __table_args__ = (
        Index("ix_tree_nodes_tree_id_id", "tree_id", "id"),
        # Serves subtree prefix LIKEs; text_pattern_ops matches them under non-C collations
        Index(
            "ix_tree_nodes_tree_id_path",
            "tree_id",
            "path",
            postgresql_ops={"path": "text_pattern_ops"},
        ),
        # One root per tree
        Index(
            "uq_tree_nodes_tree_id_root",
            "tree_id",
            unique=True,
            postgresql_where=text("parent_id IS NULL"),
            sqlite_where=text("parent_id IS NULL"),
        ),
    )

    tree_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Tree grouping key; immutable once set",
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name of the node",
    )
    parent_id: Mapped[int | None] = mapped_column(
        BigIntegerID,
        ForeignKey("tree_nodes.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
        comment="Parent node in the same tree; NULL for the root",
    )
    path: Mapped[str] = mapped_column(
        String(4000),
        nullable=False,
        default="",
        comment="Materialized path of ancestor ids, e.g. '1.3.7.'",
    )

    @property
    def level(self) -> int:
        """Depth derived from ``path``; the root is level 0."""
        return level_of(self.path)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def materialized_path(self) -> MaterializedPath:
        """``path`` parsed into node identifiers."""
        return MaterializedPath.parse(self.path)

    def __repr__(self) -> str:
        return (
            f"<TreeNode(id={self.id}, tree_id={self.tree_id}, "
            f"name={self.name!r}, path={self.path!r})>"
        )
