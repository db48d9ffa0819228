"""Pydantic schemas for the trees feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from tree_service.core.schemas.base import CustomBase

NAME_MAX_LENGTH = 255


class TreeCreate(CustomBase):
    """Payload used when creating a tree."""

    tree_name: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Name of the tree's root node",
    )

    model_config = ConfigDict(json_schema_extra={"example": {"tree_name": "Company"}})


class NodeCreate(CustomBase):
    """Payload used when adding a node to a tree."""

    parent_id: int = Field(..., gt=0, description="Existing node in the same tree")
    node_name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)

    model_config = ConfigDict(
        json_schema_extra={"example": {"parent_id": 1, "node_name": "Engineering"}},
    )


class NodeRename(CustomBase):
    """Payload for renaming a node."""

    new_name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)


class TreeNodeResponse(CustomBase):
    """Representation of a node returned from the API.

    ``children`` is null for a node fetched on its own and a list (empty
    for leaves) inside a nested tree.
    """

    id: int
    name: str
    tree_id: int
    parent_id: int | None
    path: str = Field(description="Materialized path, e.g. '1.3.7.'")
    level: int = Field(ge=0, description="Depth below the root (root is 0)")
    is_root: bool
    created_at: datetime
    children: list[TreeNodeResponse] | None = None


class TreeResponse(CustomBase):
    """A whole tree or a subtree, nested from its top node."""

    tree_id: int
    nodes: list[TreeNodeResponse]
    total_nodes: int
    created_at: datetime | None = None


class TreeSummaryResponse(CustomBase):
    """One entry of the tree listing."""

    tree_id: int
    root_name: str
    node_count: int
    max_depth: int
    created_at: datetime


__all__ = [
    "NAME_MAX_LENGTH",
    "NodeCreate",
    "NodeRename",
    "TreeCreate",
    "TreeNodeResponse",
    "TreeResponse",
    "TreeSummaryResponse",
]
