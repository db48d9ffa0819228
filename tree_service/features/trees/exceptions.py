"""Domain errors raised by the trees feature.

Every error is a client-correctable precondition failure and renders as an
RFC 7807 problem with the status and type slug set here.
"""

from __future__ import annotations

from tree_service.core.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)


class TreeNotFoundError(NotFoundException):
    """No node carries the requested tree id."""

    def __init__(self, tree_id: int) -> None:
        self.tree_id = tree_id
        super().__init__(
            detail=f"Tree with ID {tree_id} was not found.",
            type="tree-not-found",
            extra={"tree_id": tree_id},
        )


class NodeNotFoundError(NotFoundException):
    """The node does not exist, or exists in a different tree."""

    def __init__(
        self,
        node_id: int,
        tree_id: int,
        *,
        detail: str | None = None,
        type: str = "node-not-found",
    ) -> None:
        self.node_id = node_id
        self.tree_id = tree_id
        super().__init__(
            detail=detail or f"Node with ID {node_id} was not found in tree {tree_id}.",
            type=type,
            extra={"tree_id": tree_id, "node_id": node_id},
        )


class ParentNotFoundError(NodeNotFoundError):
    """The requested parent does not exist at all."""

    def __init__(self, parent_id: int, tree_id: int) -> None:
        super().__init__(
            parent_id,
            tree_id,
            detail=f"Parent node with ID {parent_id} was not found in tree {tree_id}.",
            type="parent-not-found",
        )
        self.parent_id = parent_id


class NodeHasChildrenError(ConflictException):
    """Deletion was attempted on a node that still has children."""

    def __init__(self, node_id: int, tree_id: int | None = None) -> None:
        self.node_id = node_id
        self.tree_id = tree_id
        extra: dict[str, int] = {"node_id": node_id}
        if tree_id is not None:
            extra["tree_id"] = tree_id
        super().__init__(
            detail=(
                f"Cannot delete node {node_id} because it has children. "
                "You have to delete all children nodes first"
            ),
            type="node-has-children",
            extra=extra,
        )


class InvalidParentTreeError(BadRequestException):
    """The parent exists but belongs to another tree."""

    def __init__(self, tree_id: int, parent_tree_id: int, parent_id: int | None = None) -> None:
        self.tree_id = tree_id
        self.parent_tree_id = parent_tree_id
        self.parent_id = parent_id
        extra: dict[str, int] = {"tree_id": tree_id, "parent_tree_id": parent_tree_id}
        if parent_id is not None:
            extra["parent_id"] = parent_id
        super().__init__(
            detail=(
                f"Cannot create node in tree {tree_id} with parent from tree {parent_tree_id}. "
                "Parent node must belong to the same tree."
            ),
            type="invalid-parent-tree",
            extra=extra,
        )


class CircularReferenceError(ConflictException):
    """Attaching the node under the candidate parent would make it its own ancestor."""

    def __init__(self, node_id: int, parent_id: int) -> None:
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(
            detail=(
                f"Cannot set node {parent_id} as parent of node {node_id} "
                "- this would create a circular reference."
            ),
            type="circular-reference",
            extra={"node_id": node_id, "parent_id": parent_id},
        )


__all__ = [
    "CircularReferenceError",
    "InvalidParentTreeError",
    "NodeHasChildrenError",
    "NodeNotFoundError",
    "ParentNotFoundError",
    "TreeNotFoundError",
]
