"""API router for the trees feature.

Endpoints:
    Trees:
        GET    /tree                                    - List tree summaries
        GET    /tree/{tree_id}                          - Get a whole tree, nested
        POST   /tree                                    - Create a tree with its root

    Nodes:
        POST   /tree/{tree_id}/node                     - Add a node under a parent
        PUT    /tree/{tree_id}/node/{node_id}/rename    - Rename a node
        DELETE /tree/{tree_id}/node/{node_id}           - Delete a childless node
        GET    /tree/{tree_id}/node/{node_id}           - Get a single node
        GET    /tree/{tree_id}/node/{node_id}/children  - Direct children
        GET    /tree/{tree_id}/node/{node_id}/subtree   - Subtree rooted at the node

Example Usage:
    # Create a tree
    POST /tree
    {"tree_name": "Company"}

    # Add a department under the root
    POST /tree/1/node
    {"parent_id": 1, "node_name": "Engineering"}
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from tree_service.core.dependencies.database import get_db_session
from tree_service.core.schemas.common import MessageResponse
from tree_service.features.trees.schemas import (
    NodeCreate,
    NodeRename,
    TreeCreate,
    TreeNodeResponse,
    TreeResponse,
    TreeSummaryResponse,
)
from tree_service.features.trees.service import TreeService

router = APIRouter(prefix="/tree", tags=["trees"])

TreeId = Annotated[int, Path(gt=0, description="Tree identifier")]
NodeId = Annotated[int, Path(gt=0, description="Node identifier")]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


# ──────────────────────────────────────────────────────────────
# Tree Endpoints
# ──────────────────────────────────────────────────────────────


@router.get(
    "",
    response_model=list[TreeSummaryResponse],
    summary="List trees",
    description="Return one summary per tree, ordered by tree id.",
)
async def list_trees(session: DbSession) -> list[TreeSummaryResponse]:
    service = TreeService(session)
    summaries = await service.list_trees()
    return [TreeSummaryResponse.model_validate(summary) for summary in summaries]


@router.get(
    "/{tree_id}",
    response_model=TreeResponse,
    summary="Get a tree",
    description="Return every node of the tree nested under its root.",
    responses={404: {"description": "Tree not found"}},
)
async def get_tree(tree_id: TreeId, session: DbSession) -> TreeResponse:
    service = TreeService(session)
    tree = await service.get_tree(tree_id)
    return TreeResponse.model_validate(tree)


@router.post(
    "",
    response_model=TreeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tree",
    description="Create a new tree consisting of a single root node.",
)
async def create_tree(payload: TreeCreate, session: DbSession) -> TreeResponse:
    """Create a new tree."""
    service = TreeService(session)
    tree = await service.create_tree(payload.tree_name)
    await session.commit()

    return TreeResponse.model_validate(tree)


# ──────────────────────────────────────────────────────────────
# Node Endpoints
# ──────────────────────────────────────────────────────────────


@router.post(
    "/{tree_id}/node",
    response_model=TreeNodeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a node",
    description="Add a node under an existing parent of the same tree.",
    responses={
        400: {"description": "Parent belongs to another tree"},
        404: {"description": "Tree or parent not found"},
    },
)
async def create_node(tree_id: TreeId, payload: NodeCreate, session: DbSession) -> TreeNodeResponse:
    """Add a node to a tree."""
    service = TreeService(session)
    node = await service.create_node(tree_id, payload.parent_id, payload.node_name)
    await session.commit()

    return TreeNodeResponse.model_validate(node)


@router.put(
    "/{tree_id}/node/{node_id}/rename",
    response_model=TreeNodeResponse,
    summary="Rename a node",
    responses={404: {"description": "Node not found"}},
)
async def rename_node(
    tree_id: TreeId,
    node_id: NodeId,
    payload: NodeRename,
    session: DbSession,
) -> TreeNodeResponse:
    """Rename a node. Its position in the tree is unchanged."""
    service = TreeService(session)
    node = await service.rename_node(tree_id, node_id, payload.new_name)
    await session.commit()

    return TreeNodeResponse.model_validate(node)


@router.delete(
    "/{tree_id}/node/{node_id}",
    response_model=MessageResponse,
    summary="Delete a node",
    description="Delete a node. Nodes with children cannot be deleted.",
    responses={
        404: {"description": "Node not found"},
        409: {"description": "Node has children"},
    },
)
async def delete_node(tree_id: TreeId, node_id: NodeId, session: DbSession) -> MessageResponse:
    """Delete a childless node."""
    service = TreeService(session)
    await service.delete_node(tree_id, node_id)
    await session.commit()

    return MessageResponse(message="Node deleted successfully")


@router.get(
    "/{tree_id}/node/{node_id}",
    response_model=TreeNodeResponse,
    summary="Get a node",
    responses={404: {"description": "Node not found"}},
)
async def get_node(tree_id: TreeId, node_id: NodeId, session: DbSession) -> TreeNodeResponse:
    service = TreeService(session)
    node = await service.get_node(tree_id, node_id)
    return TreeNodeResponse.model_validate(node)


@router.get(
    "/{tree_id}/node/{node_id}/children",
    response_model=list[TreeNodeResponse],
    summary="Get node children",
    description="Return the direct children of a node, ordered by id.",
    responses={404: {"description": "Node not found"}},
)
async def get_children(
    tree_id: TreeId, node_id: NodeId, session: DbSession
) -> list[TreeNodeResponse]:
    service = TreeService(session)
    children = await service.get_children(tree_id, node_id)
    return [TreeNodeResponse.model_validate(child) for child in children]


@router.get(
    "/{tree_id}/node/{node_id}/subtree",
    response_model=TreeResponse,
    summary="Get a subtree",
    description="Return the node and all of its descendants, nested.",
    responses={404: {"description": "Node not found"}},
)
async def get_subtree(tree_id: TreeId, node_id: NodeId, session: DbSession) -> TreeResponse:
    service = TreeService(session)
    subtree = await service.get_subtree(tree_id, node_id)
    return TreeResponse.model_validate(subtree)
