"""FastAPI dependencies for route handlers.

Usage:
    from tree_service.core.dependencies import get_db_session

    @router.get("/tree")
    async def list_trees(session: Annotated[AsyncSession, Depends(get_db_session)]):
        ...
"""

from tree_service.core.dependencies.database import get_db_session

__all__ = ["get_db_session"]
