"""API router for the exception journal.

Endpoints:
    GET /exception-journal             - Recent entries, optionally filtered by type
    GET /exception-journal/{entry_id}  - A single entry (the event_id of an error response)
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tree_service.core.dependencies.database import get_db_session
from tree_service.features.journal.schemas import (
    ExceptionJournalListResponse,
    ExceptionJournalResponse,
)
from tree_service.features.journal.service import ExceptionJournalService

router = APIRouter(prefix="/exception-journal", tags=["exception-journal"])


@router.get(
    "",
    response_model=ExceptionJournalListResponse,
    summary="List journal entries",
    description="Return the most recent journal entries, newest first.",
)
async def list_entries(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    count: Annotated[int, Query(ge=1, le=1000)] = 100,
    exception_type: Annotated[
        str | None,
        Query(min_length=1, max_length=500, description="Substring of the exception type"),
    ] = None,
) -> ExceptionJournalListResponse:
    service = ExceptionJournalService(session)
    if exception_type:
        entries = await service.by_type(exception_type, count)
    else:
        entries = await service.recent(count)

    items = [ExceptionJournalResponse.model_validate(entry) for entry in entries]
    return ExceptionJournalListResponse(items=items, total=len(items))


@router.get(
    "/{entry_id}",
    response_model=ExceptionJournalResponse,
    summary="Get a journal entry",
    responses={404: {"description": "Entry not found"}},
)
async def get_entry(
    entry_id: Annotated[int, Path(gt=0)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ExceptionJournalResponse:
    service = ExceptionJournalService(session)
    entry = await service.get_entry(entry_id)
    return ExceptionJournalResponse.model_validate(entry)
