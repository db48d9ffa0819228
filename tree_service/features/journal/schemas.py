"""Pydantic schemas for the exception journal."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from tree_service.core.schemas.base import CustomBase


class ExceptionJournalResponse(CustomBase):
    """A journal entry as returned from the API."""

    id: int = Field(description="Entry id, returned to clients as event_id")
    timestamp: datetime
    exception_type: str
    exception_message: str
    stack_trace: str
    query_parameters: str | None = None
    body_parameters: str | None = None
    http_method: str | None = None
    request_path: str | None = None
    user_agent: str | None = None
    client_ip_address: str | None = None


class ExceptionJournalListResponse(CustomBase):
    """A page of journal entries, newest first."""

    items: list[ExceptionJournalResponse]
    total: int


__all__ = ["ExceptionJournalListResponse", "ExceptionJournalResponse"]
