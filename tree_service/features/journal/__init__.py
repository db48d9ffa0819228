"""Exception journal: one database row per failed request."""

from __future__ import annotations

from .models import ExceptionJournal
from .repository import ExceptionJournalRepository, get_exception_journal_repository
from .service import ExceptionJournalService, journal_exception

__all__ = [
    "ExceptionJournal",
    "ExceptionJournalRepository",
    "ExceptionJournalService",
    "get_exception_journal_repository",
    "journal_exception",
]
