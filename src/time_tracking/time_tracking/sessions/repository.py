from __future__ import annotations

from datetime import date
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.constants import STANDARD_DAY_MINUTES
from .model import NewTimeEntry, NewWorkSession, SessionCounts, SessionPatch, TimeEntry, WorkSession


class WorkSessionRepository(Protocol):
    """Storage contract for work sessions.

    Services depend on this interface, never on a concrete database.
    Implementations raise ``ConflictError`` for a duplicate (user_id, work_date)
    or a stale ``expected_version`` and ``StorageError`` for backend failures.
    """

    def find_session_by_id(self, session_id: int) -> Optional[WorkSession]:
        raise NotImplementedError

    def find_session_by_user_and_date(self, user_id: int, work_date: date) -> Optional[WorkSession]:
        raise NotImplementedError

    def find_active_session_for_user(self, user_id: int) -> Optional[WorkSession]:
        """Latest session of the user whose status is active or on_lunch."""

        raise NotImplementedError

    def create_session(self, data: NewWorkSession) -> WorkSession:
        raise NotImplementedError

    def update_session(
        self,
        session_id: int,
        patch: SessionPatch,
        *,
        expected_version: Optional[int] = None,
    ) -> WorkSession:
        raise NotImplementedError

    def list_completed_sessions(self, user_id: int, *, start_date: date, end_date: date) -> Sequence[WorkSession]:
        raise NotImplementedError

    def list_sessions_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int,
        offset: int = 0,
    ) -> tuple[Sequence[WorkSession], int]:
        """Sessions newest first plus the total count matching the filter."""

        raise NotImplementedError

    def list_session_ids(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[int]:
        """Ids of every session matching the optional filters, oldest first."""

        raise NotImplementedError

    def summarize_sessions(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        standard_day_minutes: int = STANDARD_DAY_MINUTES,
    ) -> SessionCounts:
        raise NotImplementedError


class TimeEntryRepository(Protocol):
    """Append-only storage contract for time entries."""

    def create_entry(self, data: NewTimeEntry) -> TimeEntry:
        raise NotImplementedError

    def list_entries(self, user_id: int, *, start_date: date, end_date: date) -> Sequence[TimeEntry]:
        """Entries of the range (inclusive) ordered by timestamp."""

        raise NotImplementedError

    def list_recent_entries(self, user_id: int, limit: int) -> Sequence[TimeEntry]:
        raise NotImplementedError


class TransactionManager(Protocol):
    def atomic(self) -> ContextManager[None]:
        """All repository writes inside the block commit together or not at all."""

        raise NotImplementedError
