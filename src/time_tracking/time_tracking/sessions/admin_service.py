from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_id, require_ordered_dates
from ..core.constants import STANDARD_DAY_MINUTES
from ..core.enums import EntryType, FailureReason
from ..core.exceptions import DomainError, NotFoundError
from .aggregator import format_work_hours, lunch_minutes_from_entries, minutes_between, minutes_to_hours, work_minutes
from .model import IntegrityReport, TimeEntry, WorkSession
from .repository import TimeEntryRepository, TransactionManager, WorkSessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevalidationResult:
    session: WorkSession
    is_valid: bool
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class BulkRevalidationResult:
    processed: int = 0
    valid: int = 0
    invalid: int = 0
    failed: tuple[int, ...] = ()


@dataclass(frozen=True)
class SessionStatistics:
    total_sessions: int
    active_sessions: int
    completed_sessions: int
    invalid_sessions: int
    average_work_hours: float
    total_overtime_hours: float


def check_session_integrity(session: WorkSession, entries: Sequence[TimeEntry]) -> IntegrityReport:
    """Audit a session against its recorded entries (ordered by timestamp)."""

    errors: list[str] = []
    if not entries:
        errors.append("no time entries recorded")

    seen: set[EntryType] = set()
    previous = None
    for entry in entries:
        if previous is not None and entry.timestamp < previous:
            errors.append(f"entry {entry.entry_id} is out of timestamp order")
        previous = entry.timestamp

        if entry.entry_type == EntryType.CLOCK_OUT and EntryType.CLOCK_IN not in seen:
            errors.append("clock_out without a previous clock_in")
        if entry.entry_type == EntryType.RESUME_SHIFT and EntryType.START_LUNCH not in seen:
            errors.append("resume_shift without a previous start_lunch")
        if not entry.is_valid and entry.validation_notes:
            errors.append(entry.validation_notes)
        seen.add(entry.entry_type)

    if entries and EntryType.CLOCK_IN not in seen:
        errors.append("missing clock_in entry")

    ordered = [
        ("clock_in_time", session.clock_in_time),
        ("lunch_start_time", session.lunch_start_time),
        ("lunch_end_time", session.lunch_end_time),
        ("clock_out_time", session.clock_out_time),
    ]
    present = [(name, value) for name, value in ordered if value is not None]
    for (a_name, a), (b_name, b) in zip(present, present[1:]):
        if a > b:
            errors.append(f"{a_name} is after {b_name}")

    return IntegrityReport(is_valid=not errors, errors=errors)


class SessionAdminService:
    """Revalidation path: recompute and re-audit a stored session.

    This is the only place a completed session is rewritten.
    """

    def __init__(
        self,
        sessions: WorkSessionRepository,
        entries: TimeEntryRepository,
        transactions: TransactionManager,
        *,
        standard_day_minutes: int = STANDARD_DAY_MINUTES,
    ):
        self._sessions = sessions
        self._entries = entries
        self._transactions = transactions
        self._standard_day_minutes = int(standard_day_minutes)

    def get_session(self, session_id: int) -> WorkSession:
        session_id = require_id(session_id, "session_id")
        session = self._sessions.find_session_by_id(session_id)
        if session is None:
            raise NotFoundError(f"work session {session_id} not found", reason=FailureReason.SESSION_NOT_FOUND)
        return session

    def revalidate_session(self, session_id: int) -> RevalidationResult:
        with self._transactions.atomic():
            session = self.get_session(session_id)
            entries = list(
                self._entries.list_entries(session.user_id, start_date=session.work_date, end_date=session.work_date)
            )
            report = check_session_integrity(session, entries)

            patch: dict[str, object] = {
                "is_valid_session": report.is_valid,
                "validation_errors": tuple(report.errors),
            }
            lunch = lunch_minutes_from_entries(entries)
            if not lunch and session.lunch_start_time and session.lunch_end_time:
                lunch = minutes_between(session.lunch_start_time, session.lunch_end_time)
            patch["total_lunch_minutes"] = lunch
            if session.clock_in_time and session.clock_out_time:
                minutes = work_minutes(session.clock_in_time, session.clock_out_time, lunch)
                patch["total_work_minutes"] = minutes
                patch["total_work_hours"] = format_work_hours(minutes)

            updated = self._sessions.update_session(session.session_id, patch, expected_version=session.version)

        if report.is_valid:
            logger.info("Session %s revalidated: valid", updated.session_id)
        else:
            logger.warning("Session %s revalidated: %d problem(s)", updated.session_id, len(report.errors))
        return RevalidationResult(session=updated, is_valid=report.is_valid, errors=tuple(report.errors))

    def revalidate_sessions(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> BulkRevalidationResult:
        """Revalidate every matching session, one transaction per session.

        A session that fails to revalidate is reported in ``failed`` and the
        run continues with the next one.
        """
        if user_id is not None:
            user_id = require_id(user_id, "user_id")
        start_date, end_date = require_ordered_dates(start_date, end_date)

        ids = list(self._sessions.list_session_ids(user_id=user_id, start_date=start_date, end_date=end_date))
        valid = invalid = 0
        failed: list[int] = []
        for session_id in ids:
            try:
                result = self.revalidate_session(session_id)
            except DomainError as e:
                logger.error("Revalidation of session %s failed: %s", session_id, e.message)
                failed.append(session_id)
                continue
            if result.is_valid:
                valid += 1
            else:
                invalid += 1

        logger.info("Bulk revalidation: %d session(s), %d invalid, %d failed", len(ids), invalid, len(failed))
        return BulkRevalidationResult(processed=len(ids), valid=valid, invalid=invalid, failed=tuple(failed))

    def get_session_statistics(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> SessionStatistics:
        if user_id is not None:
            user_id = require_id(user_id, "user_id")
        start_date, end_date = require_ordered_dates(start_date, end_date)

        counts = self._sessions.summarize_sessions(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            standard_day_minutes=self._standard_day_minutes,
        )
        average = (
            round(counts.total_work_minutes / 60 / counts.total_sessions, 2) if counts.total_sessions else 0.0
        )
        return SessionStatistics(
            total_sessions=counts.total_sessions,
            active_sessions=counts.active_sessions,
            completed_sessions=counts.completed_sessions,
            invalid_sessions=counts.invalid_sessions,
            average_work_hours=average,
            total_overtime_hours=minutes_to_hours(counts.total_overtime_minutes),
        )
