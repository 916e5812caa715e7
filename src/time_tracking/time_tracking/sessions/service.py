from __future__ import annotations

import logging
import math
from functools import partial
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional, Sequence, Union

from ..common.datetime_utils import now_local, to_local_naive
from ..common.validators import require_id, require_ordered_dates, require_positive_int
from ..core.constants import DEFAULT_PAGE_SIZE, DEFAULT_RECENT_ACTIVITY_LIMIT, MAX_PAGE_SIZE
from ..core.enums import EntryType, FailureKind, FailureReason, SessionStatus, UserStatus
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .aggregator import live_totals, minutes_to_hours
from .buttons import derive_button_states
from .model import ButtonStates, NewTimeEntry, NewWorkSession, SessionPage, TimeEntry, WorkSession
from .policy import TrackingPolicy
from .repository import TimeEntryRepository, TransactionManager, WorkSessionRepository
from .state_machine import SessionStateMachine

logger = logging.getLogger(__name__)

_SUCCESS_MESSAGES = {
    EntryType.CLOCK_IN: "clock-in recorded",
    EntryType.CLOCK_OUT: "clock-out recorded",
    EntryType.START_LUNCH: "lunch started",
    EntryType.RESUME_SHIFT: "shift resumed",
}

_USER_STATUS = {
    SessionStatus.ACTIVE: UserStatus.CLOCKED_IN,
    SessionStatus.ON_LUNCH: UserStatus.ON_LUNCH,
    SessionStatus.COMPLETED: UserStatus.CLOCKED_OUT,
}


@dataclass(frozen=True)
class ClockActionResult:
    session: WorkSession
    entry: TimeEntry
    button_states: ButtonStates
    message: str = ""
    success: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ClockActionFailure:
    kind: FailureKind
    reason: FailureReason
    message: str
    validation_errors: tuple[str, ...] = ()
    retryable: bool = False
    success: bool = field(default=False, init=False)

    @classmethod
    def from_error(cls, error: DomainError) -> "ClockActionFailure":
        errors = error.errors or ((error.message,) if error.kind == FailureKind.VALIDATION else ())
        return cls(
            kind=error.kind,
            reason=error.reason,
            message=error.message,
            validation_errors=tuple(errors),
            retryable=error.retryable,
        )


ClockActionOutcome = Union[ClockActionResult, ClockActionFailure]


@dataclass(frozen=True)
class CurrentStatus:
    status: UserStatus
    button_states: ButtonStates
    session: Optional[WorkSession] = None


@dataclass(frozen=True)
class TodaySession:
    session: Optional[WorkSession]
    status: UserStatus
    worked_hours: float
    lunch_minutes: int
    remaining_hours: float
    button_states: ButtonStates


class TimeTrackingService:
    """Entry point of the time tracking engine.

    Clock actions never raise for expected user-driven failures; they return
    a :class:`ClockActionFailure` instead. Unexpected exceptions propagate.
    """

    def __init__(
        self,
        sessions: WorkSessionRepository,
        entries: TimeEntryRepository,
        transactions: TransactionManager,
        users: UserRepository | None = None,
        *,
        policy: TrackingPolicy | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._sessions = sessions
        self._entries = entries
        self._transactions = transactions
        self._users = users
        self._policy = policy or TrackingPolicy()
        self._machine = SessionStateMachine(self._policy)
        self._clock = clock or partial(now_local, self._policy.timezone)

    # -- clock actions -------------------------------------------------

    def clock_in(self, user_id: int, timestamp: datetime | None = None) -> ClockActionOutcome:
        return self._perform(EntryType.CLOCK_IN, user_id, timestamp)

    def clock_out(self, user_id: int, timestamp: datetime | None = None) -> ClockActionOutcome:
        return self._perform(EntryType.CLOCK_OUT, user_id, timestamp)

    def start_lunch(self, user_id: int, timestamp: datetime | None = None) -> ClockActionOutcome:
        return self._perform(EntryType.START_LUNCH, user_id, timestamp)

    def resume_shift(self, user_id: int, timestamp: datetime | None = None) -> ClockActionOutcome:
        return self._perform(EntryType.RESUME_SHIFT, user_id, timestamp)

    def _perform(self, action: EntryType, user_id: int, timestamp: datetime | None) -> ClockActionOutcome:
        try:
            user_id = require_id(user_id, "user_id")
            ts = self._local(timestamp)
            self._ensure_user(user_id)

            with self._transactions.atomic():
                current = self._current_session(user_id, ts.date())

                rejection = self._machine.check(action, current, ts)
                if rejection is not None:
                    raise ValidationError(rejection.message, reason=rejection.reason, errors=[rejection.message])

                step = self._machine.plan(action, current, ts)
                if current is None:
                    session = self._sessions.create_session(
                        NewWorkSession(
                            user_id=user_id,
                            work_date=ts.date(),
                            status=step.new_status,
                            clock_in_time=ts,
                        )
                    )
                else:
                    session = self._sessions.update_session(
                        current.session_id,
                        step.patch,
                        expected_version=current.version,
                    )

                entry = self._entries.create_entry(
                    NewTimeEntry(
                        user_id=user_id,
                        entry_type=action,
                        timestamp=ts,
                        work_date=session.work_date,
                        timezone=self._policy.timezone,
                        is_valid=step.entry_valid,
                        validation_notes=step.entry_notes,
                    )
                )
        except DomainError as e:
            self._log_failure(action, user_id, e)
            return ClockActionFailure.from_error(e)

        logger.info("%s accepted for user %s at %s (session %s)", action.value, user_id, ts.isoformat(), session.session_id)
        return ClockActionResult(
            session=session,
            entry=entry,
            button_states=self._buttons(session),
            message=_SUCCESS_MESSAGES[action],
        )

    @staticmethod
    def _log_failure(action: EntryType, user_id, error: DomainError) -> None:
        if error.kind == FailureKind.STORAGE:
            logger.error("%s failed for user %s: %s", action.value, user_id, error.message)
        else:
            logger.warning("%s rejected for user %s: %s (%s)", action.value, user_id, error.reason.value, error.message)

    # -- queries -------------------------------------------------------

    def get_current_status(self, user_id: int, *, now: datetime | None = None) -> CurrentStatus:
        user_id = require_id(user_id, "user_id")
        now = self._local(now)
        session = self._current_session(user_id, now.date())
        if session is None:
            return CurrentStatus(status=UserStatus.CLOCKED_OUT, button_states=self._buttons(None))
        return CurrentStatus(
            status=_USER_STATUS[session.status],
            session=session,
            button_states=self._buttons(session),
        )

    def get_today_session(self, user_id: int, *, now: datetime | None = None) -> TodaySession:
        user_id = require_id(user_id, "user_id")
        now = self._local(now)
        standard = self._policy.standard_day_minutes
        session = self._current_session(user_id, now.date())

        if session is None:
            return TodaySession(
                session=None,
                status=UserStatus.CLOCKED_OUT,
                worked_hours=0.0,
                lunch_minutes=0,
                remaining_hours=minutes_to_hours(standard),
                button_states=self._buttons(None),
            )

        totals = live_totals(session, now, standard_day_minutes=standard)
        return TodaySession(
            session=session,
            status=_USER_STATUS[session.status],
            worked_hours=minutes_to_hours(totals.total_work_minutes),
            lunch_minutes=totals.total_lunch_minutes,
            remaining_hours=minutes_to_hours(max(0, standard - totals.total_work_minutes)),
            button_states=self._buttons(session),
        )

    def get_recent_activities(self, user_id: int, limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT) -> Sequence[TimeEntry]:
        user_id = require_id(user_id, "user_id")
        limit = require_positive_int(limit, "limit", maximum=MAX_PAGE_SIZE)
        return list(self._entries.list_recent_entries(user_id, limit))

    def get_user_sessions(
        self,
        user_id: int,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> SessionPage:
        user_id = require_id(user_id, "user_id")
        page = require_positive_int(page, "page")
        limit = require_positive_int(limit, "limit", maximum=MAX_PAGE_SIZE)
        start_date, end_date = require_ordered_dates(start_date, end_date)

        items, total = self._sessions.list_sessions_for_user(
            user_id,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=(page - 1) * limit,
        )
        total_pages = math.ceil(total / limit) if total else 0
        return SessionPage(
            sessions=list(items),
            total=int(total),
            total_pages=total_pages,
            current_page=page,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    def get_button_states(self, user_id: int, *, now: datetime | None = None) -> ButtonStates:
        return self.get_current_status(user_id, now=now).button_states

    # -- helpers -------------------------------------------------------

    def _local(self, value: datetime | None) -> datetime:
        """Naive wall-clock time in the policy timezone; ``None`` means now."""
        return to_local_naive(value or self._clock(), self._policy.timezone)

    def _current_session(self, user_id: int, work_date: date) -> Optional[WorkSession]:
        active = self._sessions.find_active_session_for_user(user_id)
        if active is not None:
            return active
        return self._sessions.find_session_by_user_and_date(user_id, work_date)

    def _ensure_user(self, user_id: int) -> None:
        if self._users is None:
            return
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise NotFoundError("user not found", reason=FailureReason.USER_NOT_FOUND)

    def _buttons(self, session: Optional[WorkSession]) -> ButtonStates:
        return derive_button_states(session, allow_multiple_lunches=self._policy.allow_multiple_lunches)
