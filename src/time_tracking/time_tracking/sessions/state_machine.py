"""Per user/day session state machine.

Each clock action is a transition strategy that first checks its
precondition against the current session and, when accepted, describes the
session change and the audit entry to persist. Nothing here touches storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import EntryType, FailureReason, SessionStatus
from .aggregator import format_work_hours, last_event_at, minutes_between, work_minutes
from .model import WorkSession
from .policy import TrackingPolicy


@dataclass(frozen=True)
class Rejection:
    reason: FailureReason
    message: str


@dataclass(frozen=True)
class TransitionStep:
    """Accepted transition: the session patch plus how to record the entry."""

    action: EntryType
    new_status: SessionStatus
    patch: dict[str, Any]
    entry_valid: bool = True
    entry_notes: Optional[str] = None
    flags: tuple[str, ...] = field(default_factory=tuple)


class SessionTransition(ABC):
    """Strategy Pattern: one clock action's precondition and effect."""

    action: EntryType

    @abstractmethod
    def check(self, current: Optional[WorkSession], timestamp: datetime, policy: TrackingPolicy) -> Optional[Rejection]:
        raise NotImplementedError

    @abstractmethod
    def apply(self, current: Optional[WorkSession], timestamp: datetime, policy: TrackingPolicy) -> TransitionStep:
        raise NotImplementedError


def _no_active_session() -> Rejection:
    return Rejection(FailureReason.NO_ACTIVE_SESSION, "no active session")


def _flagged(current: WorkSession, step: TransitionStep) -> TransitionStep:
    """Mark the session invalid when the step carries policy flags."""
    if not step.flags:
        return step
    patch = dict(step.patch)
    patch["is_valid_session"] = False
    patch["validation_errors"] = tuple(current.validation_errors) + step.flags
    return TransitionStep(
        action=step.action,
        new_status=step.new_status,
        patch=patch,
        entry_valid=False,
        entry_notes="; ".join(step.flags),
        flags=step.flags,
    )


class ClockInTransition(SessionTransition):
    action = EntryType.CLOCK_IN

    def check(self, current, timestamp, policy):
        if current is None:
            return None
        if current.status == SessionStatus.ACTIVE:
            return Rejection(FailureReason.ALREADY_CLOCKED_IN, "already clocked in")
        if current.status == SessionStatus.ON_LUNCH:
            return Rejection(FailureReason.CURRENTLY_ON_LUNCH, "currently on lunch")
        if current.work_date == timestamp.date():
            return Rejection(FailureReason.SESSION_COMPLETED, "work session for this date is already completed")
        return None

    def apply(self, current, timestamp, policy):
        return TransitionStep(
            action=self.action,
            new_status=SessionStatus.ACTIVE,
            patch={
                "status": SessionStatus.ACTIVE,
                "clock_in_time": timestamp,
                "total_work_minutes": 0,
                "total_lunch_minutes": 0,
                "total_work_hours": format_work_hours(0),
            },
        )


class StartLunchTransition(SessionTransition):
    action = EntryType.START_LUNCH

    def check(self, current, timestamp, policy):
        if current is None or current.status == SessionStatus.COMPLETED:
            return _no_active_session()
        if current.status == SessionStatus.ON_LUNCH:
            return Rejection(FailureReason.CURRENTLY_ON_LUNCH, "currently on lunch")
        if current.took_lunch and not policy.allow_multiple_lunches:
            return Rejection(FailureReason.LUNCH_ALREADY_TAKEN, "lunch already taken today")
        return None

    def apply(self, current, timestamp, policy):
        return TransitionStep(
            action=self.action,
            new_status=SessionStatus.ON_LUNCH,
            patch={
                "status": SessionStatus.ON_LUNCH,
                "lunch_start_time": timestamp,
                "lunch_end_time": None,
            },
        )


class ResumeShiftTransition(SessionTransition):
    action = EntryType.RESUME_SHIFT

    def check(self, current, timestamp, policy):
        if current is None or current.status == SessionStatus.COMPLETED:
            return _no_active_session()
        if current.status != SessionStatus.ON_LUNCH or current.lunch_start_time is None:
            return Rejection(FailureReason.NOT_ON_LUNCH, "not on lunch")
        return None

    def apply(self, current, timestamp, policy):
        lunch = minutes_between(current.lunch_start_time, timestamp)
        flags: tuple[str, ...] = ()
        if policy.max_lunch_minutes is not None and lunch > policy.max_lunch_minutes:
            flags = (f"lunch lasted {lunch} minutes (limit {policy.max_lunch_minutes})",)
        step = TransitionStep(
            action=self.action,
            new_status=SessionStatus.ACTIVE,
            patch={
                "status": SessionStatus.ACTIVE,
                "lunch_end_time": timestamp,
                "total_lunch_minutes": current.total_lunch_minutes + lunch,
            },
            flags=flags,
        )
        return _flagged(current, step)


class ClockOutTransition(SessionTransition):
    action = EntryType.CLOCK_OUT

    def check(self, current, timestamp, policy):
        if current is None or current.status == SessionStatus.COMPLETED:
            return _no_active_session()
        if current.status == SessionStatus.ON_LUNCH:
            return Rejection(
                FailureReason.MUST_RESUME_BEFORE_CLOCK_OUT,
                "must resume from lunch before clocking out",
            )
        return None

    def apply(self, current, timestamp, policy):
        minutes = work_minutes(current.clock_in_time, timestamp, current.total_lunch_minutes)
        flags: tuple[str, ...] = ()
        if policy.max_daily_work_minutes is not None and minutes > policy.max_daily_work_minutes:
            flags = (f"worked {format_work_hours(minutes)} hours (limit {format_work_hours(policy.max_daily_work_minutes)})",)
        step = TransitionStep(
            action=self.action,
            new_status=SessionStatus.COMPLETED,
            patch={
                "status": SessionStatus.COMPLETED,
                "clock_out_time": timestamp,
                "total_work_minutes": minutes,
                "total_work_hours": format_work_hours(minutes),
            },
            flags=flags,
        )
        return _flagged(current, step)


class SessionStateMachine:
    """Validates and plans transitions for one user's session.

    ``current`` is the user's open session if any, otherwise the session of
    the timestamp's date (possibly completed), otherwise ``None``.
    """

    def __init__(self, policy: Optional[TrackingPolicy] = None):
        self.policy = policy or TrackingPolicy()
        self._transitions: dict[EntryType, SessionTransition] = {
            t.action: t
            for t in (ClockInTransition(), StartLunchTransition(), ResumeShiftTransition(), ClockOutTransition())
        }

    def transition_for(self, action: EntryType) -> SessionTransition:
        return self._transitions[EntryType(action)]

    def check(self, action: EntryType, current: Optional[WorkSession], timestamp: datetime) -> Optional[Rejection]:
        rejection = self.transition_for(action).check(current, timestamp, self.policy)
        if rejection is not None:
            return rejection

        # Only an open session orders the next event; a new day starts fresh.
        if current is not None and current.is_open:
            previous = last_event_at(current)
            if previous is not None and timestamp < previous:
                return Rejection(
                    FailureReason.TIMESTAMP_OUT_OF_ORDER,
                    f"timestamp {timestamp.isoformat()} is earlier than the previous entry at {previous.isoformat()}",
                )
        return None

    def plan(self, action: EntryType, current: Optional[WorkSession], timestamp: datetime) -> TransitionStep:
        """Effect of an action already accepted by :meth:`check`."""
        return self.transition_for(action).apply(current, timestamp, self.policy)
