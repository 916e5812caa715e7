from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..core.enums import EntryType, SessionStatus


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: immutable audit record of one clock action."""

    entry_id: int
    user_id: int
    entry_type: EntryType
    timestamp: datetime
    work_date: date
    timezone: str
    is_valid: bool = True
    validation_notes: Optional[str] = None


@dataclass(frozen=True)
class WorkSession:
    """Domain entity: daily aggregate of one user's clock actions.

    Instances are snapshots of the stored row; repositories return a new
    snapshot after every write.
    """

    session_id: int
    user_id: int
    work_date: date
    status: SessionStatus
    clock_in_time: Optional[datetime] = None
    clock_out_time: Optional[datetime] = None
    lunch_start_time: Optional[datetime] = None
    lunch_end_time: Optional[datetime] = None
    total_work_minutes: int = 0
    total_lunch_minutes: int = 0
    total_work_hours: str = "0.00"
    is_valid_session: bool = True
    validation_errors: tuple[str, ...] = ()
    version: int = 1

    @property
    def is_open(self) -> bool:
        return self.status in (SessionStatus.ACTIVE, SessionStatus.ON_LUNCH)

    @property
    def took_lunch(self) -> bool:
        return self.lunch_start_time is not None


@dataclass(frozen=True)
class NewTimeEntry:
    user_id: int
    entry_type: EntryType
    timestamp: datetime
    work_date: date
    timezone: str
    is_valid: bool = True
    validation_notes: Optional[str] = None


@dataclass(frozen=True)
class NewWorkSession:
    user_id: int
    work_date: date
    status: SessionStatus
    clock_in_time: Optional[datetime] = None
    total_work_minutes: int = 0
    total_lunch_minutes: int = 0
    total_work_hours: str = "0.00"
    is_valid_session: bool = True
    validation_errors: tuple[str, ...] = ()


# Fields a SessionPatch may carry.
SESSION_PATCH_FIELDS = frozenset(
    {
        "status",
        "clock_in_time",
        "clock_out_time",
        "lunch_start_time",
        "lunch_end_time",
        "total_work_minutes",
        "total_lunch_minutes",
        "total_work_hours",
        "is_valid_session",
        "validation_errors",
    }
)

SessionPatch = Mapping[str, Any]


@dataclass(frozen=True)
class ButtonState:
    enabled: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class ButtonStates:
    """Derived view: which clock actions the UI should offer right now."""

    clock_in: ButtonState
    clock_out: ButtonState
    start_lunch: ButtonState
    resume_shift: ButtonState

    def for_action(self, action: EntryType) -> ButtonState:
        return {
            EntryType.CLOCK_IN: self.clock_in,
            EntryType.CLOCK_OUT: self.clock_out,
            EntryType.START_LUNCH: self.start_lunch,
            EntryType.RESUME_SHIFT: self.resume_shift,
        }[action]


@dataclass(frozen=True)
class SessionTotals:
    total_work_minutes: int
    total_lunch_minutes: int
    total_work_hours: str
    overtime_minutes: int = 0


@dataclass(frozen=True)
class SessionPage:
    sessions: list[WorkSession]
    total: int
    total_pages: int
    current_page: int
    has_next: bool
    has_prev: bool


@dataclass(frozen=True)
class IntegrityReport:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SessionCounts:
    """Aggregate counters over a filtered set of sessions."""

    total_sessions: int = 0
    active_sessions: int = 0
    completed_sessions: int = 0
    invalid_sessions: int = 0
    total_work_minutes: int = 0
    total_overtime_minutes: int = 0
