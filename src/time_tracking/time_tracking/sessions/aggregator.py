"""Session arithmetic: work and lunch minutes, hours strings and overtime.

Everything here is pure; callers pass the instants they want evaluated.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ..core.constants import STANDARD_DAY_MINUTES
from ..core.enums import EntryType, SessionStatus
from .model import SessionTotals, TimeEntry, WorkSession

_CENTS = Decimal("0.01")


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, 0 when end precedes start."""
    if end < start:
        return 0
    return int((end - start).total_seconds() // 60)


def format_work_hours(minutes: int) -> str:
    """Minutes as decimal hours with two places, e.g. 510 -> "8.50"."""
    hours = (Decimal(int(minutes)) / Decimal(60)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{hours:.2f}"


def minutes_to_hours(minutes: int) -> float:
    return round(int(minutes) / 60, 2)


def overtime_minutes(total_work_minutes: int, standard_day_minutes: int = STANDARD_DAY_MINUTES) -> int:
    return max(0, int(total_work_minutes) - int(standard_day_minutes))


def work_minutes(clock_in: datetime, clock_out: datetime, lunch_minutes: int) -> int:
    """(out - in) - lunch, not below 0."""
    return max(0, minutes_between(clock_in, clock_out) - int(lunch_minutes or 0))


def last_event_at(session: Optional[WorkSession]) -> Optional[datetime]:
    """Instant of the latest accepted clock action recorded on the session."""
    if session is None:
        return None
    instants = [
        t
        for t in (
            session.clock_in_time,
            session.lunch_start_time,
            session.lunch_end_time,
            session.clock_out_time,
        )
        if t is not None
    ]
    return max(instants) if instants else None


def totals_for(
    clock_in: datetime,
    clock_out: datetime,
    lunch_minutes: int,
    *,
    standard_day_minutes: int = STANDARD_DAY_MINUTES,
) -> SessionTotals:
    minutes = work_minutes(clock_in, clock_out, lunch_minutes)
    return SessionTotals(
        total_work_minutes=minutes,
        total_lunch_minutes=int(lunch_minutes),
        total_work_hours=format_work_hours(minutes),
        overtime_minutes=overtime_minutes(minutes, standard_day_minutes),
    )


def live_totals(
    session: WorkSession,
    now: datetime,
    *,
    standard_day_minutes: int = STANDARD_DAY_MINUTES,
) -> SessionTotals:
    """Totals of a session as of ``now``.

    Completed sessions return their stored totals. For an open session the
    work interval ends at ``now`` and an ongoing lunch counts up to ``now``.
    """
    if session.status == SessionStatus.COMPLETED or session.clock_in_time is None:
        return SessionTotals(
            total_work_minutes=session.total_work_minutes,
            total_lunch_minutes=session.total_lunch_minutes,
            total_work_hours=session.total_work_hours,
            overtime_minutes=overtime_minutes(session.total_work_minutes, standard_day_minutes),
        )

    lunch = session.total_lunch_minutes
    if session.status == SessionStatus.ON_LUNCH and session.lunch_start_time is not None:
        lunch += minutes_between(session.lunch_start_time, now)
    return totals_for(session.clock_in_time, now, lunch, standard_day_minutes=standard_day_minutes)


def lunch_minutes_from_entries(entries: Iterable[TimeEntry]) -> int:
    """Sum of start_lunch -> resume_shift pairs, entries in timestamp order."""
    total = 0
    started: Optional[datetime] = None
    for entry in entries:
        if entry.entry_type == EntryType.START_LUNCH:
            started = entry.timestamp
        elif entry.entry_type == EntryType.RESUME_SHIFT and started is not None:
            total += minutes_between(started, entry.timestamp)
            started = None
    return total
