from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import SessionStatus


@dataclass(frozen=True)
class PeriodTotals:
    total_hours: float = 0.0
    total_days: int = 0
    overtime_hours: float = 0.0


@dataclass(frozen=True)
class SessionDetail:
    """Read-model row for one session inside a weekly report."""

    work_date: date
    total_work_hours: float
    total_lunch_minutes: int
    status: SessionStatus


@dataclass(frozen=True)
class WeeklyStats:
    week_start_date: date
    total_hours: float = 0.0
    total_days: int = 0
    overtime_hours: float = 0.0
    sessions: list[SessionDetail] = field(default_factory=list)


@dataclass(frozen=True)
class MonthlyStats:
    month_start_date: date
    total_hours: float = 0.0
    total_days: int = 0
    overtime_hours: float = 0.0
    average_hours_per_day: float = 0.0
    compliance_score: int = 0


@dataclass(frozen=True)
class PeriodStats:
    start_date: date
    end_date: date
    totals: PeriodTotals
    average_entry_time: Optional[str]
    average_exit_time: Optional[str]
    average_lunch_duration: int
    compliance_score: int


@dataclass(frozen=True)
class DashboardStats:
    week_stats: PeriodTotals
    month_stats: PeriodTotals
    average_entry_time: Optional[str]
    average_exit_time: Optional[str]
    average_lunch_duration: int
    compliance_score: int
