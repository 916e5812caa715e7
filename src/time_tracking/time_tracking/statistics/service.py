from __future__ import annotations

import logging
from datetime import date, datetime
from functools import partial
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import (
    format_minutes_of_day,
    minutes_of_day,
    month_end,
    month_start,
    now_local,
    week_end,
    week_start,
)
from ..common.validators import require_date_range, require_id
from ..core.constants import DEFAULT_TIMEZONE, STANDARD_DAY_MINUTES
from ..sessions.aggregator import minutes_to_hours, overtime_minutes
from ..sessions.model import WorkSession
from ..sessions.repository import WorkSessionRepository
from .compliance import ComplianceCalculator, StandardComplianceCalculator
from .model import DashboardStats, MonthlyStats, PeriodStats, PeriodTotals, SessionDetail, WeeklyStats

logger = logging.getLogger(__name__)


class StatisticsService:
    """Read-only roll-ups over completed work sessions."""

    def __init__(
        self,
        sessions: WorkSessionRepository,
        *,
        compliance: Optional[ComplianceCalculator] = None,
        standard_day_minutes: int = STANDARD_DAY_MINUTES,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] | None = None,
    ):
        self._sessions = sessions
        self._compliance = compliance or StandardComplianceCalculator()
        self._standard_day_minutes = int(standard_day_minutes)
        self._clock = clock or partial(now_local, timezone)

    def get_weekly_stats(self, user_id: int, week_of: date | None = None) -> WeeklyStats:
        user_id = require_id(user_id, "user_id")
        day = week_of or self._today()
        start, end = week_start(day), week_end(day)
        sessions = self._load(user_id, start, end)
        totals = self._totals(sessions)

        return WeeklyStats(
            week_start_date=start,
            total_hours=totals.total_hours,
            total_days=totals.total_days,
            overtime_hours=totals.overtime_hours,
            sessions=[
                SessionDetail(
                    work_date=s.work_date,
                    total_work_hours=minutes_to_hours(s.total_work_minutes),
                    total_lunch_minutes=s.total_lunch_minutes,
                    status=s.status,
                )
                for s in sessions
            ],
        )

    def get_monthly_stats(self, user_id: int, month_of: date | None = None) -> MonthlyStats:
        user_id = require_id(user_id, "user_id")
        today = self._today()
        day = month_of or today
        start, end = month_start(day), month_end(day)
        sessions = self._load(user_id, start, end)
        totals = self._totals(sessions)

        # Days after today are not missed yet.
        score_end = min(end, today) if start <= today else end
        average = round(totals.total_hours / totals.total_days, 2) if totals.total_days else 0.0
        return MonthlyStats(
            month_start_date=start,
            total_hours=totals.total_hours,
            total_days=totals.total_days,
            overtime_hours=totals.overtime_hours,
            average_hours_per_day=average,
            compliance_score=self._compliance.score(sessions, start_date=start, end_date=score_end),
        )

    def get_period_stats(self, user_id: int, start_date: date, end_date: date) -> PeriodStats:
        user_id = require_id(user_id, "user_id")
        start_date, end_date = require_date_range(start_date, end_date)
        sessions = self._load(user_id, start_date, end_date)
        entry, exit_, lunch = self._averages(sessions)
        return PeriodStats(
            start_date=start_date,
            end_date=end_date,
            totals=self._totals(sessions),
            average_entry_time=entry,
            average_exit_time=exit_,
            average_lunch_duration=lunch,
            compliance_score=self._compliance.score(sessions, start_date=start_date, end_date=end_date),
        )

    def calculate_compliance_score(self, user_id: int, start_date: date, end_date: date) -> int:
        user_id = require_id(user_id, "user_id")
        start_date, end_date = require_date_range(start_date, end_date)
        sessions = self._load(user_id, start_date, end_date)
        return self._compliance.score(sessions, start_date=start_date, end_date=end_date)

    def get_dashboard_stats(self, user_id: int) -> DashboardStats:
        user_id = require_id(user_id, "user_id")
        today = self._today()

        week = self._load(user_id, week_start(today), week_end(today))
        month = self._load(user_id, month_start(today), month_end(today))
        entry, exit_, lunch = self._averages(month)

        # Month start up to today; on the 1st this is a single day.
        score = self._compliance.score(month, start_date=month_start(today), end_date=today)
        logger.debug("Dashboard stats for user %s: %d week / %d month sessions", user_id, len(week), len(month))

        return DashboardStats(
            week_stats=self._totals(week),
            month_stats=self._totals(month),
            average_entry_time=entry,
            average_exit_time=exit_,
            average_lunch_duration=lunch,
            compliance_score=score,
        )

    def _today(self) -> date:
        return self._clock().date()

    def _load(self, user_id: int, start: date, end: date) -> list[WorkSession]:
        return list(self._sessions.list_completed_sessions(user_id, start_date=start, end_date=end))

    def _totals(self, sessions: Sequence[WorkSession]) -> PeriodTotals:
        if not sessions:
            return PeriodTotals()
        minutes = sum(s.total_work_minutes for s in sessions)
        overtime = sum(overtime_minutes(s.total_work_minutes, self._standard_day_minutes) for s in sessions)
        return PeriodTotals(
            total_hours=minutes_to_hours(minutes),
            total_days=len(sessions),
            overtime_hours=minutes_to_hours(overtime),
        )

    @staticmethod
    def _averages(sessions: Sequence[WorkSession]) -> tuple[Optional[str], Optional[str], int]:
        entries = [minutes_of_day(s.clock_in_time) for s in sessions if s.clock_in_time]
        exits = [minutes_of_day(s.clock_out_time) for s in sessions if s.clock_out_time]
        lunches = [s.total_lunch_minutes for s in sessions if s.took_lunch or s.total_lunch_minutes > 0]

        avg_entry = format_minutes_of_day(round(sum(entries) / len(entries))) if entries else None
        avg_exit = format_minutes_of_day(round(sum(exits) / len(exits))) if exits else None
        avg_lunch = int(round(sum(lunches) / len(lunches))) if lunches else 0
        return avg_entry, avg_exit, avg_lunch
