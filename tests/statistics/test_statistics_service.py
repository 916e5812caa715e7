from __future__ import annotations

from datetime import date, datetime

import pytest

from src.time_tracking.time_tracking.core.enums import FailureReason, SessionStatus
from src.time_tracking.time_tracking.core.exceptions import ValidationError
from src.time_tracking.time_tracking.sessions.model import WorkSession
from src.time_tracking.time_tracking.statistics.service import StatisticsService


def _session(day: date, start=(9, 0), end=(18, 0), lunch: int = 30, status=SessionStatus.COMPLETED) -> WorkSession:
    clock_in = datetime(day.year, day.month, day.day, *start)
    clock_out = datetime(day.year, day.month, day.day, *end)
    minutes = int((clock_out - clock_in).total_seconds() // 60) - lunch
    return WorkSession(
        session_id=day.toordinal(),
        user_id=1,
        work_date=day,
        status=status,
        clock_in_time=clock_in,
        clock_out_time=clock_out if status == SessionStatus.COMPLETED else None,
        lunch_start_time=datetime(day.year, day.month, day.day, 12) if lunch else None,
        lunch_end_time=datetime(day.year, day.month, day.day, 12, lunch) if lunch else None,
        total_work_minutes=minutes,
        total_lunch_minutes=lunch,
    )


def _stats(backend, today: date) -> StatisticsService:
    return StatisticsService(backend.sessions, clock=lambda: datetime(today.year, today.month, today.day, 20))


def test_weekly_stats(backend):
    backend.sessions.add(_session(date(2025, 3, 3)))
    backend.sessions.add(_session(date(2025, 3, 4), end=(17, 30)))
    backend.sessions.add(_session(date(2025, 3, 10)))

    weekly = _stats(backend, date(2025, 3, 5)).get_weekly_stats(1)

    assert weekly.week_start_date == date(2025, 3, 3)
    assert weekly.total_days == 2
    assert weekly.total_hours == 16.5
    assert weekly.overtime_hours == 0.5
    assert [s.work_date for s in weekly.sessions] == [date(2025, 3, 3), date(2025, 3, 4)]


def test_open_sessions_are_ignored(backend):
    backend.sessions.add(_session(date(2025, 3, 3), status=SessionStatus.ACTIVE))
    weekly = _stats(backend, date(2025, 3, 3)).get_weekly_stats(1)
    assert weekly.total_days == 0
    assert weekly.total_hours == 0.0


def test_monthly_stats_scores_up_to_today(backend):
    for d in range(3, 8):
        backend.sessions.add(_session(date(2025, 3, d)))

    monthly = _stats(backend, date(2025, 3, 7)).get_monthly_stats(1)

    assert monthly.month_start_date == date(2025, 3, 1)
    assert monthly.total_days == 5
    assert monthly.average_hours_per_day == 8.5
    assert monthly.compliance_score == 100


def test_dashboard_averages(backend):
    backend.sessions.add(_session(date(2025, 3, 3), start=(9, 0), end=(18, 0), lunch=30))
    backend.sessions.add(_session(date(2025, 3, 4), start=(8, 0), end=(17, 0), lunch=0))
    backend.sessions.add(_session(date(2025, 3, 5), start=(9, 30), end=(18, 30), lunch=50))

    dash = _stats(backend, date(2025, 3, 5)).get_dashboard_stats(1)

    assert dash.average_entry_time == "08:50"
    assert dash.average_exit_time == "17:50"
    assert dash.average_lunch_duration == 40
    assert dash.week_stats.total_days == 3
    assert dash.month_stats.total_days == 3
    assert dash.compliance_score == 100


def test_dashboard_without_sessions(backend):
    dash = _stats(backend, date(2025, 3, 5)).get_dashboard_stats(1)

    assert dash.average_entry_time is None
    assert dash.average_exit_time is None
    assert dash.average_lunch_duration == 0
    assert dash.compliance_score == 0
    assert dash.week_stats.total_hours == 0.0


def test_compliance_score_for_full_week(backend):
    for d in range(3, 8):
        backend.sessions.add(_session(date(2025, 3, d)))

    stats = _stats(backend, date(2025, 3, 10))
    assert stats.calculate_compliance_score(1, date(2025, 3, 3), date(2025, 3, 7)) == 100
    assert stats.calculate_compliance_score(1, date(2025, 3, 10), date(2025, 3, 14)) == 0


def test_period_stats_empty_range_gives_zeros(backend):
    period = _stats(backend, date(2025, 3, 31)).get_period_stats(1, date(2025, 3, 1), date(2025, 3, 31))

    assert period.totals.total_hours == 0.0
    assert period.totals.total_days == 0
    assert period.compliance_score == 0
    assert period.average_entry_time is None


@pytest.mark.parametrize("start,end", [(date(2025, 3, 7), date(2025, 3, 3)), (date(2025, 3, 3), date(2025, 3, 3))])
def test_start_not_before_end_is_rejected(backend, start, end):
    stats = _stats(backend, date(2025, 3, 10))
    with pytest.raises(ValidationError) as exc:
        stats.calculate_compliance_score(1, start, end)
    assert exc.value.reason == FailureReason.INVALID_DATE_RANGE
