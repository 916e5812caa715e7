from datetime import date, datetime

from src.time_tracking.time_tracking.core.enums import SessionStatus
from src.time_tracking.time_tracking.statistics.compliance import StandardComplianceCalculator
from src.time_tracking.time_tracking.sessions.model import WorkSession


def _completed(day: date, minutes: int = 480, valid: bool = True) -> WorkSession:
    return WorkSession(
        session_id=day.toordinal(),
        user_id=1,
        work_date=day,
        status=SessionStatus.COMPLETED,
        clock_in_time=datetime.combine(day, datetime.min.time()).replace(hour=9),
        total_work_minutes=minutes,
        is_valid_session=valid,
    )


MONDAY = date(2025, 3, 3)
FRIDAY = date(2025, 3, 7)
SUNDAY = date(2025, 3, 9)


def test_full_week_scores_100():
    sessions = [_completed(date(2025, 3, d)) for d in range(3, 8)]
    assert StandardComplianceCalculator().score(sessions, start_date=MONDAY, end_date=FRIDAY) == 100


def test_no_sessions_scores_0():
    assert StandardComplianceCalculator().score([], start_date=MONDAY, end_date=FRIDAY) == 0


def test_partial_week_rounds():
    sessions = [_completed(date(2025, 3, d)) for d in (3, 4, 5)]
    assert StandardComplianceCalculator().score(sessions, start_date=MONDAY, end_date=FRIDAY) == 60


def test_weekend_days_are_not_expected():
    sessions = [_completed(date(2025, 3, d)) for d in range(3, 8)]
    assert StandardComplianceCalculator().score(sessions, start_date=MONDAY, end_date=SUNDAY) == 100


def test_flagged_sessions_are_not_credited():
    sessions = [_completed(date(2025, 3, d), valid=d != 3) for d in range(3, 8)]
    assert StandardComplianceCalculator().score(sessions, start_date=MONDAY, end_date=FRIDAY) == 80


def test_weekend_only_range_with_sessions_scores_100():
    sessions = [_completed(date(2025, 3, 8))]
    saturday = date(2025, 3, 8)
    assert StandardComplianceCalculator().score(sessions, start_date=saturday, end_date=SUNDAY) == 100


def test_hours_band():
    calc = StandardComplianceCalculator(hours_band=(420, 540))
    sessions = [_completed(MONDAY, minutes=300), _completed(date(2025, 3, 4), minutes=480)]
    assert calc.score(sessions, start_date=MONDAY, end_date=date(2025, 3, 4)) == 50


def test_adding_a_compliant_day_never_lowers_the_score():
    calc = StandardComplianceCalculator()
    sessions = [_completed(MONDAY)]
    before = calc.score(sessions, start_date=MONDAY, end_date=FRIDAY)
    after = calc.score(sessions + [_completed(date(2025, 3, 4))], start_date=MONDAY, end_date=FRIDAY)
    assert after >= before
