from datetime import date, datetime

import pytest

from src.time_tracking.time_tracking.core.enums import EntryType, FailureReason, SessionStatus
from src.time_tracking.time_tracking.sessions.model import WorkSession
from src.time_tracking.time_tracking.sessions.policy import TrackingPolicy
from src.time_tracking.time_tracking.sessions.state_machine import SessionStateMachine

DAY = date(2025, 3, 3)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 3, hour, minute)


def _session(status: SessionStatus, **kwargs) -> WorkSession:
    kwargs.setdefault("clock_in_time", _at(9))
    return WorkSession(session_id=1, user_id=1, work_date=DAY, status=status, **kwargs)


@pytest.mark.parametrize(
    "action,current,reason",
    [
        (EntryType.CLOCK_OUT, None, FailureReason.NO_ACTIVE_SESSION),
        (EntryType.START_LUNCH, None, FailureReason.NO_ACTIVE_SESSION),
        (EntryType.RESUME_SHIFT, None, FailureReason.NO_ACTIVE_SESSION),
        (EntryType.CLOCK_IN, _session(SessionStatus.ACTIVE), FailureReason.ALREADY_CLOCKED_IN),
        (EntryType.RESUME_SHIFT, _session(SessionStatus.ACTIVE), FailureReason.NOT_ON_LUNCH),
        (
            EntryType.CLOCK_OUT,
            _session(SessionStatus.ON_LUNCH, lunch_start_time=_at(12)),
            FailureReason.MUST_RESUME_BEFORE_CLOCK_OUT,
        ),
        (
            EntryType.CLOCK_IN,
            _session(SessionStatus.ON_LUNCH, lunch_start_time=_at(12)),
            FailureReason.CURRENTLY_ON_LUNCH,
        ),
        (
            EntryType.START_LUNCH,
            _session(SessionStatus.ON_LUNCH, lunch_start_time=_at(12)),
            FailureReason.CURRENTLY_ON_LUNCH,
        ),
        (EntryType.CLOCK_OUT, _session(SessionStatus.COMPLETED, clock_out_time=_at(17)), FailureReason.NO_ACTIVE_SESSION),
        (EntryType.CLOCK_IN, _session(SessionStatus.COMPLETED, clock_out_time=_at(17)), FailureReason.SESSION_COMPLETED),
    ],
)
def test_illegal_transitions_are_rejected(action, current, reason):
    machine = SessionStateMachine()
    rejection = machine.check(action, current, _at(18))
    assert rejection is not None
    assert rejection.reason == reason


def test_second_lunch_rejected_unless_policy_allows_it():
    current = _session(SessionStatus.ACTIVE, lunch_start_time=_at(12), lunch_end_time=_at(12, 30), total_lunch_minutes=30)

    strict = SessionStateMachine(TrackingPolicy(allow_multiple_lunches=False))
    assert strict.check(EntryType.START_LUNCH, current, _at(15)).reason == FailureReason.LUNCH_ALREADY_TAKEN

    relaxed = SessionStateMachine(TrackingPolicy(allow_multiple_lunches=True))
    assert relaxed.check(EntryType.START_LUNCH, current, _at(15)) is None


def test_timestamp_before_previous_event_is_out_of_order():
    machine = SessionStateMachine()
    current = _session(SessionStatus.ACTIVE)
    rejection = machine.check(EntryType.CLOCK_OUT, current, _at(8, 59))
    assert rejection.reason == FailureReason.TIMESTAMP_OUT_OF_ORDER


def test_equal_timestamp_is_accepted():
    machine = SessionStateMachine()
    current = _session(SessionStatus.ACTIVE)
    assert machine.check(EntryType.START_LUNCH, current, _at(9)) is None


def test_clock_out_plan_computes_totals():
    machine = SessionStateMachine()
    current = _session(SessionStatus.ACTIVE, lunch_start_time=_at(12), lunch_end_time=_at(12, 30), total_lunch_minutes=30)

    step = machine.plan(EntryType.CLOCK_OUT, current, _at(18))

    assert step.new_status == SessionStatus.COMPLETED
    assert step.patch["total_work_minutes"] == 510
    assert step.patch["total_work_hours"] == "8.50"
    assert step.entry_valid is True
    assert step.flags == ()


def test_resume_plan_accumulates_lunch():
    machine = SessionStateMachine()
    current = _session(SessionStatus.ON_LUNCH, lunch_start_time=_at(12))

    step = machine.plan(EntryType.RESUME_SHIFT, current, _at(12, 45))

    assert step.new_status == SessionStatus.ACTIVE
    assert step.patch["total_lunch_minutes"] == 45
    assert step.patch["lunch_end_time"] == _at(12, 45)


def test_long_lunch_is_flagged_not_blocked():
    machine = SessionStateMachine(TrackingPolicy(max_lunch_minutes=120))
    current = _session(SessionStatus.ON_LUNCH, lunch_start_time=_at(12))

    assert machine.check(EntryType.RESUME_SHIFT, current, _at(15)) is None
    step = machine.plan(EntryType.RESUME_SHIFT, current, _at(15))

    assert step.entry_valid is False
    assert step.patch["is_valid_session"] is False
    assert "180 minutes" in step.patch["validation_errors"][0]


def test_long_day_is_flagged_on_clock_out():
    machine = SessionStateMachine(TrackingPolicy(max_daily_work_minutes=600))
    current = _session(SessionStatus.ACTIVE, clock_in_time=_at(7))

    step = machine.plan(EntryType.CLOCK_OUT, current, _at(19))

    assert step.patch["total_work_minutes"] == 720
    assert step.patch["is_valid_session"] is False
    assert step.entry_notes


def test_clock_in_on_new_day_plans_active_session():
    machine = SessionStateMachine()
    step = machine.plan(EntryType.CLOCK_IN, None, _at(9))
    assert step.new_status == SessionStatus.ACTIVE
    assert step.patch["clock_in_time"] == _at(9)
