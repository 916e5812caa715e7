from datetime import date, datetime

from src.time_tracking.time_tracking.core.enums import EntryType, SessionStatus
from src.time_tracking.time_tracking.sessions.buttons import (
    ALREADY_CLOCKED_IN,
    CURRENTLY_ON_LUNCH,
    LUNCH_ALREADY_TAKEN,
    NO_ACTIVE_SESSION,
    NOT_ON_LUNCH,
    derive_button_states,
)
from src.time_tracking.time_tracking.sessions.model import WorkSession


def _session(status: SessionStatus, **kwargs) -> WorkSession:
    return WorkSession(
        session_id=1,
        user_id=1,
        work_date=date(2025, 3, 3),
        status=status,
        clock_in_time=datetime(2025, 3, 3, 9),
        **kwargs,
    )


def _enabled(states):
    return {a for a in EntryType if states.for_action(a).enabled}


def test_no_session_only_clock_in():
    states = derive_button_states(None)
    assert _enabled(states) == {EntryType.CLOCK_IN}
    assert states.clock_out.reason == NO_ACTIVE_SESSION


def test_active_session():
    states = derive_button_states(_session(SessionStatus.ACTIVE))
    assert _enabled(states) == {EntryType.CLOCK_OUT, EntryType.START_LUNCH}
    assert states.clock_in.reason == ALREADY_CLOCKED_IN
    assert states.resume_shift.reason == NOT_ON_LUNCH


def test_on_lunch_only_resume():
    states = derive_button_states(_session(SessionStatus.ON_LUNCH, lunch_start_time=datetime(2025, 3, 3, 12)))
    assert _enabled(states) == {EntryType.RESUME_SHIFT}
    assert states.clock_out.reason == CURRENTLY_ON_LUNCH


def test_active_after_lunch_disables_second_lunch():
    session = _session(
        SessionStatus.ACTIVE,
        lunch_start_time=datetime(2025, 3, 3, 12),
        lunch_end_time=datetime(2025, 3, 3, 12, 30),
    )
    states = derive_button_states(session)
    assert not states.start_lunch.enabled
    assert states.start_lunch.reason == LUNCH_ALREADY_TAKEN

    assert derive_button_states(session, allow_multiple_lunches=True).start_lunch.enabled


def test_completed_session_offers_clock_in():
    states = derive_button_states(_session(SessionStatus.COMPLETED, clock_out_time=datetime(2025, 3, 3, 17)))
    assert _enabled(states) == {EntryType.CLOCK_IN}
