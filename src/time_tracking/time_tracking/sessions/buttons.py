from __future__ import annotations

from typing import Optional

from ..core.enums import SessionStatus
from .model import ButtonState, ButtonStates, WorkSession

NO_ACTIVE_SESSION = "no active session"
ALREADY_CLOCKED_IN = "already clocked in"
NOT_ON_LUNCH = "not on lunch"
CURRENTLY_ON_LUNCH = "currently on lunch"
LUNCH_ALREADY_TAKEN = "lunch already taken today"

_ENABLED = ButtonState(enabled=True)


def _disabled(reason: str) -> ButtonState:
    return ButtonState(enabled=False, reason=reason)


def derive_button_states(session: Optional[WorkSession], *, allow_multiple_lunches: bool = False) -> ButtonStates:
    """Button enablement for the session's current status (no I/O)."""

    status = session.status if session is not None else None

    if status == SessionStatus.ACTIVE:
        lunch_taken = session.took_lunch and not allow_multiple_lunches
        return ButtonStates(
            clock_in=_disabled(ALREADY_CLOCKED_IN),
            clock_out=_ENABLED,
            start_lunch=_disabled(LUNCH_ALREADY_TAKEN) if lunch_taken else _ENABLED,
            resume_shift=_disabled(NOT_ON_LUNCH),
        )

    if status == SessionStatus.ON_LUNCH:
        return ButtonStates(
            clock_in=_disabled(CURRENTLY_ON_LUNCH),
            clock_out=_disabled(CURRENTLY_ON_LUNCH),
            start_lunch=_disabled(CURRENTLY_ON_LUNCH),
            resume_shift=_ENABLED,
        )

    # No session yet, or today's session is completed.
    return ButtonStates(
        clock_in=_ENABLED,
        clock_out=_disabled(NO_ACTIVE_SESSION),
        start_lunch=_disabled(NO_ACTIVE_SESSION),
        resume_shift=_disabled(NO_ACTIVE_SESSION),
    )
