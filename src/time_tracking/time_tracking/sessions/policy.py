from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import (
    DEFAULT_TIMEZONE,
    MAX_DAILY_WORK_MINUTES,
    MAX_LUNCH_MINUTES,
    STANDARD_DAY_MINUTES,
)


@dataclass(frozen=True)
class TrackingPolicy:
    """Tunable rules of the time tracking engine.

    ``max_lunch_minutes`` and ``max_daily_work_minutes`` never block an action;
    exceeding them flags the entry and the session. ``None`` disables a check.
    """

    timezone: str = DEFAULT_TIMEZONE
    standard_day_minutes: int = STANDARD_DAY_MINUTES
    max_lunch_minutes: Optional[int] = MAX_LUNCH_MINUTES
    max_daily_work_minutes: Optional[int] = MAX_DAILY_WORK_MINUTES
    allow_multiple_lunches: bool = False

    @classmethod
    def from_settings(cls, settings) -> "TrackingPolicy":
        def _opt_int(name: str, default: Optional[int]) -> Optional[int]:
            value = getattr(settings, name, default)
            return None if value is None else int(value)

        return cls(
            timezone=str(getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)),
            standard_day_minutes=int(getattr(settings, "STANDARD_DAY_MINUTES", STANDARD_DAY_MINUTES)),
            max_lunch_minutes=_opt_int("MAX_LUNCH_MINUTES", MAX_LUNCH_MINUTES),
            max_daily_work_minutes=_opt_int("MAX_DAILY_WORK_MINUTES", MAX_DAILY_WORK_MINUTES),
            allow_multiple_lunches=bool(getattr(settings, "ALLOW_MULTIPLE_LUNCHES", False)),
        )
