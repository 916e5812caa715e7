from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing 'Z' is accepted)."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def now_local(timezone: Optional[str] = None) -> datetime:
    """Current wall-clock time as a naive datetime.

    Note: Wrapped so tests can patch/mocked easier. With ``timezone`` the
    wall clock of that IANA zone is returned, otherwise the host's.
    """
    if timezone:
        return datetime.now(ZoneInfo(timezone)).replace(tzinfo=None)
    return datetime.now()


def to_local_naive(value: datetime, timezone: str) -> datetime:
    """Offset-aware instants become naive wall-clock time in ``timezone``.

    Naive values are taken as already local and returned unchanged.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=None)
    return value.astimezone(ZoneInfo(timezone)).replace(tzinfo=None)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_end(day: date) -> date:
    return week_start(day) + timedelta(days=6)


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def minutes_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def format_minutes_of_day(minutes: Optional[int]) -> Optional[str]:
    if minutes is None:
        return None
    minutes = int(minutes) % (24 * 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
