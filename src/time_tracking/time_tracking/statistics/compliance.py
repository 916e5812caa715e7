from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import iter_days
from ..core.constants import WORKING_WEEKDAYS
from ..core.enums import SessionStatus
from ..sessions.model import WorkSession


class ComplianceCalculator(ABC):
    """Calculator interface (Strategy Pattern for compliance scoring)."""

    @abstractmethod
    def score(self, sessions: Iterable[WorkSession], *, start_date: date, end_date: date) -> int:
        raise NotImplementedError


class StandardComplianceCalculator(ComplianceCalculator):
    """Share of expected working days (Mon-Fri) covered by a good session.

    A day is credited when it has a completed, non-flagged session with work
    recorded (and, if ``hours_band`` is set, work minutes inside the band).
    Score = round(100 * credited / expected); 0 without sessions.
    """

    def __init__(
        self,
        *,
        working_weekdays: Iterable[int] = WORKING_WEEKDAYS,
        hours_band: Optional[tuple[int, int]] = None,
    ):
        self._working_weekdays = frozenset(working_weekdays)
        self._hours_band = hours_band

    def expected_days(self, start_date: date, end_date: date) -> list[date]:
        return [d for d in iter_days(start_date, end_date) if d.weekday() in self._working_weekdays]

    def is_compliant(self, session: WorkSession) -> bool:
        if session.status != SessionStatus.COMPLETED or not session.is_valid_session:
            return False
        if session.total_work_minutes <= 0:
            return False
        if self._hours_band is not None:
            low, high = self._hours_band
            return low <= session.total_work_minutes <= high
        return True

    def score(self, sessions: Iterable[WorkSession], *, start_date: date, end_date: date) -> int:
        sessions = [s for s in sessions if start_date <= s.work_date <= end_date]
        if not sessions:
            return 0

        expected = self.expected_days(start_date, end_date)
        if not expected:
            return 100

        credited = {s.work_date for s in sessions if self.is_compliant(s)}
        hits = sum(1 for d in expected if d in credited)
        return int(round(100 * hits / len(expected)))
