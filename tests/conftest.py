from __future__ import annotations

import pytest

from src.time_tracking.time_tracking.sessions.policy import TrackingPolicy
from src.time_tracking.time_tracking.sessions.service import TimeTrackingService
from tests.fakes import make_backend


@pytest.fixture
def backend():
    return make_backend(1, 2)


@pytest.fixture
def service(backend):
    return TimeTrackingService(
        backend.sessions,
        backend.entries,
        backend.transactions,
        backend.users,
        policy=TrackingPolicy(),
    )
