"""Shared fixtures for caseload planner tests."""

from datetime import date

import pytest

from caseload_planner.domain.entities import ScheduleSession

MONDAY = date(2026, 10, 12)


@pytest.fixture
def make_session():
    """Factory for schedule sessions with sensible defaults."""

    def _make(id: str = "session-1", provider_id: str = "me", **overrides) -> ScheduleSession:
        fields = {
            "student_id": "student-1",
            "day_of_week": 1,
            "start_time": "09:00:00",
            "end_time": "09:30:00",
        }
        fields.update(overrides)
        return ScheduleSession(id=id, provider_id=provider_id, **fields)

    return _make
