"""Schedule session entities for the caseload planner."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

TEMP_ID_PREFIX = "temp-"


class DeliveredBy(str, Enum):
    """Who actually delivers a session."""

    PROVIDER = "provider"
    SEA = "sea"
    SPECIALIST = "specialist"


def is_temporary_id(session_id: str) -> bool:
    """Return True for placeholder ids that have not been persisted yet."""
    return session_id.startswith(TEMP_ID_PREFIX)


class GroupingValidationError(ValueError):
    """Raised when a group request names too few sessions or no group name."""


class ScheduleSession(BaseModel):
    """A single student/time unit of service.

    Sessions without ``session_date`` are recurring templates; sessions with
    one are concrete calendar instances. A session missing its weekday or
    either time is unscheduled and never placed on the calendar.
    """

    id: str
    provider_id: str
    student_id: Optional[str] = None
    assigned_to_specialist_id: Optional[str] = None
    assigned_to_sea_id: Optional[str] = None
    day_of_week: Optional[int] = Field(default=None, ge=1, le=7)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    session_date: Optional[date] = None
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    service_type: Optional[str] = None
    delivered_by: DeliveredBy = DeliveredBy.PROVIDER
    session_notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "id": "temp-1735000000-0.42",
                "provider_id": "provider-1",
                "student_id": "student-7",
                "day_of_week": 1,
                "start_time": "09:00:00",
                "end_time": "09:30:00",
                "session_date": "2026-10-12",
                "delivered_by": "provider",
            }
        }

    @property
    def is_temporary(self) -> bool:
        return is_temporary_id(self.id)

    @property
    def is_template(self) -> bool:
        return self.session_date is None

    @property
    def template_key(self) -> str:
        """Key shared by every calendar instance of the same recurring session."""
        start = (self.start_time or "")[:5]
        return f"{self.provider_id}|{self.student_id}|{self.day_of_week}|{start}"


class Student(BaseModel):
    """Lightweight student projection used for display and lesson requests."""

    id: str
    initials: str
    grade_level: Optional[str] = None


@dataclass(frozen=True)
class PendingSessionId:
    """Identity of a session that only exists as an in-memory placeholder."""

    local_id: str


@dataclass(frozen=True)
class PersistedSessionId:
    """Identity of a session stored by the backend."""

    remote_id: str


SessionIdentity = Union[PendingSessionId, PersistedSessionId]
