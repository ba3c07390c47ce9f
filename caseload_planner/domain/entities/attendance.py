"""Attendance entities."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class AttendanceRecord(BaseModel):
    """Attendance of one student for one session instance."""

    session_id: Optional[str] = None
    student_id: str
    session_date: Optional[date] = None
    present: bool = True
    absence_reason: Optional[str] = None
    marked_by: Optional[str] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def _clear_reason_when_present(self) -> "AttendanceRecord":
        if self.present:
            self.absence_reason = None
        return self


class AttendanceSubmission(BaseModel):
    """Payload of an attendance save."""

    session_date: date
    attendance: list[AttendanceRecord]
