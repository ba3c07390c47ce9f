"""Attendance repository interface."""

from datetime import date
from typing import Protocol, runtime_checkable

from ..entities.attendance import AttendanceRecord


@runtime_checkable
class AttendanceRepository(Protocol):
    """Protocol for per-instance attendance storage."""

    async def get_attendance(self, session_id: str, session_date: date) -> list[AttendanceRecord]:
        """Return attendance recorded for a session instance."""
        ...

    async def save_attendance(
        self,
        session_id: str,
        session_date: date,
        records: list[AttendanceRecord],
    ) -> list[AttendanceRecord]:
        """Upsert one record per (session, student, date)."""
        ...
