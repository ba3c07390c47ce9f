"""Local in-memory implementation of AttendanceRepository."""

from datetime import date
from typing import Dict, Tuple

from ..domain.entities.attendance import AttendanceRecord
from ..domain.interfaces.attendance_repository import AttendanceRepository


class LocalAttendanceRepository(AttendanceRepository):
    """Attendance keyed by (session_id, student_id, session_date)."""

    def __init__(self):
        self._records: Dict[Tuple[str, str, date], AttendanceRecord] = {}

    async def get_attendance(self, session_id: str, session_date: date) -> list[AttendanceRecord]:
        return [
            record
            for (sid, _, day), record in self._records.items()
            if sid == session_id and day == session_date
        ]

    async def save_attendance(
        self,
        session_id: str,
        session_date: date,
        records: list[AttendanceRecord],
    ) -> list[AttendanceRecord]:
        for record in records:
            self._records[(session_id, record.student_id, session_date)] = record
        return list(records)

    def clear(self) -> None:
        self._records.clear()
