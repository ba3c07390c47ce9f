"""Attendance reads and writes for session instances."""

import logging
from datetime import date
from typing import Iterable

from ..entities.attendance import AttendanceRecord
from ..entities.schedule_session import ScheduleSession, is_temporary_id
from ..interfaces.attendance_repository import AttendanceRepository
from .session_persistence import SessionPersistenceCoordinator

logger = logging.getLogger(__name__)


class AttendanceService:
    """Attendance for one session instance, one record per student."""

    def __init__(
        self,
        repository: AttendanceRepository,
        persistence: SessionPersistenceCoordinator,
    ):
        self.repository = repository
        self.persistence = persistence

    async def get_attendance(self, session: ScheduleSession, session_date: date) -> list[AttendanceRecord]:
        # Placeholders have never been written to, so there is nothing to read.
        session_id = self.persistence.resolved_id(session.id)
        if is_temporary_id(session_id):
            return []
        return await self.repository.get_attendance(session_id, session_date)

    async def save_attendance(
        self,
        session: ScheduleSession,
        session_date: date,
        records: Iterable[AttendanceRecord],
        marked_by: str,
    ) -> list[AttendanceRecord]:
        """Persist the session if needed, then upsert one record per student.

        When a student appears more than once the last entry wins.
        """
        persisted = await self.persistence.ensure_persisted(session)

        by_student: dict[str, AttendanceRecord] = {}
        for record in records:
            by_student[record.student_id] = AttendanceRecord(
                session_id=persisted.id,
                student_id=record.student_id,
                session_date=session_date,
                present=record.present,
                absence_reason=None if record.present else (record.absence_reason or None),
                marked_by=marked_by,
            )

        saved = await self.repository.save_attendance(persisted.id, session_date, list(by_student.values()))
        logger.info(f"Saved attendance for {len(saved)} students in session {persisted.id} on {session_date}")
        return saved
