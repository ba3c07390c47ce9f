"""Local in-memory implementation of StudentDirectory."""

from typing import Dict, Iterable

from ..domain.entities.schedule_session import Student
from ..domain.interfaces.student_directory import StudentDirectory


class LocalStudentDirectory(StudentDirectory):
    """Local in-memory implementation of the StudentDirectory protocol.

    Stores students in a dictionary for testing and development purposes.
    """

    def __init__(self):
        self._students: Dict[str, Student] = {}

    async def get_students_by_ids(self, student_ids: Iterable[str]) -> list[Student]:
        return [self._students[sid] for sid in student_ids if sid in self._students]

    def add_student(self, student: Student) -> None:
        self._students[student.id] = student

    def clear(self) -> None:
        self._students.clear()

    def get_all_students(self) -> Dict[str, Student]:
        return self._students.copy()
