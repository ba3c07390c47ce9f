"""Student directory protocol."""

from typing import Iterable, Protocol, runtime_checkable

from ..entities.schedule_session import Student


@runtime_checkable
class StudentDirectory(Protocol):
    """Protocol for batch student lookups."""

    async def get_students_by_ids(self, student_ids: Iterable[str]) -> list[Student]:
        """Retrieve students by ID.

        Unknown ids are skipped rather than raising.

        Args:
            student_ids: The student ids to look up.

        Returns:
            list[Student]: The students that were found.
        """
        ...
