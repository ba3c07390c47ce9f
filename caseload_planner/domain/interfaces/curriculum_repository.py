"""Curriculum tracking repository interface."""

from datetime import date
from typing import Optional, Protocol, runtime_checkable

from ..entities.curriculum import CurriculumTarget, CurriculumTracking


@runtime_checkable
class CurriculumRepository(Protocol):
    """Protocol defining the interface for curriculum tracking storage.

    Records are scoped to a session instance (``session_id``) or to a group
    instance (``group_id`` plus ``session_date``).
    """

    async def get_current(
        self, target: CurriculumTarget, session_date: date
    ) -> Optional[CurriculumTracking]:
        """Return the record belonging to this exact calendar instance.

        Args:
            target: The session or group being tracked.
            session_date: The date of the calendar instance.

        Returns:
            Optional[CurriculumTracking]: The record, or None if there is none.
        """
        ...

    async def find_previous(
        self, target: CurriculumTarget, session_date: date
    ) -> Optional[CurriculumTracking]:
        """Return the most recent record of an earlier instance.

        Sessions match on their recurring template, groups on ``group_id``;
        only records dated strictly before ``session_date`` qualify.

        Args:
            target: The session or group being tracked.
            session_date: The date of the current calendar instance.

        Returns:
            Optional[CurriculumTracking]: The latest prior record, if any.
        """
        ...

    async def save(self, record: CurriculumTracking) -> CurriculumTracking:
        """Insert or replace a record.

        Args:
            record: The record to store.

        Returns:
            CurriculumTracking: The stored record.
        """
        ...

    async def delete(self, record_id: str) -> None:
        """Delete a record.

        Args:
            record_id: The unique identifier of the record.

        Raises:
            ValueError: If the record is not found.
        """
        ...
