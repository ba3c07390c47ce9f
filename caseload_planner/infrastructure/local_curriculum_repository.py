"""Local in-memory implementation of CurriculumRepository."""

from datetime import date
from typing import Dict, Optional

from ..domain.entities.curriculum import CurriculumTarget, CurriculumTracking, SessionTarget
from ..domain.interfaces.curriculum_repository import CurriculumRepository


class LocalCurriculumRepository(CurriculumRepository):
    """Local in-memory implementation of the curriculum repository.

    Stores records in a dictionary keyed by record id.
    """

    def __init__(self):
        """Initialize the repository with an empty dictionary."""
        self._records: Dict[str, CurriculumTracking] = {}

    async def get_current(
        self, target: CurriculumTarget, session_date: date
    ) -> Optional[CurriculumTracking]:
        """Return the record for this exact instance, if any."""
        for record in self._records.values():
            if isinstance(target, SessionTarget):
                if record.session_id == target.session.id:
                    return record
            elif record.group_id == target.group_id and record.session_date == session_date:
                return record
        return None

    async def find_previous(
        self, target: CurriculumTarget, session_date: date
    ) -> Optional[CurriculumTracking]:
        """Return the latest record dated strictly before ``session_date``."""
        if isinstance(target, SessionTarget):
            key = target.session.template_key
            candidates = [r for r in self._records.values() if r.session_id and r.template_key == key]
        else:
            candidates = [r for r in self._records.values() if r.group_id == target.group_id]

        earlier = [r for r in candidates if r.session_date is not None and r.session_date < session_date]
        if not earlier:
            return None
        return max(earlier, key=lambda r: r.session_date)

    async def save(self, record: CurriculumTracking) -> CurriculumTracking:
        self._records[record.id] = record
        return record

    async def delete(self, record_id: str) -> None:
        """Delete a record.

        Raises:
            ValueError: If the record is not found.
        """
        if record_id not in self._records:
            raise ValueError(f"Curriculum tracking with id {record_id} not found")
        del self._records[record_id]

    async def get(self, record_id: str) -> CurriculumTracking:
        if record_id not in self._records:
            raise ValueError(f"Curriculum tracking with id {record_id} not found")
        return self._records[record_id]

    def clear(self) -> None:
        """Clear all records."""
        self._records.clear()

    def get_all_records(self) -> Dict[str, CurriculumTracking]:
        return self._records.copy()
