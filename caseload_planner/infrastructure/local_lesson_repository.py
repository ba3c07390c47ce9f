"""Local in-memory implementation of LessonRepository."""

from datetime import date, datetime
from typing import Dict, Optional

from ..domain.entities.lesson import Lesson, TenantScope
from ..domain.interfaces.lesson_repository import LessonRepository


class LocalLessonRepository(LessonRepository):
    """Local in-memory implementation of the lesson repository.

    Lessons are keyed by id; ``upsert_lesson`` looks up an existing lesson
    by its natural key before inserting.
    """

    def __init__(self):
        self._lessons: Dict[str, Lesson] = {}

    async def list_lessons(
        self,
        provider_id: str,
        start_date: date,
        end_date: date,
        scope: TenantScope,
    ) -> list[Lesson]:
        lessons = [
            lesson
            for lesson in self._lessons.values()
            if lesson.provider_id == provider_id
            and start_date <= lesson.lesson_date <= end_date
            and scope.matches(lesson.scope)
        ]
        return sorted(lessons, key=lambda l: (l.lesson_date, l.slot_key))

    async def upsert_lesson(self, lesson: Lesson) -> Lesson:
        existing = self._find_by_key(lesson)
        if existing is not None:
            lesson = lesson.model_copy(update={
                "id": existing.id,
                "created_at": existing.created_at,
                "updated_at": datetime.utcnow(),
            })
        self._lessons[lesson.id] = lesson
        return lesson

    async def get_lesson(self, lesson_id: str, scope: TenantScope) -> Lesson:
        lesson = self._lessons.get(lesson_id)
        if lesson is None or not scope.matches(lesson.scope):
            raise ValueError(f"Lesson with id {lesson_id} not found")
        return lesson

    async def delete_lesson(self, lesson_id: str, scope: TenantScope) -> None:
        await self.get_lesson(lesson_id, scope)
        del self._lessons[lesson_id]

    def clear(self) -> None:
        self._lessons.clear()

    def get_all_lessons(self) -> Dict[str, Lesson]:
        return self._lessons.copy()

    def _find_by_key(self, lesson: Lesson) -> Optional[Lesson]:
        for stored in self._lessons.values():
            if stored.lesson_date != lesson.lesson_date or stored.scope.school_id != lesson.scope.school_id:
                continue
            if lesson.group_id:
                if stored.group_id == lesson.group_id:
                    return stored
            elif (
                stored.group_id is None
                and stored.provider_id == lesson.provider_id
                and stored.time_slot == lesson.time_slot
            ):
                return stored
        return None
