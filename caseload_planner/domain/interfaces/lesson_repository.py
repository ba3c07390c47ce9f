"""Lesson repository interface."""

from datetime import date
from typing import Protocol, runtime_checkable

from ..entities.lesson import Lesson, TenantScope


@runtime_checkable
class LessonRepository(Protocol):
    """Protocol for lesson persistence.

    Every read and delete is filtered by a ``TenantScope``; a scope with no
    school id only ever sees unscoped rows.
    """

    async def list_lessons(
        self,
        provider_id: str,
        start_date: date,
        end_date: date,
        scope: TenantScope,
    ) -> list[Lesson]:
        """List a provider's lessons dated within a range.

        Args:
            provider_id: The owning provider.
            start_date: First lesson date (inclusive).
            end_date: Last lesson date (inclusive).
            scope: Tenant scope filter.

        Returns:
            list[Lesson]: Matching lessons.
        """
        ...

    async def upsert_lesson(self, lesson: Lesson) -> Lesson:
        """Insert a lesson or replace the one stored under the same key.

        The key is ``(provider_id, lesson_date, time_slot)`` for time-slot
        lessons and ``(group_id, lesson_date)`` for group lessons, so a
        retried save never creates a second row.

        Args:
            lesson: The lesson to store.

        Returns:
            Lesson: The stored lesson (keeps the existing id on replace).
        """
        ...

    async def get_lesson(self, lesson_id: str, scope: TenantScope) -> Lesson:
        """Retrieve a lesson by ID within a tenant scope.

        Raises:
            ValueError: If the lesson is not found in the scope.
        """
        ...

    async def delete_lesson(self, lesson_id: str, scope: TenantScope) -> None:
        """Delete a lesson within a tenant scope.

        Raises:
            ValueError: If the lesson is not found in the scope.
        """
        ...
