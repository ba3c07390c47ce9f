"""Session source and session persistence interfaces."""

from datetime import date
from typing import Optional, Protocol, Sequence, runtime_checkable

from ..entities.schedule_session import ScheduleSession


@runtime_checkable
class SessionSource(Protocol):
    """Protocol for range queries over schedule sessions.

    Implementations may return recurring templates expanded into
    placeholder ("temp-") instances, and may include unscheduled sessions
    with null weekday or times.
    """

    async def fetch_sessions(
        self,
        provider_id: str,
        start_date: date,
        end_date: date,
        role: Optional[str] = None,
    ) -> list[ScheduleSession]:
        """Return sessions visible to a provider in a date range.

        Args:
            provider_id: The user whose caseload is queried.
            start_date: First date of the range (inclusive).
            end_date: Last date of the range (inclusive).
            role: Optional role of the user, used to widen the query for SEAs.

        Returns:
            list[ScheduleSession]: Sessions owned by or delegated to the user.
        """
        ...

    async def get_session(self, session_id: str) -> ScheduleSession:
        """Retrieve a session by ID.

        Args:
            session_id: The unique identifier of the session.

        Returns:
            ScheduleSession: The session entity.

        Raises:
            ValueError: If the session is not found.
        """
        ...


@runtime_checkable
class SessionPersistence(Protocol):
    """Protocol for promoting placeholder sessions to stored rows."""

    async def persist_session(self, session: ScheduleSession) -> ScheduleSession:
        """Store a placeholder session and return it with a permanent id.

        Must be idempotent per placeholder id: persisting the same
        placeholder twice returns the same stored session.

        Args:
            session: A session whose id may carry the "temp-" prefix.

        Returns:
            ScheduleSession: The stored session with a non-temporary id.
        """
        ...

    async def update_group(
        self,
        session_ids: Sequence[str],
        group_id: Optional[str],
        group_name: Optional[str],
    ) -> list[ScheduleSession]:
        """Set the group of sessions, or clear it when ``group_id`` is None.

        Placeholder ids resolve to their recurring template. Updating a
        template also updates its stored instances (same student, weekday
        and start time).

        Args:
            session_ids: Stored, placeholder or template session ids.
            group_id: The group to join, or None to leave any group.
            group_name: Display name of the group.

        Returns:
            list[ScheduleSession]: The updated templates and stored sessions.

        Raises:
            ValueError: If any session is not found.
        """
        ...
