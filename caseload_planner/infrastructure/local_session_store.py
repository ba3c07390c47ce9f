"""Local in-memory session source and session persistence."""

import uuid
from datetime import date, timedelta
from typing import Dict, Optional, Sequence

from ..domain.entities.schedule_session import TEMP_ID_PREFIX, ScheduleSession, is_temporary_id
from ..domain.interfaces.session_source import SessionPersistence, SessionSource


class LocalSessionStore(SessionSource, SessionPersistence):
    """Local in-memory implementation of the session source.

    Holds recurring templates (no ``session_date``) and stored instances.
    Range queries expand templates into placeholder instances for each day
    that does not already have a stored instance; placeholder ids are derived
    from the template id and date, so repeated queries return the same ids.
    """

    def __init__(self):
        """Initialize the store with empty dictionaries."""
        self._sessions: Dict[str, ScheduleSession] = {}
        self._promoted: Dict[str, str] = {}

    def add_session(self, session: ScheduleSession) -> None:
        """Add or replace a template or a stored instance."""
        self._sessions[session.id] = session

    def clear(self) -> None:
        self._sessions.clear()
        self._promoted.clear()

    def get_all_sessions(self) -> Dict[str, ScheduleSession]:
        return self._sessions.copy()

    async def fetch_sessions(
        self,
        provider_id: str,
        start_date: date,
        end_date: date,
        role: Optional[str] = None,
    ) -> list[ScheduleSession]:
        """Return templates expanded over the range plus stored instances in it.

        Sessions without a weekday are returned once, as unscheduled entries.
        """
        related = [s for s in self._sessions.values() if self._is_related(s, provider_id)]
        instances = [s for s in related if s.session_date is not None and start_date <= s.session_date <= end_date]
        templates = [s for s in related if s.session_date is None]

        existing = {(s.student_id, s.session_date, (s.start_time or "")[:5]) for s in instances}
        sessions = list(instances)

        current = start_date
        while current <= end_date:
            for template in templates:
                if template.day_of_week != current.isoweekday():
                    continue
                key = (template.student_id, current, (template.start_time or "")[:5])
                if key in existing:
                    continue
                sessions.append(template.model_copy(update={
                    "id": f"{TEMP_ID_PREFIX}{template.id}-{current.isoformat()}",
                    "session_date": current,
                }))
            current += timedelta(days=1)

        sessions.extend(t for t in templates if t.day_of_week is None)
        return sessions

    async def get_session(self, session_id: str) -> ScheduleSession:
        """Retrieve a stored session, or rebuild a placeholder from its template.

        Raises:
            ValueError: If the session is not found.
        """
        session_id = self._promoted.get(session_id, session_id)
        if session_id in self._sessions:
            return self._sessions[session_id]

        placeholder = self._placeholder(session_id)
        if placeholder is None:
            raise ValueError(f"Session with id {session_id} not found")
        return placeholder

    async def persist_session(self, session: ScheduleSession) -> ScheduleSession:
        """Store a placeholder instance, idempotently per placeholder and per instance.

        Raises:
            ValueError: If the session has no ``session_date`` (templates are never promoted).
        """
        if not is_temporary_id(session.id):
            return session
        if session.session_date is None:
            raise ValueError(f"Cannot save instance {session.id} without session_date")

        if session.id in self._promoted:
            return self._sessions[self._promoted[session.id]]

        for stored in self._sessions.values():
            if (
                stored.session_date == session.session_date
                and stored.student_id == session.student_id
                and (stored.start_time or "")[:5] == (session.start_time or "")[:5]
                and stored.provider_id == session.provider_id
            ):
                self._promoted[session.id] = stored.id
                return stored

        persisted = session.model_copy(update={"id": str(uuid.uuid4())})
        self._sessions[persisted.id] = persisted
        self._promoted[session.id] = persisted.id
        return persisted

    async def update_group(
        self,
        session_ids: Sequence[str],
        group_id: Optional[str],
        group_name: Optional[str],
    ) -> list[ScheduleSession]:
        """Set or clear the group of stored sessions and their instances.

        Raises:
            ValueError: If any session is not found.
        """
        targets = [await self._stored_row(session_id) for session_id in session_ids]
        changes = {"group_id": group_id, "group_name": group_name if group_id else None}

        updated = []
        for target in targets:
            updated.append(self._replace(target, changes))
            if target.session_date is not None:
                continue
            for stored in list(self._sessions.values()):
                if (
                    stored.session_date is not None
                    and stored.provider_id == target.provider_id
                    and stored.student_id == target.student_id
                    and stored.day_of_week == target.day_of_week
                    and (stored.start_time or "")[:5] == (target.start_time or "")[:5]
                ):
                    self._replace(stored, changes)
        return updated

    async def _stored_row(self, session_id: str) -> ScheduleSession:
        session = await self.get_session(session_id)
        if session.id in self._sessions:
            return self._sessions[session.id]
        # placeholder: the template it was expanded from
        return self._sessions[self._template_id(session_id)]

    def _replace(self, session: ScheduleSession, changes: dict) -> ScheduleSession:
        updated = session.model_copy(update=changes)
        self._sessions[session.id] = updated
        return updated

    @staticmethod
    def _template_id(session_id: str) -> str:
        # "temp-<template id>-YYYY-MM-DD"
        return session_id[len(TEMP_ID_PREFIX):-11]

    def _placeholder(self, session_id: str) -> Optional[ScheduleSession]:
        if not is_temporary_id(session_id):
            return None
        template_id, day = self._template_id(session_id), session_id[-10:]
        template = self._sessions.get(template_id)
        if template is None or template.session_date is not None:
            return None
        try:
            session_date = date.fromisoformat(day)
        except ValueError:
            return None
        return template.model_copy(update={"id": session_id, "session_date": session_date})

    @staticmethod
    def _is_related(session: ScheduleSession, user_id: str) -> bool:
        return user_id in (
            session.provider_id,
            session.assigned_to_specialist_id,
            session.assigned_to_sea_id,
        )
