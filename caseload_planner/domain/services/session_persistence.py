"""Promotion of placeholder sessions to persisted sessions."""

import asyncio
import logging
from typing import Iterable

from ..entities.schedule_session import (
    PendingSessionId,
    PersistedSessionId,
    ScheduleSession,
    SessionIdentity,
    is_temporary_id,
)
from ..interfaces.session_source import SessionPersistence

logger = logging.getLogger(__name__)


def session_identity(session: ScheduleSession) -> SessionIdentity:
    if is_temporary_id(session.id):
        return PendingSessionId(local_id=session.id)
    return PersistedSessionId(remote_id=session.id)


class SessionPersistenceCoordinator:
    """Write-once temp-id to persisted-id promotion.

    Concurrent callers asking for the same placeholder share one in-flight
    persistence call, and later callers reuse its result, so a placeholder
    never produces two stored rows. A failed attempt is forgotten so the
    next caller can retry.
    """

    def __init__(self, persistence: SessionPersistence):
        self.persistence = persistence
        self._resolved: dict[str, ScheduleSession] = {}
        self._in_flight: dict[str, asyncio.Task] = {}

    def resolved_id(self, local_id: str) -> str:
        """Persisted id for a placeholder already promoted, else the id unchanged."""
        resolved = self._resolved.get(local_id)
        return resolved.id if resolved else local_id

    async def ensure_persisted(self, session: ScheduleSession) -> ScheduleSession:
        identity = session_identity(session)
        if isinstance(identity, PersistedSessionId):
            return session

        local_id = identity.local_id
        if local_id in self._resolved:
            return self._resolved[local_id]

        task = self._in_flight.get(local_id)
        if task is None:
            task = asyncio.create_task(self._persist(session))
            self._in_flight[local_id] = task

        return await asyncio.shield(task)

    async def ensure_all_persisted(self, sessions: Iterable[ScheduleSession]) -> list[ScheduleSession]:
        """Persist every placeholder in ``sessions``; order is preserved."""
        return list(await asyncio.gather(*(self.ensure_persisted(s) for s in sessions)))

    async def _persist(self, session: ScheduleSession) -> ScheduleSession:
        local_id = session.id
        try:
            persisted = await self.persistence.persist_session(session)
            if is_temporary_id(persisted.id):
                raise ValueError(f"Persistence returned temporary id {persisted.id} for {local_id}")
            self._resolved[local_id] = persisted
            logger.info(f"Persisted session {local_id} as {persisted.id}")
            return persisted
        except Exception as e:
            logger.error(f"Error persisting session {local_id}: {e}")
            raise
        finally:
            self._in_flight.pop(local_id, None)
