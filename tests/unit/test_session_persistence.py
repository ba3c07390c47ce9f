"""Tests for placeholder session promotion."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from caseload_planner.domain.entities import PendingSessionId, PersistedSessionId
from caseload_planner.domain.services.session_persistence import (
    SessionPersistenceCoordinator,
    session_identity,
)

MONDAY = date(2026, 10, 12)


@pytest.fixture
def persistence():
    """Session persistence whose writes take a moment, like a network call."""
    mock = MagicMock()

    async def persist(session):
        await asyncio.sleep(0.01)
        return session.model_copy(update={"id": f"real-{session.id}"})

    mock.persist_session = AsyncMock(side_effect=persist)
    return mock


@pytest.fixture
def placeholder(make_session):
    return make_session("temp-t1-2026-10-12", session_date=MONDAY)


def test_session_identity(make_session):
    assert session_identity(make_session("temp-x")) == PendingSessionId(local_id="temp-x")
    assert session_identity(make_session("abc")) == PersistedSessionId(remote_id="abc")


class TestSessionPersistenceCoordinator:
    """Test cases for SessionPersistenceCoordinator."""

    @pytest.mark.asyncio
    async def test_persisted_sessions_pass_through(self, persistence, make_session):
        coordinator = SessionPersistenceCoordinator(persistence)
        session = make_session("already-real")

        assert await coordinator.ensure_persisted(session) is session
        persistence.persist_session.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_write(self, persistence, placeholder):
        coordinator = SessionPersistenceCoordinator(persistence)

        results = await asyncio.gather(*(coordinator.ensure_persisted(placeholder) for _ in range(5)))

        assert {r.id for r in results} == {"real-temp-t1-2026-10-12"}
        assert persistence.persist_session.await_count == 1

    @pytest.mark.asyncio
    async def test_later_callers_reuse_result(self, persistence, placeholder):
        coordinator = SessionPersistenceCoordinator(persistence)

        first = await coordinator.ensure_persisted(placeholder)
        second = await coordinator.ensure_persisted(placeholder)

        assert first.id == second.id
        assert persistence.persist_session.await_count == 1
        assert coordinator.resolved_id(placeholder.id) == first.id

    @pytest.mark.asyncio
    async def test_failed_write_can_be_retried(self, persistence, placeholder):
        persistence.persist_session.side_effect = [
            RuntimeError("network"),
            placeholder.model_copy(update={"id": "real-1"}),
        ]
        coordinator = SessionPersistenceCoordinator(persistence)

        with pytest.raises(RuntimeError):
            await coordinator.ensure_persisted(placeholder)
        assert coordinator.resolved_id(placeholder.id) == placeholder.id

        persisted = await coordinator.ensure_persisted(placeholder)
        assert persisted.id == "real-1"

    @pytest.mark.asyncio
    async def test_temporary_id_from_backend_is_an_error(self, persistence, placeholder):
        persistence.persist_session.side_effect = None
        persistence.persist_session.return_value = placeholder
        coordinator = SessionPersistenceCoordinator(persistence)

        with pytest.raises(ValueError):
            await coordinator.ensure_persisted(placeholder)

    @pytest.mark.asyncio
    async def test_ensure_all_persisted_preserves_order(self, persistence, make_session):
        coordinator = SessionPersistenceCoordinator(persistence)
        sessions = [make_session("temp-a", session_date=MONDAY), make_session("b"), make_session("temp-c", session_date=MONDAY)]

        results = await coordinator.ensure_all_persisted(sessions)

        assert [s.id for s in results] == ["real-temp-a", "b", "real-temp-c"]
