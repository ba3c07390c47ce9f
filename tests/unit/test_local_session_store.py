"""Tests for the local session store."""

from datetime import date

import pytest

from caseload_planner.infrastructure.local_session_store import LocalSessionStore

MONDAY = date(2026, 10, 12)
FRIDAY = date(2026, 10, 16)


@pytest.fixture
def store(make_session):
    store = LocalSessionStore()
    store.add_session(make_session("tmpl-mon", day_of_week=1))
    store.add_session(make_session("tmpl-wed", student_id="student-2", day_of_week=3, start_time="10:00", end_time="10:30"))
    store.add_session(make_session("tmpl-floating", student_id="student-3", day_of_week=None))
    store.add_session(make_session("tmpl-other", provider_id="other", day_of_week=2))
    return store


class TestFetchSessions:
    """Test cases for fetch_sessions."""

    @pytest.mark.asyncio
    async def test_templates_expand_to_placeholders(self, store):
        sessions = await store.fetch_sessions("me", MONDAY, FRIDAY)
        by_id = {s.id: s for s in sessions}

        assert "temp-tmpl-mon-2026-10-12" in by_id
        assert "temp-tmpl-wed-2026-10-14" in by_id
        assert by_id["temp-tmpl-wed-2026-10-14"].session_date == date(2026, 10, 14)

    @pytest.mark.asyncio
    async def test_placeholder_ids_are_stable(self, store):
        first = {s.id for s in await store.fetch_sessions("me", MONDAY, FRIDAY)}
        second = {s.id for s in await store.fetch_sessions("me", MONDAY, FRIDAY)}

        assert first == second

    @pytest.mark.asyncio
    async def test_unscheduled_templates_returned_once(self, store):
        sessions = await store.fetch_sessions("me", MONDAY, FRIDAY)

        assert [s.id for s in sessions if s.day_of_week is None] == ["tmpl-floating"]

    @pytest.mark.asyncio
    async def test_other_providers_sessions_excluded(self, store):
        sessions = await store.fetch_sessions("me", MONDAY, FRIDAY)

        assert all(s.provider_id == "me" for s in sessions)

    @pytest.mark.asyncio
    async def test_delegate_sees_delegated_sessions(self, store, make_session):
        store.add_session(make_session("tmpl-sea", provider_id="other", assigned_to_sea_id="sea-1", day_of_week=4))

        sessions = await store.fetch_sessions("sea-1", MONDAY, FRIDAY, role="sea")

        assert [s.id for s in sessions] == ["temp-tmpl-sea-2026-10-15"]

    @pytest.mark.asyncio
    async def test_stored_instance_replaces_placeholder(self, store, make_session):
        store.add_session(make_session("real-mon", day_of_week=1, session_date=MONDAY))

        sessions = await store.fetch_sessions("me", MONDAY, MONDAY)

        assert [s.id for s in sessions if s.day_of_week == 1] == ["real-mon"]


class TestPersistSession:
    """Test cases for persist_session and get_session."""

    @pytest.mark.asyncio
    async def test_get_session_rebuilds_placeholder(self, store):
        session = await store.get_session("temp-tmpl-mon-2026-10-19")

        assert session.session_date == date(2026, 10, 19)
        assert session.student_id == "student-1"

    @pytest.mark.asyncio
    async def test_get_unknown_session(self, store):
        with pytest.raises(ValueError, match="not found"):
            await store.get_session("nope")
        with pytest.raises(ValueError):
            await store.get_session("temp-missing-2026-10-19")

    @pytest.mark.asyncio
    async def test_persist_is_idempotent(self, store):
        placeholder = await store.get_session("temp-tmpl-mon-2026-10-12")

        first = await store.persist_session(placeholder)
        second = await store.persist_session(placeholder)

        assert first.id == second.id
        assert not first.id.startswith("temp-")
        assert (await store.get_session(placeholder.id)).id == first.id

    @pytest.mark.asyncio
    async def test_persisted_instance_suppresses_placeholder(self, store):
        placeholder = await store.get_session("temp-tmpl-mon-2026-10-12")
        persisted = await store.persist_session(placeholder)

        sessions = await store.fetch_sessions("me", MONDAY, MONDAY)

        assert [s.id for s in sessions if s.day_of_week == 1] == [persisted.id]

    @pytest.mark.asyncio
    async def test_persist_requires_date(self, make_session):
        store = LocalSessionStore()

        with pytest.raises(ValueError, match="session_date"):
            await store.persist_session(make_session("temp-x"))


class TestUpdateGroup:
    """Test cases for update_group."""

    @pytest.mark.asyncio
    async def test_placeholder_ids_group_their_templates(self, store):
        updated = await store.update_group(
            ["temp-tmpl-mon-2026-10-12", "temp-tmpl-wed-2026-10-14"], "group-1", "Blends"
        )

        assert [s.id for s in updated] == ["tmpl-mon", "tmpl-wed"]
        sessions = await store.fetch_sessions("me", MONDAY, FRIDAY)
        assert {s.group_id for s in sessions if s.day_of_week in (1, 3)} == {"group-1"}
        assert {s.group_name for s in sessions if s.day_of_week in (1, 3)} == {"Blends"}

    @pytest.mark.asyncio
    async def test_grouping_a_template_regroups_its_stored_instances(self, store):
        instance = await store.persist_session(await store.get_session("temp-tmpl-mon-2026-10-12"))

        await store.update_group(["tmpl-mon", "tmpl-wed"], "group-1", "Blends")

        assert (await store.get_session(instance.id)).group_id == "group-1"

    @pytest.mark.asyncio
    async def test_clearing_a_group(self, store):
        await store.update_group(["tmpl-mon", "tmpl-wed"], "group-1", "Blends")

        cleared = await store.update_group(["tmpl-mon"], None, "ignored")

        assert cleared[0].group_id is None
        assert cleared[0].group_name is None
        assert (await store.get_session("tmpl-wed")).group_id == "group-1"

    @pytest.mark.asyncio
    async def test_unknown_session_changes_nothing(self, store):
        with pytest.raises(ValueError):
            await store.update_group(["tmpl-mon", "nope"], "group-1", "Blends")

        assert (await store.get_session("tmpl-mon")).group_id is None
