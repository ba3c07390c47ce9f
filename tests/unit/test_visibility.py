"""Tests for delegation classification and visibility filtering."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from caseload_planner.domain.entities import (
    DelegationCategory,
    DeliveredBy,
    Student,
    UserRole,
    ViewMode,
)
from caseload_planner.domain.services.visibility import (
    VisibilityService,
    can_user_access_session,
    can_user_group_session,
    classify,
    effective_view_mode,
    filter_sessions,
    missing_student_ids,
)


@pytest.fixture
def caseload(make_session):
    """One session per delegation situation, from the point of view of "me"."""
    return {
        "own": make_session("own"),
        "own_to_sea": make_session("own_to_sea", assigned_to_sea_id="sea-1"),
        "own_to_specialist": make_session("own_to_specialist", assigned_to_specialist_id="other"),
        "from_other": make_session("from_other", provider_id="other", assigned_to_specialist_id="me"),
        "self_delegated": make_session("self_delegated", assigned_to_specialist_id="me"),
        "unrelated": make_session("unrelated", provider_id="other"),
    }


def _visible_ids(caseload, view_mode, role=None, user_id="me"):
    return {s.id for s in filter_sessions(caseload.values(), user_id, view_mode, role)}


class TestClassify:
    """Test cases for classify."""

    def test_categories(self, caseload):
        assert classify(caseload["own"], "me") == DelegationCategory.OWN
        assert classify(caseload["own_to_sea"], "me") == DelegationCategory.ASSIGNED_TO_SEA
        assert classify(caseload["own_to_specialist"], "me") == DelegationCategory.ASSIGNED_TO_SPECIALIST
        assert classify(caseload["from_other"], "me") == DelegationCategory.ASSIGNED_TO_ME

    def test_self_delegation_counts_as_own(self, caseload):
        assert classify(caseload["self_delegated"], "me") == DelegationCategory.OWN

    def test_sea_wins_over_specialist_when_both_set(self, make_session):
        session = make_session(assigned_to_sea_id="sea-1", assigned_to_specialist_id="other")

        assert classify(session, "me") == DelegationCategory.ASSIGNED_TO_SEA

    def test_assigned_to_me_wins_over_sea(self, make_session):
        session = make_session(provider_id="other", assigned_to_specialist_id="me", assigned_to_sea_id="sea-1")

        assert classify(session, "me") == DelegationCategory.ASSIGNED_TO_ME

    def test_sessions_of_others_are_unrelated(self, caseload):
        assert classify(caseload["unrelated"], "me") == DelegationCategory.UNRELATED


class TestFilterSessions:
    """Test cases for filter_sessions per view mode."""

    def test_my_sessions(self, caseload):
        assert _visible_ids(caseload, ViewMode.MY_SESSIONS) == {"own", "from_other", "self_delegated"}

    def test_all_sessions(self, caseload):
        assert _visible_ids(caseload, ViewMode.ALL_SESSIONS) == {
            "own", "own_to_sea", "own_to_specialist", "from_other", "self_delegated",
        }

    def test_specialist_view(self, caseload):
        assert _visible_ids(caseload, ViewMode.SPECIALIST) == {"own_to_specialist"}

    def test_sea_view_for_provider(self, caseload):
        assert _visible_ids(caseload, ViewMode.SEA, UserRole.RESOURCE) == {"own_to_sea"}

    def test_assigned_to_me_view(self, caseload):
        assert _visible_ids(caseload, ViewMode.ASSIGNED_TO_ME) == {"from_other"}

    def test_sea_role_is_forced_into_sea_view(self, caseload):
        visible = _visible_ids(caseload, ViewMode.ALL_SESSIONS, UserRole.SEA, user_id="sea-1")

        assert visible == {"own_to_sea"}

    def test_accepts_string_modes(self, caseload):
        assert _visible_ids(caseload, "assigned-to-me", "resource") == {"from_other"}

    def test_preserves_input_order(self, make_session):
        sessions = [make_session(str(i)) for i in range(5)]

        assert [s.id for s in filter_sessions(sessions, "me")] == ["0", "1", "2", "3", "4"]

    def test_is_pure(self, caseload):
        before = [s.model_copy() for s in caseload.values()]

        filter_sessions(caseload.values(), "me", ViewMode.ALL_SESSIONS)

        assert list(caseload.values()) == before

    def test_double_delegation_lands_in_sea_view_only(self, make_session):
        both = [make_session("both", assigned_to_sea_id="sea-1", assigned_to_specialist_id="other")]

        assert filter_sessions(both, "me", ViewMode.SPECIALIST) == []
        assert [s.id for s in filter_sessions(both, "me", ViewMode.SEA, UserRole.RESOURCE)] == ["both"]
        assert filter_sessions(both, "me", ViewMode.MY_SESSIONS) == []


def test_effective_view_mode():
    assert effective_view_mode(UserRole.SEA, ViewMode.ALL_SESSIONS) == ViewMode.SEA
    assert effective_view_mode("specialist", "specialist") == ViewMode.SPECIALIST
    assert effective_view_mode(None, ViewMode.ASSIGNED_TO_ME) == ViewMode.ASSIGNED_TO_ME


class TestGroupingPermission:
    """Test cases for can_user_group_session."""

    def test_provider_delivered_session_by_owner(self, make_session):
        assert can_user_group_session(make_session(), "me")

    def test_owner_cannot_group_session_a_sea_delivers(self, make_session):
        session = make_session(assigned_to_sea_id="sea-1", delivered_by=DeliveredBy.SEA)

        assert not can_user_group_session(session, "me")
        assert can_user_group_session(session, "sea-1")

    def test_specialist_delivered(self, make_session):
        session = make_session(assigned_to_specialist_id="other", delivered_by=DeliveredBy.SPECIALIST)

        assert can_user_group_session(session, "other")
        assert not can_user_group_session(session, "me")

    def test_no_user(self, make_session):
        assert not can_user_group_session(make_session(), None)


def test_can_user_access_session(caseload):
    assert can_user_access_session(caseload["own_to_sea"], "sea-1")
    assert can_user_access_session(caseload["from_other"], "me")
    assert not can_user_access_session(caseload["unrelated"], "me")


def test_missing_student_ids_in_first_seen_order(make_session):
    sessions = [
        make_session("a", student_id="s2"),
        make_session("b", student_id="s1"),
        make_session("c", student_id="s2"),
        make_session("d", student_id="known"),
    ]

    assert missing_student_ids(sessions, {"known": Student(id="known", initials="KN")}) == ["s2", "s1"]


@pytest.fixture
def student_directory():
    directory = MagicMock()
    directory.get_students_by_ids = AsyncMock(return_value=[Student(id="student-2", initials="BB")])
    return directory


class TestVisibilityService:
    """Test cases for VisibilityService."""

    @pytest.mark.asyncio
    async def test_backfills_missing_students(self, make_session, student_directory):
        service = VisibilityService(student_directory)
        known = {"student-1": Student(id="student-1", initials="AA")}
        sessions = [make_session("a"), make_session("b", student_id="student-2")]

        visible, students = await service.visible_sessions(sessions, "me", ViewMode.MY_SESSIONS, None, known)

        assert [s.id for s in visible] == ["a", "b"]
        assert set(students) == {"student-1", "student-2"}
        student_directory.get_students_by_ids.assert_awaited_once_with(["student-2"])

    @pytest.mark.asyncio
    async def test_caller_students_win(self, make_session, student_directory):
        student_directory.get_students_by_ids.return_value = [Student(id="student-1", initials="ZZ")]
        service = VisibilityService(student_directory)
        known = {"student-1": Student(id="student-1", initials="AA")}

        merged = await service.fill_missing_students([make_session()], known)

        assert merged["student-1"].initials == "AA"
        student_directory.get_students_by_ids.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lookup_failure_keeps_original_students(self, make_session, student_directory):
        student_directory.get_students_by_ids.side_effect = RuntimeError("directory down")
        service = VisibilityService(student_directory)

        visible, students = await service.visible_sessions([make_session()], "me", ViewMode.MY_SESSIONS, None, {})

        assert len(visible) == 1
        assert students == {}

    @pytest.mark.asyncio
    async def test_no_user_yields_empty_set(self, make_session, student_directory):
        service = VisibilityService(student_directory)

        visible, students = await service.visible_sessions([make_session()], None, ViewMode.MY_SESSIONS, None, {})

        assert visible == []
        assert students == {}
