"""Tests for the curriculum progression state machine."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from caseload_planner.domain.entities import (
    CurriculumTracking,
    CurriculumType,
    GroupTarget,
    ProgressionState,
    PromptAnswer,
    SessionTarget,
)
from caseload_planner.domain.services.curriculum_progression import (
    CurriculumProgression,
    lookup_previous,
    next_lesson,
    tracking_target,
)
from caseload_planner.domain.services.session_persistence import SessionPersistenceCoordinator
from caseload_planner.infrastructure.local_curriculum_repository import LocalCurriculumRepository
from caseload_planner.infrastructure.local_session_store import LocalSessionStore

MONDAY = date(2026, 10, 12)
NEXT_MONDAY = MONDAY + timedelta(days=7)


@pytest.fixture
def repository():
    return LocalCurriculumRepository()


@pytest.fixture
def instance(make_session):
    """Factory for weekly instances of one recurring session."""

    def _instance(session_date: date, id: str = None):
        return make_session(id or f"instance-{session_date.isoformat()}", session_date=session_date)

    return _instance


def test_next_lesson():
    assert next_lesson(4, PromptAnswer.YES) == 5
    assert next_lesson(4, "no") == 4


def test_next_lesson_rejects_non_positive():
    with pytest.raises(ValueError):
        next_lesson(0, "yes")


class TestTrackingTarget:
    """Test cases for tracking_target."""

    def test_session_wins_over_group(self, make_session):
        target = tracking_target(session=make_session(), group_id="g1")

        assert isinstance(target, SessionTarget)

    def test_group(self, make_session):
        target = tracking_target(group_id="g1", group_sessions=[make_session()])

        assert isinstance(target, GroupTarget)
        assert target.target_id == "g1"

    def test_neither_is_rejected(self):
        with pytest.raises(ValueError, match="Either sessionId or groupId is required"):
            tracking_target()


class TestSessionProgression:
    """Test cases for an individual session's progression."""

    @pytest.mark.asyncio
    async def test_first_instance_is_uninitialized(self, repository, instance):
        progression = CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository)

        assert await progression.load() == ProgressionState.UNINITIALIZED
        assert progression.prompt is None

    @pytest.mark.asyncio
    async def test_manual_save_tracks_instance(self, repository, instance):
        session = instance(MONDAY)
        progression = CurriculumProgression(SessionTarget(session=session), MONDAY, repository)
        await progression.load()

        record = await progression.save(CurriculumType.SPIRE, "3", 5)

        assert progression.state == ProgressionState.TRACKED
        assert record.session_id == session.id
        assert record.session_date == MONDAY
        assert record.template_key == session.template_key
        assert record.current_lesson == 5
        assert not record.prompt_answered

    @pytest.mark.asyncio
    async def test_save_defaults_lesson_to_one(self, repository, instance):
        progression = CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository)

        record = await progression.save("Reveal Math", "K")

        assert record.current_lesson == 1

    @pytest.mark.asyncio
    async def test_empty_fields_never_delete(self, repository, instance):
        progression = CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository)
        await progression.save(CurriculumType.SPIRE, "3", 5)

        result = await progression.save(None, None)

        assert result.current_lesson == 5
        assert len(repository.get_all_records()) == 1

    @pytest.mark.asyncio
    async def test_invalid_level_is_rejected(self, repository, instance):
        progression = CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository)

        with pytest.raises(ValueError):
            await progression.save(CurriculumType.REVEAL_MATH, "7")
        assert repository.get_all_records() == {}

    @pytest.mark.asyncio
    async def test_later_instance_is_prompted(self, repository, instance):
        first = CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository)
        await first.save(CurriculumType.SPIRE, "3", 5)

        later = CurriculumProgression(SessionTarget(session=instance(NEXT_MONDAY)), NEXT_MONDAY, repository)

        assert await later.load() == ProgressionState.PENDING_PROMPT
        assert later.prompt.previous_lesson == 5
        assert later.prompt.previous_session_date == MONDAY
        assert later.prompt.question == "Did the student complete Lesson 5?"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answer,expected", [("yes", 6), ("no", 5)])
    async def test_answering_prompt(self, repository, instance, answer, expected):
        await CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository).save(
            CurriculumType.SPIRE, "3", 5
        )
        later_session = instance(NEXT_MONDAY)
        later = CurriculumProgression(SessionTarget(session=later_session), NEXT_MONDAY, repository)
        await later.load()

        record = await later.answer_prompt(answer)

        assert record.current_lesson == expected
        assert record.prompt_answered
        assert record.curriculum_level == "3"
        assert later.state == ProgressionState.TRACKED

        reloaded = CurriculumProgression(SessionTarget(session=later_session), NEXT_MONDAY, repository)
        assert await reloaded.load() == ProgressionState.TRACKED
        assert reloaded.current.current_lesson == expected

    @pytest.mark.asyncio
    async def test_answer_without_pending_prompt(self, repository, instance):
        progression = CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository)
        await progression.load()

        with pytest.raises(ValueError):
            await progression.answer_prompt("yes")

    @pytest.mark.asyncio
    async def test_other_templates_do_not_leak(self, repository, instance, make_session):
        await CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository).save(
            CurriculumType.SPIRE, "3", 5
        )
        other_student = make_session("other", student_id="student-2", session_date=NEXT_MONDAY)

        progression = CurriculumProgression(SessionTarget(session=other_student), NEXT_MONDAY, repository)

        assert await progression.load() == ProgressionState.UNINITIALIZED

    @pytest.mark.asyncio
    async def test_advance_and_retreat(self, repository, instance):
        progression = CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository)
        await progression.save(CurriculumType.SPIRE, "Foundations", 1)

        assert (await progression.advance()).current_lesson == 2
        assert (await progression.retreat()).current_lesson == 1
        assert (await progression.retreat()).current_lesson == 1
        assert len(repository.get_all_records()) == 1

    @pytest.mark.asyncio
    async def test_advance_requires_tracking(self, repository, instance):
        progression = CurriculumProgression(SessionTarget(session=instance(MONDAY)), MONDAY, repository)

        with pytest.raises(ValueError):
            await progression.advance()

    @pytest.mark.asyncio
    async def test_seeded_curriculum_skips_lookup(self, instance):
        repository = MagicMock()
        repository.get_current = AsyncMock()
        repository.find_previous = AsyncMock()
        seeded = CurriculumTracking(curriculum_type=CurriculumType.SPIRE, curriculum_level="2", current_lesson=7)

        progression = CurriculumProgression(
            SessionTarget(session=instance(MONDAY)), MONDAY, repository, initial_curriculum=seeded
        )

        assert await progression.load() == ProgressionState.TRACKED
        assert progression.current.current_lesson == 7
        repository.get_current.assert_not_awaited()
        repository.find_previous.assert_not_awaited()


class TestGroupProgression:
    """Test cases for a group's progression."""

    @pytest.mark.asyncio
    async def test_group_records_are_per_date(self, repository, make_session):
        members = [make_session("a", group_id="g1"), make_session("b", group_id="g1", student_id="student-2")]
        first = CurriculumProgression(GroupTarget(group_id="g1", sessions=members), MONDAY, repository)
        record = await first.save(CurriculumType.REVEAL_MATH, "2", 3)

        assert record.group_id == "g1"
        assert record.session_id is None

        later = CurriculumProgression(GroupTarget(group_id="g1", sessions=members), NEXT_MONDAY, repository)
        assert await later.load() == ProgressionState.PENDING_PROMPT

        same_day = CurriculumProgression(GroupTarget(group_id="g1", sessions=members), MONDAY, repository)
        assert await same_day.load() == ProgressionState.TRACKED

    @pytest.mark.asyncio
    async def test_most_recent_prior_instance_is_used(self, repository):
        target = GroupTarget(group_id="g1")
        for weeks_back, lesson in [(3, 1), (1, 4), (2, 2)]:
            await repository.save(CurriculumTracking(
                curriculum_type=CurriculumType.SPIRE,
                curriculum_level="1",
                current_lesson=lesson,
                group_id="g1",
                session_date=NEXT_MONDAY - timedelta(days=7 * weeks_back),
            ))

        previous = await lookup_previous(repository, target, NEXT_MONDAY)

        assert previous.data.current_lesson == 4
        assert not previous.is_first_instance
        assert not previous.is_current_instance

    @pytest.mark.asyncio
    async def test_writing_persists_placeholder_members(self, repository, make_session):
        store = LocalSessionStore()
        coordinator = SessionPersistenceCoordinator(store)
        members = [
            make_session("temp-a-2026-10-12", group_id="g1", session_date=MONDAY),
            make_session("temp-b-2026-10-12", group_id="g1", student_id="student-2", session_date=MONDAY),
        ]

        progression = CurriculumProgression(GroupTarget(group_id="g1", sessions=members), MONDAY, repository, coordinator)
        await progression.save(CurriculumType.SPIRE, "1", 1)

        stored = store.get_all_sessions()
        assert len(stored) == 2
        assert all(not sid.startswith("temp-") for sid in stored)
        assert all(not s.id.startswith("temp-") for s in progression.target.sessions)


@pytest.mark.asyncio
async def test_placeholder_session_record_uses_persisted_id(repository, make_session):
    store = LocalSessionStore()
    coordinator = SessionPersistenceCoordinator(store)
    placeholder = make_session("temp-template-1-2026-10-12", session_date=MONDAY)

    progression = CurriculumProgression(SessionTarget(session=placeholder), MONDAY, repository, coordinator)
    record = await progression.save(CurriculumType.SPIRE, "1", 2)

    assert not record.session_id.startswith("temp-")
    assert coordinator.resolved_id(placeholder.id) == record.session_id
