"""Curriculum progression across calendar instances of a session or group.

Each (session or group, session_date) instance moves through three states:

* ``UNINITIALIZED`` - no record for this instance and none for any earlier
  instance. The user may pick a curriculum manually.
* ``PENDING_PROMPT`` - no record for this instance, but an earlier instance
  has one. The user is asked whether that lesson was completed.
* ``TRACKED`` - this instance has its own record.

Answering the prompt writes a record for the instance, so reloading the same
instance always comes back as ``TRACKED``.
"""

import logging
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..entities.curriculum import (
    CurriculumPlacement,
    CurriculumPrompt,
    CurriculumTarget,
    CurriculumTracking,
    CurriculumType,
    GroupTarget,
    PreviousCurriculum,
    ProgressionState,
    PromptAnswer,
    SessionTarget,
)
from ..entities.schedule_session import ScheduleSession
from ..interfaces.curriculum_repository import CurriculumRepository
from .session_persistence import SessionPersistenceCoordinator

logger = logging.getLogger(__name__)


def next_lesson(previous_lesson: int, answer: Union[PromptAnswer, str]) -> int:
    """Lesson number for the new instance after answering the prompt."""
    if previous_lesson < 1:
        raise ValueError("previousLesson must be a positive integer")
    if PromptAnswer(answer) == PromptAnswer.YES:
        return previous_lesson + 1
    return previous_lesson


def tracking_target(
    session: Optional[ScheduleSession] = None,
    group_id: Optional[str] = None,
    group_sessions: Sequence[ScheduleSession] = (),
) -> CurriculumTarget:
    """Pick the tracking target; a session wins over a group when both are given."""
    if session is not None:
        return SessionTarget(session=session)
    if group_id:
        return GroupTarget(group_id=group_id, sessions=list(group_sessions))
    raise ValueError("Either sessionId or groupId is required")


async def lookup_previous(
    repository: CurriculumRepository,
    target: CurriculumTarget,
    session_date: date,
) -> PreviousCurriculum:
    """Return this instance's own record if it has one, else the latest prior record."""
    current = await repository.get_current(target, session_date)
    if current is not None:
        return PreviousCurriculum(
            data=current,
            previous_session_date=current.session_date,
            is_first_instance=False,
            is_current_instance=True,
        )

    previous = await repository.find_previous(target, session_date)
    return PreviousCurriculum(
        data=previous,
        previous_session_date=previous.session_date if previous else None,
        is_first_instance=previous is None,
    )


class CurriculumProgression:
    """State machine for one curriculum instance.

    Passing ``initial_curriculum`` seeds the machine as ``TRACKED`` and skips
    the prompt lookup entirely; the caller already fetched the record.
    """

    def __init__(
        self,
        target: CurriculumTarget,
        session_date: date,
        repository: CurriculumRepository,
        persistence: Optional[SessionPersistenceCoordinator] = None,
        initial_curriculum: Optional[CurriculumTracking] = None,
    ):
        self.target = target
        self.session_date = session_date
        self.repository = repository
        self.persistence = persistence

        self.current: Optional[CurriculumTracking] = initial_curriculum
        self.prompt: Optional[CurriculumPrompt] = None
        self._seeded = initial_curriculum is not None
        self.state = ProgressionState.TRACKED if self._seeded else ProgressionState.UNINITIALIZED

    async def load(self) -> ProgressionState:
        """Resolve the state for this instance from stored records."""
        if self._seeded:
            return self.state

        lookup = await lookup_previous(self.repository, self.target, self.session_date)
        if lookup.is_current_instance:
            self.current = lookup.data
            self.prompt = None
            self.state = ProgressionState.TRACKED
        elif lookup.data is not None:
            self.prompt = CurriculumPrompt(
                curriculum_type=lookup.data.curriculum_type,
                curriculum_level=lookup.data.curriculum_level,
                previous_lesson=lookup.data.current_lesson,
                previous_session_date=lookup.previous_session_date,
            )
            self.state = ProgressionState.PENDING_PROMPT
        else:
            self.state = ProgressionState.UNINITIALIZED

        logger.debug(f"Curriculum for {self.target.mode} {self.target.target_id} on {self.session_date}: {self.state.value}")
        return self.state

    async def answer_prompt(self, answer: Union[PromptAnswer, str]) -> CurriculumTracking:
        """Record the answer to the pending prompt and move to ``TRACKED``.

        Raises:
            ValueError: If no prompt is pending for this instance.
        """
        if self.state != ProgressionState.PENDING_PROMPT or self.prompt is None:
            raise ValueError(f"No pending curriculum prompt for {self.target.mode} {self.target.target_id}")

        placement = CurriculumPlacement(
            curriculum_type=self.prompt.curriculum_type,
            curriculum_level=self.prompt.curriculum_level,
            current_lesson=next_lesson(self.prompt.previous_lesson, answer),
        )
        return await self._write(placement, prompt_answered=True)

    async def save(
        self,
        curriculum_type: Optional[Union[CurriculumType, str]] = None,
        curriculum_level: Optional[str] = None,
        current_lesson: Optional[int] = None,
    ) -> Optional[CurriculumTracking]:
        """Save a manually chosen placement.

        Empty curriculum fields never delete an existing record: the current
        record (or None) is returned unchanged.
        """
        if not curriculum_type or not curriculum_level:
            return self.current

        lesson = current_lesson if current_lesson is not None else 1
        placement = CurriculumPlacement(
            curriculum_type=CurriculumType(curriculum_type),
            curriculum_level=curriculum_level,
            current_lesson=lesson,
        )
        answered = self.current.prompt_answered if self.current else False
        return await self._write(placement, prompt_answered=answered)

    async def advance(self, step: int = 1) -> CurriculumTracking:
        """Move the tracked lesson forward (or back with a negative step), never below 1."""
        if self.state != ProgressionState.TRACKED or self.current is None:
            raise ValueError(f"Curriculum for {self.target.mode} {self.target.target_id} is not tracked yet")

        placement = self.current.placement().model_copy(
            update={"current_lesson": max(1, self.current.current_lesson + step)}
        )
        return await self._write(placement, prompt_answered=self.current.prompt_answered)

    async def retreat(self) -> CurriculumTracking:
        return await self.advance(-1)

    async def _resolve_target(self) -> CurriculumTarget:
        if self.persistence is None:
            return self.target

        if isinstance(self.target, SessionTarget):
            persisted = await self.persistence.ensure_persisted(self.target.session)
            return SessionTarget(session=persisted)

        persisted_members = await self.persistence.ensure_all_persisted(self.target.sessions)
        return GroupTarget(group_id=self.target.group_id, sessions=persisted_members)

    async def _write(self, placement: CurriculumPlacement, prompt_answered: bool) -> CurriculumTracking:
        self.target = await self._resolve_target()

        if self.current is not None:
            record = self.current.model_copy(
                update={
                    **placement.model_dump(),
                    "prompt_answered": prompt_answered,
                    "updated_at": datetime.utcnow(),
                }
            )
        elif isinstance(self.target, SessionTarget):
            record = CurriculumTracking(
                **placement.model_dump(),
                session_id=self.target.session.id,
                session_date=self.session_date,
                template_key=self.target.session.template_key,
                prompt_answered=prompt_answered,
            )
        else:
            record = CurriculumTracking(
                **placement.model_dump(),
                group_id=self.target.group_id,
                session_date=self.session_date,
                prompt_answered=prompt_answered,
            )

        saved = await self.repository.save(record)
        self.current = saved
        self.prompt = None
        self.state = ProgressionState.TRACKED
        logger.info(
            f"Curriculum tracked for {self.target.mode} {self.target.target_id} on {self.session_date}: "
            f"{saved.curriculum_type.value} {saved.curriculum_level} lesson {saved.current_lesson}"
        )
        return saved
