"""Lesson plan generation and manual authoring for days, time slots and groups."""

import asyncio
import logging
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

from ..entities.errors import AccessDeniedError
from ..entities.lesson import (
    GenerationSummary,
    Lesson,
    LessonContent,
    LessonRequest,
    LessonResult,
    LessonSource,
    LessonStudent,
    TenantScope,
)
from ..entities.schedule_session import ScheduleSession, Student
from ..interfaces.lesson_generator import LessonGenerator, RetryCallback
from ..interfaces.lesson_repository import LessonRepository
from .request_guard import LatestRequestGuard
from .state_maps import with_entry, without_entry
from .time_slots import group_by_time_slot, is_scheduled, normalize_time, slot_duration_minutes

logger = logging.getLogger(__name__)

SavedLessons = dict[date, dict[str, Lesson]]


def _student_key(students: Iterable[LessonStudent]) -> str:
    return "-".join(sorted(s.id for s in students if s.id))


def lesson_idempotency_key(request: LessonRequest) -> str:
    """Stable key for a single generation request.

    Built only from the lesson date, the time slot and the sorted student
    ids, so a retry of the same logical request maps to the same key.
    """
    lesson_date = request.lesson_date.isoformat() if request.lesson_date else "nd"
    time_slot = request.time_slot or "od"
    return f"single:{lesson_date}:{time_slot}:{_student_key(request.students)}"


def batch_idempotency_key(requests: Sequence[LessonRequest]) -> str:
    parts = []
    for request in requests:
        lesson_date = request.lesson_date.isoformat() if request.lesson_date else "nd"
        time_slot = request.time_slot or "ot"
        parts.append(f"{lesson_date}-{time_slot}-{_student_key(request.students)}")
    return "batch:" + "_".join(parts)


def lesson_students(
    sessions: Iterable[ScheduleSession],
    students: Mapping[str, Student],
) -> list[LessonStudent]:
    """Distinct students of a set of sessions, in session order."""
    result: dict[str, LessonStudent] = {}
    for session in sessions:
        if not session.student_id or session.student_id in result:
            continue
        student = students.get(session.student_id)
        result[session.student_id] = LessonStudent(
            id=session.student_id,
            initials=student.initials if student else "Unknown",
            grade_level=student.grade_level if student else None,
        )
    return list(result.values())


class LessonPlanOrchestrator:
    """Drives lesson generation and manual entry and keeps the saved-lessons map.

    ``saved_lessons`` maps a lesson date to ``{slot_key: Lesson}``. It is only
    ever replaced, never mutated in place, and generated content is merged
    into it by slot key, so out-of-order completions cannot overwrite
    another slot's entry.
    """

    def __init__(
        self,
        generator: LessonGenerator,
        repository: LessonRepository,
        batch_mode: bool = True,
        default_duration: int = 30,
        fetch_delay: float = 0.5,
    ):
        self.generator = generator
        self.repository = repository
        self.batch_mode = batch_mode
        self.default_duration = default_duration
        self.saved_lessons: SavedLessons = {}
        self._load_guard: LatestRequestGuard[list[Lesson]] = LatestRequestGuard(delay=fetch_delay)

    # ===== Request building =====

    def build_requests(
        self,
        lesson_date: date,
        sessions: Iterable[ScheduleSession],
        students: Mapping[str, Student],
        scope: TenantScope,
        teacher_role: str = "resource",
        subject: str = "ELA",
        topic: Optional[str] = None,
    ) -> list[tuple[str, LessonRequest]]:
        """One request per time slot, in chronological slot order."""
        scheduled = [s for s in sessions if is_scheduled(s)]
        requests = []
        for time_slot, slot_sessions in group_by_time_slot(scheduled).items():
            requests.append((
                time_slot,
                self._request(lesson_date, time_slot, slot_sessions, students, scope, teacher_role, subject, topic),
            ))
        return requests

    def _request(
        self,
        lesson_date: date,
        time_slot: str,
        sessions: Sequence[ScheduleSession],
        students: Mapping[str, Student],
        scope: TenantScope,
        teacher_role: str,
        subject: str,
        topic: Optional[str],
    ) -> LessonRequest:
        duration = slot_duration_minutes(time_slot)
        return LessonRequest(
            students=lesson_students(sessions, students),
            subject=subject,
            subject_type=subject.lower(),
            duration=duration if duration > 0 else self.default_duration,
            topic=topic,
            teacher_role=teacher_role,
            school_id=scope.school_id,
            lesson_date=lesson_date,
            time_slot=time_slot,
        )

    # ===== Generation =====

    async def generate_for_day(
        self,
        provider_id: str,
        lesson_date: date,
        sessions: Iterable[ScheduleSession],
        students: Mapping[str, Student],
        scope: TenantScope,
        teacher_role: str = "resource",
        subject: str = "ELA",
        topic: Optional[str] = None,
        on_retry: Optional[RetryCallback] = None,
    ) -> GenerationSummary:
        """Generate a lesson for every time slot of a day.

        Slots that fail are counted and reported; slots that succeed are
        persisted and merged regardless of the failures.
        """
        requests = self.build_requests(lesson_date, sessions, students, scope, teacher_role, subject, topic)
        summary = GenerationSummary(lesson_date=lesson_date)
        if not requests:
            logger.info(f"No scheduled sessions to generate lessons for on {lesson_date}")
            return summary

        if self.batch_mode:
            results = await self._generate_batch([r for _, r in requests], on_retry)
        else:
            results = await self._generate_each([r for _, r in requests], on_retry)

        for (time_slot, request), result in zip(requests, results):
            await self._record_result(summary, provider_id, lesson_date, time_slot, None, request, result, scope)

        logger.info(f"Lesson generation for {lesson_date}: {summary.message}")
        return summary

    async def generate_for_group(
        self,
        provider_id: str,
        lesson_date: date,
        group_id: str,
        sessions: Sequence[ScheduleSession],
        students: Mapping[str, Student],
        scope: TenantScope,
        teacher_role: str = "resource",
        subject: str = "ELA",
        topic: Optional[str] = None,
        on_retry: Optional[RetryCallback] = None,
    ) -> GenerationSummary:
        """Generate one lesson covering every member of a group."""
        scheduled = [s for s in sessions if is_scheduled(s)]
        summary = GenerationSummary(lesson_date=lesson_date)
        if not scheduled:
            return summary

        start = min(normalize_time(s.start_time) for s in scheduled)
        end = max(normalize_time(s.end_time) for s in scheduled)
        request = self._request(lesson_date, f"{start}-{end}", scheduled, students, scope, teacher_role, subject, topic)
        result = (await self._generate_each([request], on_retry))[0]
        await self._record_result(summary, provider_id, lesson_date, request.time_slot, group_id, request, result, scope)
        return summary

    async def _generate_batch(
        self, requests: list[LessonRequest], on_retry: Optional[RetryCallback]
    ) -> list[LessonResult]:
        key = batch_idempotency_key(requests)
        try:
            results = await self.generator.generate_batch(requests, key, on_retry)
        except Exception as e:
            logger.error(f"Batch lesson generation failed: {e}", exc_info=True)
            return [LessonResult(success=False, error=str(e)) for _ in requests]

        if len(results) != len(requests):
            logger.error(f"Batch returned {len(results)} results for {len(requests)} requests")
            results = list(results) + [
                LessonResult(success=False, error="No result returned")
                for _ in range(len(requests) - len(results))
            ]
        return results[: len(requests)]

    async def _generate_each(
        self, requests: list[LessonRequest], on_retry: Optional[RetryCallback]
    ) -> list[LessonResult]:
        # Issued in slot order; completions may arrive in any order.
        tasks = [
            asyncio.create_task(self.generator.generate(request, lesson_idempotency_key(request), on_retry))
            for request in requests
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results = []
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Lesson generation failed for slot {request.time_slot}: {outcome}")
                results.append(LessonResult(success=False, error=str(outcome)))
            else:
                results.append(outcome)
        return results

    async def _record_result(
        self,
        summary: GenerationSummary,
        provider_id: str,
        lesson_date: date,
        time_slot: Optional[str],
        group_id: Optional[str],
        request: LessonRequest,
        result: LessonResult,
        scope: TenantScope,
    ) -> None:
        slot_key = f"group:{group_id}" if group_id else time_slot
        if not result.success or result.lesson is None:
            summary.failed += 1
            summary.failed_slots.append(slot_key)
            return

        lesson = Lesson(
            provider_id=provider_id,
            lesson_date=lesson_date,
            time_slot=None if group_id else time_slot,
            group_id=group_id,
            content=result.lesson,
            lesson_source=LessonSource.AI_GENERATED,
            student_ids=[s.id for s in request.students],
            scope=scope,
        )
        if result.lesson_id:
            lesson.id = result.lesson_id

        try:
            saved = await self.repository.upsert_lesson(lesson)
        except Exception as e:
            logger.error(f"Error saving generated lesson for {slot_key} on {lesson_date}: {e}", exc_info=True)
            summary.failed += 1
            summary.failed_slots.append(slot_key)
            return

        self._merge(saved)
        summary.generated += 1
        summary.lessons = with_entry(summary.lessons, saved.slot_key, saved)

    # ===== Manual lessons =====

    async def save_manual_lesson(
        self,
        provider_id: str,
        lesson_date: date,
        scope: TenantScope,
        title: Optional[str] = None,
        content: Optional[LessonContent] = None,
        notes: Optional[str] = None,
        time_slot: Optional[str] = None,
        group_id: Optional[str] = None,
        student_ids: Sequence[str] = (),
    ) -> Lesson:
        """Create or replace a manual lesson for a time slot or a group."""
        if not time_slot and not group_id:
            raise ValueError("A time slot or a group is required for a manual lesson")

        lesson = Lesson(
            provider_id=provider_id,
            lesson_date=lesson_date,
            time_slot=None if group_id else time_slot,
            group_id=group_id,
            title=title,
            content=content or LessonContent(),
            notes=notes,
            lesson_source=LessonSource.MANUAL,
            student_ids=list(student_ids),
            scope=scope,
            updated_at=datetime.utcnow(),
        )
        saved = await self.repository.upsert_lesson(lesson)
        self._merge(saved)
        logger.info(f"Saved manual lesson {saved.id} for {saved.slot_key} on {lesson_date}")
        return saved

    async def delete_lesson(self, lesson_id: str, scope: TenantScope, provider_id: Optional[str] = None) -> bool:
        """Delete a lesson; a lesson that does not exist is nothing to do.

        Raises:
            AccessDeniedError: If ``provider_id`` is given and the lesson belongs to another provider.
        """
        try:
            lesson = await self.repository.get_lesson(lesson_id, scope)
        except ValueError as e:
            logger.info(f"Nothing to delete: {e}")
            return False

        if provider_id is not None and lesson.provider_id != provider_id:
            logger.warning(f"Provider {provider_id} denied deleting lesson {lesson_id} of {lesson.provider_id}")
            raise AccessDeniedError(f"Access denied to lesson {lesson_id}")

        try:
            await self.repository.delete_lesson(lesson_id, scope)
        except ValueError as e:
            logger.info(f"Nothing to delete: {e}")
            return False

        day = without_entry(self.saved_lessons.get(lesson.lesson_date, {}), lesson.slot_key)
        self.saved_lessons = with_entry(self.saved_lessons, lesson.lesson_date, day)
        return True

    # ===== Saved lessons =====

    async def load_saved_lessons(
        self,
        provider_id: str,
        start_date: date,
        end_date: date,
        scope: TenantScope,
    ) -> Optional[SavedLessons]:
        """Reload saved lessons for a date range.

        Repeated calls with the same parameters share one fetch; a call with
        new parameters cancels the pending one. Returns None when this call
        was superseded, leaving ``saved_lessons`` untouched.
        """
        params = (provider_id, start_date, end_date, scope.school_id, scope.district_id, scope.state_id)

        async def fetch() -> list[Lesson]:
            return await self.repository.list_lessons(provider_id, start_date, end_date, scope)

        lessons = await self._load_guard.run(params, fetch)
        if lessons is None:
            return None

        rebuilt: SavedLessons = {}
        for lesson in lessons:
            rebuilt.setdefault(lesson.lesson_date, {})[lesson.slot_key] = lesson
        self.saved_lessons = rebuilt
        return rebuilt

    def _merge(self, lesson: Lesson) -> None:
        day = with_entry(self.saved_lessons.get(lesson.lesson_date, {}), lesson.slot_key, lesson)
        self.saved_lessons = with_entry(self.saved_lessons, lesson.lesson_date, day)
