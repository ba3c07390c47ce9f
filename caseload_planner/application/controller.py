"""Caseload Planner Controller for handling business logic and coordination."""

import logging
import uuid
from collections import OrderedDict
from datetime import date, timedelta
from typing import Literal, Optional, Sequence, Union

from ..domain.entities import (
    AccessDeniedError,
    AttendanceRecord,
    CurriculumTracking,
    CurriculumType,
    CurriculumValidationError,
    Document,
    DocumentType,
    ErrorCode,
    FileUpload,
    GenerationSummary,
    GroupingValidationError,
    Lesson,
    LessonContent,
    MissingContextError,
    PreviousCurriculum,
    ProgressionState,
    PromptAnswer,
    ScheduleSession,
    TimeSlotGroup,
    UserIdentity,
    ViewMode,
    WeekView,
)
from ..domain.interfaces import (
    AttendanceRepository,
    CurriculumRepository,
    DocumentRepository,
    DocumentStorage,
    LessonGenerator,
    LessonRepository,
    SessionPersistence,
    SessionSource,
    StudentDirectory,
)
from ..domain.services import (
    AttendanceService,
    CalendarService,
    CurriculumProgression,
    DocumentService,
    LessonPlanOrchestrator,
    SessionPersistenceCoordinator,
    VisibilityService,
    can_user_access_session,
    can_user_group_session,
    lookup_previous,
    sessions_for_date,
    tracking_target,
)

logger = logging.getLogger(__name__)


class CaseloadPlannerController:
    """
    Controller for coordinating caseload planner operations.

    This controller is injected with all necessary providers and handles
    the business logic for each endpoint, keeping the API layer thin.
    """

    def __init__(
        self,
        session_source: SessionSource,
        session_persistence: SessionPersistence,
        student_directory: StudentDirectory,
        curriculum_repository: CurriculumRepository,
        lesson_repository: LessonRepository,
        lesson_generator: LessonGenerator,
        attendance_repository: AttendanceRepository,
        document_repository: DocumentRepository,
        document_storage: DocumentStorage,
        batch_mode: bool = True,
        default_lesson_duration: int = 30,
        fetch_delay: float = 0.5,
        max_document_size: int = 10 * 1024 * 1024,
        signed_url_expiry: int = 3600,
        max_orchestrators: int = 256,
    ):
        """
        Initialize the controller with injected dependencies.

        Args:
            session_source: Source of schedule sessions and templates
            session_persistence: Writes placeholder sessions as real rows
            student_directory: Student lookup for backfilling
            curriculum_repository: Curriculum tracking records
            lesson_repository: Saved lesson plans
            lesson_generator: External or local lesson generator
            attendance_repository: Attendance records
            document_repository: Document metadata
            document_storage: Stored document files
            max_orchestrators: Users whose lesson state is kept in memory at once
        """
        self.session_source = session_source
        self.session_persistence = session_persistence
        self.student_directory = student_directory
        self.curriculum_repository = curriculum_repository
        self.lesson_repository = lesson_repository
        self.lesson_generator = lesson_generator
        self.batch_mode = batch_mode
        self.default_lesson_duration = default_lesson_duration
        self.fetch_delay = fetch_delay

        self.persistence = SessionPersistenceCoordinator(session_persistence)
        self.visibility = VisibilityService(student_directory)
        self.calendar = CalendarService(session_source, self.visibility)
        self.attendance = AttendanceService(attendance_repository, self.persistence)
        self.documents = DocumentService(
            document_repository,
            document_storage,
            self.persistence,
            max_file_size=max_document_size,
            signed_url_expiry=signed_url_expiry,
        )
        self.max_orchestrators = max_orchestrators
        # lesson state per user, least recently used first
        self._orchestrators: OrderedDict[str, LessonPlanOrchestrator] = OrderedDict()

        logger.info("CaseloadPlannerController initialized with providers")

    def get_health_status(self) -> dict:
        """
        Get application health status.

        Returns:
            Dict containing health status information
        """
        return {
            "status": "healthy",
            "providers": {
                "session_source": type(self.session_source).__name__,
                "student_directory": type(self.student_directory).__name__,
                "curriculum_repository": type(self.curriculum_repository).__name__,
                "lesson_repository": type(self.lesson_repository).__name__,
                "lesson_generator": type(self.lesson_generator).__name__,
            },
        }

    # ===== Calendar =====

    async def get_week_view(
        self,
        identity: Optional[UserIdentity],
        week_offset: int = 0,
        view_mode: Union[ViewMode, str] = ViewMode.MY_SESSIONS,
        reference: Optional[date] = None,
    ) -> WeekView:
        """Week calendar for the user; no identity yields an empty week."""
        return await self.calendar.week_view(identity, week_offset, view_mode, reference=reference)

    async def get_day_time_slots(
        self,
        identity: Optional[UserIdentity],
        day: date,
        view_mode: Union[ViewMode, str] = ViewMode.MY_SESSIONS,
    ) -> list[TimeSlotGroup]:
        return await self.calendar.day_time_slots(identity, day, view_mode)

    async def get_session(self, identity: Optional[UserIdentity], session_id: str) -> ScheduleSession:
        """
        Load a session the user may act on.

        Raises:
            MissingContextError: If there is no current user.
            ValueError: If the session is not found.
            AccessDeniedError: If the user is neither owner nor delegate.
        """
        user = self._require_identity(identity)
        session = await self.session_source.get_session(self.persistence.resolved_id(session_id))
        if not can_user_access_session(session, user.user_id):
            logger.warning(f"User {user.user_id} denied access to session {session_id}")
            raise AccessDeniedError(f"Access denied to session {session_id}")
        return session

    # ===== Curriculum =====

    async def get_curriculum(
        self,
        identity: Optional[UserIdentity],
        session_date: date,
        session_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> dict:
        """Curriculum state for one instance, including any pending prompt."""
        progression = await self._progression(identity, session_date, session_id, group_id)
        state = await progression.load()
        return {
            "state": state.value,
            "curriculum": progression.current,
            "prompt": progression.prompt,
            "question": progression.prompt.question if progression.prompt else None,
        }

    async def get_previous_curriculum(
        self,
        identity: Optional[UserIdentity],
        session_date: date,
        session_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> PreviousCurriculum:
        target = await self._target(identity, session_date, session_id, group_id)
        return await lookup_previous(self.curriculum_repository, target, session_date)

    async def save_curriculum(
        self,
        identity: Optional[UserIdentity],
        session_date: date,
        curriculum_type: Optional[Union[CurriculumType, str]],
        curriculum_level: Optional[str],
        current_lesson: Optional[int] = None,
        session_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> Optional[CurriculumTracking]:
        """Upsert the placement for an instance; empty fields leave it unchanged."""
        progression = await self._progression(identity, session_date, session_id, group_id)
        await progression.load()
        return await progression.save(curriculum_type, curriculum_level, current_lesson)

    async def advance_curriculum(
        self,
        identity: Optional[UserIdentity],
        session_date: date,
        action: str = "next",
        session_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> CurriculumTracking:
        """
        Move a tracked curriculum one lesson forward ("next") or back ("previous").

        Raises:
            ValueError: If the action is unknown or nothing is tracked yet.
        """
        if action not in ("next", "previous"):
            raise CurriculumValidationError(f"Unknown curriculum action {action!r}")
        progression = await self._progression(identity, session_date, session_id, group_id)
        if await progression.load() != ProgressionState.TRACKED:
            raise ValueError(f"Curriculum tracking for {progression.target.target_id} on {session_date} not found")
        if action == "next":
            return await progression.advance()
        return await progression.retreat()

    async def delete_curriculum(
        self,
        identity: Optional[UserIdentity],
        session_date: date,
        session_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> bool:
        """Delete the instance's record; a missing record is nothing to do."""
        target = await self._target(identity, session_date, session_id, group_id)
        current = await self.curriculum_repository.get_current(target, session_date)
        if current is None:
            logger.info(f"No curriculum tracking to delete for {target.target_id} on {session_date}")
            return False
        try:
            await self.curriculum_repository.delete(current.id)
        except ValueError as e:
            logger.info(f"Nothing to delete: {e}")
            return False
        return True

    async def answer_prompt(
        self,
        identity: Optional[UserIdentity],
        session_date: date,
        answer: str,
        previous_lesson: int,
        session_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> CurriculumTracking:
        """
        Record the yes/no answer for the pending prompt of an instance.

        An instance that already has its own record keeps it: answering
        twice does not advance the lesson twice.

        Raises:
            ValueError: If the answer or lesson number is invalid, or no prompt is pending.
        """
        if answer not in (PromptAnswer.YES.value, PromptAnswer.NO.value):
            raise CurriculumValidationError("answer must be 'yes' or 'no'")
        if previous_lesson < 1:
            raise CurriculumValidationError("previousLesson must be a positive integer")

        progression = await self._progression(identity, session_date, session_id, group_id)
        state = await progression.load()
        if state == ProgressionState.TRACKED and progression.current is not None:
            logger.info(f"Prompt for {progression.target.target_id} on {session_date} already answered")
            return progression.current
        return await progression.answer_prompt(answer)

    # ===== Attendance =====

    async def get_attendance(
        self, identity: Optional[UserIdentity], session_id: str, session_date: date
    ) -> list[AttendanceRecord]:
        session = await self.get_session(identity, session_id)
        return await self.attendance.get_attendance(session, session_date)

    async def save_attendance(
        self,
        identity: Optional[UserIdentity],
        session_id: str,
        session_date: date,
        records: Sequence[AttendanceRecord],
    ) -> list[AttendanceRecord]:
        session = await self.get_session(identity, session_id)
        if session.session_date is None:
            session = session.model_copy(update={"session_date": session_date})
        return await self.attendance.save_attendance(session, session_date, records, marked_by=identity.user_id)

    # ===== Documents =====

    async def attach_document(
        self,
        identity: Optional[UserIdentity],
        owner_type: Literal["session", "group"],
        owner_id: str,
        title: str,
        document_type: Union[DocumentType, str],
        content: Optional[str] = None,
        url: Optional[str] = None,
        upload: Optional[FileUpload] = None,
        session_date: Optional[date] = None,
    ) -> Document:
        user = self._require_identity(identity)
        document_type = DocumentType(document_type)
        if owner_type == "session":
            session = await self.get_session(identity, owner_id)
            return await self.documents.attach_to_session(
                session, title, document_type, user.user_id, content, url, upload, session_date
            )
        await self._require_group_access(user, owner_id, session_date)
        return await self.documents.attach_to_group(
            owner_id, title, document_type, user.user_id, content, url, upload, session_date
        )

    async def list_documents(
        self, identity: Optional[UserIdentity], owner_type: Literal["session", "group"], owner_id: str
    ) -> list[Document]:
        user = self._require_identity(identity)
        if owner_type == "session":
            owner_id = (await self.get_session(identity, owner_id)).id
        else:
            await self._require_group_access(user, owner_id)
        return await self.documents.list_documents(owner_type, owner_id)

    async def delete_document(self, identity: Optional[UserIdentity], document_id: str) -> bool:
        """
        Delete a document the user may act on; a missing document is nothing to do.

        Raises:
            AccessDeniedError: If the user cannot access the document's session or group.
        """
        user = self._require_identity(identity)
        try:
            document = await self.documents.get_document(document_id)
        except ValueError as e:
            logger.info(f"Nothing to delete: {e}")
            return False
        await self._require_document_access(user, document)
        return await self.documents.delete_document(document_id)

    async def get_document_url(self, identity: Optional[UserIdentity], document_id: str) -> str:
        user = self._require_identity(identity)
        document = await self.documents.get_document(document_id)
        await self._require_document_access(user, document)
        return await self.documents.download_url(document_id)

    # ===== Groups =====

    async def group_sessions(
        self,
        identity: Optional[UserIdentity],
        session_ids: Sequence[str],
        group_name: str,
        group_id: Optional[str] = None,
    ) -> list[ScheduleSession]:
        """
        Put sessions into one named group, creating a new group id unless one is given.

        Raises:
            GroupingValidationError: If fewer than two sessions or no name is given.
            AccessDeniedError: If the user does not deliver every session.
        """
        user = self._require_identity(identity)
        session_ids = list(dict.fromkeys(session_ids))
        if len(session_ids) < 2:
            raise GroupingValidationError("At least 2 session IDs are required to create a group")
        if not group_name or not group_name.strip():
            raise GroupingValidationError("Group name is required")

        await self._require_groupable(user, session_ids)
        group_id = group_id or str(uuid.uuid4())
        updated = await self.session_persistence.update_group(session_ids, group_id, group_name.strip())
        logger.info(f"User {user.user_id} grouped {len(updated)} sessions into {group_id}")
        return updated

    async def ungroup_sessions(
        self, identity: Optional[UserIdentity], session_ids: Sequence[str]
    ) -> list[ScheduleSession]:
        user = self._require_identity(identity)
        session_ids = list(dict.fromkeys(session_ids))
        if not session_ids:
            raise GroupingValidationError("At least one session ID is required")

        await self._require_groupable(user, session_ids)
        updated = await self.session_persistence.update_group(session_ids, None, None)
        logger.info(f"User {user.user_id} removed {len(updated)} sessions from their groups")
        return updated

    # ===== Lessons =====

    async def generate_lessons(
        self,
        identity: Optional[UserIdentity],
        lesson_date: date,
        view_mode: Union[ViewMode, str] = ViewMode.MY_SESSIONS,
        subject: str = "ELA",
        topic: Optional[str] = None,
    ) -> GenerationSummary:
        """Generate lessons for every visible time slot of a day."""
        user = self._require_identity(identity)
        visible, students = await self.calendar.load_visible_sessions(user, lesson_date, lesson_date, view_mode)
        sessions = sessions_for_date(visible, lesson_date)
        return await self._orchestrator(user).generate_for_day(
            user.user_id,
            lesson_date,
            sessions,
            students,
            user.scope,
            teacher_role=user.role.value,
            subject=subject,
            topic=topic,
            on_retry=self._log_retry(user),
        )

    async def generate_group_lesson(
        self,
        identity: Optional[UserIdentity],
        lesson_date: date,
        group_id: str,
        subject: str = "ELA",
        topic: Optional[str] = None,
    ) -> GenerationSummary:
        user = self._require_identity(identity)
        members = await self._group_sessions(user, group_id, lesson_date)
        students = await self.visibility.fill_missing_students(members, {})
        return await self._orchestrator(user).generate_for_group(
            user.user_id,
            lesson_date,
            group_id,
            members,
            students,
            user.scope,
            teacher_role=user.role.value,
            subject=subject,
            topic=topic,
            on_retry=self._log_retry(user),
        )

    async def save_manual_lesson(
        self,
        identity: Optional[UserIdentity],
        lesson_date: date,
        title: Optional[str] = None,
        content: Optional[LessonContent] = None,
        notes: Optional[str] = None,
        time_slot: Optional[str] = None,
        group_id: Optional[str] = None,
        student_ids: Sequence[str] = (),
    ) -> Lesson:
        user = self._require_identity(identity)
        return await self._orchestrator(user).save_manual_lesson(
            user.user_id, lesson_date, user.scope, title, content, notes, time_slot, group_id, student_ids
        )

    async def list_lessons(
        self, identity: Optional[UserIdentity], start_date: date, end_date: date
    ) -> Optional[list[Lesson]]:
        """Saved lessons in a range; None when a newer request superseded this one."""
        user = self._require_identity(identity)
        saved = await self._orchestrator(user).load_saved_lessons(user.user_id, start_date, end_date, user.scope)
        if saved is None:
            return None
        return [lesson for day in sorted(saved) for _, lesson in sorted(saved[day].items())]

    async def delete_lesson(self, identity: Optional[UserIdentity], lesson_id: str) -> bool:
        user = self._require_identity(identity)
        return await self._orchestrator(user).delete_lesson(lesson_id, user.scope, provider_id=user.user_id)

    # ===== Helpers =====

    @staticmethod
    def _require_identity(identity: Optional[UserIdentity]) -> UserIdentity:
        if identity is None:
            raise MissingContextError("Sign in to continue", code=ErrorCode.UNAUTHORIZED)
        return identity

    def _orchestrator(self, user: UserIdentity) -> LessonPlanOrchestrator:
        orchestrator = self._orchestrators.get(user.user_id)
        if orchestrator is None:
            orchestrator = LessonPlanOrchestrator(
                self.lesson_generator,
                self.lesson_repository,
                batch_mode=self.batch_mode,
                default_duration=self.default_lesson_duration,
                fetch_delay=self.fetch_delay,
            )
            self._orchestrators[user.user_id] = orchestrator
            if len(self._orchestrators) > self.max_orchestrators:
                evicted, _ = self._orchestrators.popitem(last=False)
                logger.info(f"Evicted lesson state for {evicted}")
        else:
            self._orchestrators.move_to_end(user.user_id)
        return orchestrator

    @staticmethod
    def _log_retry(user: UserIdentity):
        def on_retry(attempt: int, max_retries: int) -> None:
            logger.info(f"Lesson generation for {user.user_id}: retry attempt {attempt} of {max_retries}")

        return on_retry

    async def _group_sessions(self, user: UserIdentity, group_id: str, session_date: date) -> list[ScheduleSession]:
        """Members of a group on a date, among sessions the user can see."""
        sessions = await self.session_source.fetch_sessions(
            user.user_id, session_date, session_date, user.role.value
        )
        members = [
            s for s in sessions_for_date(sessions, session_date)
            if s.group_id == group_id and can_user_access_session(s, user.user_id)
        ]
        if not members:
            raise ValueError(f"Group with id {group_id} not found on {session_date}")
        return members

    async def _require_group_access(
        self, user: UserIdentity, group_id: str, session_date: Optional[date] = None
    ) -> None:
        """Raise unless the user can see a member of the group on the date, or in the coming week if undated."""
        start = session_date or date.today()
        end = session_date or start + timedelta(days=6)
        sessions = await self.session_source.fetch_sessions(user.user_id, start, end, user.role.value)
        if not any(s.group_id == group_id and can_user_access_session(s, user.user_id) for s in sessions):
            logger.warning(f"User {user.user_id} denied access to group {group_id}")
            raise AccessDeniedError(f"Access denied to group {group_id}")

    async def _require_document_access(self, user: UserIdentity, document: Document) -> None:
        # authors keep access to what they attached
        if document.created_by == user.user_id:
            return
        if document.owner_type == "session":
            await self.get_session(user, document.owner_id)
        else:
            await self._require_group_access(user, document.owner_id, document.session_date)

    async def _require_groupable(self, user: UserIdentity, session_ids: Sequence[str]) -> None:
        for session_id in session_ids:
            session = await self.get_session(user, session_id)
            if not can_user_group_session(session, user.user_id):
                logger.warning(f"User {user.user_id} cannot group session {session_id} ({session.delivered_by.value})")
                raise AccessDeniedError("You can only group sessions that you are assigned to deliver")

    async def _target(
        self,
        identity: Optional[UserIdentity],
        session_date: date,
        session_id: Optional[str],
        group_id: Optional[str],
    ):
        user = self._require_identity(identity)
        if session_id:
            return tracking_target(session=await self.get_session(user, session_id))
        if group_id:
            members = await self._group_sessions(user, group_id, session_date)
            return tracking_target(group_id=group_id, group_sessions=members)
        raise CurriculumValidationError("Either sessionId or groupId is required")

    async def _progression(
        self,
        identity: Optional[UserIdentity],
        session_date: date,
        session_id: Optional[str],
        group_id: Optional[str],
    ) -> CurriculumProgression:
        target = await self._target(identity, session_date, session_id, group_id)
        return CurriculumProgression(target, session_date, self.curriculum_repository, self.persistence)
