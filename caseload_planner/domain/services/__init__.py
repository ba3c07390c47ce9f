"""Domain services for the caseload planner."""

from .aggregator import aggregate_day, block_color, group_color_index
from .attendance_service import AttendanceService
from .calendar_service import CalendarService, sessions_for_date
from .curriculum_progression import (
    CurriculumProgression,
    lookup_previous,
    next_lesson,
    tracking_target,
)
from .document_service import DocumentService, validate_file, validate_link
from .lesson_orchestrator import (
    LessonPlanOrchestrator,
    batch_idempotency_key,
    lesson_idempotency_key,
)
from .request_guard import LatestRequestGuard
from .session_persistence import SessionPersistenceCoordinator, session_identity
from .time_slots import group_by_time_slot, is_scheduled, normalize_time, time_slot_key
from .visibility import (
    VisibilityService,
    can_user_access_session,
    can_user_group_session,
    classify,
    effective_view_mode,
    filter_sessions,
)
from .week_window import week_dates, week_range

__all__ = [
    "AttendanceService",
    "CalendarService",
    "CurriculumProgression",
    "DocumentService",
    "LatestRequestGuard",
    "LessonPlanOrchestrator",
    "SessionPersistenceCoordinator",
    "VisibilityService",
    "aggregate_day",
    "batch_idempotency_key",
    "block_color",
    "can_user_access_session",
    "can_user_group_session",
    "classify",
    "effective_view_mode",
    "filter_sessions",
    "group_by_time_slot",
    "group_color_index",
    "is_scheduled",
    "lesson_idempotency_key",
    "lookup_previous",
    "next_lesson",
    "normalize_time",
    "session_identity",
    "sessions_for_date",
    "time_slot_key",
    "tracking_target",
    "validate_file",
    "validate_link",
    "week_dates",
    "week_range",
]
