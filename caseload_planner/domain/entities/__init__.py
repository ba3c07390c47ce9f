"""Domain entities for the caseload planner."""

from .attendance import AttendanceRecord, AttendanceSubmission
from .calendar import (
    CalendarBlock,
    CalendarDay,
    GroupBlock,
    SessionBlock,
    TimeSlotGroup,
    WeekView,
)
from .curriculum import (
    CURRICULUM_LEVELS,
    CurriculumPlacement,
    CurriculumPrompt,
    CurriculumTarget,
    CurriculumTracking,
    CurriculumType,
    CurriculumValidationError,
    GroupTarget,
    PreviousCurriculum,
    ProgressionState,
    PromptAnswer,
    SessionTarget,
)
from .delegation import (
    CATEGORY_COLORS,
    DelegationCategory,
    DisplayColor,
    UserRole,
    ViewMode,
)
from .document import Document, DocumentType, DocumentValidationError, FileUpload
from .errors import AccessDeniedError, ErrorCode, ErrorMessage, MissingContextError
from .lesson import (
    GenerationSummary,
    Lesson,
    LessonContent,
    LessonRequest,
    LessonResult,
    LessonSource,
    LessonStudent,
    TenantScope,
)
from .schedule_session import (
    DeliveredBy,
    GroupingValidationError,
    PendingSessionId,
    PersistedSessionId,
    ScheduleSession,
    SessionIdentity,
    Student,
    is_temporary_id,
)
from .user import UserIdentity

__all__ = [
    # Session entities
    "ScheduleSession",
    "DeliveredBy",
    "GroupingValidationError",
    "Student",
    "SessionIdentity",
    "PendingSessionId",
    "PersistedSessionId",
    "is_temporary_id",
    # Delegation
    "DelegationCategory",
    "DisplayColor",
    "CATEGORY_COLORS",
    "UserRole",
    "ViewMode",
    "UserIdentity",
    # Calendar
    "CalendarBlock",
    "CalendarDay",
    "GroupBlock",
    "SessionBlock",
    "TimeSlotGroup",
    "WeekView",
    # Curriculum
    "CURRICULUM_LEVELS",
    "CurriculumPlacement",
    "CurriculumPrompt",
    "CurriculumTarget",
    "CurriculumTracking",
    "CurriculumType",
    "CurriculumValidationError",
    "GroupTarget",
    "PreviousCurriculum",
    "ProgressionState",
    "PromptAnswer",
    "SessionTarget",
    # Lessons
    "GenerationSummary",
    "Lesson",
    "LessonContent",
    "LessonRequest",
    "LessonResult",
    "LessonSource",
    "LessonStudent",
    "TenantScope",
    # Attendance and documents
    "AttendanceRecord",
    "AttendanceSubmission",
    "Document",
    "DocumentType",
    "DocumentValidationError",
    "FileUpload",
    # Errors
    "AccessDeniedError",
    "ErrorCode",
    "ErrorMessage",
    "MissingContextError",
]
