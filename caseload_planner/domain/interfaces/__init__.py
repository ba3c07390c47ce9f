"""Domain interfaces implemented by the infrastructure layer."""

from .attendance_repository import AttendanceRepository
from .curriculum_repository import CurriculumRepository
from .document_repository import DocumentRepository, DocumentStorage
from .lesson_generator import LessonGenerator, RetryCallback
from .lesson_repository import LessonRepository
from .session_source import SessionPersistence, SessionSource
from .student_directory import StudentDirectory

__all__ = [
    "AttendanceRepository",
    "CurriculumRepository",
    "DocumentRepository",
    "DocumentStorage",
    "LessonGenerator",
    "LessonRepository",
    "RetryCallback",
    "SessionPersistence",
    "SessionSource",
    "StudentDirectory",
]
