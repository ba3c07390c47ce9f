"""Infrastructure layer components."""

from .dynamodb_curriculum_repository import DynamoDBCurriculumRepository
from .http_lesson_generator import HttpLessonGenerator, LessonGenerationError
from .local_attendance_repository import LocalAttendanceRepository
from .local_curriculum_repository import LocalCurriculumRepository
from .local_document_store import LocalDocumentRepository, LocalDocumentStorage
from .local_lesson_repository import LocalLessonRepository
from .local_session_store import LocalSessionStore
from .local_student_directory import LocalStudentDirectory
from .s3_document_storage import S3DocumentStorage
from .template_lesson_generator import TemplateLessonGenerator

__all__ = [
    "DynamoDBCurriculumRepository",
    "HttpLessonGenerator",
    "LessonGenerationError",
    "LocalAttendanceRepository",
    "LocalCurriculumRepository",
    "LocalDocumentRepository",
    "LocalDocumentStorage",
    "LocalLessonRepository",
    "LocalSessionStore",
    "LocalStudentDirectory",
    "S3DocumentStorage",
    "TemplateLessonGenerator",
]
