"""FastAPI application entry point."""

import logging
from datetime import date
from typing import Literal, NoReturn, Optional

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .config import Settings, settings
from .controller import CaseloadPlannerController
from .identity import resolve_identity
from .schemas import (
    AnswerPromptBody,
    AttendanceBody,
    CurriculumActionBody,
    CurriculumSaveBody,
    DocumentBody,
    GenerateLessonsBody,
    GroupSessionsBody,
    ManualLessonBody,
    UngroupSessionsBody,
)
from ..domain.entities import (
    AccessDeniedError,
    CurriculumValidationError,
    DocumentValidationError,
    ErrorCode,
    ErrorMessage,
    FileUpload,
    GroupingValidationError,
    MissingContextError,
    UserIdentity,
    ViewMode,
)
from ..infrastructure import (
    DynamoDBCurriculumRepository,
    HttpLessonGenerator,
    LocalAttendanceRepository,
    LocalCurriculumRepository,
    LocalDocumentRepository,
    LocalDocumentStorage,
    LocalLessonRepository,
    LocalSessionStore,
    LocalStudentDirectory,
    S3DocumentStorage,
    TemplateLessonGenerator,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize providers (sessions, students, lessons and attendance stay local
# until their backing services are wired in)
session_store = LocalSessionStore()
student_directory = LocalStudentDirectory()
lesson_repository = LocalLessonRepository()
attendance_repository = LocalAttendanceRepository()
document_repository = LocalDocumentRepository()


def _curriculum_repository(config: Settings):
    if config.storage_backend == "dynamodb":
        return DynamoDBCurriculumRepository(config.curriculum_table_name, config.aws_region)
    return LocalCurriculumRepository()


def _document_storage(config: Settings):
    if config.storage_backend == "dynamodb":
        return S3DocumentStorage(config.documents_bucket_name, config.aws_region)
    return LocalDocumentStorage()


def _lesson_generator(config: Settings):
    if config.lesson_api_base_url:
        return HttpLessonGenerator(
            config.lesson_api_base_url,
            timeout=config.lesson_api_timeout,
            max_retries=config.lesson_api_max_retries,
            retry_base_delay=config.lesson_api_retry_base_delay,
        )
    return TemplateLessonGenerator()


# Initialize controller with injected dependencies
controller = CaseloadPlannerController(
    session_source=session_store,
    session_persistence=session_store,
    student_directory=student_directory,
    curriculum_repository=_curriculum_repository(settings),
    lesson_repository=lesson_repository,
    lesson_generator=_lesson_generator(settings),
    attendance_repository=attendance_repository,
    document_repository=document_repository,
    document_storage=_document_storage(settings),
    batch_mode=settings.lesson_batch_mode,
    default_lesson_duration=settings.default_lesson_duration,
    fetch_delay=settings.fetch_debounce_delay,
    max_document_size=settings.max_document_size,
    signed_url_expiry=settings.signed_url_expiry,
)


def current_identity(authorization: Optional[str] = Header(None)) -> Optional[UserIdentity]:
    """Resolve the caller from the Authorization header; None when absent or invalid."""
    return resolve_identity(authorization, settings.jwt_secret, settings.jwt_algorithm)


def _error(status_code: int, code: ErrorCode, message: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=ErrorMessage(code=code, message=message).model_dump(mode="json"),
    )


def _raise_http(e: Exception, context: str) -> NoReturn:
    """Map domain exceptions to HTTP errors."""
    if isinstance(e, MissingContextError):
        status_code = 401 if e.code == ErrorCode.UNAUTHORIZED else 400
        raise _error(status_code, e.code, str(e))
    if isinstance(e, AccessDeniedError):
        raise _error(403, ErrorCode.ACCESS_DENIED, str(e))
    if isinstance(e, ValidationError):
        raise _error(400, ErrorCode.INVALID_REQUEST, "; ".join(err["msg"] for err in e.errors()))
    if isinstance(e, (DocumentValidationError, CurriculumValidationError, GroupingValidationError)):
        raise _error(400, ErrorCode.INVALID_REQUEST, str(e))
    if isinstance(e, ValueError):
        raise _error(404, ErrorCode.NOT_FOUND, str(e))
    logger.error(f"Error {context}: {e}", exc_info=True)
    raise _error(500, ErrorCode.INTERNAL_ERROR, "Internal server error")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return controller.get_health_status()


# ===== Calendar =====


@app.get("/calendar/week")
async def get_week(
    week_offset: int = Query(0, description="Weeks relative to the current week"),
    view_mode: ViewMode = Query(ViewMode.MY_SESSIONS),
    reference: Optional[date] = Query(None, description="Date standing in for today"),
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    """Week calendar of visible sessions, grouped into blocks per day.

    Without a resolvable user the week is returned with no sessions.
    """
    try:
        return await controller.get_week_view(identity, week_offset, view_mode, reference)
    except Exception as e:
        _raise_http(e, "building week view")


@app.get("/calendar/day/{day}/slots")
async def get_day_slots(
    day: date,
    view_mode: ViewMode = Query(ViewMode.MY_SESSIONS),
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    try:
        return {"date": day, "time_slots": await controller.get_day_time_slots(identity, day, view_mode)}
    except Exception as e:
        _raise_http(e, f"building time slots for {day}")


@app.get("/sessions/{session_id}")
async def get_session(session_id: str, identity: Optional[UserIdentity] = Depends(current_identity)):
    try:
        return await controller.get_session(identity, session_id)
    except Exception as e:
        _raise_http(e, f"getting session {session_id}")


@app.post("/sessions/group")
async def group_sessions(body: GroupSessionsBody, identity: Optional[UserIdentity] = Depends(current_identity)):
    try:
        sessions = await controller.group_sessions(identity, body.session_ids, body.group_name, body.group_id)
        return {"success": True, "group_id": sessions[0].group_id, "sessions": sessions}
    except Exception as e:
        _raise_http(e, "grouping sessions")


@app.post("/sessions/ungroup")
async def ungroup_sessions(body: UngroupSessionsBody, identity: Optional[UserIdentity] = Depends(current_identity)):
    try:
        return {"success": True, "sessions": await controller.ungroup_sessions(identity, body.session_ids)}
    except Exception as e:
        _raise_http(e, "ungrouping sessions")


# ===== Curriculum =====


@app.get("/curriculum")
async def get_curriculum(
    session_date: date = Query(..., alias="sessionDate"),
    session_id: Optional[str] = Query(None, alias="sessionId"),
    group_id: Optional[str] = Query(None, alias="groupId"),
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    """Curriculum state for a session or group instance, with any pending prompt."""
    try:
        return await controller.get_curriculum(identity, session_date, session_id, group_id)
    except Exception as e:
        _raise_http(e, "getting curriculum")


@app.get("/curriculum/previous")
async def get_previous_curriculum(
    session_date: date = Query(..., alias="sessionDate"),
    session_id: Optional[str] = Query(None, alias="sessionId"),
    group_id: Optional[str] = Query(None, alias="groupId"),
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    try:
        return await controller.get_previous_curriculum(identity, session_date, session_id, group_id)
    except Exception as e:
        _raise_http(e, "looking up previous curriculum")


@app.post("/curriculum")
async def save_curriculum(body: CurriculumSaveBody, identity: Optional[UserIdentity] = Depends(current_identity)):
    try:
        record = await controller.save_curriculum(
            identity,
            body.session_date,
            body.curriculum_type,
            body.curriculum_level,
            body.current_lesson,
            session_id=body.session_id,
            group_id=body.group_id,
        )
        return {"success": True, "data": record}
    except Exception as e:
        _raise_http(e, "saving curriculum")


@app.put("/curriculum")
async def update_curriculum(body: CurriculumActionBody, identity: Optional[UserIdentity] = Depends(current_identity)):
    try:
        record = await controller.advance_curriculum(
            identity, body.session_date, body.action, session_id=body.session_id, group_id=body.group_id
        )
        return {"success": True, "data": record}
    except Exception as e:
        _raise_http(e, "updating curriculum")


@app.delete("/curriculum")
async def delete_curriculum(
    session_date: date = Query(..., alias="sessionDate"),
    session_id: Optional[str] = Query(None, alias="sessionId"),
    group_id: Optional[str] = Query(None, alias="groupId"),
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    try:
        deleted = await controller.delete_curriculum(identity, session_date, session_id, group_id)
        return {"success": True, "deleted": deleted}
    except Exception as e:
        _raise_http(e, "deleting curriculum")


@app.post("/curriculum/answer-prompt")
async def answer_prompt(body: AnswerPromptBody, identity: Optional[UserIdentity] = Depends(current_identity)):
    """Record whether the previous instance's lesson was completed."""
    try:
        record = await controller.answer_prompt(
            identity,
            body.session_date,
            body.answer,
            body.previous_lesson,
            session_id=body.session_id,
            group_id=body.group_id,
        )
        return {"success": True, "data": record}
    except Exception as e:
        _raise_http(e, "answering curriculum prompt")


# ===== Attendance =====


@app.get("/sessions/{session_id}/attendance")
async def get_attendance(
    session_id: str,
    session_date: date = Query(...),
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    try:
        return {"attendance": await controller.get_attendance(identity, session_id, session_date)}
    except Exception as e:
        _raise_http(e, f"getting attendance for session {session_id}")


@app.post("/sessions/{session_id}/attendance")
async def save_attendance(
    session_id: str,
    body: AttendanceBody,
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    try:
        saved = await controller.save_attendance(identity, session_id, body.session_date, body.attendance)
        return {"success": True, "attendance": saved}
    except Exception as e:
        _raise_http(e, f"saving attendance for session {session_id}")


# ===== Documents =====


@app.get("/documents")
async def list_documents(
    owner_type: Literal["session", "group"] = Query(...),
    owner_id: str = Query(...),
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    try:
        return {"documents": await controller.list_documents(identity, owner_type, owner_id)}
    except Exception as e:
        _raise_http(e, f"listing documents for {owner_type} {owner_id}")


@app.post("/documents")
async def create_document(body: DocumentBody, identity: Optional[UserIdentity] = Depends(current_identity)):
    """Attach a link or a note to a session or group."""
    try:
        return await controller.attach_document(
            identity,
            body.owner_type,
            body.owner_id,
            body.title,
            body.document_type,
            content=body.content,
            url=body.url,
            session_date=body.session_date,
        )
    except Exception as e:
        _raise_http(e, "creating document")


@app.post("/documents/upload")
async def upload_document(
    owner_type: Literal["session", "group"] = Form(...),
    owner_id: str = Form(...),
    title: str = Form(...),
    session_date: Optional[date] = Form(None),
    file: UploadFile = File(...),
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    """Upload a file attachment (PDF, DOC, DOCX, PNG or JPEG)."""
    try:
        data = await file.read()
        upload = FileUpload(
            filename=file.filename or "upload",
            mime_type=file.content_type or "application/octet-stream",
            size=len(data),
            data=data,
        )
        document_type = "pdf" if upload.mime_type == "application/pdf" else "file"
        return await controller.attach_document(
            identity, owner_type, owner_id, title, document_type, upload=upload, session_date=session_date
        )
    except Exception as e:
        _raise_http(e, "uploading document")


@app.get("/documents/{document_id}/url")
async def get_document_url(document_id: str, identity: Optional[UserIdentity] = Depends(current_identity)):
    try:
        return {"url": await controller.get_document_url(identity, document_id)}
    except Exception as e:
        _raise_http(e, f"getting url for document {document_id}")


@app.delete("/documents/{document_id}")
async def delete_document(document_id: str, identity: Optional[UserIdentity] = Depends(current_identity)):
    try:
        return {"success": True, "deleted": await controller.delete_document(identity, document_id)}
    except Exception as e:
        _raise_http(e, f"deleting document {document_id}")


# ===== Lessons =====


@app.post("/lessons/generate")
async def generate_lessons(body: GenerateLessonsBody, identity: Optional[UserIdentity] = Depends(current_identity)):
    """Generate lessons for every time slot of a day, or for one group."""
    try:
        if body.group_id:
            summary = await controller.generate_group_lesson(
                identity, body.lesson_date, body.group_id, subject=body.subject, topic=body.topic
            )
        else:
            summary = await controller.generate_lessons(
                identity, body.lesson_date, body.view_mode, subject=body.subject, topic=body.topic
            )
        return {
            "success": summary.failed == 0,
            "message": summary.message,
            "summary": {
                "total": summary.generated + summary.failed,
                "successful": summary.generated,
                "failed": summary.failed,
            },
            "lessons": summary.lessons,
            "failed_slots": summary.failed_slots,
        }
    except Exception as e:
        _raise_http(e, "generating lessons")


@app.post("/lessons")
async def save_manual_lesson(body: ManualLessonBody, identity: Optional[UserIdentity] = Depends(current_identity)):
    try:
        return await controller.save_manual_lesson(
            identity,
            body.lesson_date,
            title=body.title,
            content=body.content,
            notes=body.notes,
            time_slot=body.time_slot,
            group_id=body.group_id,
            student_ids=body.student_ids,
        )
    except Exception as e:
        _raise_http(e, "saving manual lesson")


@app.get("/lessons")
async def list_lessons(
    start_date: date = Query(...),
    end_date: date = Query(...),
    identity: Optional[UserIdentity] = Depends(current_identity),
):
    try:
        lessons = await controller.list_lessons(identity, start_date, end_date)
        return {"lessons": lessons or [], "superseded": lessons is None}
    except Exception as e:
        _raise_http(e, "listing lessons")


@app.delete("/lessons/{lesson_id}")
async def delete_lesson(lesson_id: str, identity: Optional[UserIdentity] = Depends(current_identity)):
    try:
        return {"success": True, "deleted": await controller.delete_lesson(identity, lesson_id)}
    except Exception as e:
        _raise_http(e, f"deleting lesson {lesson_id}")
