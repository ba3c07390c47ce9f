"""Request bodies accepted by the HTTP API."""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities import AttendanceRecord, CurriculumType, DocumentType, LessonContent, ViewMode


class CurriculumTargetBody(BaseModel):
    """Identifies one session or group instance."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    group_id: Optional[str] = Field(default=None, alias="groupId")
    session_date: date = Field(alias="sessionDate")


class CurriculumSaveBody(CurriculumTargetBody):
    curriculum_type: Optional[CurriculumType] = Field(default=None, alias="curriculumType")
    curriculum_level: Optional[str] = Field(default=None, alias="curriculumLevel")
    current_lesson: Optional[int] = Field(default=None, alias="currentLesson")

    class Config:
        json_schema_extra = {
            "example": {
                "sessionId": "0b6c1f1e-2f0e-4a53-9d0c-6a0a4f3b2c11",
                "sessionDate": "2026-10-12",
                "curriculumType": "SPIRE",
                "curriculumLevel": "3",
                "currentLesson": 5,
            }
        }


class CurriculumActionBody(CurriculumTargetBody):
    action: Literal["next", "previous"] = "next"


class AnswerPromptBody(CurriculumTargetBody):
    answer: str
    previous_lesson: int = Field(alias="previousLesson")

    class Config:
        json_schema_extra = {
            "example": {
                "groupId": "reading-group-a",
                "sessionDate": "2026-10-14",
                "answer": "yes",
                "previousLesson": 4,
            }
        }


class AttendanceBody(BaseModel):
    session_date: date
    attendance: list[AttendanceRecord]


class GroupSessionsBody(BaseModel):
    """Sessions to put into one named group."""

    model_config = ConfigDict(populate_by_name=True)

    session_ids: list[str] = Field(alias="sessionIds")
    group_name: str = Field(default="", alias="groupName")
    group_id: Optional[str] = Field(default=None, alias="groupId")


class UngroupSessionsBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_ids: list[str] = Field(alias="sessionIds")



class DocumentBody(BaseModel):
    """A link or note attachment; files go through the upload route."""

    owner_type: Literal["session", "group"]
    owner_id: str
    title: str
    document_type: DocumentType
    content: Optional[str] = None
    url: Optional[str] = None
    session_date: Optional[date] = None


class GenerateLessonsBody(BaseModel):
    lesson_date: date
    group_id: Optional[str] = None
    view_mode: ViewMode = ViewMode.MY_SESSIONS
    subject: str = "ELA"
    topic: Optional[str] = None


class ManualLessonBody(BaseModel):
    lesson_date: date
    time_slot: Optional[str] = None
    group_id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[LessonContent] = None
    notes: Optional[str] = None
    student_ids: list[str] = Field(default_factory=list)
