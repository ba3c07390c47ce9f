"""Lesson plan entities and lesson generation request/response models."""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class LessonSource(str, Enum):
    """How a lesson was authored."""

    AI_GENERATED = "ai_generated"
    MANUAL = "manual"


class TenantScope(BaseModel):
    """School/district/state scoping used for tenant isolation.

    A scope without a school id matches only rows that are themselves
    unscoped; it never widens to other schools.
    """

    school_id: Optional[str] = None
    district_id: Optional[str] = None
    state_id: Optional[str] = None

    def matches(self, other: "TenantScope") -> bool:
        if self.school_id is None:
            return other.school_id is None
        if other.school_id != self.school_id:
            return False
        if self.district_id is not None and other.district_id not in (None, self.district_id):
            return False
        if self.state_id is not None and other.state_id not in (None, self.state_id):
            return False
        return True


class LessonContent(BaseModel):
    """Structured lesson body."""

    objectives: list[str] = Field(default_factory=list)
    materials: list[str] = Field(default_factory=list)
    activities: list[dict[str, Any]] = Field(default_factory=list)
    assessment: Optional[str] = None


class Lesson(BaseModel):
    """A generated or manually authored lesson plan."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    provider_id: str
    lesson_date: date
    time_slot: Optional[str] = None
    group_id: Optional[str] = None
    title: Optional[str] = None
    content: LessonContent = Field(default_factory=LessonContent)
    notes: Optional[str] = None
    lesson_source: LessonSource = LessonSource.AI_GENERATED
    student_ids: list[str] = Field(default_factory=list)
    scope: TenantScope = Field(default_factory=TenantScope)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def slot_key(self) -> str:
        """Key used to reconcile this lesson into the saved-lessons map."""
        if self.group_id:
            return f"group:{self.group_id}"
        return self.time_slot or "on-demand"


class LessonStudent(BaseModel):
    """Student details sent with a generation request."""

    id: str
    initials: str = "Unknown"
    grade_level: Optional[str] = None


class LessonRequest(BaseModel):
    """One lesson generation request in the external API's wire shape."""

    model_config = ConfigDict(populate_by_name=True)

    students: list[LessonStudent]
    subject: str = "ELA"
    subject_type: str = Field(default="ela", alias="subjectType")
    duration: int = 30
    topic: Optional[str] = None
    teacher_role: str = Field(default="resource", alias="teacherRole")
    school_id: Optional[str] = Field(default=None, alias="schoolId")
    lesson_date: Optional[date] = Field(default=None, alias="lessonDate")
    time_slot: Optional[str] = Field(default=None, alias="timeSlot")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LessonResult(BaseModel):
    """Per-request generation outcome."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    lesson: Optional[LessonContent] = None
    lesson_id: Optional[str] = Field(default=None, alias="lessonId")
    error: Optional[str] = None


class GenerationSummary(BaseModel):
    """Outcome of generating lessons for a day."""

    lesson_date: date
    generated: int = 0
    failed: int = 0
    lessons: dict[str, Lesson] = Field(default_factory=dict)
    failed_slots: list[str] = Field(default_factory=list)

    @property
    def message(self) -> str:
        if self.failed == 0:
            return f"Generated {self.generated}"
        return f"Generated {self.generated}, {self.failed} failed"
