"""Curriculum tracking entities."""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from .schedule_session import ScheduleSession


class CurriculumType(str, Enum):
    """Supported curricula."""

    SPIRE = "SPIRE"
    REVEAL_MATH = "Reveal Math"


CURRICULUM_LEVELS: dict[CurriculumType, tuple[str, ...]] = {
    CurriculumType.SPIRE: ("Foundations", "1", "2", "3", "4", "5", "6", "7", "8"),
    CurriculumType.REVEAL_MATH: ("K", "1", "2", "3", "4", "5"),
}


class CurriculumValidationError(ValueError):
    """Raised when a curriculum placement is not valid."""


class ProgressionState(str, Enum):
    """Per-instance curriculum tracking state."""

    UNINITIALIZED = "uninitialized"
    PENDING_PROMPT = "pending_prompt"
    TRACKED = "tracked"


class PromptAnswer(str, Enum):
    """Answer to "did the student complete Lesson N?"."""

    YES = "yes"
    NO = "no"


class CurriculumPlacement(BaseModel):
    """A (curriculum type, level, lesson) tuple."""

    curriculum_type: CurriculumType
    curriculum_level: str
    current_lesson: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_level(self) -> "CurriculumPlacement":
        levels = CURRICULUM_LEVELS[self.curriculum_type]
        if self.curriculum_level not in levels:
            raise CurriculumValidationError(
                f"Invalid level {self.curriculum_level!r} for {self.curriculum_type.value}; "
                f"expected one of {', '.join(levels)}"
            )
        return self


class CurriculumTracking(CurriculumPlacement):
    """Curriculum placement recorded for one session or group instance."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: Optional[str] = None
    group_id: Optional[str] = None
    session_date: Optional[date] = None
    template_key: Optional[str] = None
    prompt_answered: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def placement(self) -> CurriculumPlacement:
        return CurriculumPlacement(
            curriculum_type=self.curriculum_type,
            curriculum_level=self.curriculum_level,
            current_lesson=self.current_lesson,
        )


class SessionTarget(BaseModel):
    """Curriculum target for an individual session instance."""

    mode: Literal["session"] = "session"
    session: ScheduleSession

    @property
    def target_id(self) -> str:
        return self.session.id


class GroupTarget(BaseModel):
    """Curriculum target for a group instance."""

    mode: Literal["group"] = "group"
    group_id: str
    sessions: list[ScheduleSession] = Field(default_factory=list)

    @property
    def target_id(self) -> str:
        return self.group_id


CurriculumTarget = Union[SessionTarget, GroupTarget]


class PreviousCurriculum(BaseModel):
    """Result of the prior-instance lookup."""

    data: Optional[CurriculumTracking] = None
    previous_session_date: Optional[date] = None
    is_first_instance: bool = True
    is_current_instance: bool = False


class CurriculumPrompt(BaseModel):
    """Pending yes/no prompt surfaced from the most recent prior instance."""

    curriculum_type: CurriculumType
    curriculum_level: str
    previous_lesson: int = Field(ge=1)
    previous_session_date: Optional[date] = None

    @property
    def question(self) -> str:
        return f"Did the student complete Lesson {self.previous_lesson}?"
