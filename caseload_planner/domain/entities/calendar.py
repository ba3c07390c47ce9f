"""Calendar view entities: display blocks and day/week views."""

from datetime import date
from typing import Literal, Union

from pydantic import BaseModel, Field

from .delegation import DisplayColor, ViewMode
from .schedule_session import ScheduleSession, Student


class GroupBlock(BaseModel):
    """A persistent multi-student group rendered as one calendar block."""

    type: Literal["group"] = "group"
    group_id: str
    group_name: str
    sessions: list[ScheduleSession]
    earliest_start: str
    latest_end: str
    color: DisplayColor = DisplayColor.OWN
    palette_index: int = 0

    @property
    def start_time(self) -> str:
        return self.earliest_start


class SessionBlock(BaseModel):
    """A standalone session rendered as its own calendar block."""

    type: Literal["session"] = "session"
    session: ScheduleSession
    color: DisplayColor = DisplayColor.OWN

    @property
    def start_time(self) -> str:
        return self.session.start_time or ""


CalendarBlock = Union[GroupBlock, SessionBlock]


class CalendarDay(BaseModel):
    """All blocks for one weekday of the displayed week."""

    date: date
    blocks: list[CalendarBlock] = Field(default_factory=list)


class WeekView(BaseModel):
    """Monday-Friday calendar for one user and view mode."""

    week_offset: int = 0
    view_mode: ViewMode = ViewMode.MY_SESSIONS
    days: list[CalendarDay] = Field(default_factory=list)
    students: dict[str, Student] = Field(default_factory=dict)
    unscheduled: list[ScheduleSession] = Field(default_factory=list)


class TimeSlotGroup(BaseModel):
    """Sessions sharing one normalized time window on a day."""

    time_slot: str
    start_time: str
    end_time: str
    sessions: list[ScheduleSession]
