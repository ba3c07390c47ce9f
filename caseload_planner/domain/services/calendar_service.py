"""Week calendar assembly: fetch, filter, place and aggregate sessions."""

import logging
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Union

from ..entities.calendar import CalendarDay, TimeSlotGroup, WeekView
from ..entities.delegation import ViewMode
from ..entities.schedule_session import ScheduleSession, Student
from ..entities.user import UserIdentity
from ..interfaces.session_source import SessionSource
from .aggregator import aggregate_day
from .time_slots import is_scheduled, time_slot_groups
from .visibility import VisibilityService, effective_view_mode
from .week_window import week_dates

logger = logging.getLogger(__name__)


def sessions_for_date(sessions: Iterable[ScheduleSession], day: date) -> list[ScheduleSession]:
    """Scheduled sessions that belong in the calendar cell for ``day``.

    Concrete instances match on ``session_date``; templates match on weekday.
    """
    matched = []
    for session in sessions:
        if not is_scheduled(session):
            continue
        if session.session_date is not None:
            if session.session_date == day:
                matched.append(session)
        elif session.day_of_week == day.isoweekday():
            matched.append(session)
    return matched


class CalendarService:
    """Builds the week and day views for the current user."""

    def __init__(self, session_source: SessionSource, visibility: VisibilityService):
        self.session_source = session_source
        self.visibility = visibility

    async def load_visible_sessions(
        self,
        identity: Optional[UserIdentity],
        start_date: date,
        end_date: date,
        view_mode: Union[ViewMode, str] = ViewMode.MY_SESSIONS,
        students: Optional[Mapping[str, Student]] = None,
    ) -> tuple[list[ScheduleSession], dict[str, Student]]:
        """Fetch and filter sessions; any failure yields an empty set."""
        students = dict(students or {})
        if identity is None:
            logger.warning("No user identity; returning empty calendar")
            return [], students

        try:
            sessions = await self.session_source.fetch_sessions(
                identity.user_id, start_date, end_date, identity.role.value
            )
        except Exception as e:
            logger.error(f"Error fetching sessions for {identity.user_id}: {e}", exc_info=True)
            return [], students

        return await self.visibility.visible_sessions(
            sessions, identity.user_id, view_mode, identity.role, students
        )

    async def week_view(
        self,
        identity: Optional[UserIdentity],
        week_offset: int = 0,
        view_mode: Union[ViewMode, str] = ViewMode.MY_SESSIONS,
        students: Optional[Mapping[str, Student]] = None,
        reference: Optional[Union[date, datetime]] = None,
    ) -> WeekView:
        dates = week_dates(week_offset, reference)
        role = identity.role if identity else None
        mode = effective_view_mode(role, view_mode)

        visible, merged = await self.load_visible_sessions(identity, dates[0], dates[-1], mode, students)

        user_id = identity.user_id if identity else ""
        days = [
            CalendarDay(date=day, blocks=aggregate_day(sessions_for_date(visible, day), user_id))
            for day in dates
        ]
        return WeekView(
            week_offset=week_offset,
            view_mode=mode,
            days=days,
            students=merged,
            unscheduled=[s for s in visible if not is_scheduled(s)],
        )

    async def day_time_slots(
        self,
        identity: Optional[UserIdentity],
        day: date,
        view_mode: Union[ViewMode, str] = ViewMode.MY_SESSIONS,
    ) -> list[TimeSlotGroup]:
        visible, _ = await self.load_visible_sessions(identity, day, day, view_mode)
        return time_slot_groups(sessions_for_date(visible, day))
