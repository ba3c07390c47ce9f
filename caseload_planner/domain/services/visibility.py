"""Delegation classification and calendar visibility filtering."""

import logging
from typing import Iterable, Mapping, Optional, Union

from ..entities.delegation import DelegationCategory, UserRole, ViewMode
from ..entities.schedule_session import DeliveredBy, ScheduleSession, Student
from ..interfaces.student_directory import StudentDirectory
from .state_maps import merge_missing

logger = logging.getLogger(__name__)


# ===== Predicates shared by classification and filtering =====


def is_owned_by(session: ScheduleSession, user_id: str) -> bool:
    return session.provider_id == user_id


def is_assigned_to_me_by_other(session: ScheduleSession, user_id: str) -> bool:
    return session.assigned_to_specialist_id == user_id and session.provider_id != user_id


def is_delegated_to_sea(session: ScheduleSession) -> bool:
    return session.assigned_to_sea_id is not None


def is_delegated_to_other_specialist(session: ScheduleSession, user_id: str) -> bool:
    return (
        session.provider_id == user_id
        and session.assigned_to_specialist_id is not None
        and session.assigned_to_specialist_id != user_id
    )


def classify(session: ScheduleSession, user_id: str) -> DelegationCategory:
    """Return the delegation category of a session for ``user_id``.

    First match wins: assigned to me by another specialist, assigned to a
    SEA, delegated by me to another specialist, owned by me. The SEA check
    runs before the specialist check even when both fields are set.
    """
    if is_assigned_to_me_by_other(session, user_id):
        return DelegationCategory.ASSIGNED_TO_ME
    if is_delegated_to_sea(session):
        return DelegationCategory.ASSIGNED_TO_SEA
    if is_delegated_to_other_specialist(session, user_id):
        return DelegationCategory.ASSIGNED_TO_SPECIALIST
    if is_owned_by(session, user_id):
        return DelegationCategory.OWN
    return DelegationCategory.UNRELATED


def effective_view_mode(
    role: Optional[Union[UserRole, str]],
    requested: Union[ViewMode, str] = ViewMode.MY_SESSIONS,
) -> ViewMode:
    """SEAs always get the SEA view; everyone else gets what they asked for."""
    if role is not None and UserRole(role) == UserRole.SEA:
        return ViewMode.SEA
    return ViewMode(requested)


def _is_visible(
    session: ScheduleSession,
    user_id: str,
    view_mode: ViewMode,
    role: Optional[UserRole],
) -> bool:
    owned = is_owned_by(session, user_id)
    category = classify(session, user_id)

    if view_mode == ViewMode.MY_SESSIONS:
        return (
            category == DelegationCategory.OWN
            or session.assigned_to_specialist_id == user_id
            or session.assigned_to_sea_id == user_id
        )

    if view_mode == ViewMode.ALL_SESSIONS:
        return (
            owned
            or session.assigned_to_specialist_id == user_id
            or session.assigned_to_sea_id == user_id
        )

    if view_mode == ViewMode.SPECIALIST:
        return category == DelegationCategory.ASSIGNED_TO_SPECIALIST

    if view_mode == ViewMode.SEA:
        if role == UserRole.SEA:
            # A SEA owns nothing; their view is what was delegated to them.
            return session.assigned_to_sea_id == user_id
        return owned and category == DelegationCategory.ASSIGNED_TO_SEA

    if view_mode == ViewMode.ASSIGNED_TO_ME:
        return category == DelegationCategory.ASSIGNED_TO_ME

    return False


def filter_sessions(
    sessions: Iterable[ScheduleSession],
    user_id: str,
    view_mode: Union[ViewMode, str] = ViewMode.MY_SESSIONS,
    role: Optional[Union[UserRole, str]] = None,
) -> list[ScheduleSession]:
    """Return the sessions visible to ``user_id`` under a view mode.

    Input order is preserved.
    """
    resolved_role = UserRole(role) if role is not None else None
    mode = effective_view_mode(resolved_role, view_mode)
    return [s for s in sessions if _is_visible(s, user_id, mode, resolved_role)]


def can_user_group_session(session: ScheduleSession, user_id: Optional[str]) -> bool:
    """A user may group a session only when they personally deliver it."""
    if not user_id:
        return False
    if session.delivered_by == DeliveredBy.PROVIDER and session.provider_id == user_id:
        return True
    if session.delivered_by == DeliveredBy.SPECIALIST and session.assigned_to_specialist_id == user_id:
        return True
    if session.delivered_by == DeliveredBy.SEA and session.assigned_to_sea_id == user_id:
        return True
    return False


def can_user_access_session(session: ScheduleSession, user_id: str) -> bool:
    """Owner or either delegate may read and write a session."""
    return user_id in (
        session.provider_id,
        session.assigned_to_specialist_id,
        session.assigned_to_sea_id,
    )


def missing_student_ids(
    sessions: Iterable[ScheduleSession],
    students: Mapping[str, Student],
) -> list[str]:
    """Student ids referenced by sessions but absent from ``students``, in first-seen order."""
    seen: dict[str, None] = {}
    for session in sessions:
        if session.student_id and session.student_id not in students:
            seen.setdefault(session.student_id, None)
    return list(seen)


class VisibilityService:
    """Filters a user's sessions and backfills students the caller did not know about."""

    def __init__(self, student_directory: StudentDirectory):
        self.student_directory = student_directory

    async def fill_missing_students(
        self,
        sessions: Iterable[ScheduleSession],
        students: Mapping[str, Student],
    ) -> dict[str, Student]:
        """Return ``students`` unioned with fetched students for any gaps.

        Fetched entries never override caller-supplied ones. A failed lookup
        is logged and the original students are returned.
        """
        missing = missing_student_ids(sessions, students)
        if not missing:
            return dict(students)

        try:
            fetched = await self.student_directory.get_students_by_ids(missing)
        except Exception as e:
            logger.error(f"Error fetching {len(missing)} missing students: {e}", exc_info=True)
            return dict(students)

        supplementary = {student.id: student for student in fetched}
        logger.debug(f"Backfilled {len(supplementary)} of {len(missing)} missing students")
        return merge_missing(students, supplementary)

    async def visible_sessions(
        self,
        sessions: Iterable[ScheduleSession],
        user_id: Optional[str],
        view_mode: Union[ViewMode, str],
        role: Optional[Union[UserRole, str]],
        students: Mapping[str, Student],
    ) -> tuple[list[ScheduleSession], dict[str, Student]]:
        """Filter sessions for a view and return them with a completed student map.

        With no resolvable user the result is empty rather than an error.
        """
        if not user_id:
            logger.warning("No current user; returning empty session set")
            return [], dict(students)

        visible = filter_sessions(sessions, user_id, view_mode, role)
        merged = await self.fill_missing_students(visible, students)
        return visible, merged
