"""Time-slot grouping of a day's sessions."""

from typing import Iterable, Optional

from ..entities.calendar import TimeSlotGroup
from ..entities.schedule_session import ScheduleSession


def normalize_time(value: Optional[str]) -> Optional[str]:
    """Truncate "HH:MM[:SS]" to "HH:MM"; empty values become None."""
    if not value:
        return None
    return value[:5]


def is_scheduled(session: ScheduleSession) -> bool:
    """True when a session has a weekday and both times."""
    return (
        session.day_of_week is not None
        and bool(session.start_time)
        and bool(session.end_time)
    )


def time_slot_key(session: ScheduleSession) -> Optional[str]:
    """Return "HH:MM-HH:MM" for a session, or None when a time is missing."""
    start = normalize_time(session.start_time)
    end = normalize_time(session.end_time)
    if start is None or end is None:
        return None
    return f"{start}-{end}"


def group_by_time_slot(sessions: Iterable[ScheduleSession]) -> dict[str, list[ScheduleSession]]:
    """Group sessions by exact normalized (start, end) window.

    The returned dict iterates in ascending key order, which is chronological
    for zero-padded times. Windows that merely overlap stay separate.
    """
    slots: dict[str, list[ScheduleSession]] = {}
    for session in sessions:
        key = time_slot_key(session)
        if key is None:
            continue
        slots.setdefault(key, []).append(session)
    return {key: slots[key] for key in sorted(slots)}


def time_slot_groups(sessions: Iterable[ScheduleSession]) -> list[TimeSlotGroup]:
    """Same grouping as ``group_by_time_slot`` as a list of entities."""
    groups = []
    for key, members in group_by_time_slot(sessions).items():
        start, end = key.split("-", 1)
        groups.append(TimeSlotGroup(time_slot=key, start_time=start, end_time=end, sessions=members))
    return groups


def slot_duration_minutes(time_slot: str) -> int:
    """Length of a "HH:MM-HH:MM" slot in minutes."""
    start, end = time_slot.split("-", 1)
    start_h, start_m = (int(part) for part in start.split(":"))
    end_h, end_m = (int(part) for part in end.split(":"))
    return (end_h * 60 + end_m) - (start_h * 60 + start_m)
