"""Aggregation of a day's sessions into group blocks and standalone blocks."""

from typing import Iterable

from ..entities.calendar import CalendarBlock, GroupBlock, SessionBlock
from ..entities.delegation import (
    CATEGORY_COLORS,
    CATEGORY_PRIORITY,
    DelegationCategory,
    DisplayColor,
)
from ..entities.schedule_session import ScheduleSession
from .time_slots import is_scheduled, normalize_time
from .visibility import classify

UNNAMED_GROUP = "Unnamed Group"
GROUP_PALETTE_SIZE = 5


def block_category(sessions: Iterable[ScheduleSession], user_id: str) -> DelegationCategory:
    """Highest-priority delegation category among a block's sessions."""
    categories = {classify(session, user_id) for session in sessions}
    for category in CATEGORY_PRIORITY:
        if category in categories:
            return category
    return DelegationCategory.OWN


def block_color(sessions: Iterable[ScheduleSession], user_id: str) -> DisplayColor:
    return CATEGORY_COLORS[block_category(sessions, user_id)]


def group_color_index(group_id: str, palette_size: int = GROUP_PALETTE_SIZE) -> int:
    """Deterministic palette slot for a group id."""
    return sum(ord(char) for char in group_id) % palette_size


def _group_block(group_id: str, members: list[ScheduleSession], user_id: str) -> GroupBlock:
    starts = [normalize_time(s.start_time) for s in members]
    ends = [normalize_time(s.end_time) for s in members]
    return GroupBlock(
        group_id=group_id,
        group_name=members[0].group_name or UNNAMED_GROUP,
        sessions=members,
        earliest_start=min(starts),
        latest_end=max(ends),
        color=block_color(members, user_id),
        palette_index=group_color_index(group_id),
    )


def aggregate_day(sessions: Iterable[ScheduleSession], user_id: str) -> list[CalendarBlock]:
    """Partition a day's scheduled sessions into blocks sorted by start time.

    Sessions sharing a ``group_id`` become one ``GroupBlock``; all other
    scheduled sessions become a ``SessionBlock`` each. Unscheduled sessions
    are skipped. Every scheduled session lands in exactly one block.
    """
    groups: dict[str, list[ScheduleSession]] = {}
    standalone: list[SessionBlock] = []

    for session in sessions:
        if not is_scheduled(session):
            continue
        if session.group_id:
            groups.setdefault(session.group_id, []).append(session)
        else:
            standalone.append(SessionBlock(session=session, color=block_color([session], user_id)))

    blocks: list[CalendarBlock] = [
        _group_block(group_id, members, user_id) for group_id, members in groups.items()
    ]
    blocks.extend(standalone)

    # Stable sort: groups stay ahead of standalone sessions starting at the same time
    return sorted(blocks, key=lambda block: normalize_time(block.start_time) or "")
