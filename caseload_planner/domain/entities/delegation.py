"""Delegation, role and view-mode enums."""

from enum import Enum


class UserRole(str, Enum):
    """Roles a calendar user can hold."""

    RESOURCE = "resource"
    SPECIALIST = "specialist"
    SPEECH = "speech"
    OT = "ot"
    COUNSELOR = "counseling"
    SEA = "sea"
    ADMIN = "admin"


class ViewMode(str, Enum):
    """Calendar filters a user can pick."""

    MY_SESSIONS = "my-sessions"
    ALL_SESSIONS = "all-sessions"
    SPECIALIST = "specialist"
    SEA = "sea"
    ASSIGNED_TO_ME = "assigned-to-me"


class DelegationCategory(str, Enum):
    """Delegation state of a session relative to the current user.

    Declaration order is the priority order used when several members of a
    group fall into different categories.
    """

    ASSIGNED_TO_ME = "assigned_to_me"
    ASSIGNED_TO_SEA = "assigned_to_sea"
    ASSIGNED_TO_SPECIALIST = "assigned_to_specialist"
    OWN = "own"
    UNRELATED = "unrelated"


class DisplayColor(str, Enum):
    """Calendar block colors."""

    ASSIGNED_TO_ME = "orange"
    ASSIGNED_TO_SEA = "green"
    ASSIGNED_TO_SPECIALIST = "purple"
    OWN = "blue"


CATEGORY_COLORS = {
    DelegationCategory.ASSIGNED_TO_ME: DisplayColor.ASSIGNED_TO_ME,
    DelegationCategory.ASSIGNED_TO_SEA: DisplayColor.ASSIGNED_TO_SEA,
    DelegationCategory.ASSIGNED_TO_SPECIALIST: DisplayColor.ASSIGNED_TO_SPECIALIST,
    DelegationCategory.OWN: DisplayColor.OWN,
    DelegationCategory.UNRELATED: DisplayColor.OWN,
}

CATEGORY_PRIORITY = list(DelegationCategory)
