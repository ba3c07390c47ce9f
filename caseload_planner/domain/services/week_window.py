"""Monday-Friday week window calculation."""

from datetime import date, datetime, timedelta
from typing import Optional, Union

SCHOOL_DAYS = 5


def _as_date(reference: Optional[Union[date, datetime]]) -> date:
    if reference is None:
        return date.today()
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def week_range(
    week_offset: int = 0,
    reference: Optional[Union[date, datetime]] = None,
) -> tuple[date, date]:
    """Return (monday, friday) of the week ``week_offset`` weeks from ``reference``.

    The reference is shifted by whole weeks first, then snapped back to the
    Monday of that week (a Sunday belongs to the week that ended on it).
    Without a reference the current local date is used, so two calls
    straddling midnight can land on different weeks.
    """
    shifted = _as_date(reference) + timedelta(days=week_offset * 7)
    weekday = shifted.isoweekday()
    diff = -6 if weekday == 7 else 1 - weekday
    monday = shifted + timedelta(days=diff)
    return monday, monday + timedelta(days=SCHOOL_DAYS - 1)


def week_dates(
    week_offset: int = 0,
    reference: Optional[Union[date, datetime]] = None,
) -> list[date]:
    """Return the five school days of the selected week."""
    monday, _ = week_range(week_offset, reference)
    return [monday + timedelta(days=i) for i in range(SCHOOL_DAYS)]
