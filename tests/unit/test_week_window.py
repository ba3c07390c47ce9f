"""Tests for the Monday-Friday week window."""

from datetime import date, datetime

from caseload_planner.domain.services.week_window import week_dates, week_range


class TestWeekDates:
    """Test cases for week_dates."""

    def test_midweek_reference_snaps_to_monday(self):
        dates = week_dates(0, date(2026, 10, 14))

        assert dates == [date(2026, 10, d) for d in range(12, 17)]

    def test_monday_reference_is_its_own_week(self):
        assert week_dates(0, date(2026, 10, 12))[0] == date(2026, 10, 12)

    def test_saturday_belongs_to_the_week_just_ended(self):
        assert week_dates(0, date(2026, 10, 17))[0] == date(2026, 10, 12)

    def test_sunday_belongs_to_the_week_just_ended(self):
        assert week_dates(0, date(2026, 10, 18))[0] == date(2026, 10, 12)

    def test_positive_offset(self):
        dates = week_dates(1, date(2026, 10, 14))

        assert dates[0] == date(2026, 10, 19)
        assert dates[-1] == date(2026, 10, 23)

    def test_negative_offset_crosses_month(self):
        assert week_dates(-2, date(2026, 10, 12))[0] == date(2026, 9, 28)

    def test_always_five_consecutive_weekdays(self):
        for offset in range(-3, 4):
            dates = week_dates(offset, date(2026, 10, 15))
            assert len(dates) == 5
            assert [d.isoweekday() for d in dates] == [1, 2, 3, 4, 5]

    def test_accepts_datetime(self):
        assert week_dates(0, datetime(2026, 10, 15, 23, 59))[0] == date(2026, 10, 12)

    def test_defaults_to_today(self):
        dates = week_dates()

        assert dates[0].isoweekday() == 1
        assert abs((date.today() - dates[0]).days) <= 6


def test_week_range_returns_monday_and_friday():
    assert week_range(0, date(2026, 10, 14)) == (date(2026, 10, 12), date(2026, 10, 16))


def test_week_range_snaps_sunday_back():
    assert week_range(1, date(2026, 10, 11)) == (date(2026, 10, 12), date(2026, 10, 16))
