"""
Tests for recurring event expansion.
"""

from datetime import date, timedelta

import pytest

from eventfeed.models import RecurrencePattern, RecurrenceRule
from eventfeed.recurrence import (
    add_months,
    expand_all,
    expand_recurrence,
    recurrence_label,
    sunday_weekday,
)

MONDAY = date(2026, 10, 19)
WINDOW_END = date(2026, 12, 18)


def _days(occurrences):
    return [occ.effective_date for occ in occurrences]


class TestCalendarHelpers:
    def test_sunday_based_weekday(self):
        assert sunday_weekday(date(2026, 10, 18)) == 0
        assert sunday_weekday(MONDAY) == 1
        assert sunday_weekday(date(2026, 10, 24)) == 6

    def test_add_months_clamps_to_month_end(self):
        """A series on the 31st lands on the last day of short months."""
        anchor = date(2026, 1, 31)
        assert add_months(anchor, 1) == date(2026, 2, 28)
        assert add_months(anchor, 2) == date(2026, 3, 31)
        assert add_months(anchor, 3) == date(2026, 4, 30)

    def test_add_months_leap_year_and_year_rollover(self):
        assert add_months(date(2027, 12, 31), 2) == date(2028, 2, 29)
        assert add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)


class TestSingleOccurrence:
    def test_non_recurring_event(self, make_event):
        event = make_event(day=date(2026, 11, 2))
        result = expand_recurrence(event, MONDAY)
        assert _days(result) == [date(2026, 11, 2)]
        assert result[0].generated is False

    def test_pattern_none_outside_window_still_returned(self, make_event):
        """The window only bounds generated repeats, not the event itself."""
        event = make_event(day=date(2027, 5, 1), pattern="none")
        result = expand_recurrence(event, MONDAY)
        assert _days(result) == [date(2027, 5, 1)]

    def test_unknown_pattern_degrades(self, make_event):
        event = make_event(pattern="unknown")
        assert _days(expand_recurrence(event, MONDAY)) == [MONDAY]

    def test_unparseable_date_degrades(self, make_event):
        event = make_event(day=None, pattern="daily")
        result = expand_recurrence(event, MONDAY)
        assert len(result) == 1
        assert result[0].effective_date is None


class TestDaily:
    def test_daily_from_today_when_started_earlier(self, make_event):
        event = make_event(day=date(2026, 10, 10), pattern="daily", end_date=date(2026, 10, 22))
        assert _days(expand_recurrence(event, MONDAY)) == [
            date(2026, 10, 19),
            date(2026, 10, 20),
            date(2026, 10, 21),
            date(2026, 10, 22),
        ]

    def test_daily_starts_at_future_start_date(self, make_event):
        event = make_event(day=date(2026, 10, 25), pattern="daily")
        days = _days(expand_recurrence(event, MONDAY))
        assert days[0] == date(2026, 10, 25)
        assert days[-1] == WINDOW_END
        assert len(days) == 55

    def test_series_ended_before_today_returns_base(self, make_event):
        event = make_event(day=date(2026, 9, 1), pattern="daily", end_date=date(2026, 10, 1))
        result = expand_recurrence(event, MONDAY)
        assert _days(result) == [date(2026, 9, 1)]
        assert result[0].generated is False


class TestWeekly:
    def test_monday_wednesday_series(self, make_event):
        """Mon/Wed rule starting today covers every Mon and Wed for 60 days."""
        event = make_event(day=MONDAY, pattern="weekly", days_of_week=[1, 3])
        days = _days(expand_recurrence(event, MONDAY))

        expected = [
            MONDAY + timedelta(days=i)
            for i in range(61)
            if (MONDAY + timedelta(days=i)).weekday() in (0, 2)
        ]
        assert days == expected
        assert days[0] == MONDAY
        assert len(days) == 18

    def test_empty_days_defaults_to_start_weekday(self, make_event):
        event = make_event(day=date(2026, 10, 21), pattern="weekly")
        days = _days(expand_recurrence(event, MONDAY))
        assert all(d.weekday() == 2 for d in days)
        assert days[0] == date(2026, 10, 21)

    def test_days_before_start_in_first_week_skipped(self, make_event):
        event = make_event(day=date(2026, 10, 21), pattern="weekly", days_of_week=[1, 3])
        days = _days(expand_recurrence(event, MONDAY))
        assert days[:3] == [date(2026, 10, 21), date(2026, 10, 26), date(2026, 10, 28)]

    def test_repeated_days_do_not_duplicate(self, make_event):
        event = make_event(day=MONDAY, pattern="weekly", days_of_week=[1, 1, 1])
        days = _days(expand_recurrence(event, MONDAY))
        assert len(days) == len(set(days))

    def test_biweekly_keeps_cadence(self, make_event):
        """Biweekly series anchored two weeks ago continues this week."""
        event = make_event(day=date(2026, 10, 5), pattern="biweekly", days_of_week=[1])
        assert _days(expand_recurrence(event, MONDAY)) == [
            date(2026, 10, 19),
            date(2026, 11, 2),
            date(2026, 11, 16),
            date(2026, 11, 30),
            date(2026, 12, 14),
        ]

    def test_biweekly_off_week_skips_to_next_aligned_week(self, make_event):
        event = make_event(day=date(2026, 10, 5), pattern="biweekly", days_of_week=[1])
        days = _days(expand_recurrence(event, date(2026, 10, 26)))
        assert days[0] == date(2026, 11, 2)
        gaps = {(b - a).days for a, b in zip(days, days[1:])}
        assert gaps == {14}

    def test_series_starting_after_window_returns_base(self, make_event):
        event = make_event(day=date(2027, 2, 1), pattern="weekly", days_of_week=[1])
        result = expand_recurrence(event, MONDAY)
        assert _days(result) == [date(2027, 2, 1)]
        assert result[0].generated is False


class TestMonthly:
    def test_monthly_advances_into_window(self, make_event):
        event = make_event(day=date(2026, 8, 15), pattern="monthly")
        assert _days(expand_recurrence(event, MONDAY)) == [date(2026, 11, 15), date(2026, 12, 15)]

    def test_monthly_from_31st(self, make_event):
        event = make_event(day=date(2026, 1, 31), pattern="monthly")
        assert _days(expand_recurrence(event, date(2026, 2, 1))) == [
            date(2026, 2, 28),
            date(2026, 3, 31),
        ]


class TestWindowBound:
    @pytest.mark.parametrize(
        "pattern,days_of_week,start,end_date",
        [
            ("daily", (), date(2026, 9, 1), None),
            ("daily", (), date(2026, 10, 1), date(2026, 11, 3)),
            ("weekly", (0, 6), date(2026, 6, 3), None),
            ("biweekly", (2, 4), date(2026, 1, 7), date(2026, 12, 1)),
            ("monthly", (), date(2025, 12, 30), None),
        ],
    )
    def test_generated_occurrences_stay_in_window(self, make_event, pattern, days_of_week, start, end_date):
        event = make_event(day=start, pattern=pattern, days_of_week=days_of_week, end_date=end_date)
        upper = min(WINDOW_END, end_date) if end_date else WINDOW_END
        result = expand_recurrence(event, MONDAY)
        generated = [occ for occ in result if occ.generated]
        assert generated, "expected at least one generated occurrence"
        for occ in generated:
            assert MONDAY <= occ.effective_date <= upper
            assert occ.effective_date >= start
        assert len({occ.effective_date for occ in result}) == len(result)

    def test_custom_window(self, make_event):
        event = make_event(day=MONDAY, pattern="daily")
        assert len(expand_recurrence(event, MONDAY, window_days=6)) == 7


class TestExpandAll:
    def test_keeps_upstream_order(self, make_event):
        first = make_event(day=date(2026, 11, 1))
        second = make_event(day=MONDAY, pattern="daily", end_date=date(2026, 10, 20))
        result = expand_all([first, second], MONDAY)
        assert [occ.id for occ in result] == [first.id, second.id, second.id]


class TestRecurrenceLabel:
    def test_labels(self):
        assert recurrence_label(None) is None
        assert recurrence_label(RecurrenceRule(RecurrencePattern.DAILY)) == "Daily"
        assert recurrence_label(RecurrenceRule(RecurrencePattern.MONTHLY)) == "Monthly"
        weekly = RecurrenceRule(RecurrencePattern.WEEKLY, days_of_week=(1, 3))
        assert recurrence_label(weekly) == "Mondays, Wednesdays"

    def test_weekly_without_days_has_no_label(self):
        assert recurrence_label(RecurrenceRule(RecurrencePattern.BIWEEKLY)) is None
