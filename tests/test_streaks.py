"""Tests for the streak, heatmap and consistency calculations.

These tests verify the pure calculations over completion dates, including:
- Consecutive days and gaps
- The one-day grace period before today's entry
- Future-dated entries
- Mixed date representations
- Trailing-window heatmaps and consistency rounding
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from habitloop.errors import InvalidInputError
from habitloop.services.streaks import (
    HeatmapDay,
    InvalidDateError,
    StreakResult,
    compute_consistency,
    compute_heatmap,
    compute_streaks,
    percentage,
    to_calendar_day,
    window_start,
)


def _days(start: date, count: int) -> list[date]:
    return [start + timedelta(days=offset) for offset in range(count)]


class TestComputeStreaks:
    """Current and longest streak over a set of completion dates."""

    def test_empty_input_returns_zeros(self):
        assert compute_streaks([], date(2024, 1, 1)) == StreakResult(current=0, longest=0)

    def test_run_ending_today(self):
        dates = {date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)}

        result = compute_streaks(dates, date(2024, 1, 3))

        assert result == StreakResult(current=3, longest=3)

    def test_run_ending_two_days_ago_is_broken(self):
        dates = {date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)}

        result = compute_streaks(dates, date(2024, 1, 5))

        assert result.current == 0
        assert result.longest == 3

    def test_yesterday_only_keeps_streak_alive(self):
        result = compute_streaks({date(2024, 1, 5)}, date(2024, 1, 6))

        assert result == StreakResult(current=1, longest=1)

    def test_single_entry_today(self):
        result = compute_streaks({date(2024, 1, 6)}, date(2024, 1, 6))

        assert result == StreakResult(current=1, longest=1)

    def test_two_disjoint_runs(self):
        dates = set(_days(date(2024, 1, 1), 5)) | {date(2024, 1, 10), date(2024, 1, 11)}

        result = compute_streaks(dates, date(2024, 1, 11))

        assert result == StreakResult(current=2, longest=5)

    def test_older_long_run_with_recent_short_run_ending_yesterday(self):
        today = date(2024, 6, 20)
        old_run = _days(today - timedelta(days=14), 5)
        recent_run = [today - timedelta(days=2), today - timedelta(days=1)]

        result = compute_streaks(old_run + recent_run, today)

        assert result.current == 2
        assert result.longest == 5

    def test_duplicates_count_once(self):
        today = date(2024, 2, 10)
        dates = [today, today, today - timedelta(days=1), today - timedelta(days=1)]

        assert compute_streaks(dates, today) == StreakResult(current=2, longest=2)

    def test_logging_today_after_yesterday_extends_current(self):
        today = date(2024, 2, 10)
        for length in (1, 2, 5, 30):
            dates = set(_days(today - timedelta(days=length), length))

            before = compute_streaks(dates, today).current
            after = compute_streaks(dates | {today}, today).current

            assert before == length
            assert after >= before
            assert after == before + 1

    def test_repeating_the_input_changes_nothing(self):
        dates = set(_days(date(2024, 1, 1), 5)) | {date(2024, 1, 10), date(2024, 1, 11)}
        today = date(2024, 1, 11)

        doubled = list(dates) + list(dates)

        assert compute_streaks(doubled, today) == compute_streaks(dates, today)
        assert compute_streaks(dates | dates, today) == StreakResult(current=2, longest=5)

    def test_order_of_input_does_not_matter(self):
        today = date(2024, 2, 10)
        dates = _days(today - timedelta(days=6), 7)

        forwards = compute_streaks(dates, today)
        backwards = compute_streaks(list(reversed(dates)), today)

        assert forwards == backwards == StreakResult(current=7, longest=7)

    def test_month_and_year_boundaries(self):
        dates = _days(date(2023, 12, 30), 4)  # Dec 30 .. Jan 2

        assert compute_streaks(dates, date(2024, 1, 2)) == StreakResult(current=4, longest=4)

    def test_leap_day_is_contiguous(self):
        dates = [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]

        assert compute_streaks(dates, date(2024, 3, 1)).current == 3

    def test_future_dates_do_not_extend_current_streak(self):
        today = date(2024, 5, 10)
        dates = [today - timedelta(days=1), today + timedelta(days=1), today + timedelta(days=2)]

        result = compute_streaks(dates, today)

        assert result.current == 1
        # The future run still shows up in the historical longest
        assert result.longest == 2

    def test_only_future_dates(self):
        today = date(2024, 5, 10)

        result = compute_streaks([today + timedelta(days=3)], today)

        assert result.current == 0
        assert result.longest == 1

    def test_longest_is_never_below_current(self):
        today = date(2024, 4, 1)
        for length in range(1, 10):
            dates = _days(today - timedelta(days=length - 1), length)
            result = compute_streaks(dates, today)
            assert result.longest >= result.current == length

    def test_mixed_representations(self):
        dates = [
            "2024-01-01",
            datetime(2024, 1, 2, 23, 59, tzinfo=timezone.utc),
            date(2024, 1, 3),
            "2024-01-04T08:30:00.000Z",
        ]

        assert compute_streaks(dates, date(2024, 1, 4)) == StreakResult(current=4, longest=4)

    def test_time_of_day_is_ignored(self):
        dates = [datetime(2024, 1, 1, 0, 1), datetime(2024, 1, 1, 23, 59), datetime(2024, 1, 2, 12)]

        assert compute_streaks(dates, date(2024, 1, 2)) == StreakResult(current=2, longest=2)

    def test_unparseable_entry_raises(self):
        with pytest.raises(InvalidDateError):
            compute_streaks(["2024-01-01", "not-a-date"], date(2024, 1, 1))

    def test_to_dict(self):
        assert StreakResult(current=2, longest=5).to_dict() == {"current": 2, "longest": 5}


class TestComputeHeatmap:
    """Trailing-window heatmap cells."""

    def test_window_ending_today(self):
        cells = compute_heatmap({date(2024, 3, 10)}, 3, date(2024, 3, 10))

        assert cells == [
            HeatmapDay(day=date(2024, 3, 8), satisfied=False),
            HeatmapDay(day=date(2024, 3, 9), satisfied=False),
            HeatmapDay(day=date(2024, 3, 10), satisfied=True),
        ]

    def test_length_matches_window(self):
        today = date(2024, 3, 10)

        for window in (1, 7, 30, 90, 365):
            cells = compute_heatmap([], window, today)
            assert len(cells) == window
            assert cells[-1].day == today
            assert cells[0].day == today - timedelta(days=window - 1)

    def test_days_are_strictly_ascending(self):
        cells = compute_heatmap([], 10, date(2024, 3, 1))

        for earlier, later in zip(cells, cells[1:]):
            assert later.day - earlier.day == timedelta(days=1)

    def test_dates_outside_window_are_ignored(self):
        today = date(2024, 3, 10)
        dates = [today - timedelta(days=30), today + timedelta(days=1), today - timedelta(days=1)]

        cells = compute_heatmap(dates, 3, today)

        assert [cell.satisfied for cell in cells] == [False, True, False]

    def test_zero_window_is_empty(self):
        assert compute_heatmap([date(2024, 3, 10)], 0, date(2024, 3, 10)) == []

    def test_negative_window_is_rejected(self):
        with pytest.raises(ValueError):
            compute_heatmap([], -1, date(2024, 3, 10))

    def test_cell_to_dict(self):
        cell = HeatmapDay(day=date(2024, 3, 10), satisfied=True)

        assert cell.to_dict() == {"date": "2024-03-10", "satisfied": True}


class TestComputeConsistency:
    """Percentage of days in the window that were satisfied."""

    def test_every_day_done(self):
        today = date(2024, 3, 10)

        assert compute_consistency(_days(today - timedelta(days=6), 7), 7, today) == 100

    def test_nothing_done(self):
        assert compute_consistency([], 30, date(2024, 3, 10)) == 0

    def test_rounds_half_up(self):
        today = date(2024, 3, 10)
        # 1 of 8 days = 12.5%
        assert compute_consistency([today], 8, today) == 13
        # 1 of 3 days = 33.33%
        assert compute_consistency([today], 3, today) == 33
        # 2 of 3 days = 66.67%
        assert compute_consistency([today, today - timedelta(days=1)], 3, today) == 67

    def test_only_window_days_count(self):
        today = date(2024, 3, 10)
        dates = [today, today - timedelta(days=10), today + timedelta(days=1)]

        assert compute_consistency(dates, 4, today) == 25

    def test_zero_window_returns_zero(self):
        assert compute_consistency([date(2024, 3, 10)], 0, date(2024, 3, 10)) == 0

    def test_negative_window_is_rejected(self):
        with pytest.raises(ValueError):
            compute_consistency([], -5, date(2024, 3, 10))

    def test_result_is_bounded(self):
        today = date(2024, 3, 10)
        dates = _days(today - timedelta(days=100), 120)

        for window in (1, 5, 50, 90):
            assert 0 <= compute_consistency(dates, window, today) <= 100


class TestToCalendarDay:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (date(2024, 1, 2), date(2024, 1, 2)),
            (datetime(2024, 1, 2, 18, 30), date(2024, 1, 2)),
            ("2024-01-02", date(2024, 1, 2)),
            ("2024-01-02T23:59:59", date(2024, 1, 2)),
            ("2024-01-02T10:00:00.000Z", date(2024, 1, 2)),
            ("  2024-01-02 ", date(2024, 1, 2)),
            ("2024-01-02T23:30:00+05:00", date(2024, 1, 2)),
        ],
    )
    def test_accepted_values(self, value, expected):
        assert to_calendar_day(value) == expected

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "yesterday",
            "2024-13-01",
            "2024-02-30",
            "2024-01-05garbage",
            "2024-01-05T99:99",
            "2024-01-05 not a time",
            None,
            20240102,
        ],
    )
    def test_rejected_values(self, value):
        with pytest.raises(InvalidDateError):
            to_calendar_day(value)

    def test_invalid_date_error_is_invalid_input(self):
        with pytest.raises(InvalidInputError) as excinfo:
            to_calendar_day("nope")

        assert excinfo.value.code == "invalid_date"
        assert excinfo.value.status_code == 400


def test_percentage_handles_zero_denominator():
    assert percentage(3, 0) == 0
    assert percentage(1, 2) == 50
    assert percentage(5, 5) == 100


def test_window_start():
    today = date(2024, 3, 10)

    assert window_start(1, today) == today
    assert window_start(7, today) == date(2024, 3, 4)
