"""Tests for dashboard analytics across all of a user's habits."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from habitloop.errors import InvalidInputError
from habitloop.services import analytics as analytics_service
from habitloop.services.analytics import Period, parse_period, period_start

TODAY = date(2024, 3, 13)  # a Wednesday


class TestPeriods:
    def test_period_start(self):
        assert period_start(Period.DAILY, TODAY) == TODAY
        assert period_start(Period.WEEKLY, TODAY) == date(2024, 3, 11)
        assert period_start(Period.MONTHLY, TODAY) == date(2024, 3, 1)
        assert period_start(Period.ALL, TODAY) is None

    def test_parse_period_defaults_to_weekly(self):
        assert parse_period(None) is Period.WEEKLY
        assert parse_period("") is Period.WEEKLY
        assert parse_period("Monthly") is Period.MONTHLY

    def test_parse_period_rejects_unknown(self):
        with pytest.raises(InvalidInputError):
            parse_period("fortnightly")


class TestStreakOverview:
    def test_best_values_across_habits(self, habit_repo, habit_factory, log_factory, user):
        steady = habit_factory(name="Steady")
        lapsed = habit_factory(name="Lapsed")
        habit_factory(name="Fresh")
        for offset in range(4):
            log_factory(steady, TODAY - timedelta(days=offset))
        for offset in range(10, 18):
            log_factory(lapsed, TODAY - timedelta(days=offset))

        overview = analytics_service.streak_overview(habit_repo, user_id=user.id, today=TODAY)

        rows = {row["name"]: row for row in overview["habits"]}
        assert rows["Steady"]["current"] == 4
        assert rows["Lapsed"]["current"] == 0
        assert rows["Lapsed"]["longest"] == 8
        assert rows["Fresh"]["longest"] == 0
        assert overview["best_current"] == 4
        assert overview["best_longest"] == 8

    def test_no_habits(self, habit_repo, user):
        overview = analytics_service.streak_overview(habit_repo, user_id=user.id, today=TODAY)

        assert overview == {"habits": [], "best_current": 0, "best_longest": 0}


class TestDailyConsistency:
    def test_share_of_active_habits_per_day(self, habit_repo, habit_factory, log_factory, user):
        first = habit_factory(name="First")
        second = habit_factory(name="Second")
        third = habit_factory(name="Third")
        log_factory(first, TODAY)
        log_factory(second, TODAY)
        log_factory(third, TODAY - timedelta(days=1), completed=False)
        log_factory(first, TODAY - timedelta(days=2), completed=False, duration=5)

        rows = analytics_service.daily_consistency(habit_repo, user_id=user.id, today=TODAY, days=3)

        assert [row["date"] for row in rows] == [
            (TODAY - timedelta(days=2)).isoformat(),
            (TODAY - timedelta(days=1)).isoformat(),
            TODAY.isoformat(),
        ]
        assert [row["completed"] for row in rows] == [1, 0, 2]
        assert [row["pct"] for row in rows] == [33, 0, 67]
        assert all(row["total"] == 3 for row in rows)

    def test_archived_habits_are_excluded(self, habit_repo, habit_factory, log_factory, user):
        kept = habit_factory(name="Kept")
        gone = habit_factory(name="Gone")
        log_factory(gone, TODAY)
        habit_repo.archive(gone.id, user_id=user.id)

        rows = analytics_service.daily_consistency(habit_repo, user_id=user.id, today=TODAY, days=1)

        assert rows == [{"date": TODAY.isoformat(), "pct": 0, "completed": 0, "total": 1}]
        assert kept.id is not None

    def test_no_habits_returns_empty(self, habit_repo, user):
        assert analytics_service.daily_consistency(habit_repo, user_id=user.id, today=TODAY) == []

    def test_days_must_be_positive(self, habit_repo, user):
        with pytest.raises(InvalidInputError):
            analytics_service.daily_consistency(habit_repo, user_id=user.id, today=TODAY, days=0)


class TestTimeBreakdown:
    def test_weekly_minutes(self, habit_repo, habit_factory, log_factory, user):
        read = habit_factory(name="Read", category="Learning", habit_type="TIMER")
        run = habit_factory(name="Run", category="Fitness", habit_type="TIMER")
        log_factory(read, date(2024, 3, 10), completed=False, duration=99)  # previous week
        log_factory(read, date(2024, 3, 11), completed=False, duration=30)
        log_factory(read, TODAY, completed=False, duration=15)
        log_factory(run, TODAY, completed=False, duration=40)
        log_factory(run, date(2024, 3, 12), completed=True)  # no minutes

        payload = analytics_service.time_breakdown(
            habit_repo, user_id=user.id, today=TODAY, period=Period.WEEKLY
        )

        assert payload["period"] == "weekly"
        assert payload["total_minutes"] == 85
        assert payload["bar_data"] == [
            {"date": "2024-03-11", "Read": 30},
            {"date": "2024-03-13", "Read": 15, "Run": 40},
        ]
        assert payload["category_data"] == [
            {"category": "Learning", "minutes": 45},
            {"category": "Fitness", "minutes": 40},
        ]
        assert [item["name"] for item in payload["habit_totals"]] == ["Read", "Run"]
        assert payload["habit_meta"]["Run"]["category"] == "Fitness"

    def test_all_time_includes_everything(self, habit_repo, habit_factory, log_factory, user):
        read = habit_factory(name="Read", habit_type="TIMER")
        log_factory(read, date(2020, 1, 1), completed=False, duration=10)
        log_factory(read, TODAY, completed=False, duration=5)

        payload = analytics_service.time_breakdown(
            habit_repo, user_id=user.id, today=TODAY, period=Period.ALL
        )

        assert payload["total_minutes"] == 15

    def test_archived_habit_minutes_still_count(self, habit_repo, habit_factory, log_factory, user):
        read = habit_factory(name="Read", category="Learning", habit_type="TIMER")
        log_factory(read, TODAY, completed=False, duration=60)
        habit_repo.archive(read.id, user_id=user.id)

        payload = analytics_service.time_breakdown(
            habit_repo, user_id=user.id, today=TODAY, period=Period.ALL
        )

        assert payload["total_minutes"] == 60
        assert payload["habit_totals"][0]["name"] == "Read"
        assert payload["category_data"] == [{"category": "Learning", "minutes": 60}]

    def test_today_breakdown_sorted_by_minutes(self, habit_repo, habit_factory, log_factory, user):
        short = habit_factory(name="Short", habit_type="TIMER")
        long = habit_factory(name="Long", habit_type="TIMER", schedule_days=["SUN"])
        log_factory(short, TODAY, completed=False, duration=5)
        log_factory(long, TODAY, completed=False, duration=50)

        rows = analytics_service.today_time_breakdown(habit_repo, user_id=user.id, today=TODAY)

        assert [row["name"] for row in rows] == ["Long", "Short"]
        assert rows[0]["duration"] == 50
