"""Flask CLI commands for HabitLoop."""

from __future__ import annotations

from datetime import timedelta

import click

DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo-password"


def seed_demo_data(session_factory, today) -> dict[str, int]:
    """Create a demo user with a few habits, a month of logs and a group.

    Returns the ids of what was created. Re-running reuses the demo user and
    skips seeding when it already has habits.
    """

    from .blueprints.groups.forms import GroupForm
    from .blueprints.habits.forms import HabitForm
    from .infra.repositories import SQLModelGroupRepository, SQLModelHabitRepository
    from .models.habit import HabitLog
    from .services import auth as auth_service
    from .services import groups as group_service
    from .services import habits as habit_service

    user = auth_service.get_user_by_username(DEMO_USERNAME, session_factory)
    if user is None:
        user = auth_service.create_user(
            username=DEMO_USERNAME,
            password=DEMO_PASSWORD,
            display_name="Demo",
            session_factory=session_factory,
        )

    habits = SQLModelHabitRepository(session_factory)
    if habits.list_active(user_id=user.id):
        return {"user_id": user.id, "habits": 0, "logs": 0}

    demo_habits = [
        HabitForm(name="Read", category="Learning", type="TIMER"),
        HabitForm(name="Push-ups", category="Fitness", type="COUNT", target_count=30),
        HabitForm(name="Meditate", category="Mind", schedule_days=["MON", "WED", "FRI"]),
    ]
    created = [habit_service.create_habit(habits, user_id=user.id, form=form) for form in demo_habits]

    logs = 0
    for offset in range(30):
        day = today - timedelta(days=offset)
        # Leave a gap every ten days so streaks have something to break.
        if offset % 10 == 9:
            continue
        for habit in created:
            if not habit.is_scheduled_on(day):
                continue
            habits.save_log(
                HabitLog(
                    habit_id=habit.id,
                    user_id=user.id,
                    occurred_on=day,
                    completed=habit.habit_type != "TIMER",
                    duration=20 if habit.habit_type == "TIMER" else None,
                    count=habit.target_count,
                ),
                user_id=user.id,
            )
            logs += 1

    group_service.create_group(
        SQLModelGroupRepository(session_factory),
        user_id=user.id,
        form=GroupForm(name="Morning crew", habit={"name": "Wake up by 7"}),
    )
    return {"user_id": user.id, "habits": len(created), "logs": logs}


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("habitloop-seed")
    def habitloop_seed() -> None:
        """Seed a demo user with habits, logs and a group."""

        from .extensions import get_session_factory

        config = app.config["HABITLOOP_CONFIG"]
        result = seed_demo_data(get_session_factory(), config.local_today())
        if not result["habits"]:
            click.echo("Demo data already present.")
            return
        click.echo(
            f"Seeded {result['habits']} habits and {result['logs']} logs "
            f"for '{DEMO_USERNAME}' (password: {DEMO_PASSWORD})."
        )

    @app.cli.command("habitloop-streaks")
    @click.option("--username", required=True, help="User whose streaks to print")
    def habitloop_streaks(username: str) -> None:
        """Print current and longest streak for each of a user's habits."""

        from .extensions import get_session_factory
        from .infra.repositories import SQLModelHabitRepository
        from .services import auth as auth_service

        session_factory = get_session_factory()
        user = auth_service.get_user_by_username(username, session_factory)
        if user is None:
            raise click.ClickException(f"No such user: {username}")

        today = app.config["HABITLOOP_CONFIG"].local_today()
        habits = SQLModelHabitRepository(session_factory)
        best_current = best_longest = 0
        for habit in habits.list_active(user_id=user.id):
            current = habits.get_current_streak(habit.id, user_id=user.id, today=today)
            longest = habits.get_longest_streak(habit.id, user_id=user.id, today=today)
            best_current, best_longest = max(best_current, current), max(best_longest, longest)
            click.echo(f"{habit.name}: current {current}, longest {longest}")
        click.echo(f"Best current: {best_current}, best longest: {best_longest}")
