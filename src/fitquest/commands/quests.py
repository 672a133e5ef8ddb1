"""Daily quest commands."""

from datetime import timedelta

import click

from ..db import get_db_path
from ..errors import FitQuestError
from ..models.quest import DailyQuest, QuestAction
from ..services import QuestService
from ..utils.dates import today
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_timezone,
)


def _check(flag: bool) -> str:
    return "x" if flag else " "


def _print_quest(quest: DailyQuest) -> None:
    click.echo(f"Quests for {quest.user_key} on {quest.date.isoformat()}:")
    click.echo(f"  [{_check(quest.weight_logged)}] Log your weight")
    click.echo(f"  [{_check(quest.meal_logged)}] Log a meal")
    click.echo(f"  [{_check(quest.exercise_logged)}] Log a workout")
    click.echo()
    status = click.style("completed", fg="green") if quest.day_completed else "in progress"
    click.echo(f"Day {status}, streak: {quest.streak_day}")


@click.group()
@click.pass_context
def quests(ctx):
    """View and update daily quests."""
    ensure_initialized(ctx)


@quests.command()
@click.argument("user_key")
@click.option("--date", "day", help="Date (YYYY-MM-DD, default: today)")
@async_command
async def show(user_key: str, day: str | None):
    """Show a day's quest checklist and streak."""
    service = QuestService(get_db_path(), get_timezone())
    _print_quest(await service.get_or_create(user_key, day))


@quests.command()
@click.argument("user_key")
@click.argument("action", type=click.Choice([a.value for a in QuestAction]))
@click.option("--date", "day", help="Date (YYYY-MM-DD, default: today)")
@click.pass_context
@async_command
async def log(ctx, user_key: str, action: str, day: str | None):
    """Tick one of the day's quests.

    Example:

        fitquest quests log alice weight
    """
    service = QuestService(get_db_path(), get_timezone())
    try:
        quest = await service.record_action(user_key, action, day)
    except FitQuestError as e:
        echo_error(e.message)
        ctx.exit(1)

    echo_success(f"Logged {action}")
    if quest.day_completed:
        echo_success(f"All quests done! Streak: {quest.streak_day}")


@quests.command()
@click.argument("user_key")
@click.option("--date", "day", help="Date (YYYY-MM-DD, default: today)")
@async_command
async def complete(user_key: str, day: str | None):
    """Mark a day completed without checking the quests."""
    service = QuestService(get_db_path(), get_timezone())
    quest = await service.mark_day_complete(user_key, day)
    echo_success(f"Day {quest.date.isoformat()} completed (streak {quest.streak_day})")


@quests.command()
@click.argument("user_key")
@click.option("--start", help="First date (YYYY-MM-DD, default: 30 days ago)")
@click.option("--end", help="Last date (YYYY-MM-DD, default: today)")
@click.pass_context
@async_command
async def history(ctx, user_key: str, start: str | None, end: str | None):
    """List quest days in a date range."""
    service = QuestService(get_db_path(), get_timezone())
    current = today(get_timezone())
    try:
        rows = await service.get_history(
            user_key, start or current - timedelta(days=30), end or current
        )
    except FitQuestError as e:
        echo_error(e.message)
        ctx.exit(1)

    if not rows:
        echo_info("No quest history in that range.")
        return

    table = [
        [
            quest.date.isoformat(),
            _check(quest.weight_logged),
            _check(quest.meal_logged),
            _check(quest.exercise_logged),
            "yes" if quest.day_completed else "no",
            str(quest.streak_day),
        ]
        for quest in rows
    ]
    click.echo(format_table(["Date", "Weight", "Meal", "Workout", "Done", "Streak"], table))
