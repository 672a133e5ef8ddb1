"""Generate program command."""

import click

from ..clients import GenerationClient, VideoSearchClient
from ..config import get_settings
from ..db import get_db_path
from ..errors import FitQuestError
from ..models.program import ProgramGoal, ProgramParams
from ..services import DailyQuota, ProgramGenerator, VideoResolver
from ..utils.dates import WEEKDAYS, parse_date
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized
from .questionnaire import select_equipment, select_goal, select_workout_days


def _split_days(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [day.strip().title() for day in value.split(",") if day.strip()]


@click.command()
@click.argument("user_key")
@click.option(
    "--goal",
    "-g",
    type=click.Choice([goal.value for goal in ProgramGoal]),
    help="Program goal (prompted when omitted)",
)
@click.option(
    "--days",
    "-d",
    help="Comma-separated training weekdays, e.g. Monday,Wednesday,Friday",
)
@click.option(
    "--weeks",
    "-w",
    type=click.IntRange(1),
    default=4,
    help="Program length in weeks (default: 4)",
)
@click.option(
    "--duration",
    type=click.IntRange(1),
    default=45,
    help="Session length in minutes (default: 45)",
)
@click.option(
    "--equipment",
    "-e",
    multiple=True,
    help="Available equipment; repeat for several (prompted when omitted)",
)
@click.option("--start", help="First day of the program (YYYY-MM-DD, default: today)")
@click.pass_context
@async_command
async def generate(
    ctx,
    user_key: str,
    goal: str | None,
    days: str | None,
    weeks: int,
    duration: int,
    equipment: tuple[str, ...],
    start: str | None,
):
    """Generate a personalized workout program and schedule it.

    Requires a stored profile (see 'fitquest profile') and GEMINI_API_KEY.
    Exercise videos are attached when YOUTUBE_API_KEY is set.

    Examples:

        # Prompt for goal, days and equipment
        fitquest generate alice

        # Fully specified
        fitquest generate alice -g build_muscle -d Monday,Wednesday,Friday -w 6 -e dumbbells
    """
    ensure_initialized(ctx)

    settings = get_settings()
    db_path = get_db_path()

    interactive = goal is None or days is None
    program_goal = ProgramGoal(goal) if goal else await select_goal()
    workout_days = _split_days(days) or await select_workout_days()
    if not workout_days:
        echo_error("Pick at least one training day")
        ctx.exit(1)
    invalid = [day for day in workout_days if day not in WEEKDAYS]
    if invalid:
        echo_error(f"Unknown weekday(s): {', '.join(invalid)}")
        ctx.exit(1)
    if not equipment and interactive:
        equipment = tuple(await select_equipment())

    params = ProgramParams(
        goal=program_goal,
        frequency=len(workout_days),
        workout_days=workout_days,
        duration=duration,
        total_weeks=weeks,
        equipment=list(equipment),
    )

    quota = DailyQuota(db_path, limit=settings.daily_request_limit)
    generator = ProgramGenerator(
        generator=GenerationClient.from_settings(settings),
        videos=VideoResolver(
            VideoSearchClient.from_settings(settings),
            db_path,
            ttl_days=settings.video_cache_ttl_days,
        ),
        db_path=db_path,
        quota=quota,
        timezone=settings.timezone,
    )

    echo_info(f"Generating a {weeks}-week {program_goal.label} program for {user_key}...")
    echo_info(f"Training days: {', '.join(workout_days)}")
    click.echo()

    try:
        result = await generator.generate(
            user_key, params, start_date=parse_date(start) if start else None
        )
    except FitQuestError as e:
        echo_error(f"Failed to generate program: {e.message}")
        ctx.exit(1)

    echo_success(
        f"Program '{result.program_name}' created (ID: {result.program_id}) "
        f"with {result.sessions_created} sessions"
    )
    usage = await quota.usage(user_key)
    echo_info(f"Generations left today: {usage['remaining']}/{usage['limit']}")
    if result.muscle_balance:
        click.echo()
        click.echo("Target muscle balance:")
        for group, share in result.muscle_balance.items():
            click.echo(f"  {group:<10} {share:g}%")

    click.echo()
    click.echo("Next steps:")
    click.echo(f"  - View the schedule: fitquest programs schedule {user_key} {result.program_id}")
    click.echo(f"  - Rename it:         fitquest programs rename {user_key} {result.program_id} NAME")
