"""Program management commands."""

import click

from ..db import get_db_path
from ..errors import FitQuestError
from ..services import ProgramQueryService
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_timezone,
)


@click.group()
@click.pass_context
def programs(ctx):
    """Manage generated programs.

    Commands for listing, viewing, renaming, and deleting programs.
    """
    ensure_initialized(ctx)


def _service() -> ProgramQueryService:
    return ProgramQueryService(get_db_path(), get_timezone())


@programs.command(name="list")
@click.argument("user_key")
@async_command
async def list_programs(user_key: str):
    """List a user's active programs."""
    all_programs = await _service().list_programs(user_key)

    if not all_programs:
        echo_info(f"No programs found. Generate one with 'fitquest generate {user_key}'")
        return

    headers = ["ID", "Name", "Goal", "Week", "Days", "Next session"]
    rows = []
    for prog in all_programs:
        name = prog["program_name"]
        upcoming = prog["sessions"]
        rows.append([
            str(prog["id"]),
            name[:30] + "..." if len(name) > 30 else name,
            prog["program_goal"],
            f"{prog['current_week']}/{prog['total_weeks']}",
            ", ".join(day[:3] for day in prog["workout_days"]),
            upcoming[0]["scheduled_date"] if upcoming else "-",
        ])

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(all_programs)} program(s)")


@programs.command()
@click.argument("user_key")
@click.argument("program_id", type=int)
@click.pass_context
@async_command
async def schedule(ctx, user_key: str, program_id: int):
    """Show a program's sessions week by week."""
    try:
        data = await _service().get_schedule(user_key, program_id)
    except FitQuestError as e:
        echo_error(e.message)
        ctx.exit(1)

    program = data["program"]
    stats = data["statistics"]
    click.echo()
    click.echo(click.style(program["program_name"], bold=True))
    click.echo(
        f"Goal: {program['program_goal']}  Weeks: {program['total_weeks']}  "
        f"Starts: {program['start_date']}"
    )

    for week in data["schedule"]:
        click.echo()
        click.echo(f"Week {week['week_number']}")
        rows = [
            [
                session["scheduled_date"],
                session["title"],
                str(session["exercise_count"]),
                session["completion_status"],
            ]
            for session in week["sessions"]
        ]
        click.echo(format_table(["Date", "Session", "Exercises", "Status"], rows))

    click.echo()
    click.echo(
        f"Completed {stats['completed_sessions']}/{stats['total_sessions']} "
        f"({stats['completion_rate']}%), {stats['upcoming_sessions']} upcoming"
    )


@programs.command()
@click.argument("user_key")
@click.argument("program_id", type=int)
@click.argument("name")
@click.pass_context
@async_command
async def rename(ctx, user_key: str, program_id: int, name: str):
    """Rename a program."""
    try:
        program = await _service().rename_program(user_key, program_id, name)
    except FitQuestError as e:
        echo_error(e.message)
        ctx.exit(1)
    echo_success(f"Program {program_id} renamed to '{program.name}'")


@programs.command()
@click.argument("user_key")
@click.argument("program_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, user_key: str, program_id: int, yes: bool):
    """Delete a program (its history is kept)."""
    if not yes and not click.confirm(f"Delete program {program_id}?"):
        echo_info("Cancelled")
        return

    try:
        await _service().delete_program(user_key, program_id)
    except FitQuestError as e:
        echo_error(e.message)
        ctx.exit(1)
    echo_success(f"Program {program_id} deleted")
