"""Muscle balance report command."""

import click

from ..db import get_db_path
from ..models.muscle import MuscleGroup
from ..services import MuscleBalanceService
from ..services.muscle_balance import PERIODS
from .base import async_command, echo_info, ensure_initialized, format_table, get_timezone

BAR_WIDTH = 30


@click.command()
@click.argument("user_key")
@click.option(
    "--period",
    type=click.Choice(PERIODS),
    default="all-time",
    help="Range to report on (weeks start on Sunday)",
)
@click.option("--trends", is_flag=True, help="Also show weekly volume for the last 12 weeks")
@click.pass_context
@async_command
async def balance(ctx, user_key: str, period: str, trends: bool):
    """Show how training volume is spread across muscle groups.

    Examples:

        fitquest balance alice
        fitquest balance alice --period week --trends
    """
    ensure_initialized(ctx)

    service = MuscleBalanceService(get_db_path(), get_timezone())
    report = await service.get_report(user_key, period)

    click.echo()
    click.echo(f"Muscle balance ({period}) for {user_key}")
    click.echo()
    for group in MuscleGroup:
        share = report["balance"].get(group.value, 0.0)
        bar = "#" * round(share / 100 * BAR_WIDTH)
        click.echo(f"  {group.value:<10} {share:5.1f}%  {bar}")

    if not report["volume_history"]:
        click.echo()
        echo_info("No completed sessions recorded yet.")
        return

    if trends and report["weekly_trends"]:
        click.echo()
        headers = ["Week"] + [group.value for group in MuscleGroup] + ["total"]
        rows = [
            [week["week"]] + [str(week[group.value]) for group in MuscleGroup] + [str(week["total"])]
            for week in report["weekly_trends"]
        ]
        click.echo(format_table(headers, rows))
