"""User profile command."""

import click

from ..db import UserProfileRepository, get_db_path
from ..models.user_profile import UserProfile
from .base import async_command, echo_info, echo_success, ensure_initialized
from .questionnaire import collect_profile


@click.command()
@click.argument("user_key")
@click.option("--goal", help="Fitness goal in your own words")
@click.option("--activity-level", help="Activity level, e.g. moderate")
@click.option("--age", type=click.IntRange(10, 120), help="Age in years")
@click.option("--weight", type=float, help="Body weight in kg")
@click.option("--height", type=float, help="Height in cm")
@click.option("--show", is_flag=True, help="Only print the stored profile")
@click.pass_context
@async_command
async def profile(
    ctx,
    user_key: str,
    goal: str | None,
    activity_level: str | None,
    age: int | None,
    weight: float | None,
    height: float | None,
    show: bool,
):
    """Create or update the profile program generation reads.

    Without options an interactive questionnaire is shown.

    Examples:

        # Interactive
        fitquest profile alice

        # Non-interactive
        fitquest profile alice --goal "build muscle" --activity-level moderate --age 30

        # Print what is stored
        fitquest profile alice --show
    """
    ensure_initialized(ctx)

    repo = UserProfileRepository(get_db_path())
    existing = await repo.get(user_key)

    if show:
        if existing is None:
            echo_info(f"No profile stored for {user_key}")
            return
        for key, value in existing.to_dict().items():
            click.echo(f"  {key}: {value if value is not None else '-'}")
        return

    if any(v is not None for v in (goal, activity_level, age, weight, height)):
        data = existing.to_dict() if existing else {"user_key": user_key}
        updates = {
            "fitness_goal": goal,
            "activity_level": activity_level,
            "age": age,
            "weight": weight,
            "height": height,
        }
        data.update({k: v for k, v in updates.items() if v is not None})
        new_profile = UserProfile.from_dict(data)
    else:
        new_profile = await collect_profile(user_key, existing)

    await repo.upsert(new_profile)
    echo_success(f"Profile saved for {user_key}: {new_profile.get_summary()}")
