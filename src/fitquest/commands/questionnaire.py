"""Interactive prompts for profiles and program parameters."""

import questionary
from questionary import Style

from ..models.program import ProgramGoal
from ..models.user_profile import UserProfile
from ..utils.dates import WEEKDAYS

custom_style = Style(
    [
        ("qmark", "fg:#2e7d32 bold"),
        ("question", "bold"),
        ("answer", "fg:#ef6c00 bold"),
        ("pointer", "fg:#2e7d32 bold"),
        ("highlighted", "fg:#2e7d32 bold"),
        ("selected", "fg:#ef6c00"),
        ("separator", "fg:#ef6c00"),
        ("instruction", ""),
        ("text", ""),
    ]
)

ACTIVITY_LEVELS = [
    questionary.Choice("Sedentary (little or no exercise)", "sedentary"),
    questionary.Choice("Lightly active (1-3 days/week)", "light"),
    questionary.Choice("Moderately active (3-5 days/week)", "moderate"),
    questionary.Choice("Very active (6-7 days/week)", "active"),
]

EQUIPMENT_CHOICES = [
    questionary.Choice("Dumbbells", "dumbbells"),
    questionary.Choice("Barbell", "barbell"),
    questionary.Choice("Kettlebells", "kettlebells"),
    questionary.Choice("Resistance bands", "resistance bands"),
    questionary.Choice("Pull-up bar", "pull-up bar"),
    questionary.Choice("Bench", "bench"),
    questionary.Choice("Cable machine", "cable machine"),
]


def _parse_number(raw: str | None, cast):
    if raw is None or not raw.strip():
        return None
    try:
        return cast(raw)
    except ValueError:
        return None


async def collect_profile(user_key: str, existing: UserProfile | None = None) -> UserProfile:
    """Ask for the profile fields program generation reads."""
    print(f"\n=== Fitness Profile for {user_key} ===\n")

    fitness_goal = await questionary.text(
        "Your fitness goal (in your own words):",
        default=(existing.fitness_goal or "") if existing else "",
        style=custom_style,
    ).ask_async()

    activity_level = await questionary.select(
        "How active are you currently?",
        choices=ACTIVITY_LEVELS,
        style=custom_style,
    ).ask_async()

    age = await questionary.text("Your age:", style=custom_style).ask_async()
    weight = await questionary.text("Your body weight (in kg):", style=custom_style).ask_async()
    height = await questionary.text("Your height (in cm):", style=custom_style).ask_async()

    return UserProfile(
        user_key=user_key,
        fitness_goal=(fitness_goal or "").strip() or None,
        activity_level=activity_level,
        age=_parse_number(age, int),
        weight=_parse_number(weight, float),
        height=_parse_number(height, float),
        gender=existing.gender if existing else None,
        id=existing.id if existing else None,
    )


async def select_goal() -> ProgramGoal:
    return await questionary.select(
        "What is the program's main goal?",
        choices=[questionary.Choice(goal.label, goal) for goal in ProgramGoal],
        style=custom_style,
    ).ask_async()


async def select_workout_days() -> list[str]:
    """Pick training weekdays; returns them in calendar order."""
    days = await questionary.checkbox(
        "Which days do you want to train?",
        choices=list(WEEKDAYS),
        style=custom_style,
    ).ask_async()
    return sorted(days or [], key=WEEKDAYS.get)


async def select_equipment() -> list[str]:
    equipment = await questionary.checkbox(
        "What equipment do you have access to? (none = bodyweight only)",
        choices=EQUIPMENT_CHOICES,
        style=custom_style,
    ).ask_async()
    return equipment or []
