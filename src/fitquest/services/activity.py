"""Weight, meal and ad-hoc workout logging.

Each successful log notifies the quest engine. Quest bookkeeping never fails
the log call itself.
"""

import logging
from datetime import date
from pathlib import Path

from ..db.repositories import ActivityLogRepository, WorkoutSessionRepository
from ..errors import ValidationError
from ..models.program import WorkoutExercise, WorkoutKind, WorkoutSession
from ..models.quest import QuestAction
from ..utils.dates import parse_date, today
from .quests import QuestService

logger = logging.getLogger(__name__)

MIN_WEIGHT_KG = 20
MAX_WEIGHT_KG = 500
MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")
AD_HOC_KINDS = (WorkoutKind.EXERCISE, WorkoutKind.BARBELL)


def _positive_int(value, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field_name} must be a whole number") from e
    if number < 1:
        raise ValidationError(f"{field_name} must be positive")
    return number


def _optional_float(value, field_name: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field_name} must be a number") from e


class ActivityLogService:
    """Thin logging writes that feed the daily quests."""

    def __init__(
        self,
        db_path: Path | None = None,
        quests: QuestService | None = None,
        timezone: str | None = None,
    ):
        self.logs = ActivityLogRepository(db_path)
        self.sessions = WorkoutSessionRepository(db_path)
        self.quests = quests or QuestService(db_path, timezone)
        self.timezone = timezone

    def _resolve_date(self, day: date | str | None) -> date:
        return parse_date(day) if day is not None else today(self.timezone)

    async def log_weight(self, user_key: str, weight: float, day: date | str | None = None) -> int:
        """Store a body weight (kg) and tick the weight quest."""
        weight = _optional_float(weight, "Weight")
        if weight is None or not MIN_WEIGHT_KG <= weight <= MAX_WEIGHT_KG:
            raise ValidationError(
                f"Weight must be between {MIN_WEIGHT_KG} and {MAX_WEIGHT_KG} kg"
            )
        day = self._resolve_date(day)
        weight_id = await self.logs.add_weight(user_key, weight, day)
        await self.quests.notify(user_key, QuestAction.WEIGHT, day)
        return weight_id

    async def log_meal(
        self,
        user_key: str,
        food_name: str,
        portion_size: str,
        calories: int | None = None,
        meal_type: str | None = None,
        day: date | str | None = None,
    ) -> int:
        """Store a meal and tick the meal quest."""
        if not food_name or not str(food_name).strip():
            raise ValidationError("Food name is required")
        if not portion_size or not str(portion_size).strip():
            raise ValidationError("Portion size is required")
        if meal_type is not None and meal_type not in MEAL_TYPES:
            raise ValidationError(f"Meal type must be one of: {', '.join(MEAL_TYPES)}")
        if calories is not None:
            try:
                calories = int(calories)
            except (TypeError, ValueError) as e:
                raise ValidationError("Calories must be a whole number") from e
            if calories < 0:
                raise ValidationError("Calories must not be negative")

        day = self._resolve_date(day)
        meal_id = await self.logs.add_meal(
            user_key, str(food_name).strip(), str(portion_size).strip(), calories, meal_type, day
        )
        await self.quests.notify(user_key, QuestAction.MEAL, day)
        return meal_id

    async def log_workout(
        self,
        user_key: str,
        title: str,
        kind: WorkoutKind | str,
        day: date | str | None = None,
        exercises: list[dict] | None = None,
        duration: int | None = None,
    ) -> WorkoutSession:
        """Store an ad-hoc (non-program) workout and tick the exercise quest.

        A single `exercise` workout becomes one exercise named after the
        title. A `barbell` workout needs at least one exercise.
        """
        if not title or not title.strip():
            raise ValidationError("Title is required")
        try:
            kind = WorkoutKind(kind)
        except ValueError as e:
            raise ValidationError('Invalid workout type. Must be "exercise" or "barbell"') from e
        if kind not in AD_HOC_KINDS:
            raise ValidationError('Invalid workout type. Must be "exercise" or "barbell"')

        if kind == WorkoutKind.BARBELL:
            if not exercises:
                raise ValidationError("Barbell workouts must have at least one exercise")
            items = []
            for order_index, raw in enumerate(exercises, start=1):
                name = (raw.get("name") or "").strip()
                if not name:
                    raise ValidationError(f"Exercise {order_index} needs a name")
                items.append(
                    WorkoutExercise(
                        name=name,
                        sets=_positive_int(raw.get("sets"), "Sets"),
                        reps=_positive_int(raw.get("reps"), "Reps"),
                        weight=_optional_float(raw.get("weight"), "Weight"),
                        duration=_positive_int(raw.get("duration"), "Duration"),
                        order_index=order_index,
                    )
                )
        else:
            items = [
                WorkoutExercise(
                    name=title.strip(),
                    duration=_positive_int(duration, "Duration"),
                    order_index=1,
                )
            ]

        day = self._resolve_date(day)
        session = WorkoutSession(
            user_key=user_key,
            title=title.strip(),
            kind=kind,
            scheduled_date=day,
            exercises=items,
        )
        await self.sessions.create(session)
        logger.debug("Logged %s workout %d for %s", kind.value, session.id, user_key)
        await self.quests.notify(user_key, QuestAction.EXERCISE, day)
        return session
