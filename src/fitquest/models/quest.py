"""Daily quest and streak models."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from ..errors import ValidationError


class QuestAction(str, Enum):
    """The three daily actions that make up a quest day."""

    WEIGHT = "weight"
    MEAL = "meal"
    EXERCISE = "exercise"

    @property
    def column(self) -> str:
        """Name of the flag column this action sets."""
        return f"{self.value}_logged"

    @classmethod
    def parse(cls, value: "str | QuestAction") -> "QuestAction":
        """Accept `weight` as well as the column form `weight_logged`."""
        if isinstance(value, QuestAction):
            return value
        raw = str(value).strip().lower()
        if raw.endswith("_logged"):
            raw = raw[: -len("_logged")]
        try:
            return cls(raw)
        except ValueError as e:
            raise ValidationError(f"Invalid quest type: {value}") from e


@dataclass
class DailyQuest:
    """One user's quest record for one calendar date.

    `day_completed` is set when all three flags are true (or by the explicit
    manual override). `streak_day` is fixed when the row is created.
    """

    user_key: str
    date: date
    weight_logged: bool = False
    meal_logged: bool = False
    exercise_logged: bool = False
    day_completed: bool = False
    streak_day: int = 1
    id: int | None = None

    @property
    def all_logged(self) -> bool:
        return self.weight_logged and self.meal_logged and self.exercise_logged

    def is_logged(self, action: QuestAction) -> bool:
        return bool(getattr(self, action.column))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_key": self.user_key,
            "date": self.date.isoformat(),
            "weight_logged": self.weight_logged,
            "meal_logged": self.meal_logged,
            "exercise_logged": self.exercise_logged,
            "day_completed": self.day_completed,
            "streak_day": self.streak_day,
        }
