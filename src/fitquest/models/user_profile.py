"""User profile model (owned by the profile service, read-only here)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class UserProfile:
    """The profile fields the workout core reads."""

    user_key: str
    height: float | None = None  # in cm
    age: int | None = None
    gender: str | None = None
    activity_level: str | None = None
    fitness_goal: str | None = None
    weight: float | None = None  # in kg
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "user_key": self.user_key,
            "height": self.height,
            "age": self.age,
            "gender": self.gender,
            "activity_level": self.activity_level,
            "fitness_goal": self.fitness_goal,
            "weight": self.weight,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> "UserProfile":
        """Create from dictionary."""
        return cls(
            id=id,
            user_key=data["user_key"],
            height=data.get("height"),
            age=data.get("age"),
            gender=data.get("gender"),
            activity_level=data.get("activity_level"),
            fitness_goal=data.get("fitness_goal"),
            weight=data.get("weight"),
            created_at=created_at,
            updated_at=updated_at,
        )

    def get_summary(self) -> str:
        """Profile line for the generation prompt: goal, activity level, age."""
        age = f"age {self.age}" if self.age is not None else "age unknown"
        return ", ".join(
            [
                self.fitness_goal or "general fitness",
                self.activity_level or "unknown activity level",
                age,
            ]
        )
