"""Muscle groups and training volume."""

from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum


class MuscleGroup(str, Enum):
    """Tracked muscle groups (closed set)."""

    CHEST = "chest"
    BACK = "back"
    LEGS = "legs"
    SHOULDERS = "shoulders"
    ARMS = "arms"
    CORE = "core"

    @classmethod
    def from_value(cls, value) -> "MuscleGroup | None":
        """Map a loosely typed label to a tracked group, or None."""
        if isinstance(value, MuscleGroup):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass
class MuscleVolume:
    """Per-group volume (sets x reps)."""

    chest: int = 0
    back: int = 0
    legs: int = 0
    shoulders: int = 0
    arms: int = 0
    core: int = 0

    def add(self, group: MuscleGroup, amount: int) -> None:
        setattr(self, group.value, getattr(self, group.value) + amount)

    def get(self, group: MuscleGroup) -> int:
        return getattr(self, group.value)

    @property
    def total(self) -> int:
        return sum(getattr(self, f.name) for f in fields(self))

    def to_dict(self) -> dict[str, int]:
        return {group.value: self.get(group) for group in MuscleGroup}

    def percentages(self, divisor: int | None = None) -> dict[str, float]:
        """Share of each group as a percentage with one decimal.

        The divisor is never below 1, so an empty volume yields all zeros.
        """
        denominator = max(divisor if divisor is not None else self.total, 1)
        return {
            group.value: round(self.get(group) / denominator * 100, 1)
            for group in MuscleGroup
        }


@dataclass
class MuscleBalanceRecord:
    """Volume recorded for one completed session."""

    user_key: str
    session_id: int
    workout_date: date
    volume: MuscleVolume = field(default_factory=MuscleVolume)
    program_id: int | None = None
    id: int | None = None

    @property
    def total_volume(self) -> int:
        return self.volume.total

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_key": self.user_key,
            "program_id": self.program_id,
            "session_id": self.session_id,
            "workout_date": self.workout_date.isoformat(),
            **{f"{k}_volume": v for k, v in self.volume.to_dict().items()},
            "total_volume": self.total_volume,
        }
