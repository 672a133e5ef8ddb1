"""Workout program, session and exercise models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from ..errors import ValidationError
from ..utils.dates import WEEKDAYS
from .muscle import MuscleGroup


class ProgramGoal(str, Enum):
    """Primary goal of a generated program."""

    BUILD_MUSCLE = "build_muscle"
    LOSE_WEIGHT = "lose_weight"
    STRENGTH = "strength"
    ENDURANCE = "endurance"
    GENERAL_FITNESS = "general_fitness"

    @classmethod
    def parse(cls, value: "str | ProgramGoal") -> "ProgramGoal":
        """Accept enum values as well as labels like "Build Muscle"."""
        if isinstance(value, ProgramGoal):
            return value
        raw = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(raw)
        except ValueError as e:
            raise ValidationError(f"Invalid goal: {value}") from e

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class ProgramStatus(str, Enum):
    """Program lifecycle status."""

    ACTIVE = "active"
    DELETED = "deleted"


class WorkoutKind(str, Enum):
    """How a session was created."""

    EXERCISE = "exercise"  # ad-hoc single exercise
    BARBELL = "barbell"  # ad-hoc multi-exercise
    AI_GENERATED = "ai_generated"


class SessionStatus(str, Enum):
    """Session completion state. Moves forward only."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return list(SessionStatus).index(self)

    def can_advance_to(self, other: "SessionStatus") -> bool:
        return other.rank > self.rank


@dataclass
class ProgramParams:
    """User-chosen parameters for program generation."""

    goal: ProgramGoal
    frequency: int
    workout_days: list[str]
    duration: int
    total_weeks: int
    equipment: list[str] = field(default_factory=list)

    def validate(self) -> None:
        """Raise ValidationError if any parameter is out of range."""
        if not isinstance(self.frequency, int) or not 1 <= self.frequency <= 7:
            raise ValidationError("Frequency must be between 1 and 7 sessions per week")
        invalid = [d for d in self.workout_days if d not in WEEKDAYS]
        if invalid:
            raise ValidationError(f"Invalid workout days: {', '.join(map(str, invalid))}")
        if len(set(self.workout_days)) != len(self.workout_days):
            raise ValidationError("Workout days must not repeat")
        if len(self.workout_days) != self.frequency:
            raise ValidationError(
                f"Expected {self.frequency} workout days, got {len(self.workout_days)}"
            )
        if not isinstance(self.duration, int) or self.duration < 1:
            raise ValidationError("Session duration must be a positive number of minutes")
        if not isinstance(self.total_weeks, int) or self.total_weeks < 1:
            raise ValidationError("Program length must be a positive number of weeks")
        if not all(isinstance(e, str) for e in self.equipment):
            raise ValidationError("Equipment must be a list of names")

    @classmethod
    def from_dict(cls, data: dict) -> "ProgramParams":
        """Build from a request body (camelCase keys are accepted)."""
        try:
            params = cls(
                goal=ProgramGoal.parse(data["goal"]),
                frequency=_as_int(data.get("frequency")),
                workout_days=list(data.get("workout_days", data.get("workoutDays")) or []),
                duration=_as_int(data.get("duration")),
                total_weeks=_as_int(data.get("total_weeks", data.get("programWeeks"))),
                equipment=list(data.get("equipment") or []),
            )
        except KeyError as e:
            raise ValidationError(f"Missing required field: {e.args[0]}") from e
        params.validate()
        return params

    def to_dict(self) -> dict:
        return {
            "goal": self.goal.value,
            "frequency": self.frequency,
            "workout_days": self.workout_days,
            "duration": self.duration,
            "total_weeks": self.total_weeks,
            "equipment": self.equipment,
        }


def _as_int(value) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Expected a number, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Expected a number, got {value!r}") from e


@dataclass
class WorkoutExercise:
    """An exercise within a session."""

    name: str
    sets: int | None = None
    reps: int | None = None
    rest_seconds: int | None = None
    order_index: int = 1
    muscle_groups: list[str] = field(default_factory=list)
    video_url: str | None = None
    completed: bool = False
    completion_notes: str | None = None
    weight: float | None = None
    duration: int | None = None
    session_id: int | None = None
    id: int | None = None

    @property
    def volume(self) -> int:
        return (self.sets or 0) * (self.reps or 0)

    @property
    def tracked_muscle_groups(self) -> list[MuscleGroup]:
        """Muscle groups that count towards balance (unknown labels dropped)."""
        groups = []
        for label in self.muscle_groups:
            group = MuscleGroup.from_value(label)
            if group is not None and group not in groups:
                groups.append(group)
        return groups

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sets": self.sets,
            "reps": self.reps,
            "rest_seconds": self.rest_seconds,
            "order_index": self.order_index,
            "muscle_groups": self.muscle_groups,
            "video_url": self.video_url,
            "exercise_completed": self.completed,
            "completion_notes": self.completion_notes,
            "weight": self.weight,
            "duration": self.duration,
        }


@dataclass
class WorkoutSession:
    """A single scheduled (or ad-hoc) workout."""

    user_key: str
    title: str
    kind: WorkoutKind
    scheduled_date: date
    program_id: int | None = None
    week_number: int | None = None
    session_number: int | None = None
    phase_name: str | None = None
    warm_up_video_url: str | None = None
    status: SessionStatus = SessionStatus.SCHEDULED
    exercises: list[WorkoutExercise] = field(default_factory=list)
    id: int | None = None

    def to_dict(self, include_exercises: bool = True) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "workout_type": self.kind.value,
            "program_id": self.program_id,
            "week_number": self.week_number,
            "session_number": self.session_number,
            "phase_name": self.phase_name,
            "scheduled_date": self.scheduled_date.isoformat(),
            "warm_up_video_url": self.warm_up_video_url,
            "completion_status": self.status.value,
        }
        if include_exercises:
            data["exercises"] = [ex.to_dict() for ex in self.exercises]
        return data


@dataclass
class WorkoutProgram:
    """A generated multi-week program."""

    user_key: str
    name: str
    goal: ProgramGoal
    total_weeks: int
    sessions_per_week: int
    session_duration: int
    workout_days: list[str]
    equipment: list[str]
    start_date: date
    muscle_balance_target: dict[str, float] = field(default_factory=dict)
    status: ProgramStatus = ProgramStatus.ACTIVE
    id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "program_name": self.name,
            "program_goal": self.goal.value,
            "total_weeks": self.total_weeks,
            "sessions_per_week": self.sessions_per_week,
            "session_duration": self.session_duration,
            "workout_days": self.workout_days,
            "available_equipment": self.equipment,
            "muscle_balance_target": self.muscle_balance_target,
            "status": self.status.value,
            "start_date": self.start_date.isoformat(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class WorkoutFeedback:
    """Post-workout feedback captured on session completion."""

    user_key: str
    session_id: int
    difficulty_rating: str
    completion_percentage: int | None = None
    notes: str | None = None
    id: int | None = None
