"""Request bodies for the JSON API."""

from pydantic import BaseModel, Field


class QuestActionIn(BaseModel):
    user_key: str = Field(min_length=1)
    quest_type: str
    date: str | None = None


class DayCompleteIn(BaseModel):
    user_key: str = Field(min_length=1)
    date: str | None = None


class GenerateProgramIn(BaseModel):
    """Program generation parameters (validated further by ProgramParams)."""

    user_key: str = Field(min_length=1)
    goal: str
    frequency: int
    workout_days: list[str]
    duration: int
    total_weeks: int
    equipment: list[str] = Field(default_factory=list)


class ProgramUpdateIn(BaseModel):
    user_key: str = Field(min_length=1)
    program_id: int
    program_name: str | None = None
    status: str | None = None


class ExerciseCompletionIn(BaseModel):
    id: int
    completed: bool = False
    notes: str | None = None


class CompleteSessionIn(BaseModel):
    user_key: str = Field(min_length=1)
    session_id: int
    exercises: list[ExerciseCompletionIn]
    difficulty_rating: str | None = None
    notes: str | None = None


class ExerciseUpdateIn(BaseModel):
    exercise_id: int
    completed: bool = False
    notes: str | None = None


class CompletionStatesIn(BaseModel):
    user_key: str = Field(min_length=1)
    session_id: int
    completion_states: list[bool]


class WeightIn(BaseModel):
    user_key: str = Field(min_length=1)
    weight: float
    date: str | None = None


class MealIn(BaseModel):
    user_key: str = Field(min_length=1)
    food_name: str
    portion_size: str
    calories: int | None = None
    meal_type: str | None = None
    date: str | None = None


class WorkoutExerciseIn(BaseModel):
    name: str
    sets: int | None = None
    reps: int | None = None
    weight: float | None = None
    duration: int | None = None


class WorkoutIn(BaseModel):
    user_key: str = Field(min_length=1)
    title: str
    type: str
    date: str | None = None
    exercises: list[WorkoutExerciseIn] = Field(default_factory=list)
    duration: int | None = None
