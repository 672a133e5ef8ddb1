"""Database layer for fitquest."""

from .engine import get_db_path, init_db
from .repositories import (
    ActivityLogRepository,
    DailyQuestRepository,
    DecisionLogRepository,
    FeedbackRepository,
    MuscleBalanceRepository,
    ProgramRepository,
    QuotaRepository,
    UserProfileRepository,
    VideoCacheRepository,
    WorkoutExerciseRepository,
    WorkoutSessionRepository,
)

__all__ = [
    "ActivityLogRepository",
    "DailyQuestRepository",
    "DecisionLogRepository",
    "FeedbackRepository",
    "get_db_path",
    "init_db",
    "MuscleBalanceRepository",
    "ProgramRepository",
    "QuotaRepository",
    "UserProfileRepository",
    "VideoCacheRepository",
    "WorkoutExerciseRepository",
    "WorkoutSessionRepository",
]
