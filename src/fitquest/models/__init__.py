"""Data models for fitquest."""

from .muscle import MuscleBalanceRecord, MuscleGroup, MuscleVolume
from .program import (
    ProgramGoal,
    ProgramParams,
    ProgramStatus,
    SessionStatus,
    WorkoutExercise,
    WorkoutFeedback,
    WorkoutKind,
    WorkoutProgram,
    WorkoutSession,
)
from .quest import DailyQuest, QuestAction
from .user_profile import UserProfile
from .video import ExerciseVideo

__all__ = [
    "DailyQuest",
    "ExerciseVideo",
    "MuscleBalanceRecord",
    "MuscleGroup",
    "MuscleVolume",
    "ProgramGoal",
    "ProgramParams",
    "ProgramStatus",
    "QuestAction",
    "SessionStatus",
    "UserProfile",
    "WorkoutExercise",
    "WorkoutFeedback",
    "WorkoutKind",
    "WorkoutProgram",
    "WorkoutSession",
]
