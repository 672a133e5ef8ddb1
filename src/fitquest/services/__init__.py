"""Business services for fitquest."""

from .activity import ActivityLogService
from .completion import CompletionTracker, ExerciseCompletion
from .muscle_balance import MuscleBalanceService, calculate_muscle_volume
from .programs import GenerationResult, ProgramGenerator, ProgramQueryService
from .quests import QuestService
from .quota import DailyQuota
from .videos import VideoResolver, normalize_name

__all__ = [
    "ActivityLogService",
    "calculate_muscle_volume",
    "CompletionTracker",
    "DailyQuota",
    "ExerciseCompletion",
    "GenerationResult",
    "MuscleBalanceService",
    "normalize_name",
    "ProgramGenerator",
    "ProgramQueryService",
    "QuestService",
    "VideoResolver",
]
