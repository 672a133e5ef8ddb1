"""Prompt construction and validation of generated programs."""

from .payload import (
    GeneratedExercise,
    GeneratedProgram,
    GeneratedSession,
    GeneratedWeek,
    RawProgramPayload,
    normalize_muscle_groups,
    normalize_program,
    normalize_reps,
    normalize_rest_seconds,
    normalize_sets,
    parse_generation_text,
)
from .prompts import build_program_prompt

__all__ = [
    "build_program_prompt",
    "GeneratedExercise",
    "GeneratedProgram",
    "GeneratedSession",
    "GeneratedWeek",
    "normalize_muscle_groups",
    "normalize_program",
    "normalize_reps",
    "normalize_rest_seconds",
    "normalize_sets",
    "parse_generation_text",
    "RawProgramPayload",
]
