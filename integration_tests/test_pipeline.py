"""Integration tests for the full generation pipeline.

These tests call the real text-generation (and, when configured, video
search) services. They are skipped unless GEMINI_API_KEY is set.
"""

import asyncio
import tempfile
from datetime import date
from pathlib import Path

import pytest

from fitquest.clients import GenerationClient, VideoSearchClient
from fitquest.config import load_settings
from fitquest.db import UserProfileRepository, WorkoutSessionRepository, init_db
from fitquest.models.user_profile import UserProfile
from fitquest.services import DailyQuota, ProgramGenerator, ProgramQueryService, VideoResolver


@pytest.fixture
def db_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "integration.db"
        asyncio.run(init_db(path))
        asyncio.run(
            UserProfileRepository(path).upsert(
                UserProfile(
                    user_key="integration",
                    age=35,
                    activity_level="moderate",
                    fitness_goal="build muscle and stay mobile",
                )
            )
        )
        yield path


def test_generate_two_week_program(db_path):
    settings = load_settings()
    generator = ProgramGenerator(
        GenerationClient.from_settings(settings),
        VideoResolver(VideoSearchClient.from_settings(settings), db_path),
        db_path,
        quota=DailyQuota(db_path),
    )
    params = {
        "goal": "build_muscle",
        "frequency": 3,
        "workout_days": ["Monday", "Wednesday", "Friday"],
        "duration": 45,
        "total_weeks": 2,
        "equipment": ["dumbbells", "bench"],
    }

    result = asyncio.run(generator.generate("integration", params, start_date=date(2024, 3, 3)))

    assert result.program_id is not None
    assert 1 <= result.sessions_created <= 6

    schedule = asyncio.run(
        ProgramQueryService(db_path).get_schedule("integration", result.program_id)
    )
    assert schedule["statistics"]["total_sessions"] == result.sessions_created

    first_id = schedule["schedule"][0]["sessions"][0]["id"]
    session = asyncio.run(WorkoutSessionRepository(db_path).get(first_id))
    assert session.exercises
    for exercise in session.exercises:
        assert exercise.sets >= 1
        assert exercise.reps >= 1
        assert exercise.rest_seconds >= 0
