"""Pytest configuration and fixtures."""

import asyncio
import json
import tempfile
from datetime import date
from pathlib import Path

import pytest

from fitquest.clients.base import VideoSearchResult
from fitquest.db import UserProfileRepository, init_db
from fitquest.models.user_profile import UserProfile

# A Sunday; program weeks anchored here run Sunday to Saturday
PROGRAM_START = date(2024, 3, 3)


class FakeGenerator:
    """TextGenerator that returns a canned reply and records prompts."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeSearcher:
    """VideoSearcher that returns one video per distinct query."""

    def __init__(self, enabled: bool = True, result: bool = True):
        self.enabled = enabled
        self.result = result
        self.queries: list[str] = []

    async def search(self, query: str) -> VideoSearchResult | None:
        self.queries.append(query)
        if not self.result:
            return None
        return VideoSearchResult(video_id=f"vid{len(self.queries)}", title=query)


def program_reply(weeks: list[dict] | None = None, **extra) -> str:
    """A generation reply wrapped in prose and a code fence."""
    if weeks is None:
        weeks = [
            {
                "weekNumber": 1,
                "phase": "Foundation",
                "sessions": [
                    {
                        "dayOfWeek": "Monday",
                        "sessionName": "Upper Body",
                        "warmUpVideoQuery": "upper body warm up",
                        "exercises": [
                            {
                                "name": "Push-ups",
                                "sets": "3-4 sets",
                                "reps": "8-12",
                                "restSeconds": 60,
                                "muscleGroups": ["chest", "arms"],
                            },
                            {
                                "name": "Dumbbell Row",
                                "sets": 3,
                                "reps": 10,
                                "restSeconds": 90,
                                "muscleGroups": '["back"]',
                            },
                        ],
                    },
                    {
                        "dayOfWeek": "wednesday",
                        "sessionName": "Lower Body",
                        "exercises": [
                            {
                                "name": "Goblet Squat",
                                "sets": 4,
                                "reps": "AMRAP",
                                "muscleGroups": ["legs", "glutes"],
                            }
                        ],
                    },
                ],
            }
        ]
    data = {
        "programName": "Starter Strength",
        "weeks": weeks,
        "muscleBalance": {"chest": 20, "back": 20, "legs": 30, "shoulders": 10, "arms": 10, "core": 10},
    }
    data.update(extra)
    return "Here is your program:\n```json\n" + json.dumps(data) + "\n```\nGood luck!"


@pytest.fixture
def temp_db_path():
    """Create a temporary, initialized database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        asyncio.run(init_db(db_path))
        yield db_path


@pytest.fixture
def sample_profile():
    """Create a sample user profile for testing."""
    return UserProfile(
        user_key="alice",
        age=30,
        gender="female",
        activity_level="moderate",
        fitness_goal="get stronger",
        weight=65.0,
        height=170.0,
    )


@pytest.fixture
def stored_profile(temp_db_path, sample_profile):
    """The sample profile, saved in the temporary database."""
    asyncio.run(UserProfileRepository(temp_db_path).upsert(sample_profile))
    return sample_profile


@pytest.fixture
def fake_generator():
    return FakeGenerator(reply=program_reply())


@pytest.fixture
def fake_searcher():
    return FakeSearcher()
