"""Tests for the JSON API."""

import asyncio
from pathlib import Path

import httpx
import pytest

from conftest import PROGRAM_START, FakeGenerator, FakeSearcher, program_reply
from fitquest.config import Settings
from fitquest.web import create_app


@pytest.fixture
def app(temp_db_path, stored_profile):
    settings = Settings(data_dir=Path(temp_db_path).parent, daily_request_limit=2)
    return create_app(
        settings,
        db_path=temp_db_path,
        generator=FakeGenerator(reply=program_reply()),
        video_searcher=FakeSearcher(),
    )


def call(app, method, url, raise_app_exceptions=True, **kwargs):
    async def run():
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.request(method, url, **kwargs)

    return asyncio.run(run())


GENERATE_BODY = {
    "user_key": "alice",
    "goal": "strength",
    "frequency": 2,
    "workout_days": ["Monday", "Wednesday"],
    "duration": 45,
    "total_weeks": 1,
}


class TestHealth:
    def test_health(self, app):
        response = call(app, "GET", "/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestQuestRoutes:
    """Tests for /daily-quests."""

    def test_get_creates_row(self, app):
        response = call(app, "GET", "/daily-quests", params={"user_key": "alice", "date": "2024-03-04"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["streak_day"] == 1
        assert body["data"]["weight_logged"] is False

    def test_post_and_put(self, app):
        response = call(
            app,
            "POST",
            "/daily-quests",
            json={"user_key": "alice", "quest_type": "meal", "date": "2024-03-04"},
        )
        assert response.json()["data"]["meal_logged"] is True

        response = call(app, "PUT", "/daily-quests", json={"user_key": "alice", "date": "2024-03-04"})
        assert response.json()["data"]["day_completed"] is True

    def test_invalid_quest_type(self, app):
        response = call(
            app, "POST", "/daily-quests", json={"user_key": "alice", "quest_type": "nap"}
        )
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Invalid quest type: nap",
            "code": "BAD_REQUEST",
        }

    def test_missing_field(self, app):
        response = call(app, "POST", "/daily-quests", json={"quest_type": "meal"})
        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"
        assert response.json()["details"]["errors"]

    def test_history(self, app):
        call(app, "GET", "/daily-quests", params={"user_key": "alice", "date": "2024-03-04"})
        response = call(
            app,
            "GET",
            "/daily-quests/history",
            params={"user_key": "alice", "start": "2024-03-01", "end": "2024-03-31"},
        )
        assert [q["date"] for q in response.json()["data"]] == ["2024-03-04"]


class TestProgramRoutes:
    """Tests for generation, listing, schedule and session completion."""

    def test_generate_list_and_schedule(self, app):
        response = call(app, "POST", "/ai-workout-generator", json=GENERATE_BODY)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["program_name"] == "Starter Strength"
        assert data["sessions_created"] == 2
        program_id = data["program_id"]

        listed = call(app, "GET", "/workout-programs", params={"user_key": "alice"}).json()["data"]
        assert [p["id"] for p in listed] == [program_id]

        schedule = call(
            app,
            "GET",
            "/workout-schedule",
            params={"user_key": "alice", "program_id": program_id},
        ).json()["data"]
        assert schedule["statistics"]["total_sessions"] == 2

    def test_complete_session_flow(self, app):
        program_id = call(app, "POST", "/ai-workout-generator", json=GENERATE_BODY).json()["data"][
            "program_id"
        ]
        schedule = call(
            app, "GET", "/workout-schedule", params={"user_key": "alice", "program_id": program_id}
        ).json()["data"]
        session_id = schedule["schedule"][0]["sessions"][0]["id"]

        detail = call(
            app, "GET", "/workout-sessions", params={"user_key": "alice", "session_id": session_id}
        ).json()["data"]
        assert detail["session"]["program_name"] == "Starter Strength"
        exercise_ids = [ex["id"] for ex in detail["exercises"]]

        response = call(
            app,
            "PUT",
            "/workout-sessions",
            json={"exercise_id": exercise_ids[0], "completed": True},
        )
        assert response.json()["data"]["exercise_completed"] is True

        response = call(
            app,
            "POST",
            "/workout-sessions",
            json={
                "user_key": "alice",
                "session_id": session_id,
                "exercises": [{"id": i, "completed": True} for i in exercise_ids],
                "difficulty_rating": "moderate",
            },
        )
        result = response.json()["data"]
        assert result["completion_status"] == "completed"
        assert result["muscle_volume"]["chest_volume"] == 30
        assert result["feedback_id"] is not None

        balance = call(app, "GET", "/muscle-balance", params={"user_key": "alice"}).json()["data"]
        assert balance["balance"]["back"] > 0

    def test_complete_session_keeps_exercise_notes(self, app):
        program_id = call(app, "POST", "/ai-workout-generator", json=GENERATE_BODY).json()["data"][
            "program_id"
        ]
        schedule = call(
            app, "GET", "/workout-schedule", params={"user_key": "alice", "program_id": program_id}
        ).json()["data"]
        session_id = schedule["schedule"][0]["sessions"][0]["id"]
        params = {"user_key": "alice", "session_id": session_id}
        exercise_id = call(app, "GET", "/workout-sessions", params=params).json()["data"][
            "exercises"
        ][0]["id"]

        response = call(
            app,
            "POST",
            "/workout-sessions",
            json={
                "user_key": "alice",
                "session_id": session_id,
                "exercises": [{"id": exercise_id, "completed": True, "notes": "felt strong"}],
            },
        )
        assert response.status_code == 200

        exercises = call(app, "GET", "/workout-sessions", params=params).json()["data"]["exercises"]
        assert exercises[0]["exercise_completed"] is True
        assert exercises[0]["completion_notes"] == "felt strong"

    def test_unknown_profile(self, app):
        response = call(app, "POST", "/ai-workout-generator", json=dict(GENERATE_BODY, user_key="bob"))
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_invalid_frequency(self, app):
        response = call(app, "POST", "/ai-workout-generator", json=dict(GENERATE_BODY, frequency=3))
        assert response.status_code == 400

    def test_rate_limited(self, app):
        for _ in range(2):
            assert call(app, "POST", "/ai-workout-generator", json=GENERATE_BODY).status_code == 201
        response = call(app, "POST", "/ai-workout-generator", json=GENERATE_BODY)
        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"

    def test_rename_and_delete(self, app):
        program_id = call(app, "POST", "/ai-workout-generator", json=GENERATE_BODY).json()["data"][
            "program_id"
        ]
        response = call(
            app,
            "PUT",
            "/workout-programs",
            json={"user_key": "alice", "program_id": program_id, "program_name": "Block A"},
        )
        assert response.json()["data"]["program_name"] == "Block A"

        response = call(
            app, "DELETE", "/workout-programs", params={"user_key": "alice", "program_id": program_id}
        )
        assert response.status_code == 200
        response = call(
            app, "GET", "/workout-schedule", params={"user_key": "alice", "program_id": program_id}
        )
        assert response.status_code == 404

    def test_generation_parse_error(self, temp_db_path, stored_profile):
        app = create_app(
            Settings(data_dir=Path(temp_db_path).parent),
            db_path=temp_db_path,
            generator=FakeGenerator(reply="I cannot do that"),
            video_searcher=FakeSearcher(),
        )
        response = call(app, "POST", "/ai-workout-generator", json=GENERATE_BODY)
        assert response.status_code == 500
        assert response.json()["code"] == "GENERATION_PARSE_ERROR"

    def test_unexpected_error(self, temp_db_path, stored_profile):
        app = create_app(
            Settings(data_dir=Path(temp_db_path).parent),
            db_path=temp_db_path,
            generator=FakeGenerator(error=RuntimeError("boom")),
            video_searcher=FakeSearcher(),
        )
        response = call(
            app, "POST", "/ai-workout-generator", json=GENERATE_BODY, raise_app_exceptions=False
        )
        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"


class TestActivityAndVideoRoutes:
    def test_log_weight(self, app):
        response = call(app, "POST", "/weight", json={"user_key": "alice", "weight": 72.5, "date": "2024-03-04"})
        assert response.status_code == 201

        quest = call(app, "GET", "/daily-quests", params={"user_key": "alice", "date": "2024-03-04"})
        assert quest.json()["data"]["weight_logged"] is True

    def test_log_workout(self, app):
        response = call(
            app,
            "POST",
            "/workouts",
            json={
                "user_key": "alice",
                "title": "Leg Day",
                "type": "barbell",
                "exercises": [{"name": "Squat", "sets": 5, "reps": 5, "weight": 100}],
            },
        )
        assert response.status_code == 201
        assert response.json()["data"]["exercises"][0]["name"] == "Squat"

    def test_exercise_video(self, app):
        response = call(app, "GET", "/exercise-videos", params={"exercise": "Lunge"})
        assert response.status_code == 200
        assert response.json()["data"]["embed_url"] == "https://www.youtube.com/embed/vid1"

        stats = call(app, "GET", "/exercise-videos/stats").json()["data"]
        assert stats["stats"]["total_cached"] == 1
