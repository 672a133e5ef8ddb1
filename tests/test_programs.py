"""Tests for program generation and program queries."""

import asyncio
from datetime import date

import pytest

import fitquest.db.repositories as repositories
from conftest import PROGRAM_START, FakeGenerator, FakeSearcher, program_reply
from fitquest.db import (
    DecisionLogRepository,
    ProgramRepository,
    QuotaRepository,
    WorkoutSessionRepository,
)
from fitquest.errors import (
    GenerationParseError,
    NotFound,
    ProfileNotFound,
    QuotaExceeded,
    UpstreamUnavailable,
    ValidationError,
)
from fitquest.models.program import ProgramStatus, SessionStatus
from fitquest.services import DailyQuota, ProgramGenerator, ProgramQueryService, VideoResolver
from fitquest.services.quota import PROGRAM_GENERATION_SCOPE
from fitquest.utils.dates import utc_today

PARAMS = {
    "goal": "build_muscle",
    "frequency": 2,
    "workout_days": ["Monday", "Wednesday"],
    "duration": 45,
    "total_weeks": 1,
    "equipment": ["dumbbells"],
}


def make_generator(db_path, generator=None, searcher=None, limit=20) -> ProgramGenerator:
    return ProgramGenerator(
        generator or FakeGenerator(reply=program_reply()),
        VideoResolver(searcher or FakeSearcher(), db_path),
        db_path,
        quota=DailyQuota(db_path, limit=limit),
    )


def generate(db_path, params=None, **kwargs):
    service = make_generator(db_path, **kwargs)
    return asyncio.run(service.generate("alice", params or PARAMS, start_date=PROGRAM_START))


class TestProgramGenerator:
    """Tests for ProgramGenerator.generate."""

    def test_generates_and_schedules(self, temp_db_path, stored_profile):
        result = generate(temp_db_path)

        assert result.program_name == "Starter Strength"
        assert result.sessions_created == 2
        assert result.muscle_balance["legs"] == 30

        async def load():
            sessions_repo = WorkoutSessionRepository(temp_db_path)
            sessions = await sessions_repo.list_for_program(result.program_id)
            return [await sessions_repo.get(s.id) for s in sessions]

        monday, wednesday = asyncio.run(load())
        assert monday.scheduled_date == date(2024, 3, 4)
        assert wednesday.scheduled_date == date(2024, 3, 6)
        assert (monday.week_number, monday.session_number) == (1, 1)
        assert wednesday.session_number == 2
        assert monday.title == "Upper Body"
        assert monday.phase_name == "Foundation"
        assert monday.status == SessionStatus.SCHEDULED
        assert monday.warm_up_video_url.startswith("https://www.youtube.com/embed/")

        push_ups, row = monday.exercises
        assert push_ups.name == "Push-ups"
        assert (push_ups.sets, push_ups.reps, push_ups.order_index) == (3, 10, 1)
        assert push_ups.muscle_groups == ["chest", "arms"]
        assert push_ups.video_url.startswith("https://www.youtube.com/embed/")
        assert row.rest_seconds == 90
        assert wednesday.exercises[0].reps == 12

    def test_stores_program_and_audit_entry(self, temp_db_path, stored_profile):
        result = generate(temp_db_path)

        program = asyncio.run(ProgramRepository(temp_db_path).get(result.program_id, "alice"))
        assert program.goal.value == "build_muscle"
        assert program.workout_days == ["Monday", "Wednesday"]
        assert program.start_date == PROGRAM_START
        assert program.status == ProgramStatus.ACTIVE

        decisions = asyncio.run(DecisionLogRepository(temp_db_path).list_for_program(result.program_id))
        assert len(decisions) == 1
        assert decisions[0]["decision_type"] == "program_generation"
        assert decisions[0]["input_data"]["workout_days"] == ["Monday", "Wednesday"]
        assert decisions[0]["output_data"]["programName"] == "Starter Strength"

    def test_prompt_mentions_parameters_and_profile(self, temp_db_path, stored_profile):
        fake = FakeGenerator(reply=program_reply())
        generate(temp_db_path, generator=fake)

        prompt = fake.prompts[0]
        assert "Build Muscle" in prompt
        assert "Monday, Wednesday" in prompt
        assert "dumbbells" in prompt
        assert "get stronger" in prompt

    def test_missing_slots_are_skipped(self, temp_db_path, stored_profile):
        params = dict(PARAMS, frequency=3, workout_days=["Monday", "Wednesday", "Friday"])
        result = generate(temp_db_path, params)
        assert result.sessions_created == 2

    def test_long_program_is_not_capped(self, temp_db_path, stored_profile):
        weeks = [
            {
                "weekNumber": number,
                "sessions": [
                    {
                        "dayOfWeek": "Monday",
                        "sessionName": f"Week {number}",
                        "exercises": [{"name": "Plank", "sets": 3, "reps": 30}],
                    }
                ],
            }
            for number in range(1, 17)
        ]
        params = dict(PARAMS, frequency=1, workout_days=["Monday"], total_weeks=16, duration=240)
        result = generate(temp_db_path, params, generator=FakeGenerator(reply=program_reply(weeks)))

        assert result.sessions_created == 16
        sessions = asyncio.run(
            WorkoutSessionRepository(temp_db_path).list_for_program(result.program_id)
        )
        assert [s.week_number for s in sessions] == list(range(1, 17))
        assert sessions[-1].scheduled_date == date(2024, 6, 17)

    def test_without_video_search(self, temp_db_path, stored_profile):
        result = generate(temp_db_path, searcher=FakeSearcher(enabled=False))

        async def load():
            repo = WorkoutSessionRepository(temp_db_path)
            first = (await repo.list_for_program(result.program_id))[0]
            return await repo.get(first.id)

        session = asyncio.run(load())
        assert session.warm_up_video_url is None
        assert all(ex.video_url is None for ex in session.exercises)

    def test_unknown_profile(self, temp_db_path):
        with pytest.raises(ProfileNotFound):
            generate(temp_db_path)

        count = asyncio.run(
            QuotaRepository(temp_db_path).get_count("alice", PROGRAM_GENERATION_SCOPE, utc_today())
        )
        assert count == 0

    def test_invalid_params_skip_generation(self, temp_db_path, stored_profile):
        fake = FakeGenerator(reply=program_reply())
        with pytest.raises(ValidationError):
            generate(temp_db_path, dict(PARAMS, frequency=3), generator=fake)
        assert fake.prompts == []

    def test_unparseable_reply_writes_nothing(self, temp_db_path, stored_profile):
        with pytest.raises(GenerationParseError):
            generate(temp_db_path, generator=FakeGenerator(reply="no program today"))

        programs = asyncio.run(ProgramRepository(temp_db_path).list_for_user("alice", status=None))
        assert programs == []

    def test_upstream_failure(self, temp_db_path, stored_profile):
        fake = FakeGenerator(error=UpstreamUnavailable("generation service unavailable"))
        with pytest.raises(UpstreamUnavailable):
            generate(temp_db_path, generator=fake)

    def test_failed_write_rolls_back(self, temp_db_path, stored_profile, monkeypatch):
        async def broken_insert(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(repositories, "_insert_decision", broken_insert)
        with pytest.raises(RuntimeError):
            generate(temp_db_path)

        programs = asyncio.run(ProgramRepository(temp_db_path).list_for_user("alice", status=None))
        assert programs == []

    def test_quota_limit(self, temp_db_path, stored_profile):
        service = make_generator(temp_db_path, limit=1)

        async def run():
            await service.generate("alice", PARAMS, start_date=PROGRAM_START)
            await service.generate("alice", PARAMS, start_date=PROGRAM_START)

        with pytest.raises(QuotaExceeded):
            asyncio.run(run())


class TestProgramQueries:
    """Tests for ProgramQueryService."""

    def test_list_programs(self, temp_db_path, stored_profile):
        result = generate(temp_db_path)
        service = ProgramQueryService(temp_db_path)

        programs = asyncio.run(service.list_programs("alice", on=PROGRAM_START))

        assert len(programs) == 1
        program = programs[0]
        assert program["id"] == result.program_id
        assert program["current_week"] == 1
        assert [s["scheduled_date"] for s in program["sessions"]] == ["2024-03-04", "2024-03-06"]
        assert "exercises" not in program["sessions"][0]

    def test_list_is_per_user(self, temp_db_path, stored_profile):
        generate(temp_db_path)
        assert asyncio.run(ProgramQueryService(temp_db_path).list_programs("bob")) == []

    def test_schedule_and_statistics(self, temp_db_path, stored_profile):
        result = generate(temp_db_path)
        service = ProgramQueryService(temp_db_path)

        async def run():
            sessions = await WorkoutSessionRepository(temp_db_path).list_for_program(
                result.program_id
            )
            await WorkoutSessionRepository(temp_db_path).advance_status(
                sessions[0].id, SessionStatus.COMPLETED, [SessionStatus.SCHEDULED]
            )
            return await service.get_schedule("alice", result.program_id, on=PROGRAM_START)

        schedule = asyncio.run(run())
        assert schedule["program"]["program_name"] == "Starter Strength"
        assert [w["week_number"] for w in schedule["schedule"]] == [1]
        sessions = schedule["schedule"][0]["sessions"]
        assert [s["exercise_count"] for s in sessions] == [2, 1]
        assert schedule["statistics"] == {
            "total_sessions": 2,
            "completed_sessions": 1,
            "upcoming_sessions": 1,
            "completion_rate": 50,
        }

    def test_schedule_of_other_users_program(self, temp_db_path, stored_profile):
        result = generate(temp_db_path)
        with pytest.raises(NotFound):
            asyncio.run(ProgramQueryService(temp_db_path).get_schedule("bob", result.program_id))

    def test_rename(self, temp_db_path, stored_profile):
        result = generate(temp_db_path)
        service = ProgramQueryService(temp_db_path)

        program = asyncio.run(service.rename_program("alice", result.program_id, "  Spring Block "))
        assert program.name == "Spring Block"

        with pytest.raises(ValidationError):
            asyncio.run(service.rename_program("alice", result.program_id, "   "))

    def test_update_rejects_unknown_status(self, temp_db_path, stored_profile):
        result = generate(temp_db_path)
        with pytest.raises(ValidationError):
            asyncio.run(
                ProgramQueryService(temp_db_path).update_program(
                    "alice", result.program_id, status="paused"
                )
            )

    def test_delete_hides_program(self, temp_db_path, stored_profile):
        result = generate(temp_db_path)
        service = ProgramQueryService(temp_db_path)

        deleted = asyncio.run(service.delete_program("alice", result.program_id))
        assert deleted.status == ProgramStatus.DELETED
        assert asyncio.run(service.list_programs("alice")) == []
        with pytest.raises(NotFound):
            asyncio.run(service.get_schedule("alice", result.program_id))

        sessions = asyncio.run(
            WorkoutSessionRepository(temp_db_path).list_for_program(result.program_id)
        )
        assert len(sessions) == 2
