"""Tests for session and exercise completion tracking."""

import asyncio
from datetime import date

import pytest

from fitquest.db import (
    FeedbackRepository,
    MuscleBalanceRepository,
    WorkoutExerciseRepository,
    WorkoutSessionRepository,
)
from fitquest.errors import NotFound, ValidationError
from fitquest.models.program import SessionStatus, WorkoutExercise, WorkoutKind, WorkoutSession
from fitquest.services import CompletionTracker, ExerciseCompletion

WORKOUT_DATE = date(2024, 3, 4)


def create_session(db_path, user_key="alice") -> WorkoutSession:
    session = WorkoutSession(
        user_key=user_key,
        title="Upper Body",
        kind=WorkoutKind.AI_GENERATED,
        scheduled_date=WORKOUT_DATE,
        week_number=1,
        session_number=1,
        exercises=[
            WorkoutExercise(name="Push-ups", sets=3, reps=10, order_index=1, muscle_groups=["chest", "arms"]),
            WorkoutExercise(name="Row", sets=3, reps=12, order_index=2, muscle_groups=["back"]),
            WorkoutExercise(name="Plank", sets=2, reps=1, order_index=3, muscle_groups=["core", "abs"]),
        ],
    )
    asyncio.run(WorkoutSessionRepository(db_path).create(session))
    return session


def load_session(db_path, session_id) -> WorkoutSession:
    return asyncio.run(WorkoutSessionRepository(db_path).get(session_id))


class TestExerciseCompletion:
    """Tests for ExerciseCompletion.from_dict."""

    def test_from_dict(self):
        item = ExerciseCompletion.from_dict({"id": 4, "completed": True, "notes": "easy"})
        assert (item.exercise_id, item.completed, item.notes) == (4, True, "easy")

    def test_requires_integer_id(self):
        with pytest.raises(ValidationError):
            ExerciseCompletion.from_dict({"id": "4"})
        with pytest.raises(ValidationError):
            ExerciseCompletion.from_dict({"completed": True})


class TestSetExerciseCompletion:
    """Tests for per-exercise updates."""

    def test_first_completion_starts_session(self, temp_db_path):
        session = create_session(temp_db_path)
        tracker = CompletionTracker(temp_db_path)
        first = session.exercises[0]

        exercise = asyncio.run(tracker.set_exercise_completion(first.id, True, "felt good"))

        assert exercise.completed is True
        stored = load_session(temp_db_path, session.id)
        assert stored.status == SessionStatus.IN_PROGRESS
        assert stored.exercises[0].completion_notes == "felt good"

    def test_unchecking_does_not_start_session(self, temp_db_path):
        session = create_session(temp_db_path)
        tracker = CompletionTracker(temp_db_path)

        asyncio.run(tracker.set_exercise_completion(session.exercises[0].id, False))

        assert load_session(temp_db_path, session.id).status == SessionStatus.SCHEDULED

    def test_unknown_exercise(self, temp_db_path):
        with pytest.raises(NotFound):
            asyncio.run(CompletionTracker(temp_db_path).set_exercise_completion(999, True))


class TestCompleteSession:
    """Tests for completing a whole session."""

    def test_records_volume_for_listed_exercises(self, temp_db_path):
        session = create_session(temp_db_path)
        push_ups, row, plank = session.exercises
        tracker = CompletionTracker(temp_db_path)

        result = asyncio.run(
            tracker.complete_session(
                session.id,
                "alice",
                [ExerciseCompletion(push_ups.id, True), ExerciseCompletion(row.id, False)],
            )
        )

        assert result["completion_status"] == "completed"
        assert result["feedback_id"] is None
        volume = result["muscle_volume"]
        assert volume["chest_volume"] == 30
        assert volume["arms_volume"] == 30
        assert volume["back_volume"] == 36
        assert volume["core_volume"] == 0
        assert volume["total_volume"] == 96

        stored = load_session(temp_db_path, session.id)
        assert stored.status == SessionStatus.COMPLETED
        assert [ex.completed for ex in stored.exercises] == [True, False, False]

    def test_empty_list_counts_every_exercise(self, temp_db_path):
        session = create_session(temp_db_path)

        result = asyncio.run(CompletionTracker(temp_db_path).complete_session(session.id, "alice", []))

        assert result["muscle_volume"]["core_volume"] == 2
        assert result["muscle_volume"]["total_volume"] == 98

    def test_completing_twice_replaces_volume(self, temp_db_path):
        session = create_session(temp_db_path)
        tracker = CompletionTracker(temp_db_path)
        push_ups = session.exercises[0]

        async def run():
            await tracker.complete_session(session.id, "alice", [])
            await tracker.complete_session(session.id, "alice", [ExerciseCompletion(push_ups.id, True)])
            return await MuscleBalanceRepository(temp_db_path).list_for_user("alice")

        records = asyncio.run(run())
        assert len(records) == 1
        assert records[0].total_volume == 60

    def test_feedback_with_rating(self, temp_db_path):
        session = create_session(temp_db_path)
        push_ups, row, plank = session.exercises
        tracker = CompletionTracker(temp_db_path)

        result = asyncio.run(
            tracker.complete_session(
                session.id,
                "alice",
                [ExerciseCompletion(push_ups.id, True), ExerciseCompletion(row.id, True)],
                difficulty_rating="hard",
                notes="tough rows",
            )
        )

        feedback = asyncio.run(FeedbackRepository(temp_db_path).list_for_session(session.id))
        assert result["feedback_id"] == feedback[0].id
        assert feedback[0].difficulty_rating == "hard"
        assert feedback[0].completion_percentage == 67
        assert feedback[0].notes == "tough rows"

    def test_other_users_session(self, temp_db_path):
        session = create_session(temp_db_path)
        with pytest.raises(NotFound):
            asyncio.run(CompletionTracker(temp_db_path).complete_session(session.id, "bob", []))

    def test_foreign_exercise_ids_are_ignored(self, temp_db_path):
        session = create_session(temp_db_path)
        other = create_session(temp_db_path)
        tracker = CompletionTracker(temp_db_path)

        asyncio.run(
            tracker.complete_session(
                session.id, "alice", [ExerciseCompletion(other.exercises[0].id, True)]
            )
        )

        exercise = asyncio.run(WorkoutExerciseRepository(temp_db_path).get(other.exercises[0].id))
        assert exercise.completed is False


class TestCompletionStatesAndDetail:
    """Tests for positional saves and the session detail view."""

    def test_save_completion_states(self, temp_db_path):
        session = create_session(temp_db_path)
        tracker = CompletionTracker(temp_db_path)

        updated = asyncio.run(tracker.save_completion_states(session.id, "alice", [True, False, True]))

        assert updated == 3
        stored = load_session(temp_db_path, session.id)
        assert [ex.completed for ex in stored.exercises] == [True, False, True]
        assert stored.exercises[1].completion_notes == "Not completed"

    def test_save_completion_states_rejects_non_bools(self, temp_db_path):
        session = create_session(temp_db_path)
        with pytest.raises(ValidationError):
            asyncio.run(
                CompletionTracker(temp_db_path).save_completion_states(session.id, "alice", [1, 0])
            )

    def test_session_detail(self, temp_db_path):
        session = create_session(temp_db_path)

        detail = asyncio.run(CompletionTracker(temp_db_path).get_session_detail("alice", session.id))

        assert detail["session"]["title"] == "Upper Body"
        assert detail["session"]["program_name"] is None
        assert [ex["name"] for ex in detail["exercises"]] == ["Push-ups", "Row", "Plank"]
