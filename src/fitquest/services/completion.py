"""Session and exercise completion tracking."""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..db.repositories import (
    FeedbackRepository,
    ProgramRepository,
    WorkoutExerciseRepository,
    WorkoutSessionRepository,
)
from ..errors import NotFound, ValidationError
from ..models.program import SessionStatus, WorkoutExercise, WorkoutFeedback
from .muscle_balance import MuscleBalanceService

logger = logging.getLogger(__name__)


@dataclass
class ExerciseCompletion:
    """Final completion state for one exercise, as reported by the client."""

    exercise_id: int
    completed: bool = False
    notes: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseCompletion":
        exercise_id = data.get("id", data.get("exercise_id"))
        if isinstance(exercise_id, bool) or not isinstance(exercise_id, int):
            raise ValidationError("Each exercise needs an integer id")
        return cls(
            exercise_id=exercise_id,
            completed=bool(data.get("completed", False)),
            notes=data.get("notes") or None,
        )


class CompletionTracker:
    """Moves sessions through scheduled -> in_progress -> completed."""

    def __init__(
        self,
        db_path: Path | None = None,
        balance: MuscleBalanceService | None = None,
    ):
        self.sessions = WorkoutSessionRepository(db_path)
        self.exercises = WorkoutExerciseRepository(db_path)
        self.programs = ProgramRepository(db_path)
        self.feedback = FeedbackRepository(db_path)
        self.balance = balance or MuscleBalanceService(db_path)

    async def set_exercise_completion(
        self, exercise_id: int, completed: bool, note: str | None = None
    ) -> WorkoutExercise:
        """Update one exercise; the first completed exercise starts its session."""
        exercise = await self.exercises.get(exercise_id)
        if exercise is None:
            raise NotFound("Exercise not found", {"exercise_id": exercise_id})

        await self.exercises.set_completion(exercise_id, completed, note)
        exercise.completed = completed
        exercise.completion_notes = note

        if completed:
            started = await self.sessions.advance_status(
                exercise.session_id, SessionStatus.IN_PROGRESS, [SessionStatus.SCHEDULED]
            )
            if started:
                logger.debug("Session %d started", exercise.session_id)
        return exercise

    async def complete_session(
        self,
        session_id: int,
        user_key: str,
        exercises: list[ExerciseCompletion],
        difficulty_rating: str | None = None,
        notes: str | None = None,
    ) -> dict:
        """Mark a session completed and record its muscle volume.

        The session is completed regardless of how many exercises were done.
        Volume is computed from the stored prescriptions of the exercises
        listed (every exercise of the session when the list is empty).

        Args:
            session_id: The session to complete
            user_key: Owner of the session
            exercises: Final per-exercise completion states
            difficulty_rating: Optional rating; stores a feedback row when given
            notes: Optional feedback notes

        Returns:
            Dict with the session id, its status, the recorded volume and the
            feedback id (or None)
        """
        session = await self.sessions.get(session_id, user_key, with_exercises=False)
        if session is None:
            raise NotFound("Session not found", {"session_id": session_id})

        if session.status.can_advance_to(SessionStatus.COMPLETED):
            await self.sessions.advance_status(
                session_id,
                SessionStatus.COMPLETED,
                [SessionStatus.SCHEDULED, SessionStatus.IN_PROGRESS],
            )

        for item in exercises:
            await self.exercises.set_completion(
                item.exercise_id, item.completed, item.notes, session_id=session_id
            )

        stored = await self.exercises.list_for_session(session_id)
        listed = {item.exercise_id for item in exercises}
        counted = [ex for ex in stored if ex.id in listed] if listed else stored

        record = await self.balance.record_muscle_balance(
            user_key, session.program_id, session_id, counted, session.scheduled_date
        )

        feedback_id = None
        if difficulty_rating:
            done = sum(1 for ex in stored if ex.completed)
            percentage = round(done / len(stored) * 100) if stored else 0
            feedback_id = await self.feedback.create(
                WorkoutFeedback(
                    user_key=user_key,
                    session_id=session_id,
                    difficulty_rating=difficulty_rating,
                    completion_percentage=percentage,
                    notes=notes,
                )
            )

        logger.info("Session %d completed by %s", session_id, user_key)
        return {
            "session_id": session_id,
            "completion_status": SessionStatus.COMPLETED.value,
            "muscle_volume": record.to_dict(),
            "feedback_id": feedback_id,
        }

    async def save_completion_states(
        self, session_id: int, user_key: str, states: list[bool]
    ) -> int:
        """Save completion flags by 1-based exercise position."""
        if not all(isinstance(state, bool) for state in states):
            raise ValidationError("Completion states must be true/false values")
        session = await self.sessions.get(session_id, user_key, with_exercises=False)
        if session is None:
            raise NotFound("Session not found", {"session_id": session_id})
        return await self.exercises.set_completion_by_order(session_id, states)

    async def get_session_detail(self, user_key: str, session_id: int) -> dict:
        """A session with its program's name/goal/target and ordered exercises."""
        session = await self.sessions.get(session_id, user_key)
        if session is None:
            raise NotFound("Session not found", {"session_id": session_id})

        data = session.to_dict(include_exercises=False)
        program = None
        if session.program_id is not None:
            program = await self.programs.get(session.program_id)
        data["program_name"] = program.name if program else None
        data["program_goal"] = program.goal.value if program else None
        data["muscle_balance_target"] = program.muscle_balance_target if program else None

        return {
            "session": data,
            "exercises": [ex.to_dict() for ex in session.exercises],
        }
