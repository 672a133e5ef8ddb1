"""Workout session completion routes."""

from fastapi import APIRouter, Request

from ...services.completion import ExerciseCompletion
from ..responses import get_services, ok
from ..schemas import CompleteSessionIn, CompletionStatesIn, ExerciseUpdateIn

router = APIRouter(prefix="/workout-sessions", tags=["sessions"])


@router.get("")
async def get_session(request: Request, user_key: str, session_id: int):
    """Session details with program info and ordered exercises."""
    return ok(await get_services(request).completion.get_session_detail(user_key, session_id))


@router.post("")
async def complete_session(request: Request, body: CompleteSessionIn):
    """Complete a session, record its volume and optional feedback."""
    result = await get_services(request).completion.complete_session(
        body.session_id,
        body.user_key,
        [ExerciseCompletion.from_dict(item.model_dump()) for item in body.exercises],
        difficulty_rating=body.difficulty_rating,
        notes=body.notes,
    )
    return ok(result, message="Workout completed successfully")


@router.put("")
async def update_exercise(request: Request, body: ExerciseUpdateIn):
    """Update one exercise's completion state."""
    exercise = await get_services(request).completion.set_exercise_completion(
        body.exercise_id, body.completed, body.notes
    )
    return ok(exercise.to_dict(), message="Exercise updated successfully")


@router.patch("")
async def save_completion_states(request: Request, body: CompletionStatesIn):
    """Save completion flags for all exercises by position."""
    updated = await get_services(request).completion.save_completion_states(
        body.session_id, body.user_key, body.completion_states
    )
    return ok({"updated": updated}, message="Exercise completion states saved successfully")
