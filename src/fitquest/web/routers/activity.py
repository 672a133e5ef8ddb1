"""Weight, meal and ad-hoc workout logging routes."""

from fastapi import APIRouter, Request

from ..responses import get_services, ok
from ..schemas import MealIn, WeightIn, WorkoutIn

router = APIRouter(tags=["activity"])


@router.post("/weight")
async def log_weight(request: Request, body: WeightIn):
    weight_id = await get_services(request).activity.log_weight(
        body.user_key, body.weight, body.date
    )
    return ok({"id": weight_id}, status_code=201, message="Weight logged")


@router.post("/meals")
async def log_meal(request: Request, body: MealIn):
    meal_id = await get_services(request).activity.log_meal(
        body.user_key,
        body.food_name,
        body.portion_size,
        calories=body.calories,
        meal_type=body.meal_type,
        day=body.date,
    )
    return ok({"id": meal_id}, status_code=201, message="Meal logged")


@router.post("/workouts")
async def log_workout(request: Request, body: WorkoutIn):
    session = await get_services(request).activity.log_workout(
        body.user_key,
        body.title,
        body.type,
        day=body.date,
        exercises=[item.model_dump() for item in body.exercises],
        duration=body.duration,
    )
    return ok(session.to_dict(), status_code=201, message="Workout saved successfully")
