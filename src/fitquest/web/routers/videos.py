"""Exercise video routes."""

from fastapi import APIRouter, Request

from ...errors import NotFound
from ..responses import get_services, ok

router = APIRouter(prefix="/exercise-videos", tags=["videos"])


@router.get("")
async def get_exercise_video(request: Request, exercise: str):
    """Demonstration video for an exercise (cached)."""
    video = await get_services(request).videos.resolve(exercise)
    if video is None:
        raise NotFound("No video found for this exercise", {"exercise": exercise})
    return ok(video.to_dict())


@router.get("/stats")
async def video_cache_stats(request: Request):
    """Cache totals and most used entries."""
    return ok(await get_services(request).videos.stats())
