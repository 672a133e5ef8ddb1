"""Daily quest routes."""

from fastapi import APIRouter, Request

from ..responses import get_services, ok
from ..schemas import DayCompleteIn, QuestActionIn

router = APIRouter(prefix="/daily-quests", tags=["quests"])


@router.get("")
async def get_quest(request: Request, user_key: str, date: str | None = None):
    """Quest status and streak for a date (created on first read)."""
    quest = await get_services(request).quests.get_or_create(user_key, date)
    return ok(quest.to_dict())


@router.post("")
async def record_quest_action(request: Request, body: QuestActionIn):
    """Mark weight, meal or exercise as logged."""
    quest = await get_services(request).quests.record_action(
        body.user_key, body.quest_type, body.date
    )
    return ok(quest.to_dict(), message=f"{body.quest_type} marked as completed")


@router.put("")
async def complete_day(request: Request, body: DayCompleteIn):
    """Manually mark a day as completed."""
    quest = await get_services(request).quests.mark_day_complete(body.user_key, body.date)
    return ok(quest.to_dict(), message="Day marked as completed")


@router.get("/history")
async def quest_history(request: Request, user_key: str, start: str, end: str):
    """Quest rows between two dates."""
    quests = await get_services(request).quests.get_history(user_key, start, end)
    return ok([q.to_dict() for q in quests])
