"""Muscle balance routes."""

from fastapi import APIRouter, Request

from ..responses import get_services, ok

router = APIRouter(prefix="/muscle-balance", tags=["balance"])


@router.get("")
async def get_muscle_balance(request: Request, user_key: str, period: str = "all-time"):
    """Balance percentages, recent history and weekly trends."""
    return ok(await get_services(request).balance.get_report(user_key, period))
