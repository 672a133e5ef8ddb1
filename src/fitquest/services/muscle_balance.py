"""Muscle-volume aggregation and balance reporting."""

from datetime import date, timedelta
from pathlib import Path

from ..db.repositories import MuscleBalanceRepository
from ..errors import ValidationError
from ..models.muscle import MuscleBalanceRecord, MuscleGroup, MuscleVolume
from ..models.program import WorkoutExercise
from ..utils.dates import month_bounds, parse_date, today, week_bounds

PERIODS = ("all-time", "month", "week")
HISTORY_LIMIT = 30
TREND_WEEKS = 12


def calculate_muscle_volume(exercises: list[WorkoutExercise]) -> MuscleVolume:
    """Sum sets x reps per tracked muscle group.

    An exercise tagged with several groups adds its full volume to each of
    them. Labels outside the tracked groups are ignored.
    """
    volume = MuscleVolume()
    for exercise in exercises:
        amount = exercise.volume
        for group in exercise.tracked_muscle_groups:
            volume.add(group, amount)
    return volume


class MuscleBalanceService:
    """Records per-session volume and reports balance percentages."""

    def __init__(self, db_path: Path | None = None, timezone: str | None = None):
        self.repo = MuscleBalanceRepository(db_path)
        self.timezone = timezone

    async def record_muscle_balance(
        self,
        user_key: str,
        program_id: int | None,
        session_id: int,
        exercises: list[WorkoutExercise],
        workout_date: date | str,
    ) -> MuscleBalanceRecord:
        """Store the session's volume, replacing any earlier row for it."""
        record = MuscleBalanceRecord(
            user_key=user_key,
            program_id=program_id,
            session_id=session_id,
            workout_date=parse_date(workout_date),
            volume=calculate_muscle_volume(exercises),
        )
        await self.repo.upsert(record)
        return record

    async def get_all_time_balance(self, user_key: str) -> dict[str, float]:
        """Share of each group across every recorded session."""
        volume, total = await self.repo.sum_volumes(user_key)
        return volume.percentages(total)

    async def get_balance_by_period(
        self, user_key: str, start: date | str, end: date | str
    ) -> dict[str, float]:
        """Share of each group across sessions between two dates (inclusive)."""
        start, end = parse_date(start), parse_date(end)
        if start > end:
            raise ValidationError("Start date must not be after end date")
        volume, total = await self.repo.sum_volumes(user_key, start, end)
        return volume.percentages(total)

    async def get_report(self, user_key: str, period: str = "all-time") -> dict:
        """Balance for a period plus recent history and weekly trends.

        Args:
            user_key: Opaque user identifier
            period: "all-time", "month" or "week" (weeks start on Sunday)

        Returns:
            Dict with `balance`, `volume_history` (last 30 sessions) and
            `weekly_trends` (last 12 weeks, newest first)
        """
        if period not in PERIODS:
            raise ValidationError(
                "Invalid period. Use: all-time, month, or week", {"period": period}
            )

        current = today(self.timezone)
        if period == "all-time":
            balance = await self.get_all_time_balance(user_key)
        elif period == "month":
            balance = await self.get_balance_by_period(user_key, *month_bounds(current))
        else:
            balance = await self.get_balance_by_period(user_key, *week_bounds(current))

        history = await self.repo.list_for_user(user_key, limit=HISTORY_LIMIT)
        return {
            "period": period,
            "balance": balance,
            "volume_history": [record.to_dict() for record in history],
            "weekly_trends": await self._weekly_trends(user_key, current),
        }

    async def _weekly_trends(self, user_key: str, current: date) -> list[dict]:
        records = await self.repo.list_for_user(
            user_key, start=current - timedelta(weeks=TREND_WEEKS)
        )
        weeks: dict[date, MuscleVolume] = {}
        # records arrive newest first
        for record in records:
            week_start = week_bounds(record.workout_date)[0]
            bucket = weeks.setdefault(week_start, MuscleVolume())
            for group in MuscleGroup:
                bucket.add(group, record.volume.get(group))

        return [
            {"week": week_start.isoformat(), **volume.to_dict(), "total": volume.total}
            for week_start, volume in weeks.items()
        ]
