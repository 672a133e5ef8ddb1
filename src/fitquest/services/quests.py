"""Daily quest and streak engine."""

import logging
from datetime import date
from pathlib import Path

from ..db.repositories import DailyQuestRepository
from ..errors import ValidationError
from ..models.quest import DailyQuest, QuestAction
from ..utils.dates import parse_date, previous_day, today


logger = logging.getLogger(__name__)


class QuestService:
    """Maintains one quest row per user per calendar date.

    A row is created lazily, either on the first read of a date or on the
    first logged action. Its `streak_day` is fixed at creation from the
    previous day's row and is never recomputed afterwards.
    """

    def __init__(self, db_path: Path | None = None, timezone: str | None = None):
        self.repo = DailyQuestRepository(db_path)
        self.timezone = timezone

    def _resolve_date(self, day: date | str | None) -> date:
        if day is None:
            return today(self.timezone)
        return parse_date(day)

    async def _initial_streak(self, user_key: str, day: date) -> int:
        prior = await self.repo.get(user_key, previous_day(day))
        if prior is not None and prior.day_completed:
            return prior.streak_day + 1
        return 1

    async def _ensure_row(self, user_key: str, day: date) -> DailyQuest:
        quest = await self.repo.get(user_key, day)
        if quest is not None:
            return quest

        streak = await self._initial_streak(user_key, day)
        if not await self.repo.create_if_missing(user_key, day, streak):
            logger.debug("Quest row for %s on %s created concurrently", user_key, day)
        return await self.repo.get(user_key, day)

    async def get_or_create(self, user_key: str, day: date | str | None = None) -> DailyQuest:
        """Read the quest row for a date, creating it (no flags set) if needed."""
        return await self._ensure_row(user_key, self._resolve_date(day))

    async def record_action(
        self,
        user_key: str,
        action: QuestAction | str,
        day: date | str | None = None,
    ) -> DailyQuest:
        """Mark one of the three daily actions as done.

        Setting a flag that is already set changes nothing. Once all three
        flags are set the day is completed, and it stays completed.

        Args:
            user_key: Opaque user identifier
            action: weight, meal or exercise
            day: Calendar date (defaults to today in the configured timezone)

        Returns:
            The updated quest row
        """
        action = QuestAction.parse(action)
        day = self._resolve_date(day)

        quest = await self._ensure_row(user_key, day)
        if not quest.is_logged(action):
            await self.repo.set_flag(user_key, day, action)
            quest = await self.repo.get(user_key, day)

        if quest.all_logged and not quest.day_completed:
            await self.repo.mark_completed(user_key, day)
            quest = await self.repo.get(user_key, day)
            logger.info("Quest day %s completed for %s (streak %d)", day, user_key, quest.streak_day)
        return quest

    async def mark_day_complete(self, user_key: str, day: date | str | None = None) -> DailyQuest:
        """Manually complete a day without checking the three flags."""
        day = self._resolve_date(day)
        await self._ensure_row(user_key, day)
        await self.repo.mark_completed(user_key, day)
        return await self.repo.get(user_key, day)

    async def notify(
        self,
        user_key: str,
        action: QuestAction | str,
        day: date | str | None = None,
    ) -> DailyQuest | None:
        """Record an action on behalf of a logging call.

        Never raises: quest bookkeeping must not fail the caller's own write.
        """
        try:
            return await self.record_action(user_key, action, day)
        except Exception:
            logger.exception("Failed to update daily quest for %s (%s)", user_key, action)
            return None

    async def get_history(
        self, user_key: str, start: date | str, end: date | str
    ) -> list[DailyQuest]:
        """Quest rows between two dates (inclusive), oldest first."""
        start, end = parse_date(start), parse_date(end)
        if start > end:
            raise ValidationError("Start date must not be after end date")
        return await self.repo.list_range(user_key, start, end)
