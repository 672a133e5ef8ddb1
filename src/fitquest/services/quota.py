"""Per-user daily request quota."""

import logging
from datetime import date
from pathlib import Path

from ..db.repositories import QuotaRepository
from ..errors import QuotaExceeded
from ..utils.dates import utc_today

logger = logging.getLogger(__name__)

PROGRAM_GENERATION_SCOPE = "program_generation"
DEFAULT_DAILY_LIMIT = 20


class DailyQuota:
    """Fixed counter per (user, scope, UTC day).

    Counters live in the database, so every process sharing it sees the same
    count. A new UTC day starts a new counter.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        limit: int = DEFAULT_DAILY_LIMIT,
        scope: str = PROGRAM_GENERATION_SCOPE,
    ):
        self.repo = QuotaRepository(db_path)
        self.limit = limit
        self.scope = scope

    async def consume(self, user_key: str, day: date | None = None) -> None:
        """Count one request, or raise QuotaExceeded if the limit is reached."""
        day = day or utc_today()
        if not await self.repo.try_consume(user_key, self.scope, day, self.limit):
            logger.info("Daily %s quota exhausted for %s", self.scope, user_key)
            raise QuotaExceeded(
                f"Daily limit of {self.limit} requests reached. Try again tomorrow.",
                {"scope": self.scope, "limit": self.limit},
            )

    async def usage(self, user_key: str, day: date | None = None) -> dict:
        day = day or utc_today()
        count = await self.repo.get_count(user_key, self.scope, day)
        return {
            "count": count,
            "remaining": max(0, self.limit - count),
            "limit": self.limit,
            "date": day.isoformat(),
        }

    async def purge(self, before: date | None = None) -> int:
        """Delete counters of days before `before` (default: today)."""
        return await self.repo.purge_before(before or utc_today())
