"""Tests for the per-user daily request quota."""

import asyncio
from datetime import date

import pytest

from fitquest.errors import QuotaExceeded
from fitquest.services import DailyQuota

DAY = date(2024, 3, 4)


class TestDailyQuota:
    """Tests for DailyQuota."""

    def test_limit_is_enforced(self, temp_db_path):
        quota = DailyQuota(temp_db_path, limit=20)

        async def run():
            for _ in range(20):
                await quota.consume("alice", DAY)
            await quota.consume("alice", DAY)

        with pytest.raises(QuotaExceeded) as exc_info:
            asyncio.run(run())
        assert exc_info.value.status_code == 429
        assert exc_info.value.details["limit"] == 20

    def test_new_day_resets(self, temp_db_path):
        quota = DailyQuota(temp_db_path, limit=1)

        async def run():
            await quota.consume("alice", DAY)
            await quota.consume("alice", date(2024, 3, 5))
            return await quota.usage("alice", date(2024, 3, 5))

        usage = asyncio.run(run())
        assert usage == {"count": 1, "remaining": 0, "limit": 1, "date": "2024-03-05"}

    def test_users_have_separate_counters(self, temp_db_path):
        quota = DailyQuota(temp_db_path, limit=1)

        async def run():
            await quota.consume("alice", DAY)
            await quota.consume("bob", DAY)

        asyncio.run(run())

    def test_scopes_are_separate(self, temp_db_path):
        generation = DailyQuota(temp_db_path, limit=1)
        other = DailyQuota(temp_db_path, limit=1, scope="video_lookup")

        async def run():
            await generation.consume("alice", DAY)
            await other.consume("alice", DAY)
            return await generation.usage("alice", DAY)

        assert asyncio.run(run())["count"] == 1

    def test_refused_request_is_not_counted(self, temp_db_path):
        quota = DailyQuota(temp_db_path, limit=1)

        async def run():
            await quota.consume("alice", DAY)
            with pytest.raises(QuotaExceeded):
                await quota.consume("alice", DAY)
            return await quota.usage("alice", DAY)

        assert asyncio.run(run())["count"] == 1

    def test_purge(self, temp_db_path):
        quota = DailyQuota(temp_db_path)

        async def run():
            await quota.consume("alice", DAY)
            await quota.consume("alice", date(2024, 3, 6))
            return await quota.purge(date(2024, 3, 5))

        assert asyncio.run(run()) == 1
