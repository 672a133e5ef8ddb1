"""Exercise demonstration video lookup with a shared cache."""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from ..clients.base import VideoSearcher
from ..db.repositories import VideoCacheRepository
from ..errors import UpstreamUnavailable
from ..models.video import ExerciseVideo

logger = logging.getLogger(__name__)

DEFAULT_TTL_DAYS = 90


def normalize_name(name: str) -> str:
    """Cache key for an exercise name: lower case, single spaces."""
    return " ".join(name.lower().split())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class VideoResolver:
    """Cache-or-fetch resolution of exercise names to videos.

    Hits bump the entry's usage statistics. Entries older than the TTL are
    refreshed from the search service; if it has nothing, the old entry is
    still served. A resolver without a configured searcher only serves the
    cache.
    """

    def __init__(
        self,
        searcher: VideoSearcher,
        db_path: Path | None = None,
        ttl_days: int = DEFAULT_TTL_DAYS,
    ):
        self.searcher = searcher
        self.repo = VideoCacheRepository(db_path)
        self.ttl_days = ttl_days

    def _is_stale(self, video: ExerciseVideo) -> bool:
        if video.fetched_at is None:
            return True
        return video.fetched_at < _utcnow() - timedelta(days=self.ttl_days)

    async def _serve_cached(self, video: ExerciseVideo) -> ExerciseVideo:
        await self.repo.touch(video.exercise_name)
        video.use_count += 1
        return video

    async def resolve(self, exercise_name: str) -> ExerciseVideo | None:
        """Find a video for an exercise name, or None if there is none.

        Search failures are logged and treated as "no video".
        """
        key = normalize_name(exercise_name)
        if not key:
            return None

        cached = await self.repo.get(key)
        if cached is not None and not self._is_stale(cached):
            logger.debug("Video cache hit for %r", key)
            return await self._serve_cached(cached)

        result = None
        if self.searcher.enabled:
            logger.debug("Video cache miss for %r", key)
            try:
                result = await self.searcher.search(f"{exercise_name.strip()} exercise tutorial")
            except UpstreamUnavailable as e:
                logger.warning("Video search failed for %r: %s", key, e)

        if result is None:
            if cached is not None:
                return await self._serve_cached(cached)
            return None

        video = ExerciseVideo.from_video_id(key, result.video_id, result.title)
        video.fetched_at = _utcnow()
        await self.repo.upsert(video)
        if cached is not None:
            video.use_count = cached.use_count + 1
        return video

    async def prune(self, max_idle_days: int | None = None) -> int:
        """Evict entries unused for `max_idle_days` (default: the TTL)."""
        days = self.ttl_days if max_idle_days is None else max_idle_days
        removed = await self.repo.prune(_utcnow() - timedelta(days=days))
        if removed:
            logger.info("Pruned %d idle video cache entries", removed)
        return removed

    async def stats(self) -> dict:
        """Cache totals and the ten most used entries."""
        return await self.repo.stats(top=10)
