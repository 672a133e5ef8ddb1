"""Video-search client (YouTube Data API `search`)."""

import httpx

from ..config import Settings, get_settings
from .base import BASE_DELAY_SECONDS, UpstreamClient, VideoSearchResult


class VideoSearchClient(UpstreamClient):
    """Finds the single best-matching video for a query."""

    service_name = "video search service"

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://www.googleapis.com/youtube/v3",
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = BASE_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(
            base_url,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> "VideoSearchClient":
        settings = settings or get_settings()
        return cls(
            api_key=settings.youtube_api_key,
            base_url=settings.video_search_base_url,
            timeout=settings.upstream_timeout_seconds,
            max_retries=settings.upstream_max_retries,
            **kwargs,
        )

    async def search(self, query: str) -> VideoSearchResult | None:
        """Search for a video. Returns None when unconfigured or nothing matches."""
        if not self.api_key:
            return None

        response = await self._request(
            "GET",
            "/search",
            params={
                "part": "snippet",
                "q": query,
                "type": "video",
                "maxResults": 1,
                "key": self.api_key,
            },
        )
        try:
            items = response.json().get("items") or []
        except (ValueError, AttributeError):
            return None
        if not items:
            return None

        item = items[0]
        video_id = (item.get("id") or {}).get("videoId")
        if not video_id:
            return None
        return VideoSearchResult(
            video_id=video_id,
            title=(item.get("snippet") or {}).get("title"),
        )
