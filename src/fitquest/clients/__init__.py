"""Clients for the upstream text-generation and video-search services."""

from .base import (
    TextGenerator,
    UpstreamClient,
    VideoSearcher,
    VideoSearchResult,
    with_retries,
)
from .generation import GenerationClient
from .video_search import VideoSearchClient

__all__ = [
    "GenerationClient",
    "TextGenerator",
    "UpstreamClient",
    "VideoSearchClient",
    "VideoSearcher",
    "VideoSearchResult",
    "with_retries",
]
