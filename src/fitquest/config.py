"""Runtime configuration loaded from the environment."""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Default data directory (repository root / data)
DATA_DIR = Path(__file__).parent.parent.parent / "data"


@dataclass(frozen=True)
class Settings:
    """Application settings.

    Values come from environment variables (optionally via a `.env` file).
    """

    data_dir: Path = DATA_DIR
    timezone: str = "UTC"
    log_level: str = "INFO"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    generation_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    youtube_api_key: str | None = None
    video_search_base_url: str = "https://www.googleapis.com/youtube/v3"
    upstream_timeout_seconds: float = 30.0
    upstream_max_retries: int = 3
    daily_request_limit: int = 20
    video_cache_ttl_days: int = 90

    @property
    def db_path(self) -> Path:
        return self.data_dir / "fitquest.db"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def load_settings() -> Settings:
    """Build settings from the current environment."""
    load_dotenv()
    data_dir = os.getenv("FITQUEST_DATA_DIR")
    return Settings(
        data_dir=Path(data_dir) if data_dir else DATA_DIR,
        timezone=os.getenv("FITQUEST_TIMEZONE", "UTC"),
        log_level=os.getenv("FITQUEST_LOG_LEVEL", "INFO"),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        generation_base_url=os.getenv(
            "GENERATION_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ),
        youtube_api_key=os.getenv("YOUTUBE_API_KEY") or None,
        video_search_base_url=os.getenv(
            "VIDEO_SEARCH_BASE_URL", "https://www.googleapis.com/youtube/v3"
        ),
        upstream_timeout_seconds=_env_float("UPSTREAM_TIMEOUT_SECONDS", 30.0),
        upstream_max_retries=_env_int("UPSTREAM_MAX_RETRIES", 3),
        daily_request_limit=_env_int("DAILY_REQUEST_LIMIT", 20),
        video_cache_ttl_days=_env_int("VIDEO_CACHE_TTL_DAYS", 90),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings (loaded once)."""
    return load_settings()
