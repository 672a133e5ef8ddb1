"""FastAPI application for the fitquest API."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..clients.base import TextGenerator, VideoSearcher
from ..clients.generation import GenerationClient
from ..clients.video_search import VideoSearchClient
from ..config import Settings, get_settings
from ..db.engine import get_db_path, init_db
from ..errors import FitQuestError
from ..logging_setup import configure_logging
from ..services import (
    ActivityLogService,
    CompletionTracker,
    DailyQuota,
    MuscleBalanceService,
    ProgramGenerator,
    ProgramQueryService,
    QuestService,
    VideoResolver,
)
from .routers import activity, balance, programs, quests, sessions, videos

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Service objects shared by the routers."""

    quests: QuestService
    activity: ActivityLogService
    generator: ProgramGenerator
    programs: ProgramQueryService
    completion: CompletionTracker
    balance: MuscleBalanceService
    videos: VideoResolver
    quota: DailyQuota


def build_services(
    settings: Settings,
    db_path: Path,
    generator: TextGenerator | None = None,
    video_searcher: VideoSearcher | None = None,
) -> Services:
    """Wire services to one database and the upstream clients."""
    tz = settings.timezone
    quests = QuestService(db_path, tz)
    balance_service = MuscleBalanceService(db_path, tz)
    resolver = VideoResolver(
        video_searcher or VideoSearchClient.from_settings(settings),
        db_path,
        ttl_days=settings.video_cache_ttl_days,
    )
    quota = DailyQuota(db_path, limit=settings.daily_request_limit)
    return Services(
        quests=quests,
        activity=ActivityLogService(db_path, quests, tz),
        generator=ProgramGenerator(
            generator or GenerationClient.from_settings(settings),
            resolver,
            db_path,
            quota=quota,
            timezone=tz,
        ),
        programs=ProgramQueryService(db_path, tz),
        completion=CompletionTracker(db_path, balance_service),
        balance=balance_service,
        videos=resolver,
        quota=quota,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - runs on startup and shutdown."""
    await init_db(app.state.db_path)
    purged = await app.state.services.quota.purge()
    if purged:
        logger.info("Dropped %d quota counters from earlier days", purged)
    yield


def create_app(
    settings: Settings | None = None,
    db_path: Path | None = None,
    generator: TextGenerator | None = None,
    video_searcher: VideoSearcher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to the environment)
        db_path: Database file (defaults to the configured data directory)
        generator: Text generator to use instead of the configured client
        video_searcher: Video searcher to use instead of the configured client
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    db_path = db_path or get_db_path(settings.data_dir)

    app = FastAPI(
        title="fitquest",
        description="Daily quests, streaks and AI-generated workout programs",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.db_path = db_path
    app.state.services = build_services(settings, db_path, generator, video_searcher)

    @app.exception_handler(FitQuestError)
    async def fitquest_error_handler(request: Request, exc: FitQuestError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, **exc.to_dict()},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid request",
                "code": "BAD_REQUEST",
                "details": {"errors": jsonable_errors(exc)},
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "code": "INTERNAL_ERROR"},
        )

    app.include_router(quests.router)
    app.include_router(programs.router)
    app.include_router(sessions.router)
    app.include_router(balance.router)
    app.include_router(videos.router)
    app.include_router(activity.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Field errors reduced to location and message."""
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
