"""Exercise video cache commands."""

import click

from ..clients import VideoSearchClient
from ..config import get_settings
from ..db import get_db_path
from ..services import VideoResolver
from .base import (
    async_command,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
)


def _resolver() -> VideoResolver:
    settings = get_settings()
    return VideoResolver(
        VideoSearchClient.from_settings(settings),
        get_db_path(),
        ttl_days=settings.video_cache_ttl_days,
    )


@click.group()
@click.pass_context
def videos(ctx):
    """Look up and maintain exercise demonstration videos."""
    ensure_initialized(ctx)


@videos.command()
@click.argument("exercise")
@async_command
async def find(exercise: str):
    """Find the video for an exercise name."""
    resolver = _resolver()
    if not resolver.searcher.enabled:
        echo_warning("YOUTUBE_API_KEY is not set; only cached videos are available")

    video = await resolver.resolve(exercise)
    if video is None:
        echo_info(f"No video found for '{exercise}'")
        return

    click.echo(f"{video.video_title or video.exercise_name}")
    click.echo(f"  Watch: {video.video_url}")
    click.echo(f"  Embed: {video.embed_url}")


@videos.command()
@async_command
async def stats():
    """Show cache size and the most used entries."""
    data = await _resolver().stats()
    click.echo(f"Cached videos: {data['stats']['total_cached']}")
    click.echo(f"Total lookups: {data['stats']['total_uses']}")
    if data["top_used"]:
        click.echo()
        rows = [[entry["exercise_name"], str(entry["use_count"])] for entry in data["top_used"]]
        click.echo(format_table(["Exercise", "Uses"], rows))


@videos.command()
@click.option("--days", type=click.IntRange(1), help="Evict entries idle this many days")
@async_command
async def prune(days: int | None):
    """Evict cache entries that have not been used recently."""
    removed = await _resolver().prune(days)
    echo_success(f"Removed {removed} cache entr{'y' if removed == 1 else 'ies'}")
