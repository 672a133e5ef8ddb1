"""Initialize database command."""

import click

from ..config import get_settings
from ..db import get_db_path, init_db
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Initialize the fitquest database.

    Creates the data directory (FITQUEST_DATA_DIR, default ./data) and the
    SQLite schema. Running it again only applies pending migrations.
    """
    data_dir = get_settings().data_dir
    db_path = get_db_path(data_dir)

    echo_info(f"Initializing fitquest in {data_dir}")
    await init_db(db_path)
    echo_success("Database initialized")

    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Create a profile:     fitquest profile <user-key>")
    click.echo("  2. Generate a program:   fitquest generate <user-key>")
    click.echo("  3. Start the API:        fitquest serve")
