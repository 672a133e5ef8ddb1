"""CLI entry point for fitquest."""

import click

from . import __version__
from .commands import balance, generate, init, profile, programs, quests, serve, videos
from .config import get_settings
from .logging_setup import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="fitquest")
@click.option("--log-level", help="Override FITQUEST_LOG_LEVEL for this run")
def main(log_level: str | None):
    """fitquest: daily quests and AI-generated workout programs.

    Example usage:

        # Initialize the database
        fitquest init

        # Create a profile and generate a program
        fitquest profile alice
        fitquest generate alice

        # Track the day
        fitquest quests log alice weight
        fitquest quests show alice

        # Review programs and balance
        fitquest programs list alice
        fitquest balance alice --period month

        # Run the JSON API
        fitquest serve
    """
    configure_logging(log_level or get_settings().log_level)


# Register commands
main.add_command(init)
main.add_command(profile)
main.add_command(generate)
main.add_command(programs)
main.add_command(quests)
main.add_command(balance)
main.add_command(videos)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
