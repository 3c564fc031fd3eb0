"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from bba.cli_commands.analyze import analyze
    from bba.cli_commands.profiles import profiles
    from bba.cli_commands.sessions import sessions

    cli.add_command(analyze)
    cli.add_command(sessions)
    cli.add_command(profiles)
