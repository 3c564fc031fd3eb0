"""``bba profiles`` — list available analysis profiles."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.markup import escape

from bba.cli_commands._output import console, print_profiles_table


@click.command()
@click.option(
    "--profile-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file with additional profiles.",
)
def profiles(profile_file: str | None) -> None:
    """List the built-in analysis profiles (plus any from PROFILE_FILE)."""
    from bba.agent.profiles import build_default_registry
    from bba.errors import ConfigError

    registry = build_default_registry()
    if profile_file:
        try:
            registry.load_file(Path(profile_file))
        except ConfigError as exc:
            console.print(f"[red]Validation error:[/red] {escape(str(exc))}")
            sys.exit(1)

    print_profiles_table([registry.require(name) for name in registry.names()])
