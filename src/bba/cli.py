"""Blackboard agent CLI entrypoint."""

from __future__ import annotations

import click

from bba import __version__


@click.group()
@click.version_option(version=__version__, prog_name="bba")
def main() -> None:
    """bba: LLM exploration agent with a token-bounded blackboard."""


# Register subcommands
from bba.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
