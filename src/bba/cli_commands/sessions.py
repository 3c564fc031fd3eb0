"""``bba sessions`` — list, show and delete persisted blackboard sessions."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from bba.cli_commands._output import (
    console,
    print_blackboard_status,
    print_blackboard_summary,
    print_sessions_table,
)

if TYPE_CHECKING:
    from bba.core.blackboard.backend import FileBackend


def _backend(sessions_dir: str | None) -> FileBackend:
    from bba.core.blackboard.backend import FileBackend

    return FileBackend(Path(sessions_dir) if sessions_dir else None)


_sessions_dir_option = click.option(
    "--sessions-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Sessions directory (default: ~/.blackboard-agent/sessions).",
)


@click.group()
def sessions() -> None:
    """Inspect persisted blackboard sessions."""


@sessions.command("list")
@_sessions_dir_option
def list_sessions(sessions_dir: str | None) -> None:
    """List sessions, most recently updated first."""
    found = asyncio.run(_backend(sessions_dir).list())
    if not found:
        console.print("No sessions found.")
        return
    print_sessions_table(found)


@sessions.command("show")
@click.argument("session_id")
@_sessions_dir_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def show_session(session_id: str, sessions_dir: str | None, as_json: bool) -> None:
    """Show the blackboard stored under SESSION_ID."""
    board = asyncio.run(_backend(sessions_dir).load(session_id))
    if board is None:
        console.print(f"[red]Session not found:[/red] {session_id}")
        sys.exit(1)

    if as_json:
        console.print_json(board.snapshot().decode())
        return
    print_blackboard_status(board)
    print_blackboard_summary(board)


@sessions.command("delete")
@click.argument("session_id")
@_sessions_dir_option
def delete_session(session_id: str, sessions_dir: str | None) -> None:
    """Delete the session stored under SESSION_ID."""
    if not asyncio.run(_backend(sessions_dir).delete(session_id)):
        console.print(f"[red]Session not found:[/red] {session_id}")
        sys.exit(1)
    console.print(f"[green]Deleted session {session_id}.[/green]")
