"""``bba analyze`` — explore a target path and fill a blackboard."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.markup import escape
from pydantic import ValidationError

from bba.cli_commands._output import (
    ConsoleRenderer,
    console,
    print_blackboard_status,
    print_blackboard_summary,
)
from bba.errors import BlackboardAgentError

logger = logging.getLogger(__name__)


@click.command()
@click.option("--path", "-p", "path", default=None, help="Target path to analyze (default: current directory).")
@click.option("--profile", default="codebase-analysis", show_default=True, help="Analysis profile name.")
@click.option(
    "--profile-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file with additional profiles.",
)
@click.option(
    "--config", "-c", "config", type=click.Path(dir_okay=False), default=None, help="Settings YAML file."
)
@click.option("--model", "-m", default=None, help="LiteLLM model name, e.g. anthropic/claude-sonnet-4-5.")
@click.option("--max-iterations", type=int, default=None, help="Iteration budget for the run.")
@click.option("--resume", is_flag=True, help="Continue the most recent session for this target.")
@click.option("--show", is_flag=True, help="Show the most recent analysis instead of running one.")
@click.option("--telemetry", is_flag=True, help="Enable OpenTelemetry tracing.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def analyze(
    path: str | None,
    profile: str,
    profile_file: str | None,
    config: str | None,
    model: str | None,
    max_iterations: int | None,
    resume: bool,
    show: bool,
    telemetry: bool,
    verbose: bool,
) -> None:
    """Analyze a codebase with a token-bounded blackboard."""
    from bba.agent.agent import BlackboardAgent
    from bba.agent.profiles import build_default_registry
    from bba.config import SettingsLoader, build_settings
    from bba.core.blackboard.backend import FileBackend
    from bba.tools.fs import validate_path
    from bba.utils.logging import configure_logging

    overrides = {"model": model, "max_iterations": max_iterations}
    try:
        if config:
            settings = SettingsLoader(Path(config)).load(**overrides)
        else:
            settings = build_settings(overrides)
    except BlackboardAgentError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        sys.exit(1)

    configure_logging(settings.log_level, settings.log_file, verbose=verbose)

    target = Path(path).expanduser().resolve() if path else Path.cwd()
    try:
        validate_path(target)
    except BlackboardAgentError as exc:
        console.print("\n[bold red]❌ Error: Invalid path[/bold red]\n")
        console.print(f"Path: [yellow]{target}[/yellow]")
        console.print(f"Error: {escape(str(exc))}\n")
        sys.exit(1)

    if show:
        _show_most_recent(Path.cwd() / settings.output_dir_name)
        return

    model_config = settings.to_model_config()
    if not model_config.resolve_api_key():
        console.print(f"\n[bold red]❌ Error: {model_config.api_key_env} not found[/bold red]\n")
        console.print("Please set your API key:\n")
        console.print(f'[yellow]  export {model_config.api_key_env}="your-key-here"[/yellow]\n')
        sys.exit(1)

    registry = build_default_registry()
    try:
        if profile_file:
            registry.load_file(Path(profile_file))
        selected = registry.require(profile)
    except BlackboardAgentError as exc:
        console.print(f"\n[red]Error:[/red] {escape(str(exc))}\n")
        sys.exit(1)

    if telemetry:
        from bba.utils.telemetry import configure_telemetry

        try:
            configure_telemetry()
        except ImportError as exc:
            console.print(f"[yellow]Telemetry disabled:[/yellow] {escape(str(exc))}")

    backend = FileBackend(settings.sessions_dir)
    blackboard = None
    if resume:
        blackboard = asyncio.run(backend.find_by_target(str(target)))
        if blackboard is None:
            console.print(f"[dim]No previous session for {target}, starting fresh.[/dim]")
        else:
            blackboard.overflow_factor = settings.overflow_factor
            console.print(f"Resuming session [cyan]{blackboard.id}[/cyan]")
            print_blackboard_status(blackboard)

    agent = BlackboardAgent(
        target,
        settings=settings,
        profile=selected,
        blackboard=blackboard,
        observer=ConsoleRenderer(),
        workspace_root=Path.cwd(),
        backend=backend,
    )
    logger.info("Starting analysis of %s (profile=%s, model=%s)", target, selected.name, settings.model)

    try:
        board = asyncio.run(agent.analyze())
    except Exception as exc:
        logger.error("Analysis command failed: %s", exc)
        console.print(f"\n[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    print_blackboard_summary(board)
    logger.info("Analysis completed successfully")


def _show_most_recent(output_dir: Path) -> None:
    from bba.core.blackboard.blackboard import Blackboard
    from bba.output import find_most_recent_run

    run_dir = find_most_recent_run(output_dir)
    if run_dir is None:
        console.print(f"\nNo analysis history found in: {output_dir}\n")
        console.print("Run without --show to create a new analysis.\n")
        return

    blackboard_path = run_dir / "blackboard.json"
    if not blackboard_path.exists():
        console.print(f"\nMost recent analysis ({run_dir.name}) has no blackboard data.\n")
        return

    try:
        board = Blackboard.from_json(blackboard_path.read_bytes())
    except (OSError, ValidationError) as exc:
        logger.error("Failed to load recent analysis: %s", exc)
        console.print(f"\n[red]Error loading analysis:[/red] {escape(str(exc))}\n")
        return

    console.print(f"\nShowing most recent analysis: {run_dir.name}\n")
    print_blackboard_status(board)
    print_blackboard_summary(board)
