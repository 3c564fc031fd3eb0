"""Shared CLI output formatters and the console event renderer."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bba.agent.events import (
    AgentEvent,
    BlackboardUpdateEvent,
    CompleteEvent,
    ErrorEvent,
    IterationEvent,
    NudgeEvent,
    StartEvent,
    ThinkingEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from bba.agent.profiles import AnalysisProfile  # noqa: TC001
from bba.core.blackboard.blackboard import Blackboard, format_section_name
from bba.core.blackboard.models import SessionInfo  # noqa: TC001

console = Console()

RULE_WIDTH = 60


def _pct(current: int, maximum: int) -> int:
    return round(current / maximum * 100) if maximum else 0


def progress_bar(percentage: float, width: int = 20) -> str:
    filled = max(0, min(width, round(percentage / 100 * width)))
    return f"[green]{'█' * filled}[/green][dim]{'░' * (width - filled)}[/dim]"


def format_tool_input(arguments: dict[str, Any]) -> str:
    parts = []
    for key, value in arguments.items():
        if isinstance(value, str) and len(value) > 50:
            parts.append(f'{key}="{value[:47]}..."')
        else:
            parts.append(f"{key}={value!r}")
    return ", ".join(parts)


class ConsoleRenderer:
    """:class:`~bba.agent.events.AgentObserver` that renders events to the console."""

    def __init__(self, output: Console | None = None) -> None:
        self.console = output or console

    def on_event(self, event: AgentEvent) -> None:
        if isinstance(event, StartEvent):
            self._start(event)
        elif isinstance(event, IterationEvent):
            self._iteration(event)
        elif isinstance(event, ThinkingEvent):
            text = event.text if len(event.text) <= 500 else event.text[:500] + "..."
            self.console.print(f"\n[blue]💭 Agent:[/blue] {escape(text)}")
        elif isinstance(event, ToolCallEvent):
            self.console.print(
                f"  [yellow]→ {event.name}[/yellow][dim]({escape(format_tool_input(event.arguments))})[/dim]"
            )
        elif isinstance(event, ToolResultEvent):
            self._tool_result(event)
        elif isinstance(event, BlackboardUpdateEvent):
            pct = _pct(event.tokens, event.max_tokens)
            self.console.print(
                f"\n[cyan]📝 Blackboard updated:[/cyan] {escape(event.section)} "
                f"[dim]({event.tokens}/{event.max_tokens} tokens)[/dim]"
            )
            self.console.print(f"   {progress_bar(pct)} {pct}%")
        elif isinstance(event, NudgeEvent):
            self.console.print(
                f"\n[magenta]↻ Completion nudge {event.nudge}:[/magenta] "
                f"blackboard {round(event.utilization * 100)}% utilized, continuing"
            )
        elif isinstance(event, CompleteEvent):
            self._complete(event)
        elif isinstance(event, ErrorEvent):
            self.console.print(f"\n[bold red]❌ Error:[/bold red] {escape(event.error)}")

    def _start(self, event: StartEvent) -> None:
        self.console.print("\n[bold cyan]🔍 Starting Analysis[/bold cyan]\n")
        self.console.print(f"Target: [yellow]{escape(event.target_path)}[/yellow]")
        self.console.print(f"Blackboard: [green]{event.tokens} / {event.max_tokens} tokens[/green]")
        self.console.print(f"Analysis ID: [dim]{event.analysis_id}[/dim]")
        self.console.print("[dim]" + "─" * RULE_WIDTH + "[/dim]")

    def _iteration(self, event: IterationEvent) -> None:
        tokens = event.tokens
        self.console.print(
            f"\n[cyan]Iteration {event.iteration}/{event.max_iterations}[/cyan]"
            f"[dim] | Tokens: {tokens.input:,} in / {tokens.output:,} out / {tokens.total:,} total[/dim]"
        )
        self.console.print(progress_bar(event.iteration / event.max_iterations * 100, 30))

    def _tool_result(self, event: ToolResultEvent) -> None:
        if event.success:
            lines = event.output.split("\n")
            summary = " ".join(lines[:2]) + "..." if len(lines) > 3 else event.output
            self.console.print(
                f"    [green]✓[/green] [dim]{escape(summary[:100])} ({event.duration_ms}ms)[/dim]"
            )
        else:
            self.console.print(
                f"    [red]✗ Error:[/red] [dim]{escape(event.error or '')} ({event.duration_ms}ms)[/dim]"
            )

    def _complete(self, event: CompleteEvent) -> None:
        stats = event.stats
        rule = "[dim]" + "═" * RULE_WIDTH + "[/dim]"
        self.console.print("\n" + rule)
        self.console.print("[bold green]✨ Analysis Complete![/bold green]")
        self.console.print(rule)
        self.console.print(f"Iterations:    [cyan]{stats.iterations}[/cyan]")
        self.console.print(f"Tool Calls:    [cyan]{stats.tool_calls}[/cyan]")
        self.console.print(
            f"Tokens Used:   [cyan]{stats.tokens.input:,} in / {stats.tokens.output:,} out / "
            f"{stats.tokens.total:,} total[/cyan]"
        )
        self.console.print(f"Duration:      [cyan]{(stats.duration_ms or 0) / 1000:.1f}s[/cyan]")
        self.console.print(f"Blackboard:    [cyan]{event.tokens} / {event.max_tokens} tokens[/cyan]")
        if event.output_path:
            self.console.print(f"Output Saved:  [green]{escape(event.output_path)}[/green]")
        self.console.print(rule)


def print_blackboard_summary(board: Blackboard) -> None:
    """Print every non-empty section followed by the total usage."""
    rule = "═" * RULE_WIDTH
    console.print(f"\n[bold cyan]{rule}[/bold cyan]")
    console.print("[bold cyan]           BLACKBOARD SUMMARY[/bold cyan]")
    console.print(f"[bold cyan]{rule}[/bold cyan]\n")

    sections = board.get_sections()
    if not sections:
        console.print("[yellow]No content on blackboard yet.[/yellow]")
        return

    for section in sections:
        console.print(f"[bold yellow]## {escape(format_section_name(section.name))}[/bold yellow]")
        console.print(
            f"[dim]({section.tokens} tokens, updated {section.updated_at:%Y-%m-%d %H:%M:%S})[/dim]\n"
        )
        console.print(escape(section.content))
        console.print("\n[dim]" + "─" * RULE_WIDTH + "[/dim]\n")

    total = board.get_total_tokens()
    console.print(
        f"[bold cyan]Total Usage:[/bold cyan] {total} / {board.max_tokens} tokens "
        f"({_pct(total, board.max_tokens)}%)"
    )
    console.print(f"[bold cyan]{rule}[/bold cyan]\n")


def print_blackboard_status(board: Blackboard) -> None:
    total = board.get_total_tokens()
    console.print("\n[bold cyan]📋 Blackboard Status[/bold cyan]\n")
    console.print(f"Target: [yellow]{escape(board.target_path)}[/yellow]")
    console.print(f"Session: [dim]{board.id}[/dim]")
    console.print(f"Created: [dim]{board.created_at:%Y-%m-%d %H:%M:%S}[/dim]")
    console.print(f"Updated: [dim]{board.updated_at:%Y-%m-%d %H:%M:%S}[/dim]")
    console.print(
        f"Tokens: [green]{total} / {board.max_tokens}[/green] [dim]({_pct(total, board.max_tokens)}%)[/dim]"
    )
    console.print(f"Sections: [green]{len(board.get_sections())}[/green] with content\n")


def print_sessions_table(sessions: list[SessionInfo]) -> None:
    """Pretty-print persisted sessions as a table."""
    table = Table(title="Blackboard Sessions")
    table.add_column("ID", style="cyan")
    table.add_column("Target")
    table.add_column("Tokens", justify="right")
    table.add_column("Updated")

    for session in sessions:
        table.add_row(
            escape(session.id),
            escape(_truncate(session.target_path)),
            str(session.total_tokens),
            f"{session.updated_at:%Y-%m-%d %H:%M:%S}",
        )

    console.print(table)


def print_profiles_table(profiles: list[AnalysisProfile]) -> None:
    table = Table(title="Analysis Profiles")
    table.add_column("Name", style="cyan")
    table.add_column("Mission")
    table.add_column("Sections")

    for profile in profiles:
        table.add_row(
            profile.name,
            _truncate(profile.mission.split("\n", 1)[0]),
            ", ".join(s.name for s in profile.suggested_sections) or "-",
        )

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
