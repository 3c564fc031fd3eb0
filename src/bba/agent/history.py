"""Tool-call history — full records for the run artifacts, compact lines for the prompt.

Only the last exchange survives in the rolling window, so the system prompt
carries a short digest of everything the agent has already done.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bba.core.blackboard.models import utc_now
from bba.tools.definitions import FILE_READ, GREP_SEARCH, LIST_DIR, UPDATE_BLACKBOARD
from bba.tools.models import ToolOutcome

DEFAULT_RECENT_SIZE = 15
MAX_FILES_SHOWN = 12

REPEAT_REMINDER = (
    "DO NOT repeat tool calls you've already made. Use the blackboard to track "
    "what you've learned and move on to new areas."
)


class ToolCallRecord(BaseModel):
    """One executed tool call, as written to ``tool-calls.json``."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime = Field(default_factory=utc_now)
    iteration: int
    name: str
    input: dict[str, Any] = {}
    success: bool
    output: str | None = None
    error: str | None = None
    duration_ms: int = Field(default=0, alias="durationMs")


def _tail(path: str, segments: int) -> str:
    return "/".join(path.split("/")[-segments:])


def _basename(path: str) -> str:
    return path.split("/")[-1] or path


def format_compact_tool_call(name: str, arguments: dict[str, Any], outcome: ToolOutcome) -> str:
    """Render one tool call as a single history line, e.g. ``✓ list_dir(src/app) → 12 items``."""
    mark = "✓" if outcome.success else "✗"

    if name == LIST_DIR:
        path = _tail(str(arguments.get("path") or ""), 2)
        count = f"{_result_count(outcome)} items" if outcome.success else "failed"
        return f"{mark} list_dir({path}) → {count}"

    if name == FILE_READ:
        path = _basename(str(arguments.get("path") or ""))
        end_line = arguments.get("end_line")
        if end_line is not None:
            lines = f"lines {arguments.get('start_line') or 1}-{end_line}"
        else:
            lines = "full file"
        return f"{mark} file_read({path}, {lines})"

    if name == GREP_SEARCH:
        pattern = str(arguments.get("pattern") or "")
        count = f"{_result_count(outcome)} matches" if outcome.success else "failed"
        return f'{mark} grep("{pattern}") → {count}'

    if name == UPDATE_BLACKBOARD:
        return f"{mark} update_blackboard({arguments.get('section') or ''})"

    return f"{mark} {name}(...)"


def _result_count(outcome: ToolOutcome) -> int:
    if outcome.count is not None:
        return outcome.count
    return len(outcome.output.split("\n"))


def _collect_explored(records: list[ToolCallRecord]) -> tuple[list[str], list[str]]:
    dirs: dict[str, None] = {}
    files: dict[str, None] = {}
    for record in records:
        path = str(record.input.get("path") or "")
        if record.name == LIST_DIR:
            dirs[_tail(path, 2) or "/"] = None
        elif record.name == FILE_READ:
            files[_basename(path)] = None
    return list(dirs), list(files)


def build_tool_history(
    records: list[ToolCallRecord],
    compact: list[str],
    recent: int = DEFAULT_RECENT_SIZE,
) -> str:
    """Build the "progress so far" block of the system prompt.

    Returns an empty string before the first tool call.
    """
    if not compact:
        return ""

    dirs, files = _collect_explored(records)
    lines = [f"\n## YOUR PROGRESS SO FAR ({len(compact)} tool calls)", ""]

    if dirs:
        lines.append(f"Directories explored: {', '.join(dirs)}")
    if files:
        shown = files[:MAX_FILES_SHOWN]
        more = len(files) - len(shown)
        suffix = f", +{more} more" if more > 0 else ""
        lines.append(f"Files read: {', '.join(shown)}{suffix}")

    window = compact[-recent:] if recent > 0 else []
    skipped = len(compact) - len(window)

    lines.extend(["", "Recent:"])
    if skipped > 0:
        lines.append(f"  ({skipped} earlier calls omitted)")
    lines.extend(f"  {skipped + i + 1}. {line}" for i, line in enumerate(window))

    lines.extend(["", REPEAT_REMINDER])
    return "\n".join(lines)
