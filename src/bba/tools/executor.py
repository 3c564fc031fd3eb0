"""ToolExecutor — runs the four exploration tools against a target and a blackboard.

Every invocation is timed and every failure, including unknown tools and
malformed arguments, is converted into a failed :class:`ToolOutcome`.
Nothing raises across :meth:`ToolExecutor.execute`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from bba.tools import fs
from bba.tools.definitions import (
    DEFAULT_LIST_DEPTH,
    DEFAULT_MAX_RESULTS,
    FILE_READ,
    GREP_SEARCH,
    LIST_DIR,
    MAX_LIST_DEPTH,
    TOOLS,
    UPDATE_BLACKBOARD,
)
from bba.tools.models import ToolOutcome
from bba.utils.telemetry import ATTR_TOOL_NAME, ATTR_TOOL_SUCCESS, get_tracer

if TYPE_CHECKING:
    from bba.core.blackboard.blackboard import Blackboard

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

_Handler = Callable[[dict[str, Any]], ToolOutcome]


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size / (1024 * 1024):.1f}MB"


def _require(arguments: dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if value is None or value == "":
        raise ValueError(f"Missing required argument: {key}")
    return str(value)


def _optional_int(arguments: dict[str, Any], key: str) -> int | None:
    value = arguments.get(key)
    if value is None or value == "":
        return None
    return int(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


class ToolExecutor:
    """Executes tool calls for one exploration run.

    Relative paths resolve against the target directory (or, when the
    target is a single file, against its parent).
    """

    def __init__(self, target_path: str | Path, blackboard: Blackboard) -> None:
        self.target = Path(target_path)
        self.blackboard = blackboard
        self._handlers: dict[str, _Handler] = {
            LIST_DIR: self._list_dir,
            FILE_READ: self._file_read,
            GREP_SEARCH: self._grep_search,
            UPDATE_BLACKBOARD: self._update_blackboard,
        }

    def all_tools(self) -> list[dict[str, Any]]:
        """Return the tool schemas this executor can serve."""
        return list(TOOLS)

    @property
    def _base_dir(self) -> Path:
        return self.target if self.target.is_dir() else self.target.parent

    def _resolve(self, raw: Any) -> Path:
        if raw is None or raw == "":
            return self.target
        path = Path(str(raw)).expanduser()
        return path if path.is_absolute() else self._base_dir / path

    async def execute(self, name: str, arguments: dict[str, Any]) -> ToolOutcome:
        """Run tool *name* with *arguments*; never raises."""
        start = time.perf_counter()
        logger.info("Executing tool %s with %s", name, arguments)

        with _tracer.start_as_current_span("tool.execute") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            handler = self._handlers.get(name)
            if handler is None:
                outcome = ToolOutcome(success=False, error=f"Unknown tool: {name}")
            else:
                try:
                    outcome = handler(arguments)
                except Exception as exc:  # noqa: BLE001 - tools report, never raise
                    logger.error("Tool %s failed: %s", name, exc)
                    outcome = ToolOutcome(success=False, error=f"Tool execution failed: {exc}")
            span.set_attribute(ATTR_TOOL_SUCCESS, outcome.success)

        outcome.duration_ms = int((time.perf_counter() - start) * 1000)
        return outcome

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _list_dir(self, arguments: dict[str, Any]) -> ToolOutcome:
        path = self._resolve(arguments.get("path"))
        depth = min(_optional_int(arguments, "max_depth") or DEFAULT_LIST_DEPTH, MAX_LIST_DEPTH)
        items = fs.list_directory(path, depth)
        return ToolOutcome(success=True, output=self._format_listing(items, path), count=len(items))

    def _format_listing(self, items: list[fs.FileInfo], root: Path) -> str:
        if not items:
            return "Found 0 items"

        by_dir: dict[str, list[fs.FileInfo]] = {}
        for item in items:
            parent = str(Path(item.path).parent) or str(root)
            by_dir.setdefault(parent, []).append(item)

        lines = [f"Found {len(items)} items:"]
        for directory in sorted(by_dir):
            lines.append(f"\n{directory}/")
            for item in by_dir[directory]:
                icon = "📁" if item.type == "directory" else "📄"
                size = f" ({format_size(item.size)})" if item.size else ""
                lines.append(f"  {icon} {item.name}{size}")
        return "\n".join(lines)

    def _file_read(self, arguments: dict[str, Any]) -> ToolOutcome:
        path = self._resolve(_require(arguments, "path"))
        start_line = _optional_int(arguments, "start_line")
        end_line = _optional_int(arguments, "end_line")
        content = fs.read_file_content(path, start_line, end_line)

        if start_line is not None or end_line is not None:
            summary = f"Lines {start_line or 1}-{end_line or 'end'} of {path}"
        else:
            summary = f"{path} ({len(content.splitlines()) or 1} lines)"
        return ToolOutcome(success=True, output=f"{summary}\n\n{content}")

    def _grep_search(self, arguments: dict[str, Any]) -> ToolOutcome:
        pattern = _require(arguments, "pattern")
        path = self._resolve(arguments.get("path"))
        max_results = _optional_int(arguments, "max_results") or DEFAULT_MAX_RESULTS
        matches = fs.grep_search(pattern, path, max_results)

        if not matches:
            return ToolOutcome(success=True, output=f"No matches found for pattern: {pattern}", count=0)

        by_file: dict[str, list[fs.GrepMatch]] = {}
        for match in matches:
            by_file.setdefault(match.file, []).append(match)

        lines = [f"Found {len(matches)} matches for pattern: {pattern}"]
        for file, file_matches in by_file.items():
            lines.append(f"\n{file} ({len(file_matches)} matches):")
            lines.extend(f"  Line {m.line}: {m.content}" for m in file_matches)
        return ToolOutcome(success=True, output="\n".join(lines), count=len(matches))

    def _update_blackboard(self, arguments: dict[str, Any]) -> ToolOutcome:
        section = _require(arguments, "section")
        content = str(arguments.get("content") or "")
        replace = _as_bool(arguments.get("replace", False))

        result = self.blackboard.update_section(section, content, replace)
        if not result.success:
            return ToolOutcome(success=False, error=result.message)

        board = self.blackboard
        return ToolOutcome(
            success=True,
            output=(
                f"{result.message}\nTotal: {board.get_total_tokens()}/{board.max_tokens} tokens "
                f"({board.get_remaining_tokens()} remaining)"
            ),
        )
