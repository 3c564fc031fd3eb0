"""Run artifacts: one timestamped folder per analysis under the workspace.

Layout::

    <workspace>/.output/analysis-YYYY-MM-DD-HHMMSS/
        conversation.json   full archived transcript
        blackboard.json     blackboard wire shape
        blackboard.md       blackboard as Markdown
        metadata.json       timing, counters and token usage
        tool-calls.json     every ToolCallRecord
        summary.md          final summary (successful runs only)
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from bba.agent.stats import TokenTotals

if TYPE_CHECKING:
    from bba.agent.history import ToolCallRecord
    from bba.agent.stats import AgentStats
    from bba.core.blackboard.blackboard import Blackboard
    from bba.core.interface.models import ConversationHistory

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR_NAME = ".output"
RUN_PREFIX = "analysis-"


class AnalysisMetadata(BaseModel):
    """Contents of ``metadata.json``."""

    model_config = ConfigDict(populate_by_name=True)

    analysis_id: str = Field(alias="analysisId")
    target_path: str = Field(alias="targetPath")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    duration_ms: int = Field(alias="durationMs")
    iterations: int
    tool_calls: int = Field(alias="toolCalls")
    tokens: TokenTotals
    blackboard_tokens: int = Field(alias="blackboardTokens")
    model: str
    success: bool
    error: str | None = None


def generate_analysis_id(now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d-%H%M%S")
    return f"{RUN_PREFIX}{stamp}"


def find_most_recent_run(output_dir: Path) -> Path | None:
    """Return the newest ``analysis-*`` folder in *output_dir*, if any."""
    if not output_dir.is_dir():
        return None
    runs = sorted(
        (p for p in output_dir.iterdir() if p.is_dir() and p.name.startswith(RUN_PREFIX)),
        key=lambda p: p.name,
        reverse=True,
    )
    return runs[0] if runs else None


class OutputManager:
    """Writes the artifacts of a single analysis run."""

    def __init__(
        self,
        workspace_root: Path | str,
        output_dir_name: str = DEFAULT_OUTPUT_DIR_NAME,
        *,
        now: datetime | None = None,
    ) -> None:
        self.output_dir = Path(workspace_root) / output_dir_name
        self.analysis_id = generate_analysis_id(now)
        self.analysis_path = self.output_dir / self.analysis_id

    def create_output_folder(self) -> None:
        if not self.analysis_path.exists():
            self.analysis_path.mkdir(parents=True, exist_ok=True)
            logger.info("Created analysis output folder %s", self.analysis_path)

    def _write_json(self, filename: str, data: Any) -> Path:
        path = self.analysis_path / filename
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        return path

    def save_conversation(self, history: ConversationHistory, target_path: str) -> None:
        path = self._write_json(
            "conversation.json",
            {
                "timestamp": datetime.now().astimezone().isoformat(),
                "targetPath": target_path,
                "messages": [m.model_dump(mode="json", exclude_none=True) for m in history],
            },
        )
        logger.info("Saved conversation to %s", path)

    def save_blackboard(self, board: Blackboard) -> None:
        json_path = self._write_json("blackboard.json", board.to_json())
        md_path = self.analysis_path / "blackboard.md"
        md_path.write_text(board.to_markdown(), encoding="utf-8")
        logger.info("Saved blackboard to %s and %s", json_path, md_path)

    def save_metadata(
        self,
        stats: AgentStats,
        board: Blackboard,
        target_path: str,
        model: str,
        error: str | None = None,
    ) -> AnalysisMetadata:
        metadata = AnalysisMetadata(
            analysis_id=self.analysis_id,
            target_path=target_path,
            start_time=stats.start_time,
            end_time=stats.end_time or datetime.now().astimezone(),
            duration_ms=stats.duration_ms or 0,
            iterations=stats.iterations,
            tool_calls=stats.tool_calls,
            tokens=stats.tokens,
            blackboard_tokens=board.get_total_tokens(),
            model=model,
            success=error is None,
            error=error,
        )
        path = self._write_json("metadata.json", metadata.model_dump(mode="json", by_alias=True))
        logger.info("Saved metadata to %s", path)
        return metadata

    def save_tool_calls(self, records: list[ToolCallRecord]) -> None:
        path = self._write_json(
            "tool-calls.json",
            [r.model_dump(mode="json", by_alias=True) for r in records],
        )
        logger.info("Saved %d tool calls to %s", len(records), path)

    def save_summary(self, summary: str) -> None:
        path = self.analysis_path / "summary.md"
        path.write_text(summary, encoding="utf-8")
        logger.info("Saved summary to %s", path)
