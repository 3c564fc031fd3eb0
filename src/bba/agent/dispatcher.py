"""ToolDispatcher — runs one batch of model tool calls and records the history.

Calls are executed one at a time in the order the model requested them.
Every call is counted, announced, recorded as a :class:`ToolCallRecord`
plus a compact history line, and answered with exactly one tool message.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bba.agent.events import (
    AgentEvent,
    BlackboardUpdateEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from bba.agent.history import ToolCallRecord, format_compact_tool_call
from bba.core.interface.models import CanonicalMessage, ToolResult
from bba.tools.definitions import UPDATE_BLACKBOARD

if TYPE_CHECKING:
    from bba.agent.stats import AgentStats
    from bba.core.interface.models import ToolCall
    from bba.tools.executor import ToolExecutor

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Tool messages for the next window turn, plus whether any write landed."""

    messages: list[CanonicalMessage] = field(default_factory=list)
    wrote_to_blackboard: bool = False


class ToolDispatcher:
    """Sequential dispatcher owning the run's tool-call history."""

    def __init__(
        self,
        executor: ToolExecutor,
        stats: AgentStats,
        emit: Callable[[AgentEvent], None],
    ) -> None:
        self._executor = executor
        self._stats = stats
        self._emit = emit
        self.records: list[ToolCallRecord] = []
        self.compact: list[str] = []

    async def execute_all(self, tool_calls: list[ToolCall], iteration: int) -> DispatchResult:
        result = DispatchResult()
        for tc in tool_calls:
            message, wrote = await self._execute_one(tc, iteration)
            result.messages.append(message)
            result.wrote_to_blackboard = result.wrote_to_blackboard or wrote
        return result

    async def _execute_one(self, tool_call: ToolCall, iteration: int) -> tuple[CanonicalMessage, bool]:
        self._stats.tool_calls += 1
        self._emit(ToolCallEvent(name=tool_call.name, arguments=tool_call.arguments))

        outcome = await self._executor.execute(tool_call.name, tool_call.arguments)

        self.records.append(
            ToolCallRecord(
                iteration=iteration,
                name=tool_call.name,
                input=tool_call.arguments,
                success=outcome.success,
                output=outcome.output if outcome.success else None,
                error=outcome.error,
                duration_ms=outcome.duration_ms,
            )
        )
        self.compact.append(format_compact_tool_call(tool_call.name, tool_call.arguments, outcome))

        wrote = tool_call.name == UPDATE_BLACKBOARD and outcome.success
        if wrote:
            board = self._executor.blackboard
            self._emit(
                BlackboardUpdateEvent(
                    section=str(tool_call.arguments.get("section", "")),
                    tokens=board.get_total_tokens(),
                    max_tokens=board.max_tokens,
                )
            )
        elif not outcome.success:
            logger.warning("Tool %s failed: %s", tool_call.name, outcome.error)

        self._emit(
            ToolResultEvent(
                name=tool_call.name,
                success=outcome.success,
                output=outcome.output,
                error=outcome.error,
                duration_ms=outcome.duration_ms,
            )
        )

        message = CanonicalMessage.tool(ToolResult.from_text(tool_call.id, outcome.content))
        return message, wrote
