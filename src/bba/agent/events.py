"""Typed agent events and the observer protocol that receives them.

The agent never prints.  Rendering, logging or collecting events for tests
is the job of whatever :class:`AgentObserver` the caller attaches.
"""

from __future__ import annotations

from typing import Any, Literal, Protocol

from pydantic import BaseModel

from bba.agent.stats import AgentStats, TokenTotals


class StartEvent(BaseModel):
    type: Literal["start"] = "start"
    target_path: str
    tokens: int
    max_tokens: int
    analysis_id: str


class IterationEvent(BaseModel):
    type: Literal["iteration"] = "iteration"
    iteration: int
    max_iterations: int
    tokens: TokenTotals
    request_tokens: int = 0


class ThinkingEvent(BaseModel):
    type: Literal["thinking"] = "thinking"
    text: str


class ToolCallEvent(BaseModel):
    type: Literal["tool_call"] = "tool_call"
    name: str
    arguments: dict[str, Any] = {}


class ToolResultEvent(BaseModel):
    type: Literal["tool_result"] = "tool_result"
    name: str
    success: bool
    output: str = ""
    error: str | None = None
    duration_ms: int = 0


class BlackboardUpdateEvent(BaseModel):
    type: Literal["blackboard_update"] = "blackboard_update"
    section: str
    tokens: int
    max_tokens: int


class NudgeEvent(BaseModel):
    """The completion gate rejected an early stop."""

    type: Literal["nudge"] = "nudge"
    nudge: int
    utilization: float
    message: str


class CompleteEvent(BaseModel):
    type: Literal["complete"] = "complete"
    tokens: int
    max_tokens: int
    stats: AgentStats
    output_path: str = ""


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    error: str


AgentEvent = (
    StartEvent
    | IterationEvent
    | ThinkingEvent
    | ToolCallEvent
    | ToolResultEvent
    | BlackboardUpdateEvent
    | NudgeEvent
    | CompleteEvent
    | ErrorEvent
)


class AgentObserver(Protocol):
    """Receives every event emitted during a run."""

    def on_event(self, event: AgentEvent) -> None: ...


class EventCollector:
    """Observer that keeps every event in order."""

    def __init__(self) -> None:
        self.events: list[AgentEvent] = []

    def on_event(self, event: AgentEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> list[AgentEvent]:
        return [e for e in self.events if e.type == event_type]
