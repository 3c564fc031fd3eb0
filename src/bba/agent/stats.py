"""Iteration, tool-call and token counters for a single run."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bba.core.blackboard.models import utc_now
from bba.core.interface.models import Usage


class TokenTotals(BaseModel):
    """Cumulative token usage across every model call of a run."""

    model_config = ConfigDict(populate_by_name=True)

    input: int = 0
    output: int = 0
    total: int = 0
    cache_creation: int = Field(default=0, alias="cacheCreation")
    cache_read: int = Field(default=0, alias="cacheRead")

    def add(self, usage: Usage) -> None:
        self.input += usage.input_tokens
        self.output += usage.output_tokens
        self.total = self.input + self.output
        self.cache_creation += usage.cache_creation_tokens
        self.cache_read += usage.cache_read_tokens


class AgentStats(BaseModel):
    iterations: int = 0
    tool_calls: int = 0
    tokens: TokenTotals = Field(default_factory=TokenTotals)
    start_time: datetime = Field(default_factory=utc_now)
    end_time: datetime | None = None
    duration_ms: int | None = None

    def record_usage(self, usage: Usage) -> None:
        self.tokens.add(usage)

    def finalize(self) -> None:
        """Stamp the end time and duration of the run."""
        self.end_time = utc_now()
        self.duration_ms = self._elapsed_ms(self.end_time)

    def ensure_finalized(self) -> None:
        """Fix end time and duration if the run stopped before :meth:`finalize`."""
        if self.end_time is None:
            self.end_time = utc_now()
        if self.duration_ms is None:
            self.duration_ms = self._elapsed_ms(self.end_time)

    def _elapsed_ms(self, end: datetime) -> int:
        return int((end - self.start_time).total_seconds() * 1000)
