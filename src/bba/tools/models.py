"""Tool-layer data models."""

from pydantic import BaseModel


class ToolOutcome(BaseModel):
    """Structured result of one tool invocation.

    ``count`` carries the number of listed items or matches, when the tool
    produces one, for the compact history line.
    """

    success: bool
    output: str = ""
    error: str | None = None
    duration_ms: int = 0
    count: int | None = None

    @property
    def content(self) -> str:
        """Text fed back to the model as the tool result."""
        return self.output if self.success else f"Error: {self.error}"
