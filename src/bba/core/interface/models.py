"""Canonical Message Schema — the internal message format of the agent.

The agent loop, transcript archive and tool dispatcher only ever handle
these models; :class:`~bba.core.interface.client.ModelClient` converts
them to and from the provider wire format.
"""

from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field


class TextContent(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str


ContentPart = TextContent


# ---------------------------------------------------------------------------
# Tool Calling: structured tool invocations and results
# ---------------------------------------------------------------------------


class ToolCall(BaseModel):
    """A tool invocation emitted by an assistant message."""

    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    name: str
    arguments: dict[str, Any] = {}


class ToolResult(BaseModel):
    """The result of executing a tool, returned as a tool-role message."""

    tool_call_id: str
    content: list[ContentPart] = []

    @classmethod
    def from_text(cls, tool_call_id: str, text: str) -> "ToolResult":
        """Create a ToolResult with a single text content part."""
        return cls(tool_call_id=tool_call_id, content=[TextContent(text=text)])


# ---------------------------------------------------------------------------
# Token usage reported by the provider
# ---------------------------------------------------------------------------


class Usage(BaseModel):
    """Token usage of a single model call."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0


# ---------------------------------------------------------------------------
# Canonical Message: the core message type
# ---------------------------------------------------------------------------


class CanonicalMessage(BaseModel):
    """A single message in the canonical format.

    Roles:
    - system: instruction/context messages
    - user: human input (initial instruction, completion nudges)
    - assistant: LLM-generated messages (may include tool_calls)
    - tool: tool execution results (must include tool_call_id)
    """

    role: Literal["system", "user", "assistant", "tool"]
    content: list[ContentPart] = []
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None
    metadata: dict[str, Any] = {}

    @property
    def text(self) -> str:
        """Extract concatenated text from all TextContent parts."""
        return "".join(part.text for part in self.content)

    @property
    def finish_reason(self) -> str | None:
        reason = self.metadata.get("finish_reason")
        return str(reason) if reason is not None else None

    @property
    def usage(self) -> Usage:
        raw = self.metadata.get("usage")
        if isinstance(raw, Usage):
            return raw
        if isinstance(raw, dict):
            return Usage.model_validate(raw)
        return Usage()

    @classmethod
    def system(cls, text: str, **metadata: Any) -> "CanonicalMessage":
        """Create a system message."""
        return cls(role="system", content=[TextContent(text=text)], metadata=metadata)

    @classmethod
    def user(cls, text: str, **metadata: Any) -> "CanonicalMessage":
        """Create a user message."""
        return cls(role="user", content=[TextContent(text=text)], metadata=metadata)

    @classmethod
    def assistant(
        cls,
        text: str = "",
        tool_calls: list[ToolCall] | None = None,
        **metadata: Any,
    ) -> "CanonicalMessage":
        """Create an assistant message."""
        content: list[ContentPart] = [TextContent(text=text)] if text else []
        return cls(role="assistant", content=content, tool_calls=tool_calls, metadata=metadata)

    @classmethod
    def tool(cls, result: ToolResult, **metadata: Any) -> "CanonicalMessage":
        """Create a tool-result message."""
        return cls(
            role="tool",
            content=list(result.content),
            tool_call_id=result.tool_call_id,
            metadata=metadata,
        )


# ---------------------------------------------------------------------------
# Conversation History: ordered container of messages
# ---------------------------------------------------------------------------


class ConversationHistory(BaseModel):
    """An ordered sequence of canonical messages forming a conversation."""

    messages: list[CanonicalMessage] = []

    def append(self, message: CanonicalMessage) -> None:
        """Append a message to the history."""
        self.messages.append(message)

    def extend(self, messages: list[CanonicalMessage]) -> None:
        self.messages.extend(messages)

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self):  # type: ignore[override]
        return iter(self.messages)
