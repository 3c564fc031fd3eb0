"""Unified Model Interface — canonical messages and the LiteLLM client."""

from bba.core.interface.client import ModelClient
from bba.core.interface.config import ModelConfig
from bba.core.interface.models import (
    CanonicalMessage,
    ContentPart,
    ConversationHistory,
    TextContent,
    ToolCall,
    ToolResult,
    Usage,
)

__all__ = [
    "CanonicalMessage",
    "ContentPart",
    "ConversationHistory",
    "ModelClient",
    "ModelConfig",
    "TextContent",
    "ToolCall",
    "ToolResult",
    "Usage",
]
