"""Shared helpers for tests that drive the agent through mocked LiteLLM responses."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock


def make_mock_tool_call(call_id: str, name: str, arguments: dict[str, Any]) -> MagicMock:
    """Create a ``MagicMock`` shaped like a LiteLLM tool call."""
    tc = MagicMock()
    tc.id = call_id
    tc.function.name = name
    tc.function.arguments = json.dumps(arguments)
    return tc


def make_mock_litellm_response(
    content: str = "",
    tool_calls: list[Any] | None = None,
    finish_reason: str = "stop",
    model: str = "anthropic/claude-sonnet-4-5",
    prompt_tokens: int = 10,
    completion_tokens: int = 20,
) -> MagicMock:
    """Create a ``MagicMock`` matching LiteLLM's response structure.

    The mock mirrors ``choices[0].message`` with content, tool_calls,
    plus top-level ``usage`` and ``model`` attributes.
    """
    message = MagicMock()
    message.content = content or None
    message.tool_calls = tool_calls

    choice = MagicMock()
    choice.message = message
    choice.finish_reason = finish_reason

    usage = MagicMock()
    usage.prompt_tokens = prompt_tokens
    usage.completion_tokens = completion_tokens
    usage.total_tokens = prompt_tokens + completion_tokens

    response = MagicMock()
    response.choices = [choice]
    response.usage = usage
    response.model = model

    return response
