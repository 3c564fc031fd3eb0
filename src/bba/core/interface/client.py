"""ModelClient — unified async interface to LLMs via LiteLLM.

Wraps LiteLLM behind a CMS-native interface so the rest of the system
only ever works with CanonicalMessage and ConversationHistory.  Errors from
the transport are not retried here; they propagate to the agent loop.
"""

import json
from typing import Any

import litellm

from bba.core.interface.config import ModelConfig
from bba.core.interface.models import (
    CanonicalMessage,
    ContentPart,
    ConversationHistory,
    TextContent,
    ToolCall,
    Usage,
)
from bba.utils.telemetry import (
    ATTR_FINISH_REASON,
    ATTR_MODEL,
    ATTR_PROVIDER,
    ATTR_TOKENS_COMPLETION,
    ATTR_TOKENS_PROMPT,
    get_tracer,
)

_tracer = get_tracer(__name__)


class ModelClient:
    """Async client for generating LLM responses via LiteLLM.

    Usage::

        config = ModelConfig(model="anthropic/claude-sonnet-4-5")
        client = ModelClient(config)
        response = await client.generate(history, tools=schemas)
    """

    def __init__(self, config: ModelConfig) -> None:
        self.config = config

    async def generate(
        self,
        messages: ConversationHistory,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> CanonicalMessage:
        """Generate a response from the configured model.

        Args:
            messages: The conversation history in CMS format (system prompt
                included as a leading system message).
            tools: Optional list of tool definitions in OpenAI function schema format.
            **kwargs: Additional parameters passed to LiteLLM.

        Returns:
            A CanonicalMessage representing the model's response, with
            ``usage`` and ``finish_reason`` in its metadata.
        """
        with _tracer.start_as_current_span("model.generate") as span:
            span.set_attribute(ATTR_MODEL, self.config.model)
            span.set_attribute(ATTR_PROVIDER, self.config.provider)

            call_kwargs: dict[str, Any] = {
                "model": self.config.model,
                "messages": to_openai_messages(messages),
                "max_tokens": self.config.max_tokens,
                **self.config.extra,
                **kwargs,
            }

            api_key = self.config.resolve_api_key()
            if api_key:
                call_kwargs["api_key"] = api_key
            if self.config.api_base:
                call_kwargs["api_base"] = self.config.api_base

            if tools:
                call_kwargs["tools"] = tools

            # Call LiteLLM (type stubs are incomplete)
            response = await litellm.acompletion(**call_kwargs)  # pyright: ignore[reportUnknownMemberType]

            result = self._parse_response(response)

            usage = result.usage
            span.set_attribute(ATTR_TOKENS_PROMPT, usage.input_tokens)
            span.set_attribute(ATTR_TOKENS_COMPLETION, usage.output_tokens)
            if result.finish_reason is not None:
                span.set_attribute(ATTR_FINISH_REASON, result.finish_reason)

            return result

    def _parse_response(self, response: Any) -> CanonicalMessage:
        """Convert a LiteLLM response to a CanonicalMessage.

        LiteLLM returns OpenAI-compatible response objects regardless of
        the underlying provider.
        """
        message = response.choices[0].message

        content: list[ContentPart] = []
        if message.content:
            content = [TextContent(text=message.content)]

        tool_calls: list[ToolCall] | None = None
        if message.tool_calls:
            tool_calls = [
                ToolCall(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=_parse_arguments(tc.function.arguments),
                )
                for tc in message.tool_calls
            ]

        metadata: dict[str, Any] = {
            "usage": _parse_usage(getattr(response, "usage", None)).model_dump(),
            "finish_reason": response.choices[0].finish_reason,
            "model": response.model,
        }

        return CanonicalMessage(
            role="assistant",
            content=content,
            tool_calls=tool_calls,
            metadata=metadata,
        )


def to_openai_messages(history: ConversationHistory) -> list[dict[str, Any]]:
    """Convert CMS history to the OpenAI chat format LiteLLM expects.

    Provider-specific adjustments (e.g. system prompt extraction for
    Anthropic) are handled by LiteLLM internally.
    """
    result: list[dict[str, Any]] = []
    for msg in history:
        item: dict[str, Any] = {"role": msg.role}
        if msg.role == "tool":
            item["tool_call_id"] = msg.tool_call_id
            item["content"] = msg.text
            result.append(item)
            continue

        item["content"] = msg.text or None
        if msg.tool_calls:
            item["tool_calls"] = [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {"name": tc.name, "arguments": json.dumps(tc.arguments)},
                }
                for tc in msg.tool_calls
            ]
        result.append(item)
    return result


def _as_int(value: Any) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def _parse_usage(raw: Any) -> Usage:
    """Extract token usage, including prompt-cache counters when reported."""
    if not raw:
        return Usage()
    cache_read = _as_int(getattr(raw, "cache_read_input_tokens", None))
    if not cache_read:
        details = getattr(raw, "prompt_tokens_details", None)
        cache_read = _as_int(getattr(details, "cached_tokens", None))
    return Usage(
        input_tokens=_as_int(getattr(raw, "prompt_tokens", 0)),
        output_tokens=_as_int(getattr(raw, "completion_tokens", 0)),
        cache_creation_tokens=_as_int(getattr(raw, "cache_creation_input_tokens", None)),
        cache_read_tokens=cache_read,
    )


def _parse_arguments(raw: Any) -> dict[str, Any]:
    """Parse JSON string arguments from a tool call."""
    if isinstance(raw, dict):
        return raw
    try:
        result: dict[str, Any] = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        result = {"raw": raw}
    return result
