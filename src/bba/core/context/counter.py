"""Token counting — text estimation plus message-level counters.

:func:`estimate_tokens` is the blackboard's admission-control metric: a
dependency-free ~4 characters per token heuristic.  The message counters
measure outgoing requests, via tiktoken (for OpenAI-family models) or the
same character heuristic as a universal fallback.
"""

from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import tiktoken

if TYPE_CHECKING:
    from bba.core.interface.models import CanonicalMessage, ConversationHistory

_CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Approximate the token count of *text* as ``ceil(len(text.strip()) / 4)``."""
    return math.ceil(len(text.strip()) / _CHARS_PER_TOKEN)


def truncate_to_token_limit(text: str, max_tokens: int) -> str:
    """Cut *text* down to roughly *max_tokens*, marking the truncation."""
    if estimate_tokens(text) <= max_tokens:
        return text
    return text[: max_tokens * _CHARS_PER_TOKEN] + "\n\n[... truncated to fit token limit]"


def format_token_count(current: int, maximum: int) -> str:
    """Render ``current / maximum tokens (pct%)``."""
    percentage = round(current / maximum * 100) if maximum else 0
    return f"{current} / {maximum} tokens ({percentage}%)"


@runtime_checkable
class TokenCounter(Protocol):
    """Protocol for counting tokens in messages."""

    def count_text(self, text: str) -> int:
        """Return the token count for a bare string (e.g. a system prompt)."""
        ...

    def count_message(self, message: CanonicalMessage) -> int:
        """Return the token count for a single message."""
        ...

    def count_messages(self, messages: ConversationHistory) -> int:
        """Return the total token count for a conversation history."""
        ...


# Per-message overhead: every message has <|start|>{role}\n ... <|end|> framing.
_MSG_OVERHEAD = 4
# Reply priming tokens added once to the total (OpenAI convention).
_REPLY_PRIMING = 2


class TiktokenCounter:
    """Token counter using tiktoken encodings.

    Falls back to ``cl100k_base`` when the model's encoding is unknown.
    """

    def __init__(self, model: str) -> None:
        try:
            self._enc = tiktoken.encoding_for_model(model)
        except KeyError:
            self._enc = tiktoken.get_encoding("cl100k_base")

    def count_text(self, text: str) -> int:
        return len(self._enc.encode(text))

    def count_message(self, message: CanonicalMessage) -> int:
        """Count tokens in a single message including per-message overhead."""
        tokens = _MSG_OVERHEAD + self.count_text(message.text)
        for tc in message.tool_calls or []:
            tokens += self.count_text(tc.name)
            tokens += self.count_text(json.dumps(tc.arguments))
        return tokens

    def count_messages(self, messages: ConversationHistory) -> int:
        """Count total tokens for a conversation, including reply priming."""
        return sum(self.count_message(m) for m in messages) + _REPLY_PRIMING


class EstimatingCounter:
    """Fallback token counter built on :func:`estimate_tokens`."""

    def count_text(self, text: str) -> int:
        return estimate_tokens(text)

    def count_message(self, message: CanonicalMessage) -> int:
        tokens = _MSG_OVERHEAD + estimate_tokens(message.text)
        for tc in message.tool_calls or []:
            tokens += estimate_tokens(tc.name)
            tokens += estimate_tokens(json.dumps(tc.arguments))
        return tokens

    def count_messages(self, messages: ConversationHistory) -> int:
        return sum(self.count_message(m) for m in messages) + _REPLY_PRIMING
