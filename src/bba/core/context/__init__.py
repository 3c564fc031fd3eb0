"""Token accounting — blackboard estimation and request-size counters."""

from bba.core.context.counter import (
    EstimatingCounter,
    TiktokenCounter,
    TokenCounter,
    estimate_tokens,
    format_token_count,
    truncate_to_token_limit,
)
from bba.core.context.counter_registry import get_counter

__all__ = [
    "EstimatingCounter",
    "TiktokenCounter",
    "TokenCounter",
    "estimate_tokens",
    "format_token_count",
    "get_counter",
    "truncate_to_token_limit",
]
