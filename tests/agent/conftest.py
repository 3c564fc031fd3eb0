"""Shared fixtures for agent tests — scripted model responses and a small project tree."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from bba.core.interface.models import CanonicalMessage, ToolCall, Usage


def tool_response(*calls: tuple[str, dict[str, Any]], finish_reason: str = "tool_calls", text: str = "") -> CanonicalMessage:
    """An assistant message requesting *calls* as ``(name, arguments)`` pairs."""
    tool_calls = [ToolCall(id=f"call-{i}", name=name, arguments=args) for i, (name, args) in enumerate(calls)]
    return CanonicalMessage.assistant(
        text,
        tool_calls=tool_calls,
        finish_reason=finish_reason,
        usage=Usage(input_tokens=100, output_tokens=10),
    )


def stop_response(text: str = "Done.") -> CanonicalMessage:
    return CanonicalMessage.assistant(text, finish_reason="stop", usage=Usage(input_tokens=50, output_tokens=5))


def write(section: str, chars: int) -> tuple[str, dict[str, Any]]:
    """An ``update_blackboard`` call whose content estimates to ``chars / 4`` tokens."""
    return ("update_blackboard", {"section": section, "content": "x" * chars, "replace": True})


def scripted_client(*responses: CanonicalMessage | Exception) -> MagicMock:
    client = MagicMock()
    client.generate = AsyncMock(side_effect=list(responses))
    return client


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.py").write_text("def main():\n    return 1\n")
    (root / "README.md").write_text("# Demo\n")
    return root
