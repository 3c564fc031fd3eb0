"""E2E: a full analysis through ModelClient with mocked LiteLLM responses."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bba.agent.agent import BlackboardAgent
from bba.agent.events import EventCollector
from bba.config import AgentSettings
from bba.core.blackboard.backend import FileBackend
from tests.e2e.conftest import make_mock_litellm_response, make_mock_tool_call


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "shop"
    (root / "app").mkdir(parents=True)
    (root / "app" / "server.py").write_text(
        "from flask import Flask\n\napp = Flask(__name__)\n\n@app.route('/orders')\ndef orders():\n    return []\n"
    )
    (root / "requirements.txt").write_text("flask==3.0\n")
    return root


def _tools(*calls: tuple[str, dict[str, object]]) -> MagicMock:
    return make_mock_litellm_response(
        tool_calls=[make_mock_tool_call(f"call_{i}", name, args) for i, (name, args) in enumerate(calls)],
        finish_reason="tool_calls",
    )


@patch("bba.core.interface.client.litellm")
async def test_explore_nudge_and_summarize(mock_litellm: MagicMock, project: Path, tmp_path: Path) -> None:
    mock_litellm.acompletion = AsyncMock(
        side_effect=[
            _tools(("list_dir", {"path": "."})),
            _tools(
                ("file_read", {"path": "app/server.py"}),
                ("grep_search", {"pattern": "@app.route", "path": "app"}),
            ),
            _tools(("update_blackboard", {"section": "overview", "content": "Flask order service. " * 4})),
            make_mock_litellm_response(content="I think I'm done."),
            _tools(("update_blackboard", {"section": "entry_points", "content": "app/server.py " * 14})),
            make_mock_litellm_response(content="Done for real."),
            make_mock_litellm_response(content="# Shop\nA Flask service."),
        ]
    )
    collector = EventCollector()
    backend = FileBackend(tmp_path / "sessions")
    settings = AgentSettings(model="anthropic/claude-sonnet-4-5", api_key="test-key", blackboard_max_tokens=100)
    agent = BlackboardAgent(
        project,
        settings=settings,
        observer=collector,
        workspace_root=tmp_path / "ws",
        backend=backend,
    )

    board = await agent.analyze()

    assert board.get_section_names() == ["overview", "entry_points"]
    assert board.utilization >= 0.65
    assert agent.stats.iterations == 6
    assert agent.stats.tool_calls == 5
    assert agent.loop.completion_nudges == 1
    assert agent.stats.tokens.input == 60
    assert agent.stats.tokens.output == 120
    assert [e.type for e in collector.events].count("nudge") == 1

    calls = mock_litellm.acompletion.call_args_list
    assert len(calls) == 7

    # Iteration 3 sees only the previous exchange: assistant + two tool results.
    third = calls[2].kwargs["messages"]
    assert [m["role"] for m in third] == ["system", "assistant", "tool", "tool"]
    assert third[2]["tool_call_id"] == "call_0"
    assert third[2]["content"].startswith(f"{project / 'app' / 'server.py'} (8 lines)")
    assert "Found 1 matches for pattern: @app.route" in third[3]["content"]
    assert "## YOUR PROGRESS SO FAR (3 tool calls)" in third[0]["content"]

    # After the nudge the model sees its own stop message and the nudge.
    fifth = calls[4].kwargs["messages"]
    assert [m["role"] for m in fifth] == ["system", "assistant", "user"]
    assert fifth[2]["content"].startswith("Your blackboard is only ")

    # The summary request carries no tools and only the findings prompt.
    summary_call = calls[6].kwargs
    assert "tools" not in summary_call
    assert [m["role"] for m in summary_call["messages"]] == ["user"]
    assert "Flask order service." in summary_call["messages"][0]["content"]

    run_dir = next((tmp_path / "ws" / ".output").iterdir())
    assert (run_dir / "summary.md").read_text() == "# Shop\nA Flask service."
    tool_calls = json.loads((run_dir / "tool-calls.json").read_text())
    assert [c["name"] for c in tool_calls] == [
        "list_dir",
        "file_read",
        "grep_search",
        "update_blackboard",
        "update_blackboard",
    ]
    assert [c["iteration"] for c in tool_calls] == [1, 2, 2, 3, 5]

    restored = await backend.find_by_target(str(project))
    assert restored is not None
    assert restored.get_section("overview") == board.get_section("overview")
