"""Tests for ``bba analyze`` CLI command."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from bba.cli import main
from bba.core.blackboard.blackboard import Blackboard
from tests.e2e.conftest import make_mock_litellm_response, make_mock_tool_call


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    (root / "main.py").write_text("print('hi')\n")
    return root.resolve()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    ws = tmp_path / "workspace"
    ws.mkdir()
    monkeypatch.chdir(ws)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    return ws


def _write_call(content: str) -> MagicMock:
    return make_mock_litellm_response(
        tool_calls=[
            make_mock_tool_call("c1", "update_blackboard", {"section": "overview", "content": content, "replace": True})
        ],
        finish_reason="tool_calls",
    )


def _invoke(settings_file: Path, *args: str) -> object:
    return CliRunner().invoke(main, ["analyze", "--config", str(settings_file), *args])


class TestAnalyzeCommand:
    @patch("bba.core.interface.client.litellm")
    def test_full_run(
        self, mock_litellm: MagicMock, project: Path, workspace: Path, settings_file: Path, tmp_path: Path
    ) -> None:
        mock_litellm.acompletion = AsyncMock(
            side_effect=[
                _write_call("x" * 280),
                make_mock_litellm_response(content="Finished exploring."),
                make_mock_litellm_response(content="# Summary"),
            ]
        )

        result = _invoke(settings_file, "--path", str(project))

        assert result.exit_code == 0, result.output
        assert "Starting Analysis" in result.output
        assert "Blackboard updated:" in result.output
        assert "Analysis Complete!" in result.output
        assert "BLACKBOARD SUMMARY" in result.output
        assert "Total Usage:" in result.output

        runs = list((workspace / ".output").iterdir())
        assert len(runs) == 1
        assert (runs[0] / "summary.md").read_text() == "# Summary"
        assert len(list((tmp_path / "sessions").glob("*.json"))) == 1
        assert (tmp_path / "logs" / "agent.log").exists()

    @patch("bba.core.interface.client.litellm")
    def test_resume_continues_previous_session(
        self, mock_litellm: MagicMock, project: Path, workspace: Path, settings_file: Path, tmp_path: Path
    ) -> None:
        previous = Blackboard(str(project), max_tokens=100, id="bb_prev")
        previous.update_section("overview", "y" * 280)
        (tmp_path / "sessions").mkdir()
        (tmp_path / "sessions" / "bb_prev.json").write_bytes(previous.snapshot())
        mock_litellm.acompletion = AsyncMock(
            side_effect=[
                make_mock_litellm_response(content="Already well covered."),
                make_mock_litellm_response(content="# Summary"),
            ]
        )

        result = _invoke(settings_file, "--path", str(project), "--resume")

        assert result.exit_code == 0, result.output
        assert "Resuming session bb_prev" in result.output
        saved = json.loads((tmp_path / "sessions" / "bb_prev.json").read_text())
        assert saved["sections"]["overview"]["content"] == "y" * 280
        system_prompt = mock_litellm.acompletion.call_args_list[0].kwargs["messages"][0]["content"]
        assert "**Continuing analysis.**" in system_prompt

    def test_missing_api_key(
        self, project: Path, workspace: Path, settings_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY")

        result = _invoke(settings_file, "--path", str(project))

        assert result.exit_code == 1
        assert "ANTHROPIC_API_KEY not found" in result.output

    def test_invalid_path(self, workspace: Path, settings_file: Path, tmp_path: Path) -> None:
        result = _invoke(settings_file, "--path", str(tmp_path / "missing"))

        assert result.exit_code == 1
        assert "Invalid path" in result.output

    def test_unknown_profile(self, project: Path, workspace: Path, settings_file: Path) -> None:
        result = _invoke(settings_file, "--path", str(project), "--profile", "nope")

        assert result.exit_code == 1
        assert 'Unknown profile "nope"' in result.output

    @patch("bba.core.interface.client.litellm")
    def test_configuration_error(
        self,
        mock_litellm: MagicMock,
        project: Path,
        workspace: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY")
        mock_litellm.acompletion = AsyncMock()
        bad = tmp_path / "bad.yaml"
        bad.write_text("max_iterations: 0\n")

        result = _invoke(bad, "--path", str(project))

        assert result.exit_code == 1
        assert "Configuration error:" in result.output
        mock_litellm.acompletion.assert_not_called()

    def test_config_file_model_is_used(
        self, project: Path, workspace: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        cfg = tmp_path / "openai.yaml"
        cfg.write_text(f"model: openai/gpt-4o\nlog_file: {tmp_path / 'logs' / 'agent.log'}\n")

        result = _invoke(cfg, "--path", str(project))

        assert result.exit_code == 1
        assert "OPENAI_API_KEY not found" in result.output

    @patch("bba.core.interface.client.litellm")
    def test_model_failure_exits_nonzero(
        self, mock_litellm: MagicMock, project: Path, workspace: Path, settings_file: Path
    ) -> None:
        mock_litellm.acompletion = AsyncMock(side_effect=RuntimeError("service unavailable"))

        result = _invoke(settings_file, "--path", str(project))

        assert result.exit_code == 1
        assert "service unavailable" in result.output
        run = next((workspace / ".output").iterdir())
        metadata = json.loads((run / "metadata.json").read_text())
        assert metadata["success"] is False


class TestShowOption:
    def test_no_history(self, project: Path, workspace: Path, settings_file: Path) -> None:
        result = _invoke(settings_file, "--path", str(project), "--show")

        assert result.exit_code == 0
        assert "No analysis history found in:" in result.output

    def test_shows_most_recent(self, project: Path, workspace: Path, settings_file: Path) -> None:
        board = Blackboard(str(project), max_tokens=100)
        board.update_section("overview", "Stored finding")
        for name in ["analysis-2025-01-01-000000", "analysis-2025-02-01-000000"]:
            run = workspace / ".output" / name
            run.mkdir(parents=True)
            (run / "blackboard.json").write_bytes(board.snapshot())

        result = _invoke(settings_file, "--path", str(project), "--show")

        assert result.exit_code == 0
        assert "Showing most recent analysis: analysis-2025-02-01-000000" in result.output
        assert "Stored finding" in result.output

    def test_does_not_need_api_key(
        self, project: Path, workspace: Path, settings_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY")
        result = _invoke(settings_file, "--path", str(project), "--show")
        assert result.exit_code == 0
