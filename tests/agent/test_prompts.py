"""Tests for system prompt generation."""

import pytest

from bba.agent.profiles import CODEBASE_ANALYSIS_PROFILE, AnalysisProfile
from bba.agent.prompts import build_stall_warning, format_tool_descriptions, generate_system_prompt
from bba.core.blackboard.blackboard import Blackboard
from bba.tools.definitions import TOOLS


class TestStallWarning:
    def test_below_threshold(self) -> None:
        assert build_stall_warning(2, 3) == ""

    @pytest.mark.parametrize("iterations", [3, 4])
    def test_warning(self, iterations: int) -> None:
        warning = build_stall_warning(iterations, 3)
        assert "⚠️ WARNING" in warning
        assert f"NOT written to the blackboard in {iterations} iterations" in warning

    @pytest.mark.parametrize("iterations", [5, 9])
    def test_critical(self, iterations: int) -> None:
        warning = build_stall_warning(iterations, 3)
        assert "🚨 CRITICAL" in warning
        assert "WARNING" not in warning


class TestToolDescriptions:
    def test_numbered_with_params(self) -> None:
        text = format_tool_descriptions(TOOLS)
        assert text.startswith("1. **list_dir(path, max_depth)**: List files")
        assert "4. **update_blackboard(section, content, replace)**:" in text


class TestGenerateSystemPrompt:
    def setup_method(self) -> None:
        self.board = Blackboard("/repo", max_tokens=4000)

    def test_fresh_board(self) -> None:
        prompt = generate_system_prompt(self.board, CODEBASE_ANALYSIS_PROFILE, TOOLS)

        assert CODEBASE_ANALYSIS_PROFILE.mission in prompt
        assert "Target: /repo" in prompt
        assert "- **Token budget**: 4000 tokens" in prompt
        assert "- **Remaining**: 4000 tokens" in prompt
        assert "**Fresh analysis.**" in prompt
        assert "- **entry_points**: Main files, entry points, and key modules" in prompt
        assert "1. Start broad: list the root directory" in prompt
        assert "Explore strategically using tools (list_dir, file_read, grep_search)" in prompt
        assert "- The blackboard captures key insights" in prompt
        assert "Current progress: 0 / 4000 tokens (0%)" in prompt
        assert "EXISTING BLACKBOARD CONTENT" not in prompt
        assert "WARNING" not in prompt
        assert prompt.rstrip().endswith("build a comprehensive understanding.")

    def test_board_with_content(self) -> None:
        self.board.update_section("overview", "x" * 4000)
        prompt = generate_system_prompt(self.board, CODEBASE_ANALYSIS_PROFILE, TOOLS)

        assert "**Continuing analysis.**" in prompt
        assert "Current progress: 1000 / 4000 tokens (25%)" in prompt
        assert "## EXISTING BLACKBOARD CONTENT\n\n=== BLACKBOARD ===" in prompt
        assert "## OVERVIEW" in prompt

    def test_includes_history_and_stall_warning(self) -> None:
        prompt = generate_system_prompt(
            self.board,
            CODEBASE_ANALYSIS_PROFILE,
            TOOLS,
            tool_history_summary="\n## YOUR PROGRESS SO FAR (4 tool calls)",
            iterations_since_write=5,
        )
        assert "## YOUR PROGRESS SO FAR (4 tool calls)" in prompt
        assert "🚨 CRITICAL" in prompt

    def test_profile_criteria_and_threshold(self) -> None:
        profile = AnalysisProfile(
            name="custom",
            mission="Audit the API",
            initial_message="Go",
            completion_criteria=["Every endpoint is documented"],
            stall_warning_threshold=1,
        )
        prompt = generate_system_prompt(self.board, profile, TOOLS, iterations_since_write=1)

        assert "- Every endpoint is documented" in prompt
        assert "diminishing returns" not in prompt
        assert "Never go more than 1 iterations without saving findings" in prompt
        assert "⚠️ WARNING" in prompt

    def test_is_deterministic(self) -> None:
        first = generate_system_prompt(self.board, CODEBASE_ANALYSIS_PROFILE, TOOLS, "h", 2)
        second = generate_system_prompt(self.board, CODEBASE_ANALYSIS_PROFILE, TOOLS, "h", 2)
        assert first == second
