"""Tests for ``bba profiles`` CLI command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from click.testing import CliRunner

from bba.cli import main

if TYPE_CHECKING:
    from pathlib import Path


class TestProfilesCommand:
    def test_lists_builtin(self) -> None:
        result = CliRunner().invoke(main, ["profiles"])

        assert result.exit_code == 0
        assert "Analysis Profiles" in result.output
        assert "codebase-analysis" in result.output

    def test_with_profile_file(self, tmp_path: Path) -> None:
        f = tmp_path / "profiles.yaml"
        f.write_text("name: api-audit\nmission: Audit routes\ninitial_message: go\n")

        result = CliRunner().invoke(main, ["profiles", "--profile-file", str(f)])

        assert result.exit_code == 0
        assert "api-audit" in result.output

    def test_invalid_profile_file(self, tmp_path: Path) -> None:
        f = tmp_path / "bad.yaml"
        f.write_text("name: only-name\n")

        result = CliRunner().invoke(main, ["profiles", "--profile-file", str(f)])

        assert result.exit_code == 1
        assert "Validation error" in result.output


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
