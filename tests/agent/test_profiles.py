"""Tests for analysis profiles and the profile registry."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from bba.agent.profiles import (
    CODEBASE_ANALYSIS_PROFILE,
    DEFAULT_PROFILE_NAME,
    AnalysisProfile,
    ProfileRegistry,
    build_default_registry,
    interpolate_message,
)
from bba.errors import ConfigError, ProfileNotFoundError


class TestBuiltinProfile:
    def test_codebase_analysis(self) -> None:
        profile = CODEBASE_ANALYSIS_PROFILE
        assert profile.name == "codebase-analysis"
        assert [s.name for s in profile.suggested_sections] == [
            "overview",
            "architecture",
            "entry_points",
            "dependencies",
            "patterns",
            "concerns",
        ]
        assert len(profile.exploration_hints) == 6
        assert profile.completion_criteria is None
        assert profile.stall_warning_threshold == 3

    def test_is_frozen(self) -> None:
        with pytest.raises(ValidationError):
            CODEBASE_ANALYSIS_PROFILE.name = "other"  # type: ignore[misc]


class TestInterpolateMessage:
    def test_replaces_every_occurrence(self) -> None:
        assert interpolate_message("{{a}} and {{a}} {{b}}", {"a": "x", "b": "y"}) == "x and x y"

    def test_initial_message(self) -> None:
        text = interpolate_message(CODEBASE_ANALYSIS_PROFILE.initial_message, {"targetPath": "/repo"})
        assert text.startswith("Please analyze the codebase at: /repo\n")
        assert "{{" not in text


class TestProfileRegistry:
    def test_default_registry(self) -> None:
        registry = build_default_registry()
        assert registry.names() == [DEFAULT_PROFILE_NAME]
        assert DEFAULT_PROFILE_NAME in registry
        assert len(registry) == 1

    def test_require_unknown(self) -> None:
        registry = build_default_registry()
        with pytest.raises(ProfileNotFoundError) as exc_info:
            registry.require("security-audit")
        assert exc_info.value.name == "security-audit"
        assert exc_info.value.available == [DEFAULT_PROFILE_NAME]

    def test_get_missing_returns_none(self) -> None:
        assert ProfileRegistry().get("x") is None

    def test_register_replaces(self) -> None:
        registry = build_default_registry()
        replacement = AnalysisProfile(name=DEFAULT_PROFILE_NAME, mission="m", initial_message="i")
        registry.register(replacement)
        assert registry.require(DEFAULT_PROFILE_NAME).mission == "m"
        assert len(registry) == 1


class TestLoadFile:
    def test_single_mapping_with_aliases(self, tmp_path: Path) -> None:
        path = tmp_path / "profile.yaml"
        path.write_text(
            "name: api-audit\n"
            "mission: Audit the HTTP API\n"
            "initialMessage: Audit {{targetPath}}\n"
            "suggestedSections:\n"
            "  - name: endpoints\n"
            "    description: Every route\n"
            "completionCriteria:\n"
            "  - All routes listed\n"
            "stallWarningThreshold: 2\n"
        )
        registry = build_default_registry()

        loaded = registry.load_file(path)

        assert [p.name for p in loaded] == ["api-audit"]
        profile = registry.require("api-audit")
        assert profile.suggested_sections[0].name == "endpoints"
        assert profile.completion_criteria == ["All routes listed"]
        assert profile.stall_warning_threshold == 2

    def test_profiles_list_and_env_expansion(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BBA_TEST_MISSION", "Map the data model")
        path = tmp_path / "profiles.yaml"
        path.write_text(
            "profiles:\n"
            "  - name: one\n"
            "    mission: ${BBA_TEST_MISSION}\n"
            "    initial_message: go\n"
            "  - name: two\n"
            "    mission: m\n"
            "    initial_message: go\n"
        )
        registry = ProfileRegistry()

        registry.load_file(path)

        assert registry.names() == ["one", "two"]
        assert registry.require("one").mission == "Map the data model"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            ProfileRegistry().load_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("name: [unclosed\n")
        with pytest.raises(ConfigError, match="YAML parse error"):
            ProfileRegistry().load_file(path)

    def test_invalid_profile(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("name: only-a-name\n")
        with pytest.raises(ConfigError, match="Invalid profile"):
            ProfileRegistry().load_file(path)

    def test_wrong_shape(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- strings\n")
        with pytest.raises(ConfigError, match="must hold a mapping"):
            ProfileRegistry().load_file(path)
