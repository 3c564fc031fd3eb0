"""Analysis profiles — what the agent explores and how it reports.

A profile supplies the mission, the opening user message, suggested
blackboard sections, exploration hints, completion criteria and the summary
instructions.  Profiles live in an explicit :class:`ProfileRegistry` that the
caller builds and passes in; there is no module-level registry.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bba.errors import ConfigError, ProfileNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "codebase-analysis"
DEFAULT_STALL_THRESHOLD = 3


class SuggestedSection(BaseModel):
    name: str
    description: str


class AnalysisProfile(BaseModel):
    """Immutable description of one kind of analysis."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    mission: str
    initial_message: str = Field(alias="initialMessage")
    suggested_sections: list[SuggestedSection] = Field(default_factory=list, alias="suggestedSections")
    exploration_hints: list[str] = Field(default_factory=list, alias="explorationHints")
    summary_instructions: str = Field(default="", alias="summaryInstructions")
    completion_criteria: list[str] | None = Field(default=None, alias="completionCriteria")
    stall_warning_threshold: int = Field(
        default=DEFAULT_STALL_THRESHOLD, ge=1, alias="stallWarningThreshold"
    )


CODEBASE_ANALYSIS_PROFILE = AnalysisProfile(
    name=DEFAULT_PROFILE_NAME,
    mission=(
        "Explore and understand a software project systematically.\n"
        "\n"
        "Build a comprehensive understanding by:\n"
        "1. Exploring the file structure and organization\n"
        "2. Identifying entry points and main components\n"
        "3. Understanding the architecture and design patterns\n"
        "4. Noting key dependencies and technologies\n"
        "5. Identifying interesting patterns or potential concerns"
    ),
    initial_message=(
        "Please analyze the codebase at: {{targetPath}}\n"
        "\n"
        "Start by exploring the structure and identifying key components. Use your tools "
        "strategically and save important findings to the blackboard."
    ),
    suggested_sections=[
        SuggestedSection(name="overview", description="High-level summary of the project"),
        SuggestedSection(name="architecture", description="Key architectural patterns and structure"),
        SuggestedSection(name="entry_points", description="Main files, entry points, and key modules"),
        SuggestedSection(
            name="dependencies", description="Important dependencies and external integrations"
        ),
        SuggestedSection(name="patterns", description="Code patterns, conventions, and practices"),
        SuggestedSection(
            name="concerns",
            description="Potential issues, technical debt, or areas needing attention",
        ),
    ],
    exploration_hints=[
        "Start broad: list the root directory to see the overall structure",
        "Check package.json, setup files, or documentation for tech stack info",
        "Identify entry points (main files, index files, route definitions)",
        "Understand how code is organized (by feature, layer, etc.)",
        "Focus on core functionality and main workflows",
        "Note important libraries and their usage patterns",
    ],
    summary_instructions=(
        "Include:\n"
        "1. **Overview**: What is this project and what does it do?\n"
        "2. **Key Findings**: Most important discoveries about the codebase\n"
        "3. **Architecture**: High-level architecture and design patterns\n"
        "4. **Technologies**: Main technologies, frameworks, and dependencies\n"
        "5. **Code Quality**: Observations about code organization and quality\n"
        "6. **Recommendations**: Any suggestions for improvement or areas needing attention\n"
        "\n"
        "Keep it concise but informative. This summary should help someone understand "
        "the project quickly."
    ),
)


def interpolate_message(template: str, variables: dict[str, str]) -> str:
    """Replace every ``{{key}}`` placeholder in *template*."""
    result = template
    for key, value in variables.items():
        result = result.replace("{{" + key + "}}", value)
    return result


class ProfileRegistry:
    """Name-keyed collection of :class:`AnalysisProfile` objects."""

    def __init__(self, profiles: list[AnalysisProfile] | None = None) -> None:
        self._profiles: dict[str, AnalysisProfile] = {}
        for profile in profiles or []:
            self.register(profile)

    def register(self, profile: AnalysisProfile) -> None:
        if profile.name in self._profiles:
            logger.info("Replacing registered profile %s", profile.name)
        self._profiles[profile.name] = profile

    def get(self, name: str) -> AnalysisProfile | None:
        return self._profiles.get(name)

    def require(self, name: str) -> AnalysisProfile:
        """Return profile *name* or raise :class:`ProfileNotFoundError`."""
        profile = self._profiles.get(name)
        if profile is None:
            raise ProfileNotFoundError(name, self.names())
        return profile

    def names(self) -> list[str]:
        return list(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def load_file(self, path: Path) -> list[AnalysisProfile]:
        """Register every profile defined in a YAML file.

        The file holds either a single profile mapping or a ``profiles`` list.
        ``${VAR}`` references are expanded before parsing.

        Raises:
            ConfigError: On read, YAML or validation errors.
        """
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {path}: {exc}") from exc

        try:
            data: Any = yaml.safe_load(os.path.expandvars(raw))
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error in {path}: {exc}") from exc

        if isinstance(data, dict) and "profiles" in data:
            entries = data["profiles"]
        else:
            entries = [data]
        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            raise ConfigError(f"Profile file {path} must hold a mapping or a 'profiles' list")

        try:
            loaded = [AnalysisProfile.model_validate(entry) for entry in entries]
        except ValidationError as exc:
            raise ConfigError(f"Invalid profile in {path}: {exc}") from exc

        for profile in loaded:
            self.register(profile)
        logger.info("Loaded %d profile(s) from %s", len(loaded), path)
        return loaded


def build_default_registry() -> ProfileRegistry:
    """Return a registry holding the built-in profiles."""
    return ProfileRegistry([CODEBASE_ANALYSIS_PROFILE])
