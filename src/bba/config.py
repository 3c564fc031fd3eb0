"""Agent settings and the YAML loader that produces them.

Settings files are plain YAML mappings.  ``${VAR}`` and ``$VAR`` references
are expanded from the environment before parsing, so credentials can stay
out of the file::

    model: anthropic/claude-sonnet-4-5
    api_key: ${ANTHROPIC_API_KEY}
    max_iterations: 60
    blackboard_max_tokens: 6000
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bba.core.blackboard.backend import DEFAULT_SESSIONS_DIR
from bba.core.interface.config import ModelConfig
from bba.errors import ConfigError

DEFAULT_MODEL = "anthropic/claude-sonnet-4-5"
DEFAULT_LOG_FILE = Path.home() / ".blackboard-agent" / "agent.log"


class AgentSettings(BaseModel):
    """Every tunable of an analysis run."""

    model_config = ConfigDict(extra="forbid")

    model: str = DEFAULT_MODEL
    api_key: str | None = None
    api_base: str | None = None
    max_iterations: int = Field(default=100, ge=1)
    max_response_tokens: int = Field(default=4096, ge=1)
    blackboard_max_tokens: int = Field(default=4000, ge=1)
    overflow_factor: float = Field(default=1.2, ge=1.0)
    completion_threshold: float = Field(default=0.65, ge=0.0, le=1.0)
    max_completion_nudges: int = Field(default=3, ge=0)
    recent_history_size: int = Field(default=15, ge=0)
    save_output: bool = True
    output_dir_name: str = ".output"
    sessions_dir: Path = DEFAULT_SESSIONS_DIR
    log_file: Path = DEFAULT_LOG_FILE
    log_level: str = Field(
        default_factory=lambda: os.environ.get("BBA_LOG_LEVEL") or os.environ.get("LOG_LEVEL") or "INFO"
    )

    def to_model_config(self) -> ModelConfig:
        return ModelConfig(
            model=self.model,
            api_key=self.api_key,
            api_base=self.api_base,
            max_tokens=self.max_response_tokens,
        )


class SettingsLoader:
    """Load and validate an :class:`AgentSettings` YAML file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self, **overrides: Any) -> AgentSettings:
        """Read YAML, interpolate env vars, apply non-``None`` *overrides*, validate.

        Raises:
            ConfigError: On read errors, YAML parse errors or validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        try:
            data: Any = yaml.safe_load(os.path.expandvars(raw))
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        return build_settings({**data, **{k: v for k, v in overrides.items() if v is not None}})


def build_settings(values: dict[str, Any]) -> AgentSettings:
    """Validate *values* (ignoring ``None`` entries) into :class:`AgentSettings`."""
    try:
        return AgentSettings.model_validate({k: v for k, v in values.items() if v is not None})
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
