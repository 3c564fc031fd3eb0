"""Model configuration for the LiteLLM client."""

import os
from typing import Any

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """Configuration for a specific model/provider combination.

    The ``model`` field uses LiteLLM's naming convention:
    ``provider/model_name`` (e.g. ``anthropic/claude-sonnet-4-5``).
    """

    model: str
    api_key: str | None = None
    api_base: str | None = None
    max_tokens: int = 4096
    extra: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())

    @property
    def provider(self) -> str:
        """Extract the provider prefix from the model string."""
        if "/" in self.model:
            return self.model.split("/", 1)[0]
        return "openai"

    @property
    def api_key_env(self) -> str:
        """Name of the environment variable holding this provider's key."""
        return f"{self.provider.upper()}_API_KEY"

    def resolve_api_key(self) -> str | None:
        """Return the explicit key, or the one found in the environment."""
        return self.api_key or os.environ.get(self.api_key_env)
