"""Generate the final findings summary with one extra model call."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from bba.core.interface.models import CanonicalMessage, ConversationHistory

if TYPE_CHECKING:
    from bba.agent.profiles import AnalysisProfile
    from bba.core.blackboard.blackboard import Blackboard
    from bba.core.interface.client import ModelClient

logger = logging.getLogger(__name__)


class SummaryResult(BaseModel):
    """Either the generated summary text or the error that prevented it."""

    text: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def render(self, blackboard: Blackboard) -> str:
        """Return the summary, or a fallback document built from the blackboard."""
        if self.error is None:
            return self.text or ""
        return (
            f"# Analysis Summary\n\n_Summary generation failed: {self.error}_\n\n"
            f"{blackboard.to_markdown()}"
        )


def build_summary_prompt(profile: AnalysisProfile, blackboard: Blackboard) -> str:
    return (
        "Based on the analysis findings below, provide a comprehensive summary in markdown format.\n\n"
        f"{profile.summary_instructions}\n\n"
        "Here are the findings (from the blackboard):\n\n"
        f"{blackboard.get_all_sections_for_context()}"
    )


async def generate_summary(
    client: ModelClient,
    profile: AnalysisProfile,
    blackboard: Blackboard,
) -> SummaryResult:
    """Ask the model for a Markdown summary; failures become an error result."""
    history = ConversationHistory(messages=[CanonicalMessage.user(build_summary_prompt(profile, blackboard))])
    try:
        response = await client.generate(history)
    except Exception as exc:  # noqa: BLE001 - summary failure falls back to the blackboard
        logger.error("Failed to generate summary: %s", exc)
        return SummaryResult(error=str(exc))
    return SummaryResult(text=response.text)
