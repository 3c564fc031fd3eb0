"""Completion gate that pushes back on an agent that stops with a mostly empty blackboard."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bba.core.blackboard.blackboard import Blackboard

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_THRESHOLD = 0.65
DEFAULT_MAX_NUDGES = 3


class CompletionGate:
    """Decides whether a stop request is accepted or answered with a nudge.

    A nudge is issued while blackboard utilization is below ``threshold``
    and fewer than ``max_nudges`` nudges have been issued in this run.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_COMPLETION_THRESHOLD,
        max_nudges: int = DEFAULT_MAX_NUDGES,
    ) -> None:
        self.threshold = threshold
        self.max_nudges = max_nudges
        self.nudges = 0

    def should_nudge(self, blackboard: Blackboard) -> bool:
        return blackboard.utilization < self.threshold and self.nudges < self.max_nudges

    def nudge(self, blackboard: Blackboard) -> str | None:
        """Return the nudge message and count it, or ``None`` if the stop is accepted."""
        if not self.should_nudge(blackboard):
            return None

        self.nudges += 1
        utilization = blackboard.utilization
        logger.info(
            "Completion gate: nudging agent to continue (utilization=%.2f, nudge=%d/%d)",
            utilization,
            self.nudges,
            self.max_nudges,
        )
        return (
            f"Your blackboard is only {round(utilization * 100)}% utilized with "
            f"{blackboard.get_remaining_tokens()} tokens remaining. There is likely more to "
            "discover. Continue exploring and saving findings."
        )
