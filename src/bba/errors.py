"""Shared error types for the blackboard agent.

Tool failures are never raised: they are returned as
:class:`~bba.tools.models.ToolOutcome` values and fed back to the model.
The exceptions below cover everything that must stop a run or the CLI.
"""

from __future__ import annotations


class BlackboardAgentError(Exception):
    """Base error for all blackboard agent failures."""


class BlackboardError(BlackboardAgentError):
    """A blackboard operation could not be completed."""


class BlackboardSeedError(BlackboardError):
    """Seeding a blackboard failed for one or more sections.

    No partially populated blackboard is ever returned alongside this error.
    """

    def __init__(self, failures: list[str]) -> None:
        self.failures = failures
        super().__init__(
            f"Blackboard seed failed for {len(failures)} section(s):\n" + "\n".join(failures)
        )


class ProfileNotFoundError(BlackboardAgentError):
    """Requested analysis profile is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(
            f'Unknown profile "{name}". Available profiles: {", ".join(available) or "(none)"}'
        )


class ConfigError(BlackboardAgentError):
    """A settings or profile file failed parsing or validation."""


class InvalidTargetError(BlackboardAgentError):
    """The target path does not exist or cannot be explored."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid target {path}: {reason}")
