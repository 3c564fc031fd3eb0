"""BlackboardAgent — wires the loop, tools, artifacts and session persistence.

:meth:`BlackboardAgent.run` is the pure exploration loop with no disk I/O.
:meth:`BlackboardAgent.analyze` is the full CLI flow: output folder, run,
summary, artifacts and session save.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from bba.agent.events import AgentEvent, CompleteEvent, ErrorEvent, StartEvent
from bba.agent.gate import CompletionGate
from bba.agent.loop import AgentLoop
from bba.agent.profiles import CODEBASE_ANALYSIS_PROFILE, AnalysisProfile
from bba.agent.stats import AgentStats
from bba.agent.summary import generate_summary
from bba.config import AgentSettings
from bba.core.blackboard.blackboard import Blackboard
from bba.core.context.counter_registry import get_counter
from bba.core.interface.client import ModelClient
from bba.output import OutputManager
from bba.tools.executor import ToolExecutor
from bba.utils.telemetry import (
    ATTR_BLACKBOARD_TOKENS,
    ATTR_MAX_ITERATIONS,
    ATTR_MODEL,
    ATTR_PROFILE,
    ATTR_TARGET,
    get_tracer,
)

if TYPE_CHECKING:
    from bba.agent.events import AgentObserver
    from bba.agent.history import ToolCallRecord
    from bba.core.blackboard.backend import BlackboardBackend
    from bba.core.context.counter import TokenCounter
    from bba.core.interface.models import ConversationHistory

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class BlackboardAgent:
    """One analysis of one target path.

    Usage::

        agent = BlackboardAgent("/path/to/project", settings=AgentSettings())
        blackboard = await agent.analyze()
    """

    def __init__(
        self,
        target_path: str | Path,
        *,
        settings: AgentSettings | None = None,
        profile: AnalysisProfile | None = None,
        client: ModelClient | None = None,
        blackboard: Blackboard | None = None,
        observer: AgentObserver | None = None,
        workspace_root: str | Path | None = None,
        backend: BlackboardBackend | None = None,
        counter: TokenCounter | None = None,
    ) -> None:
        self.settings = settings or AgentSettings()
        self.target_path = str(target_path)
        self.profile = profile or CODEBASE_ANALYSIS_PROFILE
        model_config = self.settings.to_model_config()
        self.client = client or ModelClient(model_config)
        self.blackboard = blackboard or Blackboard(
            self.target_path,
            self.settings.blackboard_max_tokens,
            overflow_factor=self.settings.overflow_factor,
        )
        self.observer = observer
        self.backend = backend

        self.output: OutputManager | None = None
        if self.settings.save_output and workspace_root is not None:
            self.output = OutputManager(workspace_root, self.settings.output_dir_name)

        self.stats = AgentStats()
        self.loop = AgentLoop(
            self.client,
            self.blackboard,
            self.profile,
            ToolExecutor(self.target_path, self.blackboard),
            self.stats,
            emit=self._emit,
            max_iterations=self.settings.max_iterations,
            gate=CompletionGate(self.settings.completion_threshold, self.settings.max_completion_nudges),
            counter=counter or get_counter(model_config),
            recent_history_size=self.settings.recent_history_size,
        )

    @property
    def messages(self) -> ConversationHistory:
        """The archived transcript of the run."""
        return self.loop.archive

    @property
    def tool_call_history(self) -> list[ToolCallRecord]:
        return self.loop.dispatcher.records

    def _emit(self, event: AgentEvent) -> None:
        if self.observer is not None:
            self.observer.on_event(event)

    async def analyze(self) -> Blackboard:
        """Run the analysis and persist everything it produced.

        On failure, error artifacts are saved on a best-effort basis, an
        :class:`ErrorEvent` is emitted and the original exception re-raised.
        """
        if self.output is not None:
            self.output.create_output_folder()

        try:
            await self.run()
        except Exception as exc:
            await self._handle_failure(exc)
            raise

        await self.save_artifacts()
        if self.backend is not None:
            await self.backend.save(self.blackboard)
        return self.blackboard

    async def run(self) -> Blackboard:
        """Execute the exploration loop without touching the disk."""
        with _tracer.start_as_current_span("agent.run") as span:
            span.set_attribute(ATTR_TARGET, self.target_path)
            span.set_attribute(ATTR_PROFILE, self.profile.name)
            span.set_attribute(ATTR_MODEL, self.settings.model)
            span.set_attribute(ATTR_MAX_ITERATIONS, self.settings.max_iterations)

            self._emit(
                StartEvent(
                    target_path=self.target_path,
                    tokens=self.blackboard.get_total_tokens(),
                    max_tokens=self.blackboard.max_tokens,
                    analysis_id=self.output.analysis_id if self.output else "no-output",
                )
            )
            logger.info("Starting analysis of %s with profile %s", self.target_path, self.profile.name)

            await self.loop.run()
            self.stats.finalize()
            span.set_attribute(ATTR_BLACKBOARD_TOKENS, self.blackboard.get_total_tokens())

            self._emit(
                CompleteEvent(
                    tokens=self.blackboard.get_total_tokens(),
                    max_tokens=self.blackboard.max_tokens,
                    stats=self.stats,
                    output_path=str(self.output.analysis_path) if self.output else "",
                )
            )
            logger.info(
                "Analysis complete: %d iterations, %d tool calls, %d blackboard tokens",
                self.stats.iterations,
                self.stats.tool_calls,
                self.blackboard.get_total_tokens(),
            )
        return self.blackboard

    async def save_artifacts(self, error: str | None = None) -> None:
        """Write every run artifact; the summary is generated only when *error* is ``None``."""
        if self.output is None:
            return

        summary: str | None = None
        if error is None:
            result = await generate_summary(self.client, self.profile, self.blackboard)
            summary = result.render(self.blackboard)

        self.output.save_conversation(self.messages, self.target_path)
        self.output.save_blackboard(self.blackboard)
        self.output.save_metadata(self.stats, self.blackboard, self.target_path, self.settings.model, error)
        self.output.save_tool_calls(self.tool_call_history)
        if summary is not None:
            self.output.save_summary(summary)

        logger.info("Saved all artifacts to %s", self.output.analysis_path)

    async def _handle_failure(self, exc: Exception) -> None:
        self.stats.ensure_finalized()
        if self.output is not None:
            try:
                await self.save_artifacts(str(exc))
            except Exception:  # noqa: BLE001 - the original failure is what gets raised
                logger.exception("Failed to save error artifacts")
        logger.error("Agent analysis failed: %s", exc)
        self._emit(ErrorEvent(error=str(exc)))
