"""AgentLoop — the iterate / call model / dispatch tools state machine.

Two message streams are kept:

* the **archive**, every message of the run, saved as ``conversation.json``;
* the **rolling window**, only the most recent exchange, which is all the
  model sees besides the regenerated system prompt.

Everything else the agent learned must already be on the blackboard.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from bba.agent.dispatcher import ToolDispatcher
from bba.agent.events import AgentEvent, IterationEvent, NudgeEvent, ThinkingEvent
from bba.agent.gate import CompletionGate
from bba.agent.history import DEFAULT_RECENT_SIZE, build_tool_history
from bba.agent.profiles import interpolate_message
from bba.agent.prompts import generate_system_prompt
from bba.core.context.counter import EstimatingCounter
from bba.core.interface.models import CanonicalMessage, ConversationHistory
from bba.utils.telemetry import (
    ATTR_BLACKBOARD_TOKENS,
    ATTR_ITERATION,
    ATTR_LOOP_STATE,
    ATTR_TOKENS_REQUEST_ESTIMATE,
    get_tracer,
)

if TYPE_CHECKING:
    from bba.agent.profiles import AnalysisProfile
    from bba.agent.stats import AgentStats
    from bba.core.blackboard.blackboard import Blackboard
    from bba.core.context.counter import TokenCounter
    from bba.core.interface.client import ModelClient
    from bba.tools.executor import ToolExecutor

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_MAX_ITERATIONS = 100

# Finish reasons meaning "the model considers itself done".
_NATURAL_STOP = frozenset({"stop", "end_turn"})
_EMPTY_STOP_TEXT = "(Stopped without further tool calls.)"


class LoopState(str, Enum):
    ITERATING = "iterating"
    AWAITING_TOOL_RESULTS = "awaiting_tool_results"
    NUDGED = "nudged"
    DONE = "done"
    FAILED = "failed"


class AgentLoop:
    """Drives one exploration run until the model stops or the budget runs out.

    ``max_iterations`` is a budget, not an error: reaching it ends the loop
    normally.  Model errors are not retried; they move the loop to
    :attr:`LoopState.FAILED` and propagate.
    """

    def __init__(
        self,
        client: ModelClient,
        blackboard: Blackboard,
        profile: AnalysisProfile,
        executor: ToolExecutor,
        stats: AgentStats,
        *,
        emit: Callable[[AgentEvent], None] | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        gate: CompletionGate | None = None,
        counter: TokenCounter | None = None,
        recent_history_size: int = DEFAULT_RECENT_SIZE,
    ) -> None:
        self.client = client
        self.blackboard = blackboard
        self.profile = profile
        self.executor = executor
        self.stats = stats
        self.max_iterations = max_iterations
        self.gate = gate or CompletionGate()
        self.counter = counter or EstimatingCounter()
        self.recent_history_size = recent_history_size
        self._emit = emit or (lambda _event: None)

        self.tools: list[dict[str, Any]] = executor.all_tools()
        self.dispatcher = ToolDispatcher(executor, stats, self._emit)
        self.state = LoopState.ITERATING
        self.archive = ConversationHistory()
        self.window: list[CanonicalMessage] = []
        self.iterations_since_write = 0

    @property
    def completion_nudges(self) -> int:
        return self.gate.nudges

    async def run(self) -> LoopState:
        """Run iterations until ``done`` or the iteration budget is spent."""
        initial = CanonicalMessage.user(
            interpolate_message(self.profile.initial_message, {"targetPath": self.blackboard.target_path})
        )
        self.archive.append(initial)
        self.window = [initial]
        self.state = LoopState.ITERATING

        while self.state is not LoopState.DONE and self.stats.iterations < self.max_iterations:
            await self.step()

        if self.state is not LoopState.DONE:
            logger.info("Iteration budget exhausted after %d iterations", self.stats.iterations)
        return self.state

    async def step(self) -> None:
        """Execute a single iteration of the loop."""
        self.stats.iterations += 1
        iteration = self.stats.iterations
        logger.info("Agent iteration %d/%d", iteration, self.max_iterations)

        with _tracer.start_as_current_span("agent.iteration") as span:
            span.set_attribute(ATTR_ITERATION, iteration)

            system_prompt = generate_system_prompt(
                self.blackboard,
                self.profile,
                self.tools,
                build_tool_history(
                    self.dispatcher.records, self.dispatcher.compact, self.recent_history_size
                ),
                self.iterations_since_write,
            )
            request = ConversationHistory(messages=[CanonicalMessage.system(system_prompt), *self.window])
            request_tokens = self.counter.count_messages(request)
            span.set_attribute(ATTR_TOKENS_REQUEST_ESTIMATE, request_tokens)

            self._emit(
                IterationEvent(
                    iteration=iteration,
                    max_iterations=self.max_iterations,
                    tokens=self.stats.tokens.model_copy(),
                    request_tokens=request_tokens,
                )
            )

            try:
                response = await self.client.generate(request, tools=self.tools)
            except Exception:
                self.state = LoopState.FAILED
                span.set_attribute(ATTR_LOOP_STATE, self.state.value)
                logger.exception("Model call failed at iteration %d", iteration)
                raise

            self.stats.record_usage(response.usage)
            logger.info(
                "Model response received (finish_reason=%s, input=%d, output=%d)",
                response.finish_reason,
                response.usage.input_tokens,
                response.usage.output_tokens,
            )

            if response.text:
                self._emit(ThinkingEvent(text=response.text))

            if self._is_stopping(response):
                self._handle_stop(response)
            else:
                await self._handle_tool_use(response, iteration)

            span.set_attribute(ATTR_LOOP_STATE, self.state.value)
            span.set_attribute(ATTR_BLACKBOARD_TOKENS, self.blackboard.get_total_tokens())

    def _is_stopping(self, response: CanonicalMessage) -> bool:
        return not response.tool_calls or response.finish_reason in _NATURAL_STOP

    def _handle_stop(self, response: CanonicalMessage) -> None:
        message = self.gate.nudge(self.blackboard)
        if message is None:
            logger.info("Agent completed analysis (no more tool calls)")
            self.archive.append(response)
            self.state = LoopState.DONE
            return

        nudge = CanonicalMessage.user(message)
        self._emit(
            NudgeEvent(nudge=self.gate.nudges, utilization=self.blackboard.utilization, message=message)
        )
        # Unanswered tool calls cannot precede a plain user turn, and providers
        # reject an assistant turn with no content.
        window_copy = CanonicalMessage.assistant(response.text or _EMPTY_STOP_TEXT, **response.metadata)
        self.archive.extend([response, nudge])
        self.window = [window_copy, nudge]
        self.state = LoopState.NUDGED

    async def _handle_tool_use(self, response: CanonicalMessage, iteration: int) -> None:
        self.state = LoopState.AWAITING_TOOL_RESULTS
        result = await self.dispatcher.execute_all(response.tool_calls or [], iteration)

        if result.wrote_to_blackboard:
            self.iterations_since_write = 0
        else:
            self.iterations_since_write += 1

        self.archive.extend([response, *result.messages])
        self.window = [response, *result.messages]
        self.state = LoopState.ITERATING
