"""The agentic loop: stream, parse, execute tools, fold results back, repeat or finalize."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config import AgentConfig
from ..exceptions import BackendConnectionError, BackendRequestError, StreamCancelledError
from ..logger import get_logger
from ..messages import AssistantTurn, ConversationTurn, ThinkingStep, UserTurn
from ..protocol import AgenticResponse, CONTINUE_MARKER, parse_agentic_response
from ..tools.models import ToolCall, ToolResult
from ..tools.registry import ToolRegistry
from ..transport import CancellationToken, ChatTransport
from .callbacks import StreamCallbacks
from .prompts import (
    DEFAULT_REASONING,
    FINAL_ANSWER_INSTRUCTION,
    FORCE_FINAL_ANSWER_PROMPT,
    format_tool_results_for_context,
)

logger = get_logger(__name__)

CONNECTION_ERROR_MESSAGE = (
    "I'm having trouble connecting to the AI service. Please check your internet connection and try again."
)
SERVICE_UNAVAILABLE_MESSAGE = "The AI service is currently unavailable. Please try again in a moment."
GENERIC_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."


@dataclass
class LoopState:
    """Mutable state carried from one iteration of a run to the next.

    Attributes:
        history: Turn list sent on the next backend call.
        iteration: 0-based index of the next backend call.
        tools_enabled: Whether the next response is parsed for directives.
        final_round: Set once the last tool round is done; the completion then carries
                     every call and result of the run.
        thinking_steps: Append-only record of the tool rounds.
    """

    history: List[ConversationTurn]
    tools_enabled: bool = True
    iteration: int = 0
    final_round: bool = False
    thinking_steps: List[ThinkingStep] = field(default_factory=list)

    @property
    def all_tool_calls(self) -> List[ToolCall]:
        return [call for step in self.thinking_steps for call in step.tool_calls]

    @property
    def all_tool_results(self) -> List[ToolResult]:
        return [result for step in self.thinking_steps for result in step.tool_results]


class AgenticLoop:
    """
    Drives one user request to a final answer.

    Each iteration streams a backend response, parses it for ``TOOL_CALL`` and
    ``CONTINUE_THINKING`` directives, executes the requested tools through the registry and
    appends the results to the history for the next call. A run makes at most
    ``config.max_iterations`` backend calls and the last one always has tools disabled.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        transport: ChatTransport,
        config: Optional[AgentConfig] = None,
    ) -> None:
        """Initialize the loop.

        Args:
            registry: Tools available to the model.
            transport: Backend streaming transport.
            config: Iteration bound, timeouts and tool execution mode.
        """
        self.registry = registry
        self.transport = transport
        self.config = config or AgentConfig()

    async def run(
        self,
        history: Sequence[ConversationTurn],
        callbacks: StreamCallbacks,
        cancel_token: Optional[CancellationToken] = None,
        tools_enabled: bool = True,
    ) -> None:
        """Run the loop until the model gives a final answer, the run fails, or it is cancelled.

        Args:
            history: Full turn list including the system prompt and the new user turn.
            callbacks: UI hooks. Exactly one of ``on_complete``/``on_error`` fires unless the
                       run is cancelled, in which case neither does. An exception raised by
                       ``on_complete`` propagates to the caller.
            cancel_token: Shared cancellation signal for every backend call of the run.
            tools_enabled: Whether the first response may request tools.
        """
        token = cancel_token or CancellationToken()
        state = LoopState(history=list(history), tools_enabled=tools_enabled)

        run_timer: Optional[asyncio.TimerHandle] = None
        if self.config.timeout_scope == "run":
            run_timer = token.cancel_after(self.config.stream_timeout)

        final_text: Optional[str] = None
        try:
            while final_text is None:
                final_text = await self._iterate(state, callbacks, token)
        except StreamCancelledError as e:
            logger.info(f"Agentic run stopped without completing: {e}")
            return
        except Exception as e:
            logger.error(f"Agentic run failed: {e}", exc_info=True)
            callbacks.on_error(self._user_facing_error(e))
            return
        finally:
            if run_timer is not None:
                run_timer.cancel()

        # Exceptions from on_complete reach the caller.
        self._finish(state, final_text, callbacks)

    async def _iterate(self, state: LoopState, callbacks: StreamCallbacks, token: CancellationToken) -> Optional[str]:
        """Perform one backend call and its follow-up. Returns the final raw text once the run is done."""
        max_iterations = self.config.max_iterations

        if state.tools_enabled and state.iteration >= max_iterations - 1:
            logger.warning(f"Reached max agentic iterations ({max_iterations}). Forcing final answer.")
            state.history.append(UserTurn(content=FORCE_FINAL_ANSWER_PROMPT))
            state.tools_enabled = False

        if state.iteration > 0 and callbacks.on_iteration_start:
            callbacks.on_iteration_start(state.iteration + 1, len(state.thinking_steps))

        token.raise_if_cancelled()
        call_timeout = self.config.stream_timeout if self.config.timeout_scope == "call" else None
        logger.debug(
            f"Iteration {state.iteration + 1}: streaming {len(state.history)} turn(s), "
            f"tools {'enabled' if state.tools_enabled else 'disabled'}."
        )
        text = await self.transport.stream(
            state.history, on_token=callbacks.on_token, cancel_token=token, timeout=call_timeout
        )

        if state.tools_enabled:
            parsed = parse_agentic_response(text)
            if parsed.tool_calls:
                callbacks.on_token("", parsed.clean_text)
                await self._run_tool_round(state, parsed, callbacks, token)
                return None
            if parsed.clean_text != text:
                # A marker without tool calls; replace the raw text shown so far.
                callbacks.on_token("", parsed.clean_text)

        return text

    async def _run_tool_round(
        self,
        state: LoopState,
        parsed: AgenticResponse,
        callbacks: StreamCallbacks,
        token: CancellationToken,
    ) -> None:
        logger.info(f"Iteration {state.iteration + 1}: executing {len(parsed.tool_calls)} tool call(s).")
        results = await self._execute_tool_calls(parsed.tool_calls, callbacks, token)

        step = ThinkingStep(
            iteration=state.iteration + 1,
            reasoning=parsed.reasoning or DEFAULT_REASONING,
            tool_calls=list(parsed.tool_calls),
            tool_results=results,
        )
        state.thinking_steps.append(step)
        if callbacks.on_thinking_step:
            callbacks.on_thinking_step(step)

        tool_context = format_tool_results_for_context(results)
        next_iteration = state.iteration + 1

        if parsed.should_continue and next_iteration < self.config.max_iterations - 1:
            prefix = f"{CONTINUE_MARKER} {parsed.reasoning}\n\n" if parsed.reasoning else ""
            state.history = [
                *state.history,
                AssistantTurn(content=f"{prefix}{parsed.clean_text}"),
                UserTurn(content=tool_context),
            ]
        else:
            logger.debug("Last tool round; requesting the final answer with tools disabled.")
            state.history = [
                *state.history,
                AssistantTurn(content=parsed.clean_text),
                UserTurn(content=tool_context + FINAL_ANSWER_INSTRUCTION),
            ]
            state.tools_enabled = False
            state.final_round = True

        state.iteration = next_iteration

    async def _execute_tool_calls(
        self,
        tool_calls: Sequence[ToolCall],
        callbacks: StreamCallbacks,
        token: CancellationToken,
    ) -> List[ToolResult]:
        if self.config.parallel_tool_calls:
            token.raise_if_cancelled()
            if callbacks.on_tool_call:
                for call in tool_calls:
                    callbacks.on_tool_call(call)
            results = await self.registry.execute_all(tool_calls)
            if callbacks.on_tool_result:
                for result in results:
                    callbacks.on_tool_result(result)
            return results

        results = []
        for call in tool_calls:
            token.raise_if_cancelled()
            if callbacks.on_tool_call:
                callbacks.on_tool_call(call)
            result = await self.registry.execute(call)
            results.append(result)
            if callbacks.on_tool_result:
                callbacks.on_tool_result(result)
        return results

    @staticmethod
    def _finish(state: LoopState, text: str, callbacks: StreamCallbacks) -> None:
        # The model may echo directives even with tools disabled; never show them.
        final_text = parse_agentic_response(text).clean_text

        if state.final_round:
            callbacks.on_complete(final_text, state.all_tool_calls, state.all_tool_results, state.thinking_steps)
        else:
            callbacks.on_complete(final_text, None, None, state.thinking_steps or None)
        logger.info(f"Agentic run completed after {state.iteration + 1} backend call(s).")

    @staticmethod
    def _user_facing_error(error: Exception) -> str:
        if isinstance(error, BackendConnectionError):
            return CONNECTION_ERROR_MESSAGE
        if isinstance(error, BackendRequestError):
            return SERVICE_UNAVAILABLE_MESSAGE
        return str(error) or GENERIC_ERROR_MESSAGE
