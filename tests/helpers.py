"""Test doubles shared by the test modules: a scripted backend and a callback recorder."""

import inspect
import json
from typing import Any, Callable, List, Optional, Sequence, Union

from agentic_chat_lib.agent_core import (
    CancellationToken,
    ConversationTurn,
    StreamCallbacks,
    ThinkingStep,
    ToolCall,
    ToolResult,
)

ScriptedResponse = Union[str, BaseException, Callable[..., Any]]


class ScriptedTransport:
    """
    A ``ChatTransport`` that replays canned responses instead of talking to a backend.

    Each entry is either the full response text, an exception to raise, or a callable
    ``(turns, cancel_token)`` returning one of those (or an awaitable of one).
    Every request's turns and timeout are recorded for assertions.
    """

    def __init__(self, responses: Sequence[ScriptedResponse], chunk_size: int = 7) -> None:
        self.responses = list(responses)
        self.chunk_size = chunk_size
        self.requests: List[List[ConversationTurn]] = []
        self.timeouts: List[Optional[float]] = []

    async def stream(
        self,
        turns: Sequence[ConversationTurn],
        *,
        on_token: Optional[Callable[[str, str], None]] = None,
        cancel_token: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
    ) -> str:
        self.requests.append(list(turns))
        self.timeouts.append(timeout)
        if not self.responses:
            raise AssertionError("Unexpected backend call: no scripted response left.")

        response = self.responses.pop(0)
        if callable(response) and not isinstance(response, BaseException):
            response = response(turns, cancel_token)
            if inspect.isawaitable(response):
                response = await response
        if isinstance(response, BaseException):
            raise response
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        accumulated = ""
        for i in range(0, len(response), self.chunk_size):
            delta = response[i : i + self.chunk_size]
            accumulated += delta
            if on_token:
                on_token(delta, accumulated)
        return accumulated


class CallbackRecorder:
    """Collects every callback invocation of a run, plus a flat event log to check ordering."""

    def __init__(self) -> None:
        self.tokens: List[tuple] = []
        self.completions: List[tuple] = []
        self.errors: List[str] = []
        self.tool_calls: List[ToolCall] = []
        self.tool_results: List[ToolResult] = []
        self.thinking_steps: List[ThinkingStep] = []
        self.iterations: List[tuple] = []
        self.events: List[str] = []

    @property
    def displayed_text(self) -> str:
        return self.tokens[-1][1] if self.tokens else ""

    def callbacks(self) -> StreamCallbacks:
        def on_token(delta: str, full_text: str) -> None:
            self.tokens.append((delta, full_text))

        def on_complete(text: str, calls: Any, results: Any, steps: Any) -> None:
            self.completions.append((text, calls, results, steps))
            self.events.append("complete")

        def on_error(message: str) -> None:
            self.errors.append(message)
            self.events.append("error")

        def on_tool_call(call: ToolCall) -> None:
            self.tool_calls.append(call)
            self.events.append(f"call:{call.name}")

        def on_tool_result(result: ToolResult) -> None:
            self.tool_results.append(result)
            self.events.append(f"result:{result.name}")

        def on_thinking_step(step: ThinkingStep) -> None:
            self.thinking_steps.append(step)
            self.events.append(f"step:{step.iteration}")

        def on_iteration_start(iteration: int, steps: int) -> None:
            self.iterations.append((iteration, steps))
            self.events.append(f"iteration:{iteration}")

        return StreamCallbacks(
            on_token=on_token,
            on_complete=on_complete,
            on_error=on_error,
            on_tool_call=on_tool_call,
            on_tool_result=on_tool_result,
            on_thinking_step=on_thinking_step,
            on_iteration_start=on_iteration_start,
        )


def tool_call_text(name: str, **arguments: Any) -> str:
    return f"TOOL_CALL: {json.dumps({'name': name, 'arguments': arguments})}"
