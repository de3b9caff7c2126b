"""Callback contract between the agentic loop and the UI layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from ..messages import ThinkingStep
from ..tools.models import ToolCall, ToolResult

CompleteCallback = Callable[
    [str, Optional[List[ToolCall]], Optional[List[ToolResult]], Optional[List[ThinkingStep]]], None
]


@dataclass(frozen=True)
class StreamCallbacks:
    """
    Hooks invoked by ``AgenticLoop.run``.

    Attributes:
        on_token: ``(delta, full_text)`` for every streamed fragment. A call with an empty
                  delta replaces the displayed text with a cleaned version.
        on_complete: ``(text, tool_calls, tool_results, thinking_steps)``; always the last
                     callback of a successful run.
        on_error: User-facing message when the run fails. Not called on cancellation.
        on_tool_call: Before a tool call executes.
        on_tool_result: After a tool call finished.
        on_thinking_step: After a tool round was recorded.
        on_iteration_start: ``(iteration_number, steps_so_far)`` before every call after the first.
    """

    on_token: Callable[[str, str], None]
    on_complete: CompleteCallback
    on_error: Callable[[str], None]
    on_tool_call: Optional[Callable[[ToolCall], None]] = None
    on_tool_result: Optional[Callable[[ToolResult], None]] = None
    on_thinking_step: Optional[Callable[[ThinkingStep], None]] = None
    on_iteration_start: Optional[Callable[[int, int], None]] = None
