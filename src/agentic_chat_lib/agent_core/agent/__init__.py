"""The agentic loop and the conversation plumbing around it."""

from .callbacks import StreamCallbacks
from .history import ConversationHistoryBuilder
from .loop import AgenticLoop, LoopState
from .prompts import DEFAULT_SYSTEM_PROMPT, describe_tools_for_prompt, format_tool_results_for_context
from .session import ChatSession

__all__ = [
    "StreamCallbacks",
    "ConversationHistoryBuilder",
    "AgenticLoop",
    "LoopState",
    "DEFAULT_SYSTEM_PROMPT",
    "describe_tools_for_prompt",
    "format_tool_results_for_context",
    "ChatSession",
]
