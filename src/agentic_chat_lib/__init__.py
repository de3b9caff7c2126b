"""Agentic chat library - streaming tool-calling orchestration over a free-text chat backend."""

from .agent_core import (
    AgentConfig,
    AgenticLoop,
    StreamCallbacks,
    ConversationHistoryBuilder,
    ChatSession,
    StreamingTransport,
    CancellationToken,
    ToolRegistry,
    ToolDefinition,
    ToolParameter,
    ToolCall,
    ToolResult,
    Message,
    ThinkingStep,
    ConversationTurn,
    ChatConversation,
    parse_agentic_response,
)

__all__ = [
    "AgentConfig",
    "AgenticLoop",
    "StreamCallbacks",
    "ConversationHistoryBuilder",
    "ChatSession",
    "StreamingTransport",
    "CancellationToken",
    "ToolRegistry",
    "ToolDefinition",
    "ToolParameter",
    "ToolCall",
    "ToolResult",
    "Message",
    "ThinkingStep",
    "ConversationTurn",
    "ChatConversation",
    "parse_agentic_response",
]
