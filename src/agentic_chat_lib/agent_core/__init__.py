"""Public exports for the agentic chat core."""

from .config import AgentConfig
from .exceptions import (
    LLMToolError,
    ToolRegistrationError,
    ToolNotFoundError,
    ToolExecutionError,
    ToolValidationError,
    ToolLoadError,
    StreamingError,
    BackendRequestError,
    BackendConnectionError,
    StreamCancelledError,
    StreamTimeoutError,
)
from .logger import get_logger, setup_logging
from .messages import ConversationTurn, SystemTurn, UserTurn, AssistantTurn, Message, ThinkingStep
from .tools import (
    ToolDefinition,
    ToolParameter,
    ToolCall,
    ToolResult,
    ToolRegistry,
    SchemaValidator,
    describe_tool_call,
)
from .protocol import AgenticResponse, parse_agentic_response
from .transport import CancellationToken, ChatTransport, StreamDecoder, StreamingTransport
from .conversations import (
    ChatConversation,
    ConversationStore,
    InMemoryConversationStore,
    JsonFileConversationStore,
    generate_chat_title,
)
from .agent import (
    AgenticLoop,
    StreamCallbacks,
    ConversationHistoryBuilder,
    ChatSession,
    format_tool_results_for_context,
    describe_tools_for_prompt,
)

__all__ = [
    "AgentConfig",
    "LLMToolError",
    "ToolRegistrationError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolValidationError",
    "ToolLoadError",
    "StreamingError",
    "BackendRequestError",
    "BackendConnectionError",
    "StreamCancelledError",
    "StreamTimeoutError",
    "get_logger",
    "setup_logging",
    "ConversationTurn",
    "SystemTurn",
    "UserTurn",
    "AssistantTurn",
    "Message",
    "ThinkingStep",
    "ToolDefinition",
    "ToolParameter",
    "ToolCall",
    "ToolResult",
    "ToolRegistry",
    "SchemaValidator",
    "describe_tool_call",
    "AgenticResponse",
    "parse_agentic_response",
    "CancellationToken",
    "ChatTransport",
    "StreamDecoder",
    "StreamingTransport",
    "ChatConversation",
    "ConversationStore",
    "InMemoryConversationStore",
    "JsonFileConversationStore",
    "generate_chat_title",
    "AgenticLoop",
    "StreamCallbacks",
    "ConversationHistoryBuilder",
    "ChatSession",
    "format_tool_results_for_context",
    "describe_tools_for_prompt",
]
