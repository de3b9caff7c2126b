"""Export the exception hierarchy shared by tool dispatch and the streaming transport."""

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

__all__ = [
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
]
