"""
Custom exception classes for the agentic chat core.

Two families live here. Tool errors cover registration, validation and execution of tools;
they are raised by registry management calls but never escape ``ToolRegistry.execute``.
Streaming errors cover the backend request/response cycle and always end a run.
Cancellation is deliberately outside the ``StreamingError`` family: the loop treats it as a
silent stop, not a failure.
"""

from typing import Optional


class LLMToolError(Exception):
    """Base exception for all tool-related errors."""

    pass


class ToolLoadError(LLMToolError):
    """Raised when tools cannot be loaded from a provider (e.g. an MCP server)."""

    pass


class ToolRegistrationError(LLMToolError):
    """Raised when there is an error registering a tool."""

    pass


class ToolNotFoundError(LLMToolError):
    """Raised when a requested tool is not found in the registry."""

    pass


class ToolExecutionError(LLMToolError):
    """Raised when a tool fails during execution."""

    pass


class ToolValidationError(LLMToolError):
    """Raised when tool parameters or definition are invalid."""

    pass


class StreamingError(Exception):
    """Base exception for failures of a single backend streaming call."""

    pass


class BackendRequestError(StreamingError):
    """Raised when the backend answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendConnectionError(StreamingError):
    """Raised when the backend cannot be reached or the connection drops mid-stream."""

    pass


class StreamCancelledError(Exception):
    """Raised when a stream is aborted through its cancellation token."""

    pass


class StreamTimeoutError(StreamCancelledError):
    """Raised when a single backend call exceeds its timeout."""

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        super().__init__(message)
        self.timeout = timeout
