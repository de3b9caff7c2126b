"""Extraction of in-band agent directives from free-text model output."""

from .parser import (
    AgenticResponse,
    ToolCallDetection,
    CONTINUE_MARKER,
    TOOL_CALL_MARKER,
    parse_agentic_response,
    detect_tool_calls_in_text,
)

__all__ = [
    "AgenticResponse",
    "ToolCallDetection",
    "CONTINUE_MARKER",
    "TOOL_CALL_MARKER",
    "parse_agentic_response",
    "detect_tool_calls_in_text",
]
