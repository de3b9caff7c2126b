"""Tool-related data models."""

from .models import ToolDefinition, ToolParameter, ParameterType
from .tool_call import ToolCall, ToolResult, generate_call_id

__all__ = ["ToolDefinition", "ToolParameter", "ParameterType", "ToolCall", "ToolResult", "generate_call_id"]
