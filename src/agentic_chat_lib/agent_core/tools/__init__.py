from .models import ToolDefinition, ToolParameter, ToolCall, ToolResult, generate_call_id
from .registry import ToolRegistry
from .schema import SchemaValidator, ToolParameterFactory
from .display import describe_tool_call

__all__ = [
    "ToolDefinition",
    "ToolParameter",
    "ToolCall",
    "ToolResult",
    "generate_call_id",
    "ToolRegistry",
    "SchemaValidator",
    "ToolParameterFactory",
    "describe_tool_call",
]
