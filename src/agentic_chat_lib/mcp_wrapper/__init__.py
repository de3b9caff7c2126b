"""Import tools from MCP servers into a ToolRegistry."""

from .wrapper import MCPClientWrapper, render_content

__all__ = ["MCPClientWrapper", "render_content"]
