from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from mcp.types import CallToolResult, ImageContent, ListToolsResult, TextContent, Tool as MCPTool

from agentic_chat_lib.agent_core import ToolCall, ToolLoadError, ToolRegistry
from agentic_chat_lib.mcp_wrapper import MCPClientWrapper, render_content

WEATHER_TOOL = MCPTool(
    name="weather",
    description="Current weather for a city.",
    inputSchema={
        "type": "object",
        "properties": {"city": {"type": "string", "description": "City name"}},
        "required": ["city"],
    },
)


@pytest.fixture
def mock_session() -> Any:
    session = AsyncMock()
    session.__aenter__.return_value = session
    session.list_tools = AsyncMock(return_value=ListToolsResult(tools=[WEATHER_TOOL]))
    session.call_tool = AsyncMock(return_value=CallToolResult(content=[TextContent(type="text", text="Sunny, 21°C")]))
    return session


@asynccontextmanager
async def connected(session: Any) -> AsyncIterator[MCPClientWrapper]:
    """Open a wrapper whose stdio transport and client session are mocked out."""
    stdio = AsyncMock()
    stdio.__aenter__.return_value = (AsyncMock(), AsyncMock())
    with patch("agentic_chat_lib.mcp_wrapper.wrapper.stdio_client", MagicMock(return_value=stdio)), patch(
        "agentic_chat_lib.mcp_wrapper.wrapper.ClientSession", return_value=session
    ):
        async with MCPClientWrapper("server", ["--stdio"]) as wrapper:
            yield wrapper


@pytest.mark.asyncio
async def test_session_is_initialized_and_released(mock_session: Any) -> None:
    async with connected(mock_session) as wrapper:
        assert wrapper._session is mock_session
        mock_session.initialize.assert_awaited_once()

    assert wrapper._session is None


@pytest.mark.asyncio
async def test_load_into_requires_connection() -> None:
    with pytest.raises(ToolLoadError):
        await MCPClientWrapper("server", []).load_into(ToolRegistry())


@pytest.mark.asyncio
async def test_load_into_registers_every_tool(mock_session: Any) -> None:
    mock_session.list_tools.return_value = ListToolsResult(
        tools=[
            MCPTool(name="tool1", description="desc1", inputSchema={"type": "object"}),
            MCPTool(name="tool2", description=None, inputSchema={"type": "object"}),
        ]
    )
    registry = MagicMock(spec=ToolRegistry)

    async with connected(mock_session) as wrapper:
        names = await wrapper.load_into(registry)

    assert names == ["tool1", "tool2"]
    first, second = registry.register.call_args_list
    assert first.kwargs["name_or_tool"] == "tool1"
    assert first.kwargs["description"] == "desc1"
    assert second.kwargs["description"] == "Tool tool2 provided by MCP server."


@pytest.mark.asyncio
async def test_failed_registration_skips_only_that_tool(mock_session: Any) -> None:
    mock_session.list_tools.return_value = ListToolsResult(
        tools=[MCPTool(name="bad", inputSchema={"type": "object"}), WEATHER_TOOL]
    )
    registry = MagicMock(spec=ToolRegistry)
    registry.register.side_effect = [ValueError("unsupported schema"), None]

    async with connected(mock_session) as wrapper:
        names = await wrapper.load_into(registry)

    assert names == ["weather"]


@pytest.mark.asyncio
async def test_imported_tool_runs_through_registry(mock_session: Any) -> None:
    registry = ToolRegistry()

    async with connected(mock_session) as wrapper:
        await wrapper.load_into(registry)

        tool_def = registry.get("weather")
        assert tool_def is not None
        assert tool_def.required_parameters == ["city"]

        missing = await registry.execute(ToolCall(name="weather", arguments={}))
        result = await registry.execute(ToolCall(name="weather", arguments={"city": "Lisbon"}))

    assert missing.error == "Missing required parameters: city"
    mock_session.call_tool.assert_awaited_once_with("weather", arguments={"city": "Lisbon"})
    assert result.result == "Sunny, 21°C"


@pytest.mark.asyncio
async def test_server_error_becomes_tool_error(mock_session: Any) -> None:
    mock_session.call_tool.return_value = CallToolResult(
        content=[TextContent(type="text", text="quota exceeded")], isError=True
    )
    registry = ToolRegistry()

    async with connected(mock_session) as wrapper:
        await wrapper.load_into(registry)
        result = await registry.execute(ToolCall(name="weather", arguments={"city": "Lisbon"}))

    assert result.error == "quota exceeded"


@pytest.mark.asyncio
async def test_tool_fails_after_disconnect(mock_session: Any) -> None:
    registry = ToolRegistry()
    async with connected(mock_session) as wrapper:
        await wrapper.load_into(registry)

    result = await registry.execute(ToolCall(name="weather", arguments={"city": "Lisbon"}))

    assert result.error == "Cannot call tool 'weather': MCP session is not active."


def test_render_content() -> None:
    blocks = [
        TextContent(type="text", text="Forecast attached."),
        ImageContent(type="image", data="aGk=", mimeType="image/png"),
    ]

    assert render_content(blocks) == "Forecast attached.\n[Image: image/png]"
