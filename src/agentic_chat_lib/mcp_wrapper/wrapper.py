"""Expose the tools of an MCP server (spoken to over stdio) as ordinary registry entries."""

from contextlib import AsyncExitStack
from types import TracebackType
from typing import Any, Callable, Awaitable, Dict, List, Optional, Sequence, Type

from mcp import ClientSession
from mcp.client.stdio import stdio_client, StdioServerParameters
from mcp.types import Tool as MCPTool

from agentic_chat_lib.agent_core.exceptions import ToolLoadError
from agentic_chat_lib.agent_core.logger import get_logger
from agentic_chat_lib.agent_core.tools import ToolRegistry

logger = get_logger(__name__)

__all__ = ["MCPClientWrapper", "render_content"]

_EMPTY_OBJECT_SCHEMA: Dict[str, Any] = {"type": "object", "properties": {}}


def render_content(blocks: Sequence[Any]) -> str:
    """Flatten MCP content blocks into the plain text handed back to the model.

    Text blocks are kept verbatim; images and embedded resources are replaced by a short
    placeholder naming their MIME type or URI.
    """
    rendered = []
    for block in blocks:
        kind = getattr(block, "type", None)
        if kind == "text":
            rendered.append(block.text)
        elif kind == "image":
            rendered.append(f"[Image: {block.mimeType}]")
        elif kind == "resource":
            rendered.append(f"[Resource: {block.resource.uri}]")
        else:
            rendered.append(f"[Unsupported MCP content: {kind}]")
    return "\n".join(rendered)


class MCPClientWrapper:
    """
    Spawns an MCP server process and imports its tools into a ``ToolRegistry``.

    Use it as an async context manager; the imported executors only work while the
    session is open::

        async with MCPClientWrapper("npx", ["-y", "@modelcontextprotocol/server-everything"]) as mcp:
            await mcp.load_into(registry)
            await loop.run(history, callbacks)
    """

    def __init__(self, command: str, args: List[str], env: Optional[Dict[str, str]] = None) -> None:
        """
        Args:
            command: Executable that starts the server.
            args: Arguments for the executable.
            env: Environment for the server process; inherits the default environment when None.
        """
        self._server_params = StdioServerParameters(command=command, args=args, env=env)
        self._session: Optional[ClientSession] = None
        self._stack = AsyncExitStack()

    async def __aenter__(self) -> "MCPClientWrapper":
        logger.debug(f"Starting MCP server: {self._server_params.command} {' '.join(self._server_params.args)}")
        read_stream, write_stream = await self._stack.enter_async_context(stdio_client(self._server_params))
        session = await self._stack.enter_async_context(ClientSession(read_stream, write_stream))
        await session.initialize()
        self._session = session
        logger.info("Connected to MCP server.")
        return self

    async def __aexit__(
        self, exc_type: Optional[Type[BaseException]], exc_val: Optional[BaseException], exc_tb: Optional[TracebackType]
    ) -> None:
        await self._stack.aclose()
        self._session = None
        logger.info("Disconnected from MCP server.")

    async def load_into(self, registry: ToolRegistry) -> List[str]:
        """Register every tool the server advertises.

        A server tool replaces a registry entry of the same name. A tool whose schema cannot
        be converted is logged and skipped; the others are still imported.

        Args:
            registry: Destination registry.

        Returns:
            Names of the tools that were imported.

        Raises:
            ToolLoadError: If called outside the ``async with`` block.
        """
        if self._session is None:
            raise ToolLoadError("MCP Client is not connected. Use 'async with'.")

        listing = await self._session.list_tools()
        logger.info(f"MCP server advertises {len(listing.tools)} tool(s).")

        imported = []
        for tool in listing.tools:
            try:
                self._import_tool(registry, tool)
            except Exception as e:
                logger.error(f"Skipping MCP tool '{tool.name}': {e}")
                continue
            imported.append(tool.name)
        return imported

    def _import_tool(self, registry: ToolRegistry, tool: MCPTool) -> None:
        description = tool.description or f"Tool {tool.name} provided by MCP server."
        registry.register(
            name_or_tool=tool.name,
            description=description,
            func=self._make_executor(tool.name, description),
            parameters=tool.inputSchema or _EMPTY_OBJECT_SCHEMA,
        )

    def _make_executor(self, tool_name: str, description: str) -> Callable[..., Awaitable[str]]:
        async def call_remote_tool(**arguments: Any) -> str:
            if self._session is None:
                raise RuntimeError(f"Cannot call tool '{tool_name}': MCP session is not active.")

            logger.debug(f"Forwarding '{tool_name}' to MCP server with {arguments}")
            outcome = await self._session.call_tool(tool_name, arguments=arguments)
            if outcome.isError:
                raise RuntimeError(render_content(outcome.content) or f"MCP tool '{tool_name}' reported an error.")
            return render_content(outcome.content) if outcome.content else "Success"

        call_remote_tool.__name__ = tool_name
        call_remote_tool.__doc__ = description
        return call_remote_tool
