"""Tool registry: the name -> capability table and its validated dispatcher."""

import asyncio
import inspect
import threading
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Union

from ..models import ToolCall, ToolDefinition, ToolParameter, ToolResult
from ..schema import SchemaValidator, ToolParameterFactory
from ...exceptions import ToolExecutionError, ToolNotFoundError, ToolRegistrationError, ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)

ParametersSpec = Union[Sequence[ToolParameter], Dict[str, Any]]


class ToolRegistry:
    """
    A central registry to manage and execute all tools available to the agent.

    The registry is an ordinary value handed to the agentic loop and the history builder,
    so providers (built-in tool sets, MCP imports) can add tools at any time. Registering a
    name twice replaces the earlier entry.

    ``execute`` is a total function: unknown tools, missing required arguments, executor
    exceptions and timeouts all come back as a ``ToolResult`` with ``error`` set.
    """

    def __init__(self, tool_timeout: Optional[float] = 180.0) -> None:
        """Initialize the ToolRegistry.

        Args:
            tool_timeout: Maximum seconds a single executor may run. ``None`` disables the limit.
        """
        self.tool_timeout = tool_timeout
        self._tools: Dict[str, ToolDefinition] = {}
        # Sync tools run in worker threads and may register or unregister tools themselves.
        self._lock = threading.RLock()

    def register(
        self,
        name_or_tool: Union[str, ToolDefinition, Callable],
        description: Optional[str] = None,
        func: Optional[Callable] = None,
        parameters: Optional[ParametersSpec] = None,
    ) -> ToolDefinition:
        """
        Register a tool, replacing any tool already registered under the same name.

        A tool can be given as a ready ``ToolDefinition``, as individual components
        (name, description, function, parameters), or as a bare function whose parameter
        list is generated from its signature.

        Args:
            name_or_tool: Either a `ToolDefinition` object, the name of the tool (str), or a Callable.
            description: What the tool does. Required if `name_or_tool` is a string and parameters are provided.
            func: The callable implementing the tool. Required if `name_or_tool` is a string.
            parameters: A list of `ToolParameter` or an object JSON schema. If None, inferred from `func`.

        Returns:
            The definition that was stored.

        Raises:
            ToolRegistrationError: If individual arguments are provided but some are missing.
            ToolValidationError: If a definition has to be generated and the function lacks docs.
        """
        if isinstance(name_or_tool, ToolDefinition):
            tool = name_or_tool
        elif callable(name_or_tool):
            tool = self._generate_tool_definition(name_or_tool, description=description)
        else:
            if func is None:
                raise ToolRegistrationError("If passing name as string, func is required.")

            if parameters is None:
                tool = self._generate_tool_definition(func, name=name_or_tool, description=description)
            else:
                if description is None:
                    raise ToolRegistrationError("If passing name and parameters, description is required.")
                tool = ToolDefinition(
                    name=name_or_tool,
                    description=description,
                    func=func,
                    parameters=self._coerce_parameters(parameters),
                )

        with self._lock:
            replaced = tool.name in self._tools
            self._tools[tool.name] = tool

        if replaced:
            logger.info(f"Replaced existing tool: '{tool.name}'")
        else:
            logger.info(f"Successfully registered tool: '{tool.name}'")
        return tool

    def unregister(self, tool_name: str) -> None:
        """Unregister a tool from the registry.

        Args:
            tool_name: The name of the tool to remove.

        Raises:
            ToolNotFoundError: If the tool does not exist in the registry.
        """
        with self._lock:
            if tool_name not in self._tools:
                raise ToolNotFoundError(f"Tool '{tool_name}' not found in the registry.")
            del self._tools[tool_name]
        logger.info(f"Successfully unregistered tool: '{tool_name}'")

    def tool(self, func: Callable) -> Callable:
        """A decorator to turn a function into a tool.

        Args:
            func: The function to decorate.

        Returns:
            The original function, after registering it as a tool.
        """
        self.register(func)
        return func

    def get(self, name: str) -> Optional[ToolDefinition]:
        with self._lock:
            return self._tools.get(name)

    def list(self) -> List[ToolDefinition]:
        """All registered tools in registration order."""
        with self._lock:
            return list(self._tools.values())

    @property
    def names(self) -> List[str]:
        with self._lock:
            return list(self._tools.keys())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._tools

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self.list())

    async def execute(self, call: ToolCall) -> ToolResult:
        """Execute a single tool call.

        Args:
            call: The call to dispatch.

        Returns:
            A ``ToolResult`` mirroring the call's id and name. This method never raises for
            tool-level failures.
        """
        tool = self.get(call.name)
        if tool is None:
            msg = f"Tool '{call.name}' not found"
            logger.warning(msg)
            return ToolResult.failure(call, msg)

        missing = [name for name in tool.required_parameters if name not in call.arguments]
        if missing:
            msg = f"Missing required parameters: {', '.join(missing)}"
            logger.warning(f"Rejected call to '{call.name}': {msg}")
            return ToolResult.failure(call, msg)

        try:
            logger.info(f"Executing tool '{call.name}' (ID: {call.id})...")
            result = await self._execute_tool(tool.func, call.arguments)
        except Exception as exc:
            msg = str(exc) or "Unknown error occurred"
            logger.warning(f"Tool '{call.name}' failed: {msg} ({type(exc).__name__})")
            return ToolResult.failure(call, msg)

        logger.info(f"Tool '{call.name}' executed successfully.")
        return ToolResult.success(call, result)

    async def execute_all(self, calls: Sequence[ToolCall]) -> List[ToolResult]:
        """Execute a batch of calls concurrently; results come back in call order."""
        if not calls:
            return []
        return list(await asyncio.gather(*(self.execute(call) for call in calls)))

    async def _execute_tool(self, tool_function: Callable[..., Any], function_args: Dict[str, Any]) -> Any:
        """Execute the tool function, handling async/sync and timeouts.

        Args:
            tool_function: The callable to execute.
            function_args: The arguments to pass to the function.

        Returns:
            The result of the function execution.

        Raises:
            ToolExecutionError: If execution times out.
        """
        try:
            if inspect.iscoroutinefunction(tool_function):
                return await asyncio.wait_for(tool_function(**function_args), timeout=self.tool_timeout)

            result = await asyncio.wait_for(
                asyncio.to_thread(tool_function, **function_args),
                timeout=self.tool_timeout,
            )
            # Callables that return awaitables (e.g. functools.partial over a coroutine function)
            if inspect.isawaitable(result):
                result = await asyncio.wait_for(result, timeout=self.tool_timeout)
            return result

        except asyncio.TimeoutError as exc:
            msg = f"Tool execution timed out after {self.tool_timeout} seconds."
            raise ToolExecutionError(msg) from exc

    @staticmethod
    def _coerce_parameters(parameters: ParametersSpec) -> List[ToolParameter]:
        if isinstance(parameters, dict):
            return SchemaValidator.parameters_from_schema(parameters)
        return [p if isinstance(p, ToolParameter) else ToolParameter.model_validate(p) for p in parameters]

    def _generate_tool_definition(
        self, func: Callable, name: Optional[str] = None, description: Optional[str] = None
    ) -> ToolDefinition:
        """Generate a ToolDefinition from a callable function.

        Args:
            func: The function to generate a definition for.
            name: Optional name override for the tool.
            description: Optional description override for the tool.

        Returns:
            A ToolDefinition object containing the tool's metadata and parameters.

        Raises:
            ToolValidationError: If the function is missing a docstring or parameter descriptions.
        """
        tool_name = name or func.__name__
        if description is None:
            description = self._get_docstring_from_func(func, tool_name)

        parameters = []
        for param_name, param in inspect.signature(func).parameters.items():
            if param_name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            parameters.append(ToolParameterFactory.build_parameter(param_name, param, tool_name))

        return ToolDefinition(name=tool_name, description=description, func=func, parameters=parameters)

    @staticmethod
    def _get_docstring_from_func(func: Callable, tool_name: str) -> str:
        doc = inspect.getdoc(func)
        if not doc:
            msg = f"Tool '{tool_name}' missing docstring. LLMs need a description of what the tool does."
            logger.error(msg)
            raise ToolValidationError(msg)
        return doc
