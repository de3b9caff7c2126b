from typing import Any, Callable, List, Literal, Optional

from pydantic import BaseModel, Field

ParameterType = Literal["string", "number", "boolean", "object", "array"]


class ToolParameter(BaseModel):
    """
    Declares a single named argument of a tool.

    Attributes:
        name: Argument name as it appears in the call's argument mapping.
        type: JSON-ish type of the argument.
        description: Human readable explanation shown to the model in the tool catalogue.
        required: Whether the registry rejects calls that omit this argument.
        enum: Optional list of allowed values.
    """

    name: str
    type: ParameterType = "string"
    description: str = ""
    required: bool = False
    enum: Optional[List[str]] = None


class ToolDefinition(BaseModel):
    """
    Represents the definition of a tool that can be registered with the agent.

    Attributes:
        name: The unique name of the tool.
        description: A brief description of what the tool does.
        parameters: Declared parameters. Only ``required`` is enforced at dispatch time.
        func: The callable implementing the tool. May be sync or async; it receives the
              call arguments as keyword arguments.
    """

    name: str
    description: str
    parameters: List[ToolParameter] = Field(default_factory=list)
    func: Callable[..., Any]

    @property
    def required_parameters(self) -> List[str]:
        return [p.name for p in self.parameters if p.required]
