import inspect
from typing import Any, Annotated, get_args, get_origin

from pydantic import TypeAdapter
from pydantic.fields import FieldInfo

from ...exceptions import ToolValidationError
from ...logger import get_logger
from ..models import ToolParameter
from .schema_validator import SchemaValidator

logger = get_logger(__name__)


class ToolParameterFactory:
    """Turns one annotated function parameter into a ``ToolParameter``."""

    @classmethod
    def build_parameter(cls, param_name: str, param: inspect.Parameter, tool_name: str) -> ToolParameter:
        """Creates the ``ToolParameter`` for a single function parameter.

        Args:
            param_name: The name of the parameter.
            param: The inspect.Parameter object.
            tool_name: The name of the tool for error reporting.

        Returns:
            The parameter declaration, required when the function gives it no default.
        """
        annotation = param.annotation
        description = cls._extract_description(annotation=annotation, param_name=param_name, tool_name=tool_name)
        base_type = get_args(annotation)[0]

        try:
            raw_schema = TypeAdapter(base_type).json_schema()
        except Exception as e:
            msg = f"Parameter '{param_name}' in tool '{tool_name}' has an unsupported type: {e}"
            logger.error(msg)
            raise ToolValidationError(msg) from e

        schema = SchemaValidator.resolve_refs(raw_schema)

        return ToolParameter(
            name=param_name,
            type=SchemaValidator.json_type(schema),
            description=description,
            required=param.default is inspect.Parameter.empty,
            enum=SchemaValidator.enum_values(schema),
        )

    @staticmethod
    def _extract_description(annotation: Any, param_name: str, tool_name: str) -> str:
        """Read the description from ``Annotated[T, Field(description=...)]``.

        Raises:
            ToolValidationError: If the annotation carries no described ``Field``.
        """
        if get_origin(annotation) is Annotated:
            described = [m for m in get_args(annotation)[1:] if isinstance(m, FieldInfo) and m.description]
            if described:
                return described[0].description

        msg = (
            f"Parameter '{param_name}' in tool '{tool_name}' is missing a description. "
            f"Declare it as {param_name}: Annotated[<type>, Field(description='...')]."
        )
        logger.error(msg)
        raise ToolValidationError(msg)
