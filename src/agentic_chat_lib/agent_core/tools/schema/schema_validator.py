from typing import Any, Dict, List, Optional, Set

import jsonref  # type: ignore

from ...exceptions import ToolValidationError
from ...logger import get_logger
from ..models import ToolParameter, ParameterType

logger = get_logger(__name__)

_JSON_TYPE_MAP: Dict[str, ParameterType] = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
    "object": "object",
    "array": "array",
}


class SchemaValidator:
    """
    Helper class for converting JSON schemas into the flat ``ToolParameter`` lists
    the registry works with.
    """

    @staticmethod
    def assert_no_recursive_refs(schema: Dict[str, Any]) -> None:
        """
        Checks if the schema contains recursive references by traversing the graph.
        Raises ToolValidationError if a cycle is detected.

        Args:
            schema: The JSON schema to check.

        Raises:
            ToolValidationError: If a recursive reference is found.
        """
        defs = schema.get("$defs", {}) or schema.get("definitions", {})

        def check(node: Any, path: Set[str]) -> None:
            if isinstance(node, dict):
                if "$ref" in node:
                    ref = node["$ref"]
                    if ref in path:
                        msg = (
                            f"Recursive structure detected: {ref}. "
                            "Recursive structures are not allowed in tool inputs."
                        )
                        logger.error(msg)
                        raise ToolValidationError(msg)

                    # e.g. #/$defs/MyModel
                    if ref.startswith("#"):
                        parts = ref.split("/")
                        if len(parts) >= 3:
                            def_name = parts[-1]
                            if def_name in defs:
                                check(defs[def_name], path | {ref})
                    return

                for v in node.values():
                    check(v, path)
            elif isinstance(node, list):
                for item in node:
                    check(item, path)

        check(schema, set())

    @staticmethod
    def resolve_refs(schema: Dict[str, Any]) -> Dict[str, Any]:
        """Inline every local ``$ref`` and drop the definition tables.

        Args:
            schema: A JSON schema that may contain ``$defs``/``definitions``.

        Returns:
            A plain-dict schema without references.
        """
        SchemaValidator.assert_no_recursive_refs(schema)
        # proxies=False ensures we get a plain dict back, not JsonRef objects
        resolved = jsonref.replace_refs(schema, proxies=False)
        if isinstance(resolved, dict):
            resolved = dict(resolved)
            for key in ("$defs", "definitions", "$schema", "$id"):
                resolved.pop(key, None)
        return resolved

    @staticmethod
    def json_type(schema: Dict[str, Any]) -> ParameterType:
        """Map a property schema onto one of the registry's parameter types.

        ``Optional[X]`` (``anyOf`` with ``null``) maps to ``X``; ``integer`` maps to ``number``.
        Anything that cannot be classified is treated as a string.
        """
        raw = schema.get("type")
        if isinstance(raw, list):
            raw = next((t for t in raw if t != "null"), None)
        if isinstance(raw, str) and raw in _JSON_TYPE_MAP:
            return _JSON_TYPE_MAP[raw]

        for key in ("anyOf", "oneOf"):
            options = schema.get(key)
            if isinstance(options, list):
                non_null = [o for o in options if isinstance(o, dict) and o.get("type") != "null"]
                if len(non_null) == 1:
                    return SchemaValidator.json_type(non_null[0])

        if "properties" in schema:
            return "object"
        if "items" in schema:
            return "array"
        return "string"

    @staticmethod
    def enum_values(schema: Dict[str, Any]) -> Optional[List[str]]:
        """Return enum choices as strings, looking through ``Optional`` wrappers and ``const``."""
        if isinstance(schema.get("enum"), list):
            return [str(v) for v in schema["enum"] if v is not None]
        if "const" in schema:
            return [str(schema["const"])]
        for key in ("anyOf", "oneOf"):
            options = schema.get(key)
            if isinstance(options, list):
                collected: List[str] = []
                for option in options:
                    if isinstance(option, dict) and option.get("type") != "null":
                        values = SchemaValidator.enum_values(option)
                        if values is None:
                            return None
                        collected.extend(values)
                return collected or None
        return None

    @staticmethod
    def parameters_from_schema(schema: Optional[Dict[str, Any]]) -> List[ToolParameter]:
        """Flatten an object schema (e.g. an MCP ``inputSchema``) into parameters.

        Args:
            schema: JSON schema of the tool's argument object. ``None`` means no parameters.

        Returns:
            One ``ToolParameter`` per top-level property, in declaration order.
        """
        if not schema:
            return []

        resolved = SchemaValidator.resolve_refs(schema)
        properties = resolved.get("properties") or {}
        required = set(resolved.get("required") or [])

        parameters = []
        for name, prop in properties.items():
            prop = prop if isinstance(prop, dict) else {}
            parameters.append(
                ToolParameter(
                    name=name,
                    type=SchemaValidator.json_type(prop),
                    description=prop.get("description", ""),
                    required=name in required,
                    enum=SchemaValidator.enum_values(prop),
                )
            )
        return parameters
