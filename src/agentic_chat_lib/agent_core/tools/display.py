"""User-facing one-line descriptions of tool calls, for progress indicators in chat UIs."""

import json
from typing import Any, Callable, Dict, Mapping, Optional

from .models import ToolCall

CallDescriber = Callable[[ToolCall], str]


def format_tool_name(tool_name: str) -> str:
    """``get_current_time`` -> ``Get Current Time``."""
    return " ".join(word[:1].upper() + word[1:] for word in tool_name.split("_") if word)


def format_arguments(arguments: Mapping[str, Any]) -> str:
    parts = []
    for key, value in arguments.items():
        if value is None or value == "":
            continue
        if isinstance(value, str):
            formatted = f'"{value}"'
        elif isinstance(value, (dict, list)):
            formatted = json.dumps(value, ensure_ascii=False)
        else:
            formatted = str(value)
        parts.append(f"{key.replace('_', ' ')}: {formatted}")
    return ", ".join(parts)


def describe_tool_call(call: ToolCall, describers: Optional[Dict[str, CallDescriber]] = None) -> str:
    """Return a short human readable line for a tool call.

    Args:
        call: The call being executed.
        describers: Optional per-tool overrides keyed by tool name.

    Returns:
        The override's text if one is registered for ``call.name``, otherwise a generic
        ``⚙️ Tool Name: arg: value`` line.
    """
    if describers and call.name in describers:
        return describers[call.name](call)

    args = format_arguments(call.arguments)
    if args:
        return f"⚙️ {format_tool_name(call.name)}: {args}"
    return f"⚙️ Using {format_tool_name(call.name)}"
