"""Parser for the textual directive protocol the model is taught in its system prompt.

The backend only returns prose, so tool use is negotiated in-band::

    CONTINUE_THINKING: <reasoning, up to a blank line or the first TOOL_CALL>
    TOOL_CALL: {"name": "tool_name", "arguments": {...}}

Everything here is pure: the same text always yields the same directives and clean text
(apart from freshly generated call ids).
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..logger import get_logger
from ..tools.models import ToolCall

logger = get_logger(__name__)

CONTINUE_MARKER = "CONTINUE_THINKING:"
TOOL_CALL_MARKER = "TOOL_CALL:"

_CONTINUE_RE = re.compile(r"CONTINUE_THINKING:[ \t]*(.*?)(?=\n\n|TOOL_CALL:|\Z)", re.DOTALL)
_TOOL_CALL_RE = re.compile(r"TOOL_CALL:\s*")
_STRAY_MARKER_RE = re.compile(r"(?:TOOL_CALL|CONTINUE_THINKING):\s*")
_EXCESS_NEWLINES_RE = re.compile(r"\n\s*\n\s*\n")


@dataclass(frozen=True)
class ToolCallDetection:
    """Tool calls found in a text plus the text with their blocks removed."""

    tool_calls: List[ToolCall] = field(default_factory=list)
    clean_text: str = ""


@dataclass(frozen=True)
class AgenticResponse:
    """Structured view of one completed model turn."""

    should_continue: bool
    reasoning: Optional[str]
    tool_calls: List[ToolCall]
    clean_text: str


def _balanced_object_end(text: str, start: int) -> int:
    """Return the index just past the ``}`` closing the object that opens at ``start``.

    String literals (and escapes inside them) are skipped so braces in argument values do not
    count. Returns -1 when the object is never closed.
    """
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return -1


def _find_tool_call_blocks(text: str) -> List[Tuple[int, int, str]]:
    """Locate ``TOOL_CALL: {...}`` blocks left to right as ``(start, end, json_text)``."""
    blocks = []
    position = 0
    while True:
        match = _TOOL_CALL_RE.search(text, position)
        if match is None:
            break
        brace = match.end()
        if brace >= len(text) or text[brace] != "{":
            position = match.end()
            continue
        end = _balanced_object_end(text, brace)
        if end == -1:
            # Truncated block; the stray marker is removed during cleanup.
            position = match.end()
            continue
        blocks.append((match.start(), end, text[brace:end]))
        position = end
    return blocks


def _tidy(text: str) -> str:
    # Removing a marker can join its neighbours into a new one.
    previous = None
    while previous != text:
        previous, text = text, _STRAY_MARKER_RE.sub("", text)
    text = text.strip()
    return _EXCESS_NEWLINES_RE.sub("\n\n", text).strip()


def detect_tool_calls_in_text(text: str) -> ToolCallDetection:
    """Extract every ``TOOL_CALL`` directive from ``text``.

    Blocks whose JSON does not parse, or that lack a non-empty ``name``, are logged and
    skipped; they are still removed from the clean text.

    Args:
        text: Raw model output (continuation block already removed or not).

    Returns:
        The detected calls in order of appearance and the cleaned text.
    """
    tool_calls: List[ToolCall] = []
    pieces: List[str] = []
    cursor = 0

    for start, end, json_text in _find_tool_call_blocks(text):
        pieces.append(text[cursor:start])
        cursor = end
        try:
            data = json.loads(json_text)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse tool call: {e}. Block: {json_text[:200]}")
            continue

        if not isinstance(data, dict):
            logger.warning(f"Ignoring tool call that is not a JSON object: {json_text[:200]}")
            continue
        name = data.get("name")
        if not isinstance(name, str) or not name:
            logger.warning(f"Ignoring tool call without a name: {json_text[:200]}")
            continue

        arguments = data.get("arguments") or {}
        if not isinstance(arguments, dict):
            logger.warning(f"Tool call '{name}' has non-object arguments; using an empty mapping.")
            arguments = {}
        tool_calls.append(ToolCall(name=name, arguments=arguments))

    pieces.append(text[cursor:])
    clean_text = _tidy("".join(pieces))
    return ToolCallDetection(tool_calls=tool_calls, clean_text=clean_text)


def parse_agentic_response(text: str) -> AgenticResponse:
    """Parse a completed model turn into its continuation flag, reasoning and tool calls.

    Args:
        text: The full accumulated text of one backend call.

    Returns:
        ``should_continue`` is True iff a ``CONTINUE_THINKING`` block is present;
        ``reasoning`` is its trimmed content; ``clean_text`` contains neither marker.
    """
    match = _CONTINUE_RE.search(text)
    should_continue = match is not None
    reasoning = (match.group(1).strip() or None) if match else None

    remainder = text
    if match:
        remainder = text[: match.start()] + text[match.end() :]

    detection = detect_tool_calls_in_text(remainder.strip())
    logger.debug(
        f"Parsed response: continue={should_continue}, tool_calls={len(detection.tool_calls)}, "
        f"clean_length={len(detection.clean_text)}"
    )
    return AgenticResponse(
        should_continue=should_continue,
        reasoning=reasoning,
        tool_calls=detection.tool_calls,
        clean_text=detection.clean_text,
    )
