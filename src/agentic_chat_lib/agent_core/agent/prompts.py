"""Prompt text: the system persona, the tool catalogue and the synthetic turns of the loop.

The tool catalogue is the only thing that teaches the model the ``TOOL_CALL`` /
``CONTINUE_THINKING`` grammar; the backend enforces no schema.
"""

import json
from typing import Iterable, Sequence

from ..tools.models import ToolDefinition, ToolResult

DEFAULT_SYSTEM_PROMPT = """You are a knowledgeable, friendly assistant. Answer accurately and say so when you are unsure.

CRITICAL INSTRUCTIONS - WHEN TO USE TOOLS:

1. Use a tool whenever it can give you authentic or current information you do not already have
   (reference material, the current time, calculations, the user's location or saved preferences).
2. Do NOT make up facts from memory when a tool can verify them.

## DECOMPOSE COMPLEX QUERIES

When a user asks a question with several distinct topics, break it into separate, focused tool calls
instead of a single broad one. Keep each query short and specific, and call independent tools in the
same iteration.

## AGENTIC WORKFLOW - MULTI-STEP REASONING

1. Identify every topic that needs research.
2. Call tools to gather information; use one tool's result to inform the next call if needed.
3. When you need another round after seeing the results, start your response with
   "CONTINUE_THINKING: <your reasoning>" followed by your tool calls.
4. When you have everything you need, give the complete answer without the CONTINUE_THINKING marker.

After receiving tool results, decide whether you have enough information. If not, continue with more
tool calls. If yes, provide your final answer."""

DEFAULT_REASONING = "Gathering information..."

FORCE_FINAL_ANSWER_PROMPT = (
    "You have reached the maximum number of research iterations. "
    "Please provide your final answer now based on all the information you've gathered."
)

FINAL_ANSWER_INSTRUCTION = "\n\nPlease provide your final, comprehensive answer now."


def describe_tools_for_prompt(tools: Sequence[ToolDefinition]) -> str:
    """Render the tool catalogue appended to the system prompt.

    Args:
        tools: Registered tools, in registration order.

    Returns:
        A markdown catalogue followed by the usage protocol and worked examples, or an
        empty string when no tools are registered.
    """
    if not tools:
        return ""

    lines = [
        "",
        "",
        "## AVAILABLE TOOLS",
        "",
        "You have access to the following tools that you can use to help users:",
        "",
    ]
    for tool in tools:
        lines.append(f"### {tool.name}")
        lines.append(tool.description)
        lines.append("")
        lines.append("**Parameters:**")
        if not tool.parameters:
            lines.append("- (none)")
        for param in tool.parameters:
            required = "**[REQUIRED]**" if param.required else "[optional]"
            choices = f" (choices: {', '.join(param.enum)})" if param.enum else ""
            lines.append(f"- **{param.name}** {required}: {param.description}{choices}")
        lines.append("")

    lines.extend(
        [
            "## HOW TO USE TOOLS",
            "",
            "When you need to use a tool, respond with EXACTLY this format:",
            "",
            'TOOL_CALL: {"name": "tool_name", "arguments": {"param1": "value1", "param2": "value2"}}',
            "",
            "**CRITICAL RULES:**",
            "1. Always use the exact tool name from the list above",
            "2. Arguments must be a valid JSON object; include every [REQUIRED] parameter",
            "3. DECOMPOSE complex queries into separate focused tool calls",
            "4. Make multiple tool calls in the same iteration when topics are independent",
            "5. Start with CONTINUE_THINKING: <reasoning> when you expect to need another round of tools",
            "6. After calling tools, wait for results, then provide a natural answer based on those results",
            "",
            "**Examples:**",
            "",
            "**Simple Query:**",
            'User: "What time is it?"',
            'Assistant: TOOL_CALL: {"name": "get_current_time", "arguments": {}}',
            "",
            "**Multiple Related Queries:**",
            'User: "Tell me about bhakti and dharma"',
            "Assistant: CONTINUE_THINKING: Two distinct concepts to search separately.",
            'TOOL_CALL: {"name": "search", "arguments": {"query": "bhakti devotion"}}',
            'TOOL_CALL: {"name": "search", "arguments": {"query": "dharma righteousness"}}',
            "",
        ]
    )
    return "\n".join(lines)


def _format_payload(result: object) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, ensure_ascii=False, default=str)


def format_tool_results_for_context(results: Iterable[ToolResult]) -> str:
    """Render one round of tool results as the synthetic user turn fed back to the model.

    Args:
        results: Results of the round, in call order.

    Returns:
        The formatted block, or an empty string when there are no results.
    """
    results = list(results)
    if not results:
        return ""

    parts = ["\n\n## TOOL EXECUTION RESULTS\n\n", "The following tools were executed:\n\n"]
    for result in results:
        parts.append(f"### Tool: {result.name}\n\n")
        if result.error is not None:
            parts.append("**Status:** ❌ Error\n")
            parts.append(f"**Error Message:** {result.error}\n\n")
        else:
            parts.append("**Status:** ✅ Success\n")
            parts.append(f"**Result:**\n```json\n{_format_payload(result.result)}\n```\n\n")

    parts.append("---\n\n")
    parts.append(
        "Based on the tool results above, provide a natural, conversational response to the user. "
        "Present the information in a helpful way without mentioning that you used tools.\n"
    )
    return "".join(parts)
