"""Assembly of the turn list sent to the backend."""

from typing import List, Sequence

from ..messages import ConversationTurn, Message, SystemTurn, UserTurn
from ..tools.registry import ToolRegistry
from .prompts import DEFAULT_SYSTEM_PROMPT, describe_tools_for_prompt


class ConversationHistoryBuilder:
    """
    Builds ``[system, *prior turns, new user turn]`` for a request.

    The tool catalogue is rendered from the registry on every call, so tools registered at
    runtime show up in the next request.
    """

    def __init__(self, registry: ToolRegistry, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> None:
        self.registry = registry
        self.system_prompt = system_prompt

    def system_turn(self, include_tools: bool = True) -> SystemTurn:
        tool_prompt = describe_tools_for_prompt(self.registry.list()) if include_tools else ""
        return SystemTurn(content=self.system_prompt + tool_prompt)

    def build(
        self, messages: Sequence[Message], new_user_message: str, include_tools: bool = True
    ) -> List[ConversationTurn]:
        """Build the turn list for a new user message.

        Args:
            messages: Prior displayed messages, oldest first.
            new_user_message: Text the user just sent.
            include_tools: Whether to append the tool catalogue to the system prompt.

        Returns:
            A fresh list; nothing is cached between calls.
        """
        turns: List[ConversationTurn] = [self.system_turn(include_tools)]
        turns.extend(message.to_turn() for message in messages)
        turns.append(UserTurn(content=new_user_message))
        return turns
