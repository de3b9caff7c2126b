"""Conversation models: wire-level turns sent to the backend and display-level messages."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..tools.models import ToolCall, ToolResult

Role = Literal["system", "user", "assistant"]


class ConversationTurn(BaseModel):
    """One role/content pair of the turn list sent to the backend.

    Attributes:
        role: Who authored the turn.
        content: Plain text of the turn.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    def to_wire(self) -> Dict[str, Any]:
        """Backend format: ``{"role": ..., "parts": [{"type": "text", "text": ...}]}``."""
        return {"role": self.role, "parts": [{"type": "text", "text": self.content}]}


class SystemTurn(ConversationTurn):
    """Turn carrying the system prompt and tool catalogue."""

    role: Role = "system"


class UserTurn(ConversationTurn):
    """Turn authored by the user, or synthesized on the user's behalf (tool results)."""

    role: Role = "user"


class AssistantTurn(ConversationTurn):
    """Turn authored by the model."""

    role: Role = "assistant"


class ThinkingStep(BaseModel):
    """One tool-calling round of the agentic loop.

    Attributes:
        iteration: 1-based round number.
        reasoning: Text of the continuation marker, or a placeholder when there was none.
        tool_calls: Calls detected in the round.
        tool_results: Results of those calls, same order.
    """

    model_config = ConfigDict(frozen=True)

    iteration: int = Field(ge=1)
    reasoning: str
    tool_calls: List[ToolCall] = Field(default_factory=list)
    tool_results: List[ToolResult] = Field(default_factory=list)


def _new_message_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """A displayed chat message.

    ``text`` changes while the assistant streams; the tool fields are set once, when the
    run completes.
    """

    id: str = Field(default_factory=_new_message_id)
    text: str = ""
    is_user: bool
    timestamp: datetime = Field(default_factory=_utcnow)
    tool_calls: Optional[List[ToolCall]] = None
    tool_results: Optional[List[ToolResult]] = None
    thinking_steps: Optional[List[ThinkingStep]] = None

    def to_turn(self) -> ConversationTurn:
        return ConversationTurn(role="user" if self.is_user else "assistant", content=self.text)
