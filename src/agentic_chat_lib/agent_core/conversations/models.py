import uuid
from datetime import datetime, timezone
from typing import ClassVar, List

from pydantic import BaseModel, Field

from ..messages import Message


def generate_chat_title(first_user_message: str, max_length: int = 30) -> str:
    """Derive a conversation title from the first user message, truncated with an ellipsis."""
    text = first_user_message.strip()
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ChatConversation(BaseModel):
    """
    A stored conversation.

    Attributes:
        id: Conversation key.
        title: Display title; ``"New Chat"`` until the first user message.
        messages: Messages in display order, including tool calls, results and thinking steps.
        created_at: Creation time (UTC).
        updated_at: Last modification time (UTC).
    """

    DEFAULT_TITLE: ClassVar[str] = "New Chat"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str = DEFAULT_TITLE
    messages: List[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
