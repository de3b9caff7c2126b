"""Conversation persistence."""

from .models import ChatConversation, generate_chat_title
from .store import ConversationStore, InMemoryConversationStore, JsonFileConversationStore

__all__ = [
    "ChatConversation",
    "generate_chat_title",
    "ConversationStore",
    "InMemoryConversationStore",
    "JsonFileConversationStore",
]
