"""Expose the conversation and wire-level message models."""

from .models import Role, ConversationTurn, Message, ThinkingStep, SystemTurn, UserTurn, AssistantTurn

__all__ = [
    "Role",
    "ConversationTurn",
    "SystemTurn",
    "UserTurn",
    "AssistantTurn",
    "Message",
    "ThinkingStep",
]
