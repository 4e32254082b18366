"""Expose provider-agnostic message model types shared by the engine and the providers."""

from .models import BaseMessage, UserMessage, AssistantMessage, SystemMessage, ToolMessage
from .context import ConversationContext, truncate_history

__all__ = [
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolMessage",
    "ConversationContext",
    "truncate_history",
]
