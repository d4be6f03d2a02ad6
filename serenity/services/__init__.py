"""Service layer for chat streaming and journal drift analysis."""

from serenity.services.chat_service import ChatService, ChatTurn
from serenity.services.chat_session import ChatMessage, ChatSession, MoodPoint

__all__ = ["ChatMessage", "ChatService", "ChatSession", "ChatTurn", "MoodPoint"]
