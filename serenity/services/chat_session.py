from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Literal

WELCOME_MESSAGE = "Welcome to your safe space. How are you feeling today?"

ChatRole = Literal["user", "assistant"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class ChatMessage:
    role: ChatRole
    content: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    sentiment_score: float | None = None


@dataclass(frozen=True)
class MoodPoint:
    timestamp: datetime
    score: float


@dataclass(frozen=True)
class ChatSession:
    """Conversation history and mood series for one chat; updates return new sessions."""

    messages: tuple[ChatMessage, ...] = ()
    mood_series: tuple[MoodPoint, ...] = ()

    @classmethod
    def start(cls) -> ChatSession:
        return cls(messages=(ChatMessage(role="assistant", content=WELCOME_MESSAGE, id="welcome"),))

    def with_message(self, message: ChatMessage) -> ChatSession:
        return replace(self, messages=(*self.messages, message))

    def with_mood(self, point: MoodPoint) -> ChatSession:
        return replace(self, mood_series=(*self.mood_series, point))

    @property
    def last_message(self) -> ChatMessage | None:
        return self.messages[-1] if self.messages else None

    def history_payload(self) -> list[dict[str, str]]:
        """Role/content pairs in the shape the chat endpoint expects."""
        return [{"role": message.role, "content": message.content} for message in self.messages]
