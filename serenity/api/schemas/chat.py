from typing import Literal

from pydantic import BaseModel, Field


class ChatTurnMessage(BaseModel):
    role: Literal["system", "user", "assistant"] = Field(..., description="Speaker role of the message")
    content: str = Field(..., description="Message text")


class ChatRequest(BaseModel):
    messages: list[ChatTurnMessage] = Field(
        ...,
        min_length=1,
        description="Conversation so far, oldest first; the last user message is answered",
    )
