"""
Transport adapters that deliver raw chat event-stream chunks.

A transport opens one request per chat send and exposes the response status
(and any structured error body) before the first chunk is pulled:

- ``HttpxChatTransport`` talks to the streaming chat endpoint over HTTP
- ``CannedResponseTransport`` replies locally for environments without a backend
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncContextManager, Protocol

import httpx

from serenity.streaming.errors import TransportError

logger = logging.getLogger(__name__)

DONE_RECORD = "data: [DONE]\n\n"


def encode_delta_record(text: str) -> str:
    """Encode one content fragment as a chat-completion chunk event record."""
    payload = {"choices": [{"index": 0, "delta": {"content": text}, "finish_reason": None}]}
    return f"data: {json.dumps(payload)}\n\n"


@dataclass
class TransportResponse:
    """Response head plus the lazily pulled body chunks."""

    status_code: int
    chunks: AsyncIterator[bytes | str] | None
    error_body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ChatTransport(Protocol):
    """Contract for opening one streaming chat exchange."""

    def open(self, messages: Sequence[Mapping[str, str]]) -> AsyncContextManager[TransportResponse]:
        """Start a request for ``messages`` and yield its response."""

    async def close(self) -> None:
        """Release any connection pool held by the transport."""


class HttpxChatTransport(ChatTransport):
    """Streams the chat endpoint response body with httpx."""

    def __init__(
        self,
        endpoint_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    @asynccontextmanager
    async def open(self, messages: Sequence[Mapping[str, str]]) -> AsyncIterator[TransportResponse]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        payload = {"messages": [{"role": m["role"], "content": m["content"]} for m in messages]}

        try:
            async with self._client.stream("POST", self._endpoint_url, json=payload, headers=headers) as response:
                if response.is_success:
                    yield TransportResponse(status_code=response.status_code, chunks=self._iter_body(response))
                    return

                error_body = await self._read_error_body(response)
                logger.warning(
                    "chat endpoint returned non-success status",
                    extra={"status_code": response.status_code},
                )
                yield TransportResponse(status_code=response.status_code, chunks=None, error_body=error_body)
        except httpx.HTTPError as exc:
            # Raised before the response head was available.
            raise TransportError(f"Chat request failed: {exc}") from exc

    async def _iter_body(self, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as exc:
            raise TransportError(f"Stream interrupted: {exc}", status_code=response.status_code) from exc

    @staticmethod
    async def _read_error_body(response: httpx.Response) -> Any:
        try:
            await response.aread()
            return response.json()
        except (httpx.HTTPError, ValueError):
            return None


_CANNED_RESPONSES: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("anxious", "worried", "stress"),
        "I hear that you're feeling anxious. That takes courage to share. Let's try a grounding "
        "exercise: can you name 5 things you can see right now?",
    ),
    (
        ("sad", "down", "depress"),
        "Thank you for sharing that with me. Your feelings are valid. Would you like to explore "
        "what's contributing to this feeling?",
    ),
    (
        ("angry", "frustrated"),
        "It sounds like you're dealing with some strong emotions. Take a deep breath with me. "
        "What happened that brought these feelings up?",
    ),
    (
        ("good", "great", "happy"),
        "That's wonderful to hear! What's been going well for you? Recognizing positive moments "
        "is an important part of wellbeing.",
    ),
)
_DEFAULT_CANNED_RESPONSE = (
    "Thank you for sharing. I'm here to listen without judgment. Could you tell me more about "
    "how that makes you feel?"
)


def canned_reply(message: str) -> str:
    """Pick a supportive reply for ``message`` by keyword."""
    lowered = message.lower()
    for keywords, reply in _CANNED_RESPONSES:
        if any(keyword in lowered for keyword in keywords):
            return reply
    return _DEFAULT_CANNED_RESPONSE


def canned_reply_records(message: str) -> list[str]:
    """Split the canned reply into word-sized event records ending with the sentinel."""
    words = canned_reply(message).split(" ")
    records = [encode_delta_record(word if index == 0 else f" {word}") for index, word in enumerate(words)]
    records.append(DONE_RECORD)
    return records


class CannedResponseTransport(ChatTransport):
    """Offline transport that streams keyword-matched replies in the event-stream wire format."""

    def __init__(self, delay_seconds: float = 0.0) -> None:
        self._delay_seconds = delay_seconds

    async def close(self) -> None:
        return None

    @asynccontextmanager
    async def open(self, messages: Sequence[Mapping[str, str]]) -> AsyncIterator[TransportResponse]:
        latest = next((m["content"] for m in reversed(messages) if m.get("role") == "user"), "")
        logger.debug("serving canned chat response", extra={"message_length": len(latest)})
        yield TransportResponse(status_code=200, chunks=self._iter_records(latest))

    async def _iter_records(self, message: str) -> AsyncIterator[bytes]:
        for record in canned_reply_records(message):
            if self._delay_seconds:
                await asyncio.sleep(self._delay_seconds)
            yield record.encode("utf-8")
