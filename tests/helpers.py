"""Test doubles and builders shared across the serenity test modules."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterable

import httpx
import punq


def delta_record(text: str) -> str:
    return f"data: {json.dumps({'choices': [{'delta': {'content': text}}]}, ensure_ascii=False)}\n"


async def aiter_chunks(chunks: Iterable[bytes | str]) -> AsyncIterator[bytes | str]:
    for chunk in chunks:
        yield chunk


class RecordingSink:
    """Sink double that records every callback in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str | None]] = []

    def on_delta(self, text: str) -> None:
        self.events.append(("delta", text))

    def on_done(self) -> None:
        self.events.append(("done", None))

    def on_error(self, message: str) -> None:
        self.events.append(("error", message))

    @property
    def text(self) -> str:
        return "".join(value or "" for kind, value in self.events if kind == "delta")


class FakeChatStream:
    """Upstream chat stream double that records whether it was closed."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks
        self.closed = False

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


class FakeGatewayClient:
    """In-memory gateway double used at the LLM gateway boundary."""

    def __init__(self, *, analysis=None, chunks: list[bytes] | None = None, error: Exception | None = None) -> None:
        self._analysis = analysis
        self._chunks = chunks or []
        self._error = error
        self.analyze_calls: list[list] = []
        self.chat_calls: list[list[dict[str, str]]] = []
        self.streams: list[FakeChatStream] = []
        self.closed = False

    async def analyze_drift(self, entries):
        self.analyze_calls.append(list(entries))
        if self._error is not None:
            raise self._error
        return self._analysis

    async def open_chat_stream(self, messages):
        self.chat_calls.append([dict(message) for message in messages])
        if self._error is not None:
            raise self._error
        stream = FakeChatStream(self._chunks)
        self.streams.append(stream)
        return stream

    async def close(self) -> None:
        self.closed = True


def mock_async_client(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are served by ``handler`` instead of the network."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def build_test_container(bindings: dict[object, object]) -> punq.Container:
    """Create a punq container and bind protocol/service keys to test doubles."""

    container = punq.Container()
    for key, value in bindings.items():
        container.register(key, instance=value)
    return container
