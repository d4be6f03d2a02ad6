"""
Incremental decoder for chat-completion event streams.

Consumes raw UTF-8 chunks of ``data: <payload>`` lines in arrival order and
turns them into ``Delta``/``Done``/``Error`` outcomes. One decoder instance
serves exactly one chat send.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from enum import Enum
from typing import Any

from serenity.streaming.errors import TransportError
from serenity.streaming.outcomes import DecoderOutcome, Delta, Done, Error
from serenity.streaming.transport import TransportResponse

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
DEFAULT_MAX_BUFFER_CHARS = 1_000_000

MALFORMED_RECORD_MESSAGE = "Malformed event record in stream"
BUFFER_LIMIT_MESSAGE = "Event stream buffer limit exceeded"


class DecoderState(str, Enum):
    AWAITING_FIRST_BYTE = "awaiting_first_byte"
    STREAMING = "streaming"
    DONE = "done"
    ERROR = "error"


def extract_content(record: Any) -> str | None:
    """Return ``choices[0].delta.content`` when it is a non-empty string."""
    if not isinstance(record, dict):
        return None
    choices = record.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


def describe_failure(status_code: int | None, body: Any = None) -> str:
    """Build the user-facing message for a failed or bodiless response."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
        if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
            return error["message"]
    if status_code is None:
        return "Request failed"
    if 200 <= status_code < 300:
        return f"Request failed: response with status {status_code} has no body"
    return f"Request failed with status {status_code}"


class StreamDecoder:
    """Line-buffering event-stream decoder for a single chat session."""

    def __init__(self, max_buffer_chars: int = DEFAULT_MAX_BUFFER_CHARS) -> None:
        self._max_buffer_chars = max_buffer_chars
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending_line: str | None = None
        self._state = DecoderState.AWAITING_FIRST_BYTE

    @property
    def state(self) -> DecoderState:
        return self._state

    @property
    def finished(self) -> bool:
        return self._state in (DecoderState.DONE, DecoderState.ERROR)

    def feed(self, chunk: bytes | str) -> list[DecoderOutcome]:
        """Buffer one chunk and return the outcomes it completes."""
        if self.finished:
            return []
        self._state = DecoderState.STREAMING

        if isinstance(chunk, (bytes, bytearray)):
            self._buffer += self._utf8.decode(bytes(chunk))
        else:
            self._buffer += chunk

        outcomes = self._drain()
        if not self.finished and len(self._buffer) > self._max_buffer_chars:
            logger.warning("event stream buffer limit exceeded", extra={"buffered_chars": len(self._buffer)})
            outcomes.extend(self.fail(BUFFER_LIMIT_MESSAGE))
        return outcomes

    def finish(self) -> list[DecoderOutcome]:
        """Signal end of transport; the unterminated tail is dropped."""
        if self.finished:
            return []
        self._utf8.decode(b"", final=True)
        self._buffer = ""
        if self._pending_line is not None:
            logger.warning("stream ended with an unparseable event record pending")
            return self.fail(MALFORMED_RECORD_MESSAGE)
        self._state = DecoderState.DONE
        return [Done()]

    def fail(self, message: str) -> list[DecoderOutcome]:
        """Terminate with an ``Error`` unless a terminal outcome was already produced."""
        if self.finished:
            return []
        self._buffer = ""
        self._state = DecoderState.ERROR
        return [Error(message)]

    def _drain(self) -> list[DecoderOutcome]:
        outcomes: list[DecoderOutcome] = []
        while True:
            newline = self._buffer.find("\n")
            if newline == -1:
                break

            line = self._buffer[:newline]
            self._buffer = self._buffer[newline + 1 :]
            if line.endswith("\r"):
                line = line[:-1]

            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX) :].strip()
            if payload == DONE_SENTINEL:
                self._buffer = ""
                self._state = DecoderState.DONE
                outcomes.append(Done())
                break
            if not payload:
                # keep-alive
                continue

            try:
                record = json.loads(payload)
            except json.JSONDecodeError:
                # Hold the whole line until more bytes arrive.
                self._buffer = line + "\n" + self._buffer
                if self._pending_line != line:
                    logger.debug("holding unparseable event record", extra={"record_chars": len(line)})
                self._pending_line = line
                break

            self._pending_line = None
            content = extract_content(record)
            if content is not None:
                outcomes.append(Delta(content))
        return outcomes


async def decode_response(
    response: TransportResponse,
    decoder: StreamDecoder | None = None,
) -> AsyncIterator[DecoderOutcome]:
    """Lazily decode a transport response into outcomes.

    Chunks are pulled only while no terminal outcome has been produced.
    Closing the generator abandons the session.
    """
    decoder = decoder or StreamDecoder()

    if not response.ok or response.chunks is None:
        for outcome in decoder.fail(describe_failure(response.status_code, response.error_body)):
            yield outcome
        return

    try:
        async for chunk in response.chunks:
            for outcome in decoder.feed(chunk):
                yield outcome
            if decoder.finished:
                return
    except TransportError as exc:
        logger.warning("chat transport failed mid-stream", extra={"status_code": exc.status_code})
        for outcome in decoder.fail(exc.message):
            yield outcome
        return

    for outcome in decoder.finish():
        yield outcome


async def decode_chunks(
    chunks: AsyncIterable[bytes | str] | Iterable[bytes | str],
    decoder: StreamDecoder | None = None,
) -> AsyncIterator[DecoderOutcome]:
    """Decode an in-memory or async chunk sequence as a successful response body."""
    response = TransportResponse(status_code=200, chunks=_as_async_iterator(chunks))
    async for outcome in decode_response(response, decoder):
        yield outcome


async def _as_async_iterator(chunks: AsyncIterable[bytes | str] | Iterable[bytes | str]) -> AsyncIterator[bytes | str]:
    if isinstance(chunks, AsyncIterable):
        async for chunk in chunks:
            yield chunk
    else:
        for chunk in chunks:
            yield chunk
