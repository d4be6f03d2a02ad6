"""
Chat event-stream decoding.

This package provides:
- Incremental decoding of ``data:`` event records into text deltas
- Transport adapters for the chat endpoint and an offline canned responder
- Sink dispatch with a single terminal callback per stream
"""

from serenity.streaming.decoder import DecoderState, StreamDecoder, decode_chunks, decode_response
from serenity.streaming.errors import StreamError, TransportError
from serenity.streaming.outcomes import CallbackSink, DecoderOutcome, Delta, DeltaSink, Done, Error, dispatch
from serenity.streaming.transport import (
    CannedResponseTransport,
    ChatTransport,
    HttpxChatTransport,
    TransportResponse,
)

__all__ = [
    "CallbackSink",
    "CannedResponseTransport",
    "ChatTransport",
    "DecoderOutcome",
    "DecoderState",
    "Delta",
    "DeltaSink",
    "Done",
    "Error",
    "HttpxChatTransport",
    "StreamDecoder",
    "StreamError",
    "TransportError",
    "TransportResponse",
    "decode_chunks",
    "decode_response",
    "dispatch",
]
