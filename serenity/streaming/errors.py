"""Error types raised at the event-stream transport boundary."""

from __future__ import annotations


class StreamError(Exception):
    """Base error for chat event streaming."""


class TransportError(StreamError):
    """The transport failed to deliver the response body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
