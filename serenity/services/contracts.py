from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

from serenity.api.schemas.journal import DriftAnalysis, JournalEntry, JournalEntryInput
from serenity.services.chat_session import ChatSession
from serenity.services.gateway_client import GatewayChatStream
from serenity.streaming.outcomes import DeltaSink


class GatewayClientProtocol(Protocol):
    """Server-side access to the LLM gateway."""

    async def analyze_drift(self, entries: Sequence[JournalEntryInput]) -> DriftAnalysis:
        """Score ``entries`` and return the structured drift analysis."""

    async def open_chat_stream(self, messages: Sequence[Mapping[str, str]]) -> GatewayChatStream:
        """Start a streaming completion; the caller closes the returned stream."""

    async def close(self) -> None:
        """Release HTTP resources during application shutdown."""


class DriftAnalysisClientProtocol(Protocol):
    """Client-side access to the remote analyze-journal function."""

    async def analyze(self, entries: Sequence[JournalEntry]) -> DriftAnalysis:
        """Return the drift analysis for chronologically ordered ``entries``."""


class JournalServiceProtocol(Protocol):
    """Journal drift workflow used by the journaling page."""

    async def analyze(self, entries: Sequence[JournalEntry]) -> tuple[DriftAnalysis, list[JournalEntry]]:
        """Analyze ``entries`` and return the analysis with scored entries."""


class ChatServiceProtocol(Protocol):
    """Streaming chat workflow used by the chat page."""

    async def send(self, session: ChatSession, text: str, sink: DeltaSink | None = None):
        """Send ``text`` within ``session`` and return the completed turn."""
