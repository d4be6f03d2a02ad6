"""Chat and journal services for callers of the Serenity HTTP API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from serenity.core.settings import Settings
from serenity.services.chat_service import ChatService
from serenity.services.contracts import ChatServiceProtocol, JournalServiceProtocol
from serenity.services.drift_client import DriftAnalysisClient
from serenity.services.journal_service import JournalService
from serenity.streaming.transport import CannedResponseTransport, ChatTransport, HttpxChatTransport


@dataclass(frozen=True)
class ClientServices:
    chat_service: ChatServiceProtocol
    journal_service: JournalServiceProtocol
    chat_transport: ChatTransport
    drift_client: DriftAnalysisClient


def build_chat_transport(settings: Settings) -> ChatTransport:
    if settings.use_canned_responder:
        return CannedResponseTransport(delay_seconds=settings.canned_response_delay_seconds)
    return HttpxChatTransport(
        endpoint_url=settings.chat_endpoint_url,
        api_key=settings.client_api_key,
        timeout_seconds=settings.ai_gateway_timeout_seconds,
    )


@asynccontextmanager
async def client_services(settings: Settings) -> AsyncIterator[ClientServices]:
    """Build the client-side services and close their HTTP clients on exit."""
    chat_transport = build_chat_transport(settings)
    drift_client = DriftAnalysisClient(
        endpoint_url=settings.analyze_journal_url,
        api_key=settings.client_api_key,
        timeout_seconds=settings.ai_gateway_timeout_seconds,
    )
    try:
        yield ClientServices(
            chat_service=ChatService(transport=chat_transport, max_buffer_chars=settings.stream_max_buffer_chars),
            journal_service=JournalService(drift_client=drift_client),
            chat_transport=chat_transport,
            drift_client=drift_client,
        )
    finally:
        try:
            await chat_transport.close()
        finally:
            await drift_client.close()
