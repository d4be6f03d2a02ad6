import pytest
from fastapi import FastAPI

from serenity.core.settings import Settings
from serenity.dependency_injection import build_chat_transport, build_container, client_services
from serenity.main import lifespan
from serenity.services.chat_service import ChatService
from serenity.services.contracts import GatewayClientProtocol
from serenity.services.chat_session import ChatSession
from serenity.services.gateway_client import GatewayClient
from serenity.services.journal_service import JournalService
from serenity.streaming.transport import CannedResponseTransport, HttpxChatTransport, canned_reply


def test_container_resolves_singletons() -> None:
    container = build_container(Settings(AI_GATEWAY_API_KEY="key"))

    assert isinstance(container.resolve(GatewayClientProtocol), GatewayClient)
    assert container.resolve(GatewayClientProtocol) is container.resolve(GatewayClientProtocol)
    assert container.resolve(CannedResponseTransport) is container.resolve(CannedResponseTransport)


def test_chat_transport_follows_canned_responder_setting() -> None:
    assert isinstance(build_chat_transport(Settings(AI_GATEWAY_API_KEY="key")), HttpxChatTransport)
    assert isinstance(build_chat_transport(Settings(AI_GATEWAY_API_KEY=None)), CannedResponseTransport)
    assert isinstance(
        build_chat_transport(Settings(AI_GATEWAY_API_KEY="key", CHAT_USE_CANNED_RESPONDER=True)),
        CannedResponseTransport,
    )


@pytest.mark.asyncio
async def test_lifespan_shutdown_closes_gateway_client() -> None:
    app = FastAPI()

    async with lifespan(app):
        gateway = app.state.container.resolve(GatewayClientProtocol)
        assert not gateway._client.is_closed

    assert gateway._client.is_closed


@pytest.mark.asyncio
async def test_client_services_close_their_http_clients_on_exit() -> None:
    async with client_services(Settings(AI_GATEWAY_API_KEY="key")) as services:
        assert isinstance(services.chat_service, ChatService)
        assert isinstance(services.journal_service, JournalService)
        assert isinstance(services.chat_transport, HttpxChatTransport)
        assert not services.chat_transport._client.is_closed
        assert not services.drift_client._client.is_closed

    assert services.chat_transport._client.is_closed
    assert services.drift_client._client.is_closed


@pytest.mark.asyncio
async def test_client_services_use_canned_transport_without_gateway_key() -> None:
    async with client_services(Settings(AI_GATEWAY_API_KEY=None)) as services:
        assert isinstance(services.chat_transport, CannedResponseTransport)
        turn = await services.chat_service.send(ChatSession.start(), "feeling great today")

    assert turn.ok
    assert turn.reply == canned_reply("great")
    assert services.drift_client._client.is_closed
