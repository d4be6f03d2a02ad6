from __future__ import annotations

import punq
from fastapi import Request

from serenity.core.settings import Settings
from serenity.services.contracts import GatewayClientProtocol
from serenity.services.gateway_client import GatewayClient
from serenity.streaming.transport import CannedResponseTransport


def build_container(settings: Settings) -> punq.Container:
    """Wire the services the HTTP API resolves per request."""
    container = punq.Container()
    container.register(Settings, instance=settings)

    container.register(
        GatewayClientProtocol,
        factory=lambda: GatewayClient(settings=settings),
        scope=punq.Scope.singleton,
    )
    container.register(
        CannedResponseTransport,
        factory=lambda: CannedResponseTransport(delay_seconds=settings.canned_response_delay_seconds),
        scope=punq.Scope.singleton,
    )

    return container


async def close_container(container: punq.Container) -> None:
    """Release every HTTP client owned by ``container``."""
    await container.resolve(GatewayClientProtocol).close()


def get_container(request: Request) -> punq.Container:
    return request.app.state.container
