"""Dependency injection container assembly utilities."""

from serenity.dependency_injection.clients import ClientServices, build_chat_transport, client_services
from serenity.dependency_injection.container import build_container, close_container, get_container

__all__ = [
    "ClientServices",
    "build_chat_transport",
    "build_container",
    "client_services",
    "close_container",
    "get_container",
]
